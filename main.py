#!/usr/bin/env python3
"""TickerScore: technical confidence score with optional AI blending.

Usage:
    python main.py analyze AAPL                 # technical score (AI per settings)
    python main.py analyze BTC ETH --ai --save  # blend in AI scores, persist results
    python main.py scan                         # analyze the whole watchlist
    python main.py verify NVDA                  # does Yahoo know this symbol?
    python main.py history AAPL --limit 10      # past analyses
    python main.py watch add MSFT               # manage the watchlist
    python main.py cache clear                  # drop cached prices and headlines
"""

import argparse
import dataclasses
import json
import sys

from tickerscore.config import SETTINGS, Paths, ScoringConfig
from tickerscore.data_sources.market_data import MarketDataClient, normalize_symbol
from tickerscore.pipeline.engine import AnalysisEngine
from tickerscore.storage.results_store import ResultsStore
from tickerscore.utils.cache import DataCache
from tickerscore.utils.logger import set_level, setup_logger

logger = setup_logger("main", SETTINGS.get("app", {}).get("log_level", "INFO"))


def _store() -> ResultsStore:
    return ResultsStore(Paths.DATABASE, seed_tickers=SETTINGS.get("watchlist", []))


def _config(args) -> ScoringConfig:
    config = ScoringConfig.from_settings()
    if getattr(args, "ai", None) is not None:
        config = dataclasses.replace(config, ai_enabled=args.ai)
    if getattr(args, "ai_tech", None) is not None:
        config = dataclasses.replace(config, ai_tech_enabled=args.ai_tech)
    return config


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, default=str))


# ============================================================
# COMMANDS
# ============================================================

def cmd_analyze(args):
    """Analyze one or more symbols."""
    engine = AnalysisEngine(config=_config(args), store=_store() if args.save else None)
    results = engine.run_many(args.symbols, max_workers=args.workers)
    failed = [s for s, r in results.items() if r is None]
    _print([r.to_dict() for r in results.values() if r is not None])
    if failed:
        logger.error("Insufficient data for: %s", ", ".join(failed))
        sys.exit(1)


def cmd_scan(args):
    """Analyze every symbol on the watchlist and persist the results."""
    store = _store()
    symbols = [t["name"] for t in store.list_tickers()]
    if not symbols:
        _print({"processed": 0})
        return
    engine = AnalysisEngine(config=_config(args), store=store)
    results = engine.run_many(symbols, max_workers=args.workers)
    _print({
        "processed": sum(1 for r in results.values() if r is not None),
        "scores": {s: (r.score if r else None) for s, r in results.items()},
    })


def cmd_verify(args):
    """Check that a symbol has price data."""
    sym = normalize_symbol(args.symbol)
    _print({"symbol": sym, "ok": MarketDataClient().symbol_exists(args.symbol)})


def cmd_history(args):
    """Show stored analyses for a symbol."""
    _print(_store().get_analyses(normalize_symbol(args.symbol), limit=args.limit))


def cmd_watch(args):
    """Add, remove or list watchlist symbols."""
    store = _store()
    if args.action == "list":
        _print(store.list_tickers())
        return
    if not args.symbol:
        print("A symbol is required for add/remove")
        sys.exit(1)
    sym = normalize_symbol(args.symbol)
    if args.action == "add":
        if not MarketDataClient().symbol_exists(sym):
            print(f"Symbol {sym} not found.")
            sys.exit(1)
        added = store.add_ticker(sym)
        if added:
            result = AnalysisEngine(config=_config(args), store=store).run(sym)
            _print({"status": "ok", "symbol": sym, "score": result.score if result else None})
        else:
            _print({"status": "exists", "symbol": sym})
    else:
        store.remove_ticker(sym)
        _print({"status": "ok", "symbol": sym})


def cmd_cache(args):
    """Drop cached price histories and headlines."""
    _print({c: DataCache(c).clear() for c in ("price_historical", "news")})


def _add_ai_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--ai", dest="ai", action="store_true", default=None,
                   help="Blend in AI news sentiment")
    p.add_argument("--no-ai", dest="ai", action="store_false",
                   help="Technical score only")
    p.add_argument("--ai-tech", dest="ai_tech", action="store_true", default=None,
                   help="Also blend in the AI technical score")
    p.add_argument("--workers", type=int, default=4, help="Parallel symbols (default: 4)")


def main():
    parser = argparse.ArgumentParser(
        description="TickerScore: technical confidence scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--log-level", default=None, help="Override app.log_level")
    sub = parser.add_subparsers(dest="command", help="Commands")

    # analyze
    p = sub.add_parser("analyze", help="Analyze symbols")
    p.add_argument("symbols", nargs="+", help="Symbols, e.g. AAPL BTC ETHUSDT")
    p.add_argument("--save", action="store_true", help="Persist results")
    _add_ai_flags(p)
    p.set_defaults(func=cmd_analyze)

    # scan
    p = sub.add_parser("scan", help="Analyze the watchlist")
    _add_ai_flags(p)
    p.set_defaults(func=cmd_scan)

    # verify
    p = sub.add_parser("verify", help="Check a symbol exists")
    p.add_argument("symbol")
    p.set_defaults(func=cmd_verify)

    # history
    p = sub.add_parser("history", help="Stored analyses for a symbol")
    p.add_argument("symbol")
    p.add_argument("--limit", type=int, default=20)
    p.set_defaults(func=cmd_history)

    # watch
    p = sub.add_parser("watch", help="Manage the watchlist")
    p.add_argument("action", choices=["add", "remove", "list"])
    p.add_argument("symbol", nargs="?", default="")
    p.set_defaults(func=cmd_watch, ai=None, ai_tech=None)

    # cache
    p = sub.add_parser("cache", help="Manage the local data cache")
    p.add_argument("action", choices=["clear"])
    p.set_defaults(func=cmd_cache)

    args = parser.parse_args()
    if args.log_level:
        set_level(args.log_level)
    if args.command is None:
        parser.print_help()
        sys.exit(0)
    args.func(args)


if __name__ == "__main__":
    main()
