"""Built-in pipeline steps: fetch, analyze, assess, blend.

Each step is a function: (PipelineContext) -> None
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable

from tickerscore.analysis.blending import ExternalScore, blend
from tickerscore.analysis.result import AnalysisResult
from tickerscore.analysis.technical import TechnicalAnalyzer
from tickerscore.data_sources.market_data import normalize_symbol
from tickerscore.pipeline.context import PipelineContext
from tickerscore.utils.logger import setup_logger

logger = setup_logger("steps")


# ============================================================
# FETCH STEPS
# ============================================================

def fetch_price_data(ctx: PipelineContext) -> None:
    """Fetch the daily close series."""
    logger.info("Fetching price data: %s", ctx.symbol)
    ctx.closes = ctx.services.market.get_closes(ctx.symbol, limit=ctx.config.history_limit)
    if len(ctx.closes) < ctx.config.min_history:
        logger.warning(
            "%s: only %d closes (want %d); long-window indicators will be skipped",
            ctx.symbol, len(ctx.closes), ctx.config.min_history,
        )


def fetch_news(ctx: PipelineContext) -> None:
    """Fetch headlines for the news-sentiment analyzer (AI runs only)."""
    if not ctx.ai_enabled:
        return
    logger.info("Fetching news: %s", ctx.symbol)
    ctx.news = ctx.services.news.fetch_headlines(ctx.symbol, count=ctx.config.news_count)


# ============================================================
# ANALYZE STEPS
# ============================================================

def run_technical_analysis(ctx: PipelineContext) -> None:
    """Compute the indicator snapshot and the rule-based score."""
    if len(ctx.closes) == 0:
        raise ValueError(f"no price data for {ctx.symbol}")
    ctx.technical = TechnicalAnalyzer().analyze(ctx.closes)
    logger.info(
        "%s technical score %d (%s)", ctx.symbol, ctx.technical.score, ctx.technical.signal,
    )


def _bounded_call(
    executor: ThreadPoolExecutor,
    label: str,
    fn: Callable[[], dict],
    timeout: float,
) -> ExternalScore:
    """Run *fn* on *executor*; neutral score on timeout or error."""
    future = executor.submit(fn)
    try:
        return ExternalScore.from_payload(future.result(timeout=timeout))
    except FutureTimeout:
        future.cancel()
        logger.error("%s timed out after %.1fs", label, timeout)
        return ExternalScore.neutral(f"AI Service unavailable (timed out after {timeout:g}s)")
    except Exception as e:
        logger.error("%s failed: %s", label, e)
        return ExternalScore.neutral(f"AI Service unavailable ({e})")


def run_ai_assessment(ctx: PipelineContext) -> None:
    """Ask the external analyzers for news (and optionally technical) scores."""
    if not ctx.ai_enabled:
        return
    llm = ctx.services.llm
    cfg = ctx.config
    timeout = cfg.llm.timeout_seconds

    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"ai-{ctx.symbol}")
    try:
        ctx.news_assessment = _bounded_call(
            executor,
            f"News sentiment for {ctx.symbol}",
            lambda: llm.analyze_news(ctx.symbol, ctx.news, cfg.llm.model, cfg.news_days),
            timeout,
        )
        if ctx.ai_tech_enabled and ctx.technical is not None:
            snapshot = ctx.technical.snapshot
            ctx.tech_assessment = _bounded_call(
                executor,
                f"AI technical scoring for {ctx.symbol}",
                lambda: llm.analyze_technical(ctx.symbol, snapshot, cfg.llm.model),
                timeout,
            )
    finally:
        # Do not wait on a call that already timed out.
        executor.shutdown(wait=False, cancel_futures=True)


# ============================================================
# SCORE STEP
# ============================================================

def blend_scores(ctx: PipelineContext) -> None:
    """Fold the external scores into the technical score and build the result."""
    if ctx.technical is None:
        logger.warning("No technical result for %s; nothing to score", ctx.symbol)
        return

    ctx.outcome = blend(
        ctx.technical.score,
        ctx.config.weights,
        ai_enabled=ctx.ai_enabled,
        ai_tech_enabled=ctx.ai_tech_enabled,
        news=ctx.news_assessment,
        ai_tech=ctx.tech_assessment,
    )
    ctx.result = AnalysisResult.build(
        symbol=normalize_symbol(ctx.symbol) or ctx.symbol,
        snapshot=ctx.technical.snapshot,
        signal=ctx.technical.signal,
        outcome=ctx.outcome,
        news=ctx.news,
    )


DEFAULT_STEPS = [
    fetch_price_data,
    run_technical_analysis,
    fetch_news,
    run_ai_assessment,
    blend_scores,
]
