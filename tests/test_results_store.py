"""Tests for tickerscore.storage.results_store -- watchlist and analysis history."""

import pytest

from tickerscore.analysis.blending import BlendOutcome
from tickerscore.analysis.result import AnalysisResult
from tickerscore.analysis.technical import IndicatorSnapshot
from tickerscore.data_sources.market_data import normalize_symbol
from tickerscore.storage.results_store import ResultsStore


def _result(symbol="AAPL", score=61):
    snap = IndicatorSnapshot(rsi14=48.2, sma20=101.0, current_price=102.5)
    return AnalysisResult.build(symbol, snap, "NEUTRAL", BlendOutcome(score=score, blended=False))


class TestResultsStore:

    @pytest.fixture(autouse=True)
    def _store(self, tmp_path):
        self.db_path = tmp_path / "db" / "analyses.sqlite"
        self.store = ResultsStore(self.db_path, seed_tickers=["BTC", "AAPL"])

    def test_seeds_watchlist_once(self):
        assert {t["name"] for t in self.store.list_tickers()} == {"BTC-USD", "AAPL"}
        self.store.remove_ticker("BTC")
        reopened = ResultsStore(self.db_path, seed_tickers=["BTC", "AAPL"])
        assert [t["name"] for t in reopened.list_tickers()] == ["AAPL"]

    def test_add_ticker_is_idempotent(self):
        assert self.store.add_ticker("MSFT") is True
        assert self.store.add_ticker("MSFT") is False

    def test_add_and_read_analysis(self):
        row_id = self.store.add_analysis("AAPL", _result())
        rows = self.store.get_analyses("AAPL")
        assert len(rows) == 1
        row = rows[0]
        assert row["id"] == row_id
        assert row["score"] == 61
        assert row["details"]["symbol"] == "AAPL"
        assert row["details"]["indicators"]["rsi14"] == 48
        assert row["details"]["indicators"]["ma50"] is None

    def test_newest_first_and_limit(self):
        for score in (10, 20, 30):
            self.store.add_analysis("AAPL", _result(score=score))
        self.store.add_analysis("BTC", _result("BTC", score=99))

        rows = self.store.get_analyses("AAPL", limit=2)
        assert [r["score"] for r in rows] == [30, 20]
        assert len(self.store.get_analyses()) == 4

    def test_remove_ticker_drops_history(self):
        self.store.add_analysis("AAPL", _result())
        self.store.remove_ticker("AAPL")
        assert self.store.get_analyses("AAPL") == []
        assert "AAPL" not in {t["name"] for t in self.store.list_tickers()}

    def test_seeded_crypto_can_be_removed_by_normalized_name(self, tmp_path):
        store = ResultsStore(tmp_path / "seeded.sqlite", seed_tickers=["BTC"])
        store.remove_ticker(normalize_symbol("BTC"))
        assert store.list_tickers() == []

    def test_names_normalized_on_every_entry_point(self):
        assert self.store.add_ticker("eth") is True
        assert self.store.add_ticker("ETHUSDT") is False
        self.store.add_analysis("btc", _result("BTC-USD"))
        assert len(self.store.get_analyses("BTC-USD")) == 1
        assert len(self.store.get_analyses("btc")) == 1
        assert {t["name"] for t in self.store.list_tickers()} == {"BTC-USD", "AAPL", "ETH-USD"}
