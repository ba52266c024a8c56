"""Shared pytest fixtures for the TickerScore test suite.

Provides synthetic price data with fixed random seed for reproducibility.
All fixtures are independent of external APIs.
"""

import numpy as np
import pandas as pd
import pytest


def make_closes(n=252, seed=42, start_price=150.0, trend=0.0004, vol=0.015):
    """Geometric Brownian motion close series on business days."""
    np.random.seed(seed)
    dates = pd.bdate_range(start="2023-01-02", periods=n)
    log_returns = np.random.normal(trend, vol, n)
    close = start_price * np.exp(np.cumsum(log_returns))
    return pd.Series(close, index=dates, name="Close")


# ---------------------------------------------------------------------------
# 1. OHLCV fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_ohlcv():
    """Synthetic OHLCV DataFrame with 252 rows, seeded at 42.

    Starting price ~150, daily drift ~0.04%, daily vol ~1.5%.
    """
    close = make_closes()
    n = len(close)
    high = close * (1 + np.abs(np.random.normal(0.002, 0.005, n)))
    low = close * (1 - np.abs(np.random.normal(0.002, 0.005, n)))
    open_ = close * (1 + np.random.normal(0, 0.003, n))
    volume = np.random.randint(1_000_000, 10_000_000, n).astype(float)
    return pd.DataFrame(
        {"Open": open_, "High": high, "Low": low, "Close": close.values, "Volume": volume},
        index=close.index,
    )


# ---------------------------------------------------------------------------
# 2. Close series fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_closes():
    """252 daily closes, seeded at 42."""
    return make_closes()


@pytest.fixture
def short_closes():
    """30 closes: enough for RSI and SMA20, not for SMA50 or the MACD signal."""
    return make_closes(n=30, seed=7)


# ---------------------------------------------------------------------------
# 3. Headlines fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_articles():
    return [
        {
            "title": "Company beats earnings expectations",
            "link": "https://example.com/a",
            "pubDate": "2025-10-14T12:30:00+00:00",
            "description": "Quarterly revenue up 12%.",
        },
        {
            "title": "Regulator opens inquiry",
            "link": "https://example.com/b",
            "pubDate": "2025-10-13T09:00:00+00:00",
            "description": "",
        },
    ]
