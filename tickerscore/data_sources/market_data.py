"""Market data client - daily close series for stocks, ETFs and crypto.

Primary: yfinance (Yahoo Finance chart data)
"""

from __future__ import annotations

import pandas as pd
import yfinance as yf

from tickerscore.utils.cache import DataCache
from tickerscore.utils.logger import setup_logger

logger = setup_logger("market_data")

# Bare tickers that Yahoo only knows with a quote-currency suffix
_COMMON_CRYPTO = {"BTC", "ETH", "SOL", "BNB", "XRP", "ADA", "DOT", "DOGE", "SHIB", "LTC"}

# Calendar range that comfortably covers *limit* daily bars
_LIMIT_TO_PERIOD = [(600, "2y"), (1200, "5y")]


def normalize_symbol(raw: str | None) -> str | None:
    """Map user input to a Yahoo symbol: 'btc' -> 'BTC-USD', 'ETHUSDT' -> 'ETH-USD'."""
    if not raw:
        return None
    s = raw.strip().upper()
    if not s:
        return None
    if s.endswith("USDT"):
        s = s[: -len("USDT")] + "-USD"
    if "-" not in s and "." not in s and s in _COMMON_CRYPTO:
        s = f"{s}-USD"
    return s


def _period_for(limit: int) -> str:
    for max_bars, period in _LIMIT_TO_PERIOD:
        if limit <= max_bars:
            return period
    return "max"


class MarketDataClient:
    """Fetch daily price history."""

    def __init__(self, cache: DataCache | None = None):
        self._cache = cache

    @property
    def cache(self) -> DataCache:
        if self._cache is None:
            self._cache = DataCache("price_historical")
        return self._cache

    def get_price_history(self, symbol: str, period: str = "2y", interval: str = "1d") -> pd.DataFrame:
        """Get OHLCV price history (adjusted) for a symbol; empty frame on failure."""
        cache_key = f"{symbol}_{period}_{interval}"
        cached = self.cache.get_df(cache_key)
        if cached is not None:
            logger.info("Cache hit: %s", cache_key)
            return cached

        logger.info("Fetching price history: %s (period=%s)", symbol, period)
        try:
            df = yf.Ticker(symbol).history(period=period, interval=interval, auto_adjust=True)
        except Exception as e:
            logger.warning("yfinance history failed for %s: %s", symbol, e)
            return pd.DataFrame()

        if df is None or df.empty:
            logger.warning("No data found for symbol: %s", symbol)
            return pd.DataFrame()

        self.cache.set_df(cache_key, df)
        return df

    def get_closes(self, symbol: str, limit: int = 300) -> pd.Series:
        """Chronological daily closes (last *limit* bars), empty trading days dropped."""
        sym = normalize_symbol(symbol)
        if not sym:
            return pd.Series(dtype=float)
        df = self.get_price_history(sym, period=_period_for(limit))
        if df.empty or "Close" not in df.columns:
            return pd.Series(dtype=float)
        closes = df["Close"].astype(float).dropna().sort_index()
        return closes.iloc[-limit:]

    def symbol_exists(self, symbol: str) -> bool:
        """True when Yahoo has at least one real close in the last five days."""
        sym = normalize_symbol(symbol)
        if not sym:
            return False
        try:
            df = yf.Ticker(sym).history(period="5d", interval="1d")
        except Exception as e:
            logger.error("Check symbol %s error: %s", sym, e)
            return False
        if df is None or df.empty or "Close" not in df.columns:
            return False
        return bool(df["Close"].notna().any())
