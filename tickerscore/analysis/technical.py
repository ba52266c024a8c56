"""Technical indicator snapshot and rule-based technical score.

The scorer is a fixed additive heuristic around a neutral base of 50:

    SMA20 vs SMA50 ........ +/-10
    close vs SMA50 ........ +/-5
    EMA12 vs EMA26 ........ +/-10
    MACD histogram sign ... +/-10
    RSI14 < 30 / > 70 ..... +15 / -15

A rule whose inputs never warmed up is skipped rather than counted as
bearish.  The sum is clamped to [0, 100] and the signal is read off the
clamped score.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal, Optional, Sequence

import numpy as np
import pandas as pd

from tickerscore.analysis import indicators as ind
from tickerscore.utils.logger import setup_logger

logger = setup_logger("technical")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SignalType = Literal["BUY", "SELL", "NEUTRAL"]

BASE_SCORE = 50
BUY_THRESHOLD = 65
SELL_THRESHOLD = 35
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70

_SMA_FAST, _SMA_SLOW = 20, 50
_EMA_FAST, _EMA_SLOW = 12, 26
_RSI_PERIOD = 14
_MACD_SIGNAL = 9


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class IndicatorSnapshot:
    """Last defined value of each indicator plus the current close."""

    rsi14: Optional[float] = None
    macd_hist: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    current_price: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TechnicalScore:
    score: int
    signal: SignalType


@dataclass(frozen=True)
class TechnicalResult:
    snapshot: IndicatorSnapshot
    score: int
    signal: SignalType
    bars: int


# ---------------------------------------------------------------------------
# Snapshot + scoring
# ---------------------------------------------------------------------------
def build_snapshot(closes: Sequence[float]) -> IndicatorSnapshot:
    """Run every indicator over *closes* and keep the last defined values."""
    values = np.asarray(closes, dtype=float).tolist() if closes is not None else []
    macd_result = ind.macd(values, _EMA_FAST, _EMA_SLOW, _MACD_SIGNAL)
    return IndicatorSnapshot(
        rsi14=ind.last_defined(ind.rsi(values, _RSI_PERIOD)),
        macd_hist=ind.last_defined(macd_result.histogram),
        sma20=ind.last_defined(ind.sma(values, _SMA_FAST)),
        sma50=ind.last_defined(ind.sma(values, _SMA_SLOW)),
        ema12=ind.last_defined(ind.ema(values, _EMA_FAST)),
        ema26=ind.last_defined(ind.ema(values, _EMA_SLOW)),
        current_price=values[-1] if values else None,
    )


def signal_for(score: int) -> SignalType:
    if score >= BUY_THRESHOLD:
        return "BUY"
    if score <= SELL_THRESHOLD:
        return "SELL"
    return "NEUTRAL"


def score_snapshot(snap: IndicatorSnapshot) -> TechnicalScore:
    """Apply the additive rules to *snap*; never raises."""
    score = BASE_SCORE
    price = snap.current_price

    if snap.sma20 is not None and snap.sma50 is not None:
        score += 10 if snap.sma20 > snap.sma50 else -10
    if snap.sma50 is not None and price is not None:
        score += 5 if price > snap.sma50 else -5
    if snap.ema12 is not None and snap.ema26 is not None:
        score += 10 if snap.ema12 > snap.ema26 else -10
    if snap.macd_hist is not None:
        score += 10 if snap.macd_hist > 0 else -10
    if snap.rsi14 is not None:
        if snap.rsi14 < RSI_OVERSOLD:
            score += 15
        elif snap.rsi14 > RSI_OVERBOUGHT:
            score -= 15

    score = max(0, min(100, score))
    return TechnicalScore(score=score, signal=signal_for(score))


# =====================================================================
# Analyzer
# =====================================================================
class TechnicalAnalyzer:
    """Score a daily close series and expose the indicator columns."""

    def analyze(self, closes: Sequence[float]) -> TechnicalResult:
        snap = build_snapshot(closes)
        scored = score_snapshot(snap)
        bars = len(closes) if closes is not None else 0
        logger.debug(
            "Technical score %d (%s) from %d bars", scored.score, scored.signal, bars,
        )
        return TechnicalResult(snapshot=snap, score=scored.score, signal=scored.signal, bars=bars)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add indicator columns to a frame with a ``Close`` column.

        Undefined warm-up positions become NaN in the frame.
        """
        r = df.copy()
        close = r["Close"].astype(float).tolist()

        def column(series: ind.IndicatorSeries) -> pd.Series:
            return pd.Series(
                [np.nan if v is None else v for v in series], index=r.index, dtype=float,
            )

        r["SMA_20"] = column(ind.sma(close, _SMA_FAST))
        r["SMA_50"] = column(ind.sma(close, _SMA_SLOW))
        r["EMA_12"] = column(ind.ema(close, _EMA_FAST))
        r["EMA_26"] = column(ind.ema(close, _EMA_SLOW))
        r["RSI_14"] = column(ind.rsi(close, _RSI_PERIOD))

        m = ind.macd(close, _EMA_FAST, _EMA_SLOW, _MACD_SIGNAL)
        r["MACD"] = column(m.line)
        r["MACD_signal"] = column(m.signal)
        r["MACD_hist"] = column(m.histogram)
        return r
