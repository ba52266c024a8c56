"""Moving averages and oscillators over a daily close series.

Every function returns a list the same length as its input so that the value
at index ``i`` describes the window ending at close ``i``.  Positions where an
indicator has not warmed up yet hold ``None``; callers must skip or unwrap
them explicitly instead of doing arithmetic on a sentinel.

Short input is never an error: it yields an all-``None`` series.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

IndicatorSeries = List[Optional[float]]

# Sentinel used by RSI when the smoothed average loss is exactly zero.
_ZERO_LOSS_RS = 100.0


@dataclass(frozen=True)
class MACDResult:
    line: IndicatorSeries
    signal: IndicatorSeries
    histogram: IndicatorSeries


def _as_floats(values: Iterable[float]) -> List[float]:
    """Materialize lists, tuples, numpy arrays or pandas Series as Python floats."""
    if values is None:
        return []
    return np.asarray(values, dtype=float).tolist()


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be a positive integer, got {period!r}")


def _undefined(n: int) -> IndicatorSeries:
    return [None] * n


# ---------------------------------------------------------------------------
# Moving averages
# ---------------------------------------------------------------------------
def sma(values: Sequence[float], period: int) -> IndicatorSeries:
    """Simple moving average over a trailing window of *period* closes."""
    _check_period(period)
    closes = _as_floats(values)
    n = len(closes)
    if n < period:
        return _undefined(n)

    out: IndicatorSeries = _undefined(period - 1)
    for i in range(period - 1, n):
        # Summed left to right over the window so the result does not drift
        # the way a running add/subtract total does.
        window_sum = 0.0
        for v in closes[i - period + 1:i + 1]:
            window_sum += v
        out.append(window_sum / period)
    return out


def ema(values: Sequence[float], period: int) -> IndicatorSeries:
    """Exponential moving average seeded with the SMA of the first *period* closes.

    After the seed, ``ema[i] = close[i] * k + ema[i-1] * (1 - k)`` with
    ``k = 2 / (period + 1)``.
    """
    _check_period(period)
    closes = _as_floats(values)
    n = len(closes)
    if n < period:
        return _undefined(n)

    k = 2.0 / (period + 1)
    seed = 0.0
    for v in closes[:period]:
        seed += v
    seed /= period

    out: IndicatorSeries = _undefined(period - 1)
    prev = seed
    out.append(prev)
    for close in closes[period:]:
        prev = close * k + prev * (1 - k)
        out.append(prev)
    return out


# ---------------------------------------------------------------------------
# Oscillators
# ---------------------------------------------------------------------------
def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    rs = _ZERO_LOSS_RS if avg_loss == 0 else avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(values: Sequence[float], period: int = 14) -> IndicatorSeries:
    """Relative strength index with Wilder's smoothing.

    The first *period* positions are undefined.  The seed at index *period*
    averages the first *period* price changes; afterwards
    ``avg = (avg * (period - 1) + current) / period`` for gains and losses.
    A zero average loss gives RS = 100 rather than infinity, so an
    uninterrupted rise reads 100 - 100/101 instead of exactly 100.
    """
    _check_period(period)
    closes = _as_floats(values)
    n = len(closes)
    if n <= period:
        return _undefined(n)

    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        if change > 0:
            avg_gain += change
        else:
            avg_loss += abs(change)
    avg_gain /= period
    avg_loss /= period

    out: IndicatorSeries = _undefined(period)
    out.append(_rsi_from_averages(avg_gain, avg_loss))

    for i in range(period + 1, n):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = abs(change) if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        out.append(_rsi_from_averages(avg_gain, avg_loss))
    return out


def first_defined_index(series: Sequence[Optional[float]]) -> Optional[int]:
    for i, v in enumerate(series):
        if v is not None:
            return i
    return None


def _pairwise_diff(a: IndicatorSeries, b: IndicatorSeries) -> IndicatorSeries:
    return [
        x - y if x is not None and y is not None else None
        for x, y in zip(a, b)
    ]


def macd(
    values: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """MACD line, signal line and histogram.

    The signal line is the EMA of the MACD line's defined suffix, re-padded
    at the front with ``None`` so it stays index-aligned with the line.
    """
    closes = _as_floats(values)
    n = len(closes)
    line = _pairwise_diff(ema(closes, fast), ema(closes, slow))

    offset = first_defined_index(line)
    if offset is None:
        return MACDResult(line=line, signal=_undefined(n), histogram=_undefined(n))

    suffix = line[offset:]
    signal_line = _undefined(offset) + ema(suffix, signal)
    histogram = _pairwise_diff(line, signal_line)
    return MACDResult(line=line, signal=signal_line, histogram=histogram)


def last_defined(series: Optional[Sequence[Optional[float]]]) -> Optional[float]:
    """Return the last non-``None`` value of *series*, or ``None``."""
    if series is None or len(series) == 0:
        return None
    for v in reversed(series):
        if v is not None:
            return v
    return None
