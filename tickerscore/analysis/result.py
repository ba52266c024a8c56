"""AnalysisResult: the record handed to persistence and display."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from tickerscore.analysis.blending import BlendOutcome, round_half_up
from tickerscore.analysis.technical import IndicatorSnapshot, SignalType


def _fixed(value: Optional[float], decimals: int) -> Optional[str]:
    return None if value is None else f"{value:.{decimals}f}"


def round_price(value: Optional[float]) -> Optional[float]:
    """Two-decimal rounding with ties going up, as displayed to users."""
    if value is None:
        return None
    return round_half_up(value * 100) / 100


@dataclass(frozen=True)
class AIAssessment:
    news_score: float
    tech_score: float
    explanation: str
    news: tuple = ()

    def to_dict(self) -> dict:
        return {
            "newsScore": self.news_score,
            "techScore": self.tech_score,
            "explanation": self.explanation,
            "news": [dict(a) for a in self.news],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """One analysis run for one symbol. Re-analysis creates a new record."""

    symbol: str
    current_price: Optional[float]
    indicators: IndicatorSnapshot
    signal: SignalType
    score: int
    ai: Optional[AIAssessment] = None
    created: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        symbol: str,
        snapshot: IndicatorSnapshot,
        signal: SignalType,
        outcome: BlendOutcome,
        news: list[dict] | None = None,
    ) -> AnalysisResult:
        ai = None
        if outcome.blended:
            ai = AIAssessment(
                news_score=outcome.news_score,
                tech_score=outcome.tech_score,
                explanation=outcome.explanation,
                news=tuple(news or ()),
            )
        return cls(
            symbol=symbol,
            current_price=round_price(snapshot.current_price),
            indicators=snapshot,
            signal=signal,
            score=outcome.score,
            ai=ai,
        )

    def indicator_summary(self) -> dict[str, Any]:
        snap = self.indicators
        return {
            "rsi14": None if snap.rsi14 is None else round_half_up(snap.rsi14),
            "ma20": _fixed(snap.sma20, 2),
            "ma50": _fixed(snap.sma50, 2),
            "ema12": _fixed(snap.ema12, 2),
            "ema26": _fixed(snap.ema26, 2),
            "macdHist": _fixed(snap.macd_hist, 4),
        }

    def to_dict(self) -> dict:
        out = {
            "symbol": self.symbol,
            "currentPrice": self.current_price,
            "indicators": self.indicator_summary(),
            "signal": self.signal,
            "score": self.score,
            "meta": {"timestamp": self.created.isoformat()},
        }
        if self.ai is not None:
            out["ai"] = self.ai.to_dict()
        return out
