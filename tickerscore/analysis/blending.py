"""Blend the technical score with externally sourced AI scores.

The technical score is always present.  When AI blending is enabled, the
news-sentiment score (and, optionally, the AI-technical score) are folded in
as a weighted average:

    total = w_tech + w_news + (w_ai_tech if ai_tech_enabled else 0)
    total = 1 if total == 0           # degenerate-configuration guard
    score = round_half_up((tech*w_tech + news*w_news + [ai_tech*w_ai_tech]) / total)

The guard substitutes the denominator only; it does not fall back to the
technical score, so an all-zero weight set yields the raw numerator.
The result is not re-clamped: external scores live in [0, 100] and weights
are non-negative, so the average already does.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any, Optional

from tickerscore.utils.logger import setup_logger

logger = setup_logger("blending")

NEUTRAL_SCORE: float = 50.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards +infinity."""
    return int(math.floor(value + 0.5))


def coerce_score(value: Any) -> float:
    """Keep real numbers from a collaborator payload; anything else is neutral."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return NEUTRAL_SCORE
    value = float(value)
    if math.isnan(value):
        return NEUTRAL_SCORE
    return value


@dataclass(frozen=True)
class ScoreWeights:
    technical: float = 0.4
    ai_news: float = 0.4
    ai_technical: float = 0.2

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ExternalScore:
    """What an external analyzer returned: a 0-100 score and free text."""

    score: float = NEUTRAL_SCORE
    explanation: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> ExternalScore:
        if not isinstance(payload, dict):
            return cls()
        explanation = payload.get("explanation") or ""
        return cls(score=coerce_score(payload.get("score")), explanation=str(explanation))

    @classmethod
    def neutral(cls, explanation: str = "") -> ExternalScore:
        return cls(score=NEUTRAL_SCORE, explanation=explanation)


@dataclass(frozen=True)
class BlendOutcome:
    score: int
    blended: bool
    news_score: Optional[float] = None
    tech_score: Optional[float] = None
    explanation: str = ""


def combine_explanations(
    news: Optional[ExternalScore],
    ai_tech: Optional[ExternalScore],
    ai_tech_enabled: bool,
) -> str:
    """News first, then AI-technical, one per line. The text is opaque."""
    parts = []
    if news is not None and news.explanation:
        parts.append(f"News: {news.explanation}")
    if ai_tech_enabled and ai_tech is not None and ai_tech.explanation:
        parts.append(f"AI Tech: {ai_tech.explanation}")
    return "\n".join(parts)


def blend(
    technical_score: int,
    weights: ScoreWeights,
    *,
    ai_enabled: bool,
    ai_tech_enabled: bool = False,
    news: Optional[ExternalScore] = None,
    ai_tech: Optional[ExternalScore] = None,
) -> BlendOutcome:
    """Fold *technical_score* with the external scores under *weights*.

    Missing external scores count as the neutral 50.  With *ai_enabled*
    false the technical score passes through untouched.
    """
    if not ai_enabled:
        return BlendOutcome(score=technical_score, blended=False)

    news_score = news.score if news is not None else NEUTRAL_SCORE
    tech_score = ai_tech.score if ai_tech is not None else NEUTRAL_SCORE

    total_weight = weights.technical + weights.ai_news
    numerator = technical_score * weights.technical + news_score * weights.ai_news
    if ai_tech_enabled:
        total_weight += weights.ai_technical
        numerator += tech_score * weights.ai_technical

    if total_weight == 0:
        # TODO: decide with product whether all-zero weights should fall back
        # to the technical score; today the raw numerator is returned.
        logger.warning("All blend weights are zero; using denominator 1")
        total_weight = 1

    combined = numerator / total_weight
    return BlendOutcome(
        score=round_half_up(combined),
        blended=True,
        news_score=news_score,
        tech_score=tech_score,
        explanation=combine_explanations(news, ai_tech, ai_tech_enabled),
    )
