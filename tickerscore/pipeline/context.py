"""Per-run state for one symbol, handed from step to step."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pandas as pd

from tickerscore.analysis.blending import BlendOutcome, ExternalScore
from tickerscore.analysis.result import AnalysisResult
from tickerscore.analysis.technical import TechnicalResult
from tickerscore.config import ScoringConfig
from tickerscore.data_sources.llm_sentiment import LLMSentimentClient
from tickerscore.data_sources.market_data import MarketDataClient
from tickerscore.data_sources.news import NewsClient


@dataclass
class Services:
    """External collaborators used by the steps."""

    market: Any = field(default_factory=MarketDataClient)
    news: Any = field(default_factory=NewsClient)
    llm: Any = field(default_factory=LLMSentimentClient)

    @classmethod
    def from_config(cls, config: ScoringConfig) -> Services:
        return cls(llm=LLMSentimentClient(config.llm))


@dataclass
class PipelineContext:
    """Accumulates data and results as one symbol's analysis executes."""

    # Input
    symbol: str
    config: ScoringConfig = field(default_factory=ScoringConfig)
    services: Services = field(default_factory=Services)
    run_id: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))

    # Fetched data
    closes: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    news: list[dict] = field(default_factory=list)

    # Analysis results
    technical: TechnicalResult | None = None
    news_assessment: ExternalScore | None = None
    tech_assessment: ExternalScore | None = None
    outcome: BlendOutcome | None = None
    result: AnalysisResult | None = None

    # Pipeline metadata
    steps_completed: list[str] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def ai_enabled(self) -> bool:
        return self.config.ai_enabled

    @property
    def ai_tech_enabled(self) -> bool:
        return self.config.ai_enabled and self.config.ai_tech_enabled
