"""Central configuration loader for TickerScore."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from tickerscore.analysis.blending import ScoreWeights
from tickerscore.utils.logger import setup_logger

# Project root is the parent of the tickerscore/ package
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")

logger = setup_logger("config")


def load_settings(path: Path | None = None) -> dict:
    """Load settings from configs/settings.yaml (empty dict if missing)."""
    settings_path = path or PROJECT_ROOT / "configs" / "settings.yaml"
    if not settings_path.exists():
        return {}
    with open(settings_path) as f:
        return yaml.safe_load(f) or {}


SETTINGS = load_settings()


# --- API Keys ---
class Keys:
    ANTHROPIC = os.getenv("ANTHROPIC_API_KEY", "")
    LLM_API_URL = os.getenv("TICKERSCORE_LLM_API_URL", "")
    LLM_MODEL = os.getenv("TICKERSCORE_LLM_MODEL", "")


# --- Paths ---
class Paths:
    ROOT = PROJECT_ROOT
    DATA_CACHE = PROJECT_ROOT / "data" / "cache"
    DATABASE = PROJECT_ROOT / SETTINGS.get("storage", {}).get("db_path", "data/analyses.sqlite")


def _as_flag(value) -> bool:
    """Interpret settings flags stored as bools, ints or strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return False


@dataclass(frozen=True)
class LLMConfig:
    """Connection details for the external sentiment analyzer."""

    provider: str = "ollama"
    model: str = "mistral"
    api_url: str = "http://127.0.0.1:11434"
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class ScoringConfig:
    """Everything one analysis run reads from configuration."""

    weights: ScoreWeights = field(default_factory=ScoreWeights)
    ai_enabled: bool = False
    ai_tech_enabled: bool = False
    news_count: int = 5
    news_days: int = 3
    history_limit: int = 300
    min_history: int = 50
    llm: LLMConfig = field(default_factory=LLMConfig)

    @classmethod
    def from_settings(cls, settings: dict | None = None) -> ScoringConfig:
        settings = SETTINGS if settings is None else settings
        ai = settings.get("ai", {}) or {}
        w = settings.get("weights", {}) or {}
        news = settings.get("news", {}) or {}
        analysis = settings.get("analysis", {}) or {}

        weights = ScoreWeights(
            technical=float(w.get("technical", 0.4)),
            ai_news=float(w.get("ai_news", 0.4)),
            ai_technical=float(w.get("ai_technical", 0.2)),
        )
        negative = {k: v for k, v in weights.to_dict().items() if v < 0}
        if negative:
            logger.warning("Negative score weights configured: %s", negative)

        llm = LLMConfig(
            provider=str(ai.get("provider", "ollama")).lower(),
            model=Keys.LLM_MODEL or str(ai.get("model", "mistral")),
            api_url=(Keys.LLM_API_URL or str(ai.get("api_url", "http://127.0.0.1:11434"))).rstrip("/"),
            timeout_seconds=float(ai.get("timeout_seconds", 30)),
        )

        return cls(
            weights=weights,
            ai_enabled=_as_flag(ai.get("enabled", False)),
            ai_tech_enabled=_as_flag(ai.get("tech_enabled", False)),
            news_count=int(news.get("count_limit", 5)),
            news_days=int(news.get("days_limit", 3)),
            history_limit=int(analysis.get("history_limit", 300)),
            min_history=int(analysis.get("min_history", 50)),
            llm=llm,
        )
