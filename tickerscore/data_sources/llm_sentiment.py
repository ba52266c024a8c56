"""LLM-based sentiment and technical scoring.

Asks a language model for a 0-100 confidence score plus a short
explanation, either for recent news headlines or for an indicator snapshot.
Two backends are supported: a local Ollama server (``/api/generate``) and
Claude through the Anthropic SDK.

Every failure is absorbed here: callers always receive
``{"score": <number>, "explanation": <str>}``, with the neutral 50 when the
model is unreachable or its answer cannot be parsed.
"""

from __future__ import annotations

import json

import requests

from tickerscore.analysis.technical import IndicatorSnapshot
from tickerscore.config import Keys, LLMConfig
from tickerscore.utils.logger import setup_logger

logger = setup_logger("llm_sentiment")

NEUTRAL = 50

NEWS_PROMPT = """\
You are a financial analyst. Analyze these news headlines for {symbol} from the last {days} days.

News:
{headlines}

Task:
1. Assign a confidence score between 0 (Very Bearish) and 100 (Very Bullish) based on the sentiment. 50 is neutral.
2. Provide a short explanation (max 2 sentences) justifying the score.

Return ONLY a JSON object in this format:
{{ "score": number, "explanation": "string" }}
"""

TECHNICAL_PROMPT = """\
You are a technical analyst. Analyze these indicators for {symbol}:
- RSI: {rsi14}
- MACD Histogram: {macd_hist}
- MA20: {sma20}
- MA50: {sma50}
- EMA12: {ema12}
- EMA26: {ema26}
- Current Price: {current_price}

Task:
1. Assign a confidence score between 0 (Strong Sell) and 100 (Strong Buy) based ONLY on these technicals.
2. Provide a short explanation (max 2 sentences).

Return ONLY a JSON object in this format:
{{ "score": number, "explanation": "string" }}
"""


def _fallback(explanation: str) -> dict:
    return {"score": NEUTRAL, "explanation": explanation}


def _strip_fences(raw_text: str) -> str:
    raw_text = raw_text.strip()
    if raw_text.startswith("```"):
        raw_text = raw_text.split("\n", 1)[1] if "\n" in raw_text else ""
        if raw_text.endswith("```"):
            raw_text = raw_text[:-3]
        raw_text = raw_text.strip()
    return raw_text


def _fmt(value) -> str:
    return "N/A" if value is None else f"{value:.4f}"


class LLMSentimentClient:
    """Score news and technicals with a language model."""

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or LLMConfig()
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not Keys.ANTHROPIC:
                raise RuntimeError(
                    "ANTHROPIC_API_KEY not set. Add it to your .env file."
                )
            import anthropic
            self._client = anthropic.Anthropic(
                api_key=Keys.ANTHROPIC, timeout=self.config.timeout_seconds,
            )
        return self._client

    # ------------------------------------------------------------------
    # Public collaborator API
    # ------------------------------------------------------------------
    def analyze_news(
        self,
        symbol: str,
        articles: list[dict],
        model: str | None = None,
        days_window: int = 3,
    ) -> dict:
        """Score the sentiment of *articles*; no model call when there are none."""
        if not articles:
            return _fallback("No news found.")

        headlines = "\n".join(
            f"- {a.get('title', '')} ({a.get('pubDate', '')})" for a in articles
        )
        prompt = NEWS_PROMPT.format(symbol=symbol, days=days_window, headlines=headlines)
        logger.info("Running LLM news sentiment for %s (%d headlines)", symbol, len(articles))
        return self.query(prompt, model)

    def analyze_technical(
        self,
        symbol: str,
        snapshot: IndicatorSnapshot,
        model: str | None = None,
    ) -> dict:
        """Ask the model for its own read of the indicator snapshot."""
        prompt = TECHNICAL_PROMPT.format(
            symbol=symbol,
            rsi14=_fmt(snapshot.rsi14),
            macd_hist=_fmt(snapshot.macd_hist),
            sma20=_fmt(snapshot.sma20),
            sma50=_fmt(snapshot.sma50),
            ema12=_fmt(snapshot.ema12),
            ema26=_fmt(snapshot.ema26),
            current_price=_fmt(snapshot.current_price),
        )
        logger.info("Running LLM technical scoring for %s", symbol)
        return self.query(prompt, model)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def query(self, prompt: str, model: str | None = None) -> dict:
        model = model or self.config.model
        try:
            if self.config.provider == "anthropic":
                raw_text = self._query_anthropic(model, prompt)
            else:
                raw_text = self._query_ollama(model, prompt)
        except Exception as e:
            logger.error("AI Service Error: %s", e)
            return _fallback(f"AI Service unavailable ({e})")

        if not raw_text or not raw_text.strip():
            return _fallback("No response from AI.")

        try:
            result = json.loads(_strip_fences(raw_text))
        except json.JSONDecodeError as e:
            logger.error("Failed to parse AI response: %s", e)
            logger.debug("Raw response: %s", raw_text)
            return _fallback("Error parsing AI response.")

        if not isinstance(result, dict):
            logger.error("AI response is not a JSON object: %r", result)
            return _fallback("Error parsing AI response.")
        return result

    def _query_ollama(self, model: str, prompt: str) -> str:
        resp = requests.post(
            f"{self.config.api_url}/api/generate",
            json={"model": model, "prompt": prompt, "stream": False, "format": "json"},
            timeout=self.config.timeout_seconds,
        )
        resp.raise_for_status()
        return (resp.json() or {}).get("response", "")

    def _query_anthropic(self, model: str, prompt: str) -> str:
        response = self.client.messages.create(
            model=model,
            max_tokens=512,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.content:
            return ""
        return response.content[0].text
