"""Tests for tickerscore.data_sources.llm_sentiment -- prompts, transport, fallbacks."""

import json
from unittest.mock import MagicMock, patch

import requests

from tickerscore.analysis.technical import IndicatorSnapshot
from tickerscore.config import LLMConfig
from tickerscore.data_sources.llm_sentiment import LLMSentimentClient

OLLAMA = LLMConfig(provider="ollama", model="mistral", api_url="http://llm.local:11434", timeout_seconds=7)


def _ollama_response(body):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = {"response": body}
    return resp


class TestAnalyzeNews:

    def setup_method(self):
        self.client = LLMSentimentClient(OLLAMA)

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_no_articles_skips_model(self, mock_post):
        assert self.client.analyze_news("AAPL", [], days_window=3) == {
            "score": 50, "explanation": "No news found.",
        }
        mock_post.assert_not_called()

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_parses_json_answer(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response(
            json.dumps({"score": 72, "explanation": "Earnings beat dominates."})
        )
        out = self.client.analyze_news("AAPL", sample_articles, days_window=3)
        assert out == {"score": 72, "explanation": "Earnings beat dominates."}

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_request_shape(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response('{"score": 50, "explanation": ""}')
        self.client.analyze_news("AAPL", sample_articles, model="llama3", days_window=5)

        args, kwargs = mock_post.call_args
        assert args[0] == "http://llm.local:11434/api/generate"
        assert kwargs["timeout"] == 7
        payload = kwargs["json"]
        assert payload["model"] == "llama3"
        assert payload["stream"] is False
        assert payload["format"] == "json"
        assert "AAPL" in payload["prompt"]
        assert "last 5 days" in payload["prompt"]
        assert "- Company beats earnings expectations (2025-10-14T12:30:00+00:00)" in payload["prompt"]

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_default_model_from_config(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response('{"score": 50}')
        self.client.analyze_news("AAPL", sample_articles)
        assert mock_post.call_args.kwargs["json"]["model"] == "mistral"

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_strips_code_fences(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response('```json\n{"score": 30, "explanation": "Weak."}\n```')
        assert self.client.analyze_news("AAPL", sample_articles)["score"] == 30

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_unparseable_answer(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response("I think it is bullish")
        assert self.client.analyze_news("AAPL", sample_articles) == {
            "score": 50, "explanation": "Error parsing AI response.",
        }

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_non_object_answer(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response("[1, 2]")
        assert self.client.analyze_news("AAPL", sample_articles)["explanation"] == "Error parsing AI response."

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_empty_answer(self, mock_post, sample_articles):
        mock_post.return_value = _ollama_response("")
        assert self.client.analyze_news("AAPL", sample_articles) == {
            "score": 50, "explanation": "No response from AI.",
        }

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_unreachable_server(self, mock_post, sample_articles):
        mock_post.side_effect = requests.ConnectionError("connection refused")
        out = self.client.analyze_news("AAPL", sample_articles)
        assert out["score"] == 50
        assert out["explanation"].startswith("AI Service unavailable (")
        assert "connection refused" in out["explanation"]


class TestAnalyzeTechnical:

    @patch("tickerscore.data_sources.llm_sentiment.requests.post")
    def test_prompt_lists_indicators(self, mock_post):
        mock_post.return_value = _ollama_response('{"score": 64, "explanation": "Uptrend intact."}')
        snap = IndicatorSnapshot(rsi14=55.0, macd_hist=0.25, sma20=101.0, sma50=None,
                                 ema12=102.0, ema26=100.5, current_price=103.2)
        out = LLMSentimentClient(OLLAMA).analyze_technical("NVDA", snap)

        assert out["score"] == 64
        prompt = mock_post.call_args.kwargs["json"]["prompt"]
        assert "NVDA" in prompt
        assert "- RSI: 55.0000" in prompt
        assert "- MA50: N/A" in prompt
        assert "- Current Price: 103.2000" in prompt


class TestAnthropicProvider:

    def setup_method(self):
        self.config = LLMConfig(provider="anthropic", model="claude-sonnet-4-5", timeout_seconds=5)

    def test_missing_key_falls_back(self, sample_articles):
        with patch("tickerscore.data_sources.llm_sentiment.Keys.ANTHROPIC", ""):
            out = LLMSentimentClient(self.config).analyze_news("AAPL", sample_articles)
        assert out["score"] == 50
        assert "ANTHROPIC_API_KEY" in out["explanation"]

    def test_uses_messages_api(self, sample_articles):
        client = LLMSentimentClient(self.config)
        fake = MagicMock()
        fake.messages.create.return_value.content = [
            MagicMock(text='{"score": 41, "explanation": "Mixed."}')
        ]
        client._client = fake

        out = client.analyze_news("AAPL", sample_articles)

        assert out == {"score": 41, "explanation": "Mixed."}
        kwargs = fake.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5"
        assert kwargs["messages"][0]["role"] == "user"
