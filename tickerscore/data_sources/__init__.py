"""External collaborators: prices, headlines and the LLM scorer."""

from .market_data import MarketDataClient, normalize_symbol
from .news import NewsClient
from .llm_sentiment import LLMSentimentClient
