"""Headline client: Yahoo Finance RSS feed for a symbol."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import requests

from tickerscore.data_sources.market_data import normalize_symbol
from tickerscore.utils.cache import DataCache
from tickerscore.utils.logger import setup_logger

logger = setup_logger("news")

RSS_URL = "https://finance.yahoo.com/rss/headline"
_HEADERS = {"User-Agent": "Mozilla/5.0"}
_TAG_RE = re.compile(r"<[^>]*>")


def _iso_date(raw: str | None) -> str:
    if raw:
        try:
            return parsedate_to_datetime(raw).astimezone(timezone.utc).isoformat()
        except (TypeError, ValueError):
            logger.debug("Unparseable pubDate: %s", raw)
    return datetime.now(timezone.utc).isoformat()


def parse_rss(xml_text: str, count: int = 5) -> list[dict]:
    """Extract up to *count* items with a title from an RSS document."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        logger.warning("Malformed RSS feed: %s", e)
        return []

    items = []
    for item in root.iter("item"):
        if len(items) >= count:
            break
        title = (item.findtext("title") or "").strip()
        if not title:
            continue
        description = _TAG_RE.sub("", item.findtext("description") or "").strip()
        items.append({
            "title": title,
            "link": (item.findtext("link") or "").strip(),
            "pubDate": _iso_date(item.findtext("pubDate")),
            "description": description,
        })
    return items


class NewsClient:
    """Fetch recent headlines for a symbol."""

    def __init__(self, timeout: float = 10.0, cache: DataCache | None = None):
        self.timeout = timeout
        self._cache = cache

    @property
    def cache(self) -> DataCache:
        if self._cache is None:
            self._cache = DataCache("news")
        return self._cache

    def fetch_headlines(self, symbol: str, count: int = 5) -> list[dict]:
        """Get up to *count* headlines; [] on any failure."""
        sym = normalize_symbol(symbol)
        if not sym or count <= 0:
            return []

        cache_key = f"{sym}_{count}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            resp = requests.get(RSS_URL, params={"s": sym}, headers=_HEADERS, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("News fetch error for %s: %s", sym, e)
            return []

        items = parse_rss(resp.text, count)
        logger.info("Fetched %d headlines for %s", len(items), sym)
        self.cache.set(cache_key, items)
        return items
