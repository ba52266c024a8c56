"""File cache for price histories (parquet) and headline lists (JSON)."""

import json
import re
import time
from pathlib import Path

import pandas as pd

from tickerscore.config import Paths, SETTINGS

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class DataCache:
    """One directory per category; entries expire after the category's TTL.

    TTLs come from ``cache.ttl_hours.<category>`` in settings (24h when unset).
    """

    def __init__(self, category: str, cache_root: Path | None = None, ttl_hours: float | None = None):
        self.category = category
        self.cache_dir = Path(cache_root or Paths.DATA_CACHE) / category
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        if ttl_hours is None:
            ttl_hours = (SETTINGS.get("cache", {}) or {}).get("ttl_hours", {}).get(category, 24)
        self.ttl_seconds = float(ttl_hours) * 3600

    def path_for(self, key: str, suffix: str) -> Path:
        # keys look like "AAPL_2y_1d", keep them readable on disk
        return self.cache_dir / f"{_UNSAFE.sub('_', key)}.{suffix}"

    def _fresh(self, path: Path) -> bool:
        if not path.exists():
            return False
        if time.time() - path.stat().st_mtime <= self.ttl_seconds:
            return True
        path.unlink(missing_ok=True)
        return False

    def get(self, key: str) -> dict | list | None:
        path = self.path_for(key, "json")
        if not self._fresh(path):
            return None
        return json.loads(path.read_text())

    def set(self, key: str, data: dict | list) -> None:
        path = self.path_for(key, "json")
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data))
        tmp.replace(path)

    def get_df(self, key: str) -> pd.DataFrame | None:
        path = self.path_for(key, "parquet")
        if not self._fresh(path):
            return None
        return pd.read_parquet(path)

    def set_df(self, key: str, df: pd.DataFrame) -> None:
        df.to_parquet(self.path_for(key, "parquet"))

    def clear(self) -> int:
        """Delete every entry in this category; returns how many were removed."""
        removed = 0
        for path in self.cache_dir.iterdir():
            if path.is_file():
                path.unlink()
                removed += 1
        return removed
