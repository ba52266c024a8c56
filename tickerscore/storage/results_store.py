"""SQLite persistence for the watchlist and past analyses."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from tickerscore.analysis.result import AnalysisResult
from tickerscore.data_sources.market_data import normalize_symbol
from tickerscore.utils.logger import setup_logger

logger = setup_logger("results_store")

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS tickers (name TEXT PRIMARY KEY, created TEXT)",
    """
    CREATE TABLE IF NOT EXISTS analyses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        ticket TEXT NOT NULL,
        score REAL,
        created TEXT,
        details TEXT
    )
    """,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _canonical(name: str) -> str:
    """Watchlist rows and history share the normalized Yahoo symbol."""
    return normalize_symbol(name) or name


class ResultsStore:
    """Watchlist + append-only analysis history in one SQLite file."""

    def __init__(self, db_path: Path, seed_tickers: list[str] | None = None):
        self.db_path = Path(db_path)
        fresh = not self.db_path.exists()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        if fresh and seed_tickers:
            for name in seed_tickers:
                self.add_ticker(name)
            logger.info("Seeded watchlist with %d tickers", len(seed_tickers))

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        conn = self._connect()
        try:
            for stmt in _SCHEMA:
                conn.execute(stmt)
            conn.commit()
        finally:
            conn.close()

    # --- watchlist ---------------------------------------------------------
    def add_ticker(self, name: str) -> bool:
        """Add *name* to the watchlist; False if it was already there."""
        conn = self._connect()
        try:
            cur = conn.execute(
                "INSERT OR IGNORE INTO tickers (name, created) VALUES (?, ?)",
                (_canonical(name), _now()),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def remove_ticker(self, name: str) -> None:
        """Drop *name* and its analysis history."""
        name = _canonical(name)
        conn = self._connect()
        try:
            conn.execute("DELETE FROM tickers WHERE name = ?", (name,))
            conn.execute("DELETE FROM analyses WHERE ticket = ?", (name,))
            conn.commit()
        finally:
            conn.close()

    def list_tickers(self) -> list[dict]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT name, created FROM tickers ORDER BY created DESC").fetchall()
            return [dict(r) for r in rows]
        finally:
            conn.close()

    # --- analyses ------------------------------------------------------------
    def add_analysis(self, ticket: str, result: AnalysisResult) -> int:
        conn = self._connect()
        try:
            cur = conn.execute(
                "INSERT INTO analyses (ticket, score, created, details) VALUES (?, ?, ?, ?)",
                (_canonical(ticket), result.score, _now(), json.dumps(result.to_dict(), default=str)),
            )
            conn.commit()
            return cur.lastrowid
        finally:
            conn.close()

    def get_analyses(self, ticket: str | None = None, limit: int | None = None) -> list[dict]:
        """Newest first; ``details`` is decoded back into a dict."""
        sql = "SELECT id, ticket, score, created, details FROM analyses"
        params: list = []
        if ticket:
            sql += " WHERE ticket = ?"
            params.append(_canonical(ticket))
        sql += " ORDER BY created DESC, id DESC"
        if limit:
            sql += " LIMIT ?"
            params.append(int(limit))

        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()

        out = []
        for r in rows:
            row = dict(r)
            row["details"] = json.loads(row["details"]) if row["details"] else {}
            out.append(row)
        return out
