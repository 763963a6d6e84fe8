"""SQLite snapshot store used when the remote service is unreachable.

Holds the last catalog state we successfully observed, one JSON document per
key (``products``, ``collections``, ``config``).
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Generator, Optional

from shop.config import FALLBACK_DB_PATH
from shop.logging_config import get_logger

__all__ = [
    "FallbackStore",
    "SNAPSHOT_KEYS",
]

logger = get_logger("fallback")

SNAPSHOT_KEYS = ("products", "collections", "config")


class FallbackStore:
    """Key/value snapshots in a single SQLite table."""

    def __init__(self, db_path: str = FALLBACK_DB_PATH):
        self.db_path = db_path
        self._ensure_table_exists()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_table_exists(self) -> None:
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def read(self, key: str) -> Optional[Any]:
        """Return the decoded snapshot for ``key``, or None if absent or unreadable."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM snapshots WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt fallback snapshot '{key}'")
            return None

    def write(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO snapshots (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, payload, datetime.now().isoformat()),
            )
            conn.commit()

    def clear(self) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM snapshots")
            conn.commit()
