"""Key-value persistence for POS collections.

Each collection (settings, tables, menu items, ...) is stored as one JSON
document under its own key and is always replaced as a whole.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol


class KeyValueStore(Protocol):
    def load(self, key: str) -> Any | None:
        """Return the decoded value for ``key``, or None when unset."""

    def save(self, key: str, value: Any) -> None:
        """Replace the value stored under ``key``."""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteKeyValueStore:
    """SQLite-backed store; one row per collection key."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.path)

    def bootstrap_schema(self) -> None:
        """Create the store table if it does not already exist."""
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
        finally:
            conn.close()

    def load(self, key: str) -> Any | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return json.loads(row[0])

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, payload, _utc_now_iso()),
                )
        finally:
            conn.close()


class MemoryKeyValueStore:
    """In-process store. Values are kept as JSON text like the SQLite store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
