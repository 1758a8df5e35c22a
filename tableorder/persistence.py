"""SQLite persistence for durable client snapshots (cart, table, orders, token)."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CART_KEY = "cartItems"
TABLE_KEY = "tableNumber"
TOKEN_KEY = "token"


def order_key(order_id: str) -> str:
    return f"order_{order_id}"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SnapshotStore:
    """Key/value snapshots stored as JSON text, local to one device."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the snapshot table if it does not already exist."""
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def get_raw(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM snapshots WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_raw(self, key: str, value: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO snapshots (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, value, _utc_now_iso()),
                )

    def get_json(self, key: str) -> Any:
        """Decoded snapshot, or None when it is missing or unreadable."""
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt snapshot %r", key)
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value))

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))
