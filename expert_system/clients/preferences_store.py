"""SQLite-backed key-value store for remembered form values."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, Optional

from expert_system.schemas import UserPreferences

PREFERENCE_KEYS: tuple[str, ...] = tuple(UserPreferences.model_fields)


class PreferencesStore:
    """Plain-text key-value table holding the last-used form values.

    Nothing is versioned or encrypted. Callers load a :class:`UserPreferences`
    snapshot and hand it to the components that need it.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        if key not in PREFERENCE_KEYS:
            raise ValueError(f"Unknown preference key: {key!r}")
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO preferences (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM preferences WHERE key = ?", (key,))

    def load(self) -> UserPreferences:
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM preferences").fetchall()
        values: Dict[str, str] = {
            row["key"]: row["value"] for row in rows if row["key"] in PREFERENCE_KEYS
        }
        return UserPreferences(**values)

    def update(self, **fields: Optional[str]) -> UserPreferences:
        """Store the non-empty values in ``fields``; empty strings clear a key."""
        for key, value in fields.items():
            if key not in PREFERENCE_KEYS:
                raise ValueError(f"Unknown preference key: {key!r}")
            if value is None:
                continue
            if value == "":
                self.delete(key)
            else:
                self.set(key, value)
        return self.load()

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM preferences")


__all__ = ["PREFERENCE_KEYS", "PreferencesStore"]
