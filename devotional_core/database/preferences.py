"""
Key/value preferences: current user, subscription state, notification settings,
selected translation and in-progress download markers.

Values are JSON-encoded so ints and bools come back with their type.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from devotional_core.database.connection import SQLiteStore

SCHEMA_PREFERENCES = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_MISSING = object()


class PreferencesStore(SQLiteStore):
    FILENAME = "preferences.db"

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        cur.executescript(SCHEMA_PREFERENCES)

    def get(self, key: str, default: Any = None) -> Any:
        with self._cursor() as cur:
            cur.execute("SELECT value FROM preferences WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key, _MISSING)
        if value is _MISSING or value is None:
            return default
        return str(value)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.get(key, _MISSING)
        if value is _MISSING or value is None:
            return default
        return int(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, _MISSING)
        if value is _MISSING or value is None:
            return default
        return bool(value)

    def set(self, key: str, value: Any) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, json.dumps(value)),
            )

    def set_many(self, values: dict[str, Any]) -> None:
        with self._cursor() as cur:
            cur.executemany(
                """
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                [(k, json.dumps(v)) for k, v in values.items()],
            )

    def remove(self, *keys: str) -> None:
        if not keys:
            return
        with self._cursor() as cur:
            cur.executemany("DELETE FROM preferences WHERE key = ?", [(k,) for k in keys])

    def contains(self, key: str) -> bool:
        with self._cursor() as cur:
            cur.execute("SELECT 1 FROM preferences WHERE key = ?", (key,))
            return cur.fetchone() is not None

    def keys(self, prefix: str | None = None) -> list[str]:
        with self._cursor() as cur:
            if prefix:
                # LIKE treats _ and % as wildcards; match the prefix literally instead.
                cur.execute(
                    "SELECT key FROM preferences WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                )
            else:
                cur.execute("SELECT key FROM preferences ORDER BY key")
            return [row["key"] for row in cur.fetchall()]

    def clear(self) -> None:
        with self._cursor() as cur:
            cur.execute("DELETE FROM preferences")
