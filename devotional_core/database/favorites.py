"""
Unified favorites: devotionals, verse/theme of the month and Bible verses in one table,
partitioned by user.

Responsibilities:
- Keep (user_id, type, reference_id) unique; re-adding replaces the row.
- Migrate the legacy single-user layout (no user_id column) in place, tagging old rows
  with the current user or "migrated_user" when nobody is signed in.
- Answer per-user queries ordered by created_at.
"""

from __future__ import annotations

import sqlite3

from devotional_core.core.clock import now_local
from devotional_core.database.connection import SQLiteStore, contains_pattern, table_exists
from devotional_core.database.models import (
    FAVORITE_BIBLE_VERSE,
    FAVORITE_DEVOTIONAL,
    FAVORITE_TYPES,
    Favorite,
)
from devotional_core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 2
MIGRATED_USER_ID = "migrated_user"

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_ALPHABETICAL = "alphabetical"

SCHEMA_FAVORITES = """
CREATE TABLE IF NOT EXISTS unified_favorites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    reference_id TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT,
    subtitle TEXT,
    book_id INTEGER,
    chapter INTEGER,
    verse INTEGER,
    translation_id TEXT,
    created_at TEXT NOT NULL,
    UNIQUE(user_id, type, reference_id)
);
CREATE INDEX IF NOT EXISTS idx_unified_favorites_user ON unified_favorites(user_id, type);
"""

_COLUMNS = (
    "id, user_id, type, reference_id, title, content, subtitle, "
    "book_id, chapter, verse, translation_id, created_at"
)


class FavoritesStore(SQLiteStore):
    FILENAME = "unified_favorites.db"

    def __init__(self, data_dir, *, timeout_sec: float = 5.0) -> None:
        super().__init__(data_dir, timeout_sec=timeout_sec)
        self._migration_user_id: str | None = None

    def ensure_schema(self, migration_user_id: str | None = None) -> None:
        """Create or upgrade the table. migration_user_id owns rows carried over from v1."""
        self._migration_user_id = migration_user_id
        super().ensure_schema()

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        version = cur.execute("PRAGMA user_version").fetchone()[0]
        if version < SCHEMA_VERSION and self._is_legacy_layout(cur.connection):
            self._migrate_v1(cur)
        cur.executescript(SCHEMA_FAVORITES)
        cur.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    @staticmethod
    def _is_legacy_layout(conn: sqlite3.Connection) -> bool:
        if not table_exists(conn, "unified_favorites"):
            return False
        cols = {row["name"] for row in conn.execute("PRAGMA table_info(unified_favorites)")}
        return "user_id" not in cols

    def _migrate_v1(self, cur: sqlite3.Cursor) -> None:
        owner = self._migration_user_id or MIGRATED_USER_ID
        cur.execute("ALTER TABLE unified_favorites RENAME TO unified_favorites_v1")
        cur.executescript(SCHEMA_FAVORITES)
        cur.execute(
            """
            INSERT OR IGNORE INTO unified_favorites
                (user_id, type, reference_id, title, content, subtitle,
                 book_id, chapter, verse, translation_id, created_at)
            SELECT ?, type, reference_id, title, content, subtitle,
                   book_id, chapter, verse, translation_id, created_at
            FROM unified_favorites_v1
            """,
            (owner,),
        )
        migrated = cur.rowcount
        cur.execute("DROP TABLE unified_favorites_v1")
        logger.info("favorites_migrated", to_version=SCHEMA_VERSION, owner=owner, rows=migrated)

    def add_favorite(self, favorite: Favorite) -> Favorite:
        if favorite.type not in FAVORITE_TYPES:
            raise ValueError(f"unknown favorite type: {favorite.type}")
        if not favorite.created_at:
            favorite.created_at = now_local().isoformat()
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT OR REPLACE INTO unified_favorites
                    (user_id, type, reference_id, title, content, subtitle,
                     book_id, chapter, verse, translation_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    favorite.user_id,
                    favorite.type,
                    favorite.reference_id,
                    favorite.title,
                    favorite.content,
                    favorite.subtitle,
                    favorite.book_id,
                    favorite.chapter,
                    favorite.verse,
                    favorite.translation_id,
                    favorite.created_at,
                ),
            )
            favorite.id = cur.lastrowid
        return favorite

    def remove_favorite(self, user_id: str, type: str, reference_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM unified_favorites WHERE user_id = ? AND type = ? AND reference_id = ?",
                (user_id, type, reference_id),
            )
            return cur.rowcount > 0

    def is_favorite(self, user_id: str, type: str, reference_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "SELECT 1 FROM unified_favorites WHERE user_id = ? AND type = ? AND reference_id = ?",
                (user_id, type, reference_id),
            )
            return cur.fetchone() is not None

    def get_favorite(self, user_id: str, type: str, reference_id: str) -> Favorite | None:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM unified_favorites "
                "WHERE user_id = ? AND type = ? AND reference_id = ?",
                (user_id, type, reference_id),
            )
            row = cur.fetchone()
        return Favorite.from_row(row) if row is not None else None

    def get_all_favorites(self, user_id: str) -> list[Favorite]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM unified_favorites WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            )
            rows = cur.fetchall()
        return [Favorite.from_row(r) for r in rows]

    def get_favorites_by_type(self, user_id: str, type: str) -> list[Favorite]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM unified_favorites "
                "WHERE user_id = ? AND type = ? ORDER BY created_at DESC",
                (user_id, type),
            )
            rows = cur.fetchall()
        return [Favorite.from_row(r) for r in rows]

    def get_devotional_favorites(self, user_id: str) -> list[Favorite]:
        return self.get_favorites_by_type(user_id, FAVORITE_DEVOTIONAL)

    def get_bible_verse_favorites(self, user_id: str) -> list[Favorite]:
        return self.get_favorites_by_type(user_id, FAVORITE_BIBLE_VERSE)

    def is_bible_verse_favorite(
        self, user_id: str, translation_id: str, book_id: int, chapter: int, verse: int
    ) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT 1 FROM unified_favorites
                WHERE user_id = ? AND type = ? AND translation_id = ?
                  AND book_id = ? AND chapter = ? AND verse = ?
                """,
                (user_id, FAVORITE_BIBLE_VERSE, translation_id, book_id, chapter, verse),
            )
            return cur.fetchone() is not None

    def clear_all_favorites(self, user_id: str) -> int:
        with self._cursor() as cur:
            cur.execute("DELETE FROM unified_favorites WHERE user_id = ?", (user_id,))
            removed = cur.rowcount
        logger.info("favorites_cleared", user_id=user_id, removed=removed)
        return removed

    def search_and_sort(self, user_id: str, query: str = "", order: str = SORT_NEWEST) -> list[Favorite]:
        """Case-insensitive match on title, content and subtitle."""
        order_sql = {
            SORT_NEWEST: "created_at DESC",
            SORT_OLDEST: "created_at ASC",
            SORT_ALPHABETICAL: "title COLLATE NOCASE ASC",
        }.get(order)
        if order_sql is None:
            raise ValueError(f"unknown sort order: {order}")
        sql = f"SELECT {_COLUMNS} FROM unified_favorites WHERE user_id = ?"
        params: list = [user_id]
        query = query.strip()
        if query:
            like = contains_pattern(query.lower())
            sql += (
                " AND (lower(title) LIKE ? ESCAPE '\\' OR lower(coalesce(content, '')) LIKE ? ESCAPE '\\'"
                " OR lower(coalesce(subtitle, '')) LIKE ? ESCAPE '\\')"
            )
            params.extend([like, like, like])
        sql += f" ORDER BY {order_sql}"
        with self._cursor() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        return [Favorite.from_row(r) for r in rows]
