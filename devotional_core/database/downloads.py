"""
Devotionals saved for offline reading.

A file left behind by an older build may lack the downloads table; on first open such
a file (or one SQLite cannot read at all) is deleted and recreated.
"""

from __future__ import annotations

import sqlite3

from devotional_core.database.connection import SQLiteStore, connect, table_exists
from devotional_core.database.models import Devotional
from devotional_core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_DOWNLOADS = """
CREATE TABLE IF NOT EXISTS downloads (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    date TEXT NOT NULL
);
"""


class DownloadsStore(SQLiteStore):
    FILENAME = "downloads.db"

    def ensure_schema(self) -> None:
        self._discard_if_invalid()
        super().ensure_schema()

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        cur.executescript(SCHEMA_DOWNLOADS)

    def _discard_if_invalid(self) -> None:
        if not self.path.exists():
            return
        try:
            conn = connect(self.path, read_only=True)
            try:
                valid = table_exists(conn, "downloads")
            finally:
                conn.close()
        except sqlite3.DatabaseError as e:
            logger.warning("downloads_db_unreadable", path=str(self.path), error=str(e))
            valid = False
        if not valid:
            logger.warning("downloads_db_discarded", path=str(self.path))
            self.path.unlink()

    def insert_devotional(self, devotional: Devotional) -> None:
        row = devotional.to_row()
        with self._cursor() as cur:
            cur.execute(
                "INSERT OR REPLACE INTO downloads (id, title, content, date) VALUES (?, ?, ?, ?)",
                (row["id"], row["title"], row["content"], row["date"]),
            )
        logger.info("devotional_downloaded", devotional_id=devotional.id)

    def get_all_devotionals(self) -> list[Devotional]:
        with self._cursor() as cur:
            cur.execute("SELECT id, title, content, date FROM downloads ORDER BY date DESC")
            rows = cur.fetchall()
        return [Devotional.from_row(row) for row in rows]

    def get_devotional(self, devotional_id: str) -> Devotional | None:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, title, content, date FROM downloads WHERE id = ?",
                (devotional_id,),
            )
            row = cur.fetchone()
        return Devotional.from_row(row) if row is not None else None

    def is_downloaded(self, devotional_id: str) -> bool:
        return self.get_devotional(devotional_id) is not None

    def delete_devotional(self, devotional_id: str) -> bool:
        """Remove a saved devotional. Returns False if it was not saved."""
        with self._cursor() as cur:
            cur.execute("DELETE FROM downloads WHERE id = ?", (devotional_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("devotional_download_removed", devotional_id=devotional_id)
        return deleted
