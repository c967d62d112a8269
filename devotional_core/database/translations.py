"""
Metadata for downloadable Bible translations (catalog rows plus the downloaded flag).
"""

from __future__ import annotations

import sqlite3
from typing import Iterable

from devotional_core.database.connection import SQLiteStore
from devotional_core.database.models import BibleTranslation
from devotional_core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_TRANSLATIONS = """
CREATE TABLE IF NOT EXISTS translations (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    abbreviation TEXT NOT NULL,
    download_url TEXT NOT NULL,
    size_mb INTEGER NOT NULL,
    description TEXT NOT NULL,
    is_downloaded INTEGER NOT NULL DEFAULT 0
);
"""


class TranslationMetadataStore(SQLiteStore):
    FILENAME = "bible_translations_metadata.db"

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        cur.executescript(SCHEMA_TRANSLATIONS)

    def seed(self, catalog: Iterable[BibleTranslation]) -> int:
        """Insert catalog entries that are missing. Existing rows (and their flags) are kept."""
        added = 0
        with self._cursor() as cur:
            for translation in catalog:
                row = translation.to_row()
                row["is_downloaded"] = 0
                cur.execute(
                    """
                    INSERT OR IGNORE INTO translations
                        (id, name, abbreviation, download_url, size_mb, description, is_downloaded)
                    VALUES (:id, :name, :abbreviation, :download_url, :size_mb, :description, :is_downloaded)
                    """,
                    row,
                )
                added += cur.rowcount
        if added:
            logger.info("translation_metadata_seeded", added=added)
        return added

    def list_translations(self) -> list[BibleTranslation]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, name, abbreviation, download_url, size_mb, description, is_downloaded "
                "FROM translations ORDER BY name"
            )
            rows = cur.fetchall()
        return [BibleTranslation.from_row(r) for r in rows]

    def get_translation(self, translation_id: str) -> BibleTranslation | None:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, name, abbreviation, download_url, size_mb, description, is_downloaded "
                "FROM translations WHERE id = ?",
                (translation_id,),
            )
            row = cur.fetchone()
        return BibleTranslation.from_row(row) if row is not None else None

    def set_downloaded(self, translation_id: str, downloaded: bool) -> None:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE translations SET is_downloaded = ? WHERE id = ?",
                (1 if downloaded else 0, translation_id),
            )
