"""
Downloadable Bible translations.

Responsibilities:
- Seed translation metadata and reconcile the downloaded flag with files on disk.
- Stream a translation database (bible_<id>.db) into the data directory with progress,
  verify it, and leave nothing behind on failure.
- Track in-flight downloads with a downloading_<id> preference so a crash mid-download
  is cleaned up on the next start.
- Read verses, search and book names from a downloaded translation (read-only).
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

import httpx

from devotional_core.bible.catalog import AVAILABLE_TRANSLATIONS, DEFAULT_TRANSLATION_ID
from devotional_core.core.clock import now_local
from devotional_core.core.exceptions import (
    TranslationDownloadError,
    TranslationNotFoundError,
    TranslationVerificationError,
)
from devotional_core.database.connection import connect, contains_pattern
from devotional_core.database.models import BibleTranslation, BibleVerse
from devotional_core.database.preferences import PreferencesStore
from devotional_core.database.translations import TranslationMetadataStore
from devotional_core.logging import get_logger

logger = get_logger(__name__)

SELECTED_TRANSLATION_KEY = "selected_bible_translation"
DOWNLOADING_PREFIX = "downloading_"

MIN_FILE_BYTES = 3 * 1024 * 1024
MIN_VERSE_COUNT = 30_000
REQUIRED_COLUMNS = frozenset({"id", "book_id", "chapter", "verse", "text"})
SEARCH_LIMIT = 50
CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    reason: str = ""
    verse_count: int = 0


def _find_table(conn: sqlite3.Connection, name: str) -> str | None:
    """Actual name of a table matching name case-insensitively."""
    for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'"):
        if row["name"].lower() == name.lower():
            return row["name"]
    return None


class TranslationManager:
    def __init__(
        self,
        data_dir: str | Path,
        metadata: TranslationMetadataStore,
        preferences: PreferencesStore,
        *,
        timeout_sec: float = 20.0,
        transport: httpx.BaseTransport | None = None,
        min_file_bytes: int = MIN_FILE_BYTES,
        min_verse_count: int = MIN_VERSE_COUNT,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._metadata = metadata
        self._prefs = preferences
        self._timeout_sec = timeout_sec
        self._transport = transport
        self.min_file_bytes = min_file_bytes
        self.min_verse_count = min_verse_count
        self._clock = clock

    def translation_path(self, translation_id: str) -> Path:
        return self._data_dir / f"bible_{translation_id}.db"

    def initialize_translations(self) -> int:
        return self._metadata.seed(AVAILABLE_TRANSLATIONS)

    def get_all_translations(self) -> list[BibleTranslation]:
        """Catalog with is_downloaded reflecting whether the file is actually present."""
        translations = self._metadata.list_translations()
        for t in translations:
            exists = self.translation_path(t.id).exists()
            if exists != t.is_downloaded:
                logger.info("translation_flag_reconciled", translation_id=t.id, is_downloaded=exists)
                self._metadata.set_downloaded(t.id, exists)
                t.is_downloaded = exists
        return translations

    def get_translation(self, translation_id: str) -> BibleTranslation:
        translation = self._metadata.get_translation(translation_id)
        if translation is None:
            raise TranslationNotFoundError(f"unknown translation: {translation_id}")
        return translation

    def _abbreviation(self, translation_id: str) -> str:
        translation = self._metadata.get_translation(translation_id)
        return (translation.abbreviation if translation else translation_id).upper()

    def download_translation(
        self,
        translation: BibleTranslation | str,
        on_progress: ProgressCallback | None = None,
    ) -> VerificationResult:
        if isinstance(translation, str):
            translation = self.get_translation(translation)
        path = self.translation_path(translation.id)
        self.mark_download_in_progress(translation.id)
        try:
            path.unlink(missing_ok=True)
            self._stream_to_file(translation.download_url, path, on_progress)
            result = self.verify_database(path, translation.abbreviation)
            if not result.ok:
                raise TranslationVerificationError(
                    f"downloaded file is not a valid {translation.abbreviation} Bible database",
                    reason=result.reason,
                )
        except Exception as e:
            logger.error("translation_download_failed", translation_id=translation.id, error=str(e))
            path.unlink(missing_ok=True)
            self._metadata.set_downloaded(translation.id, False)
            self.mark_download_complete(translation.id)
            raise
        self._metadata.set_downloaded(translation.id, True)
        self.mark_download_complete(translation.id)
        logger.info(
            "translation_downloaded",
            translation_id=translation.id,
            verses=result.verse_count,
            size_bytes=path.stat().st_size,
        )
        return result

    def _stream_to_file(self, url: str, path: Path, on_progress: ProgressCallback | None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("translation_download_started", url=url)
        try:
            with httpx.Client(timeout=self._timeout_sec, transport=self._transport, follow_redirects=True) as client:
                with client.stream("GET", url) as resp:
                    if resp.status_code != 200:
                        raise TranslationDownloadError(f"download failed with status {resp.status_code}")
                    total = int(resp.headers.get("Content-Length") or 0)
                    downloaded = 0
                    with open(path, "wb") as fh:
                        for chunk in resp.iter_bytes(CHUNK_SIZE):
                            fh.write(chunk)
                            downloaded += len(chunk)
                            if total > 0 and on_progress is not None:
                                on_progress(min(downloaded / total, 1.0))
        except httpx.HTTPError as e:
            raise TranslationDownloadError(f"download failed: {e}") from e

    def verify_database(self, path: str | Path, abbreviation: str) -> VerificationResult:
        path = Path(path)
        if not path.exists():
            return VerificationResult(False, "missing")
        size = path.stat().st_size
        if size < self.min_file_bytes:
            return VerificationResult(False, f"too small ({size} bytes)")
        try:
            conn = connect(path, read_only=True)
        except sqlite3.DatabaseError as e:
            return VerificationResult(False, f"not a database: {e}")
        try:
            table = _find_table(conn, f"{abbreviation.upper()}_verses")
            if table is None:
                return VerificationResult(False, f"{abbreviation.upper()}_verses table not found")
            columns = {row["name"].lower() for row in conn.execute(f'PRAGMA table_info("{table}")')}
            missing = REQUIRED_COLUMNS - columns
            if missing:
                return VerificationResult(False, f"missing columns: {', '.join(sorted(missing))}")
            count = conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]
            if count < self.min_verse_count:
                return VerificationResult(False, f"insufficient verses ({count})", count)
            return VerificationResult(True, "", count)
        except sqlite3.DatabaseError as e:
            return VerificationResult(False, f"not a database: {e}")
        finally:
            conn.close()

    def delete_translation(self, translation_id: str) -> None:
        self.translation_path(translation_id).unlink(missing_ok=True)
        self._metadata.set_downloaded(translation_id, False)
        logger.info("translation_deleted", translation_id=translation_id)

    def get_current_translation(self) -> str:
        return self._prefs.get_str(SELECTED_TRANSLATION_KEY) or DEFAULT_TRANSLATION_ID

    def set_current_translation(self, translation_id: str) -> None:
        self._prefs.set(SELECTED_TRANSLATION_KEY, translation_id)

    def open_translation_database(self, translation_id: str) -> sqlite3.Connection | None:
        path = self.translation_path(translation_id)
        if not path.exists():
            logger.warning("translation_db_missing", translation_id=translation_id)
            return None
        return connect(path, read_only=True)

    def get_translation_verses(self, translation_id: str, book_id: int, chapter: int) -> list[BibleVerse]:
        conn = self.open_translation_database(translation_id)
        if conn is None:
            return []
        try:
            table = _find_table(conn, f"{self._abbreviation(translation_id)}_verses")
            if table is None:
                return []
            rows = conn.execute(
                f'SELECT id, book_id, chapter, verse, text FROM "{table}" '
                "WHERE book_id = ? AND chapter = ? ORDER BY verse ASC",
                (book_id, chapter),
            ).fetchall()
        except sqlite3.DatabaseError as e:
            logger.warning("translation_read_failed", translation_id=translation_id, error=str(e))
            return []
        finally:
            conn.close()
        return [BibleVerse.from_row(r) for r in rows]

    def search_in_translation(self, translation_id: str, query: str, limit: int = SEARCH_LIMIT) -> list[BibleVerse]:
        conn = self.open_translation_database(translation_id)
        if conn is None:
            return []
        try:
            table = _find_table(conn, f"{self._abbreviation(translation_id)}_verses")
            if table is None:
                return []
            rows = conn.execute(
                f'SELECT id, book_id, chapter, verse, text FROM "{table}" '
                "WHERE text LIKE ? ESCAPE '\\' LIMIT ?",
                (contains_pattern(query), limit),
            ).fetchall()
        except sqlite3.DatabaseError as e:
            logger.warning("translation_search_failed", translation_id=translation_id, error=str(e))
            return []
        finally:
            conn.close()
        return [BibleVerse.from_row(r) for r in rows]

    def get_book_name(self, translation_id: str, book_id: int) -> str | None:
        conn = self.open_translation_database(translation_id)
        if conn is None:
            return None
        try:
            table = _find_table(conn, f"{self._abbreviation(translation_id)}_books")
            if table is None:
                return None
            row = conn.execute(f'SELECT name FROM "{table}" WHERE id = ? LIMIT 1', (book_id,)).fetchone()
        except sqlite3.DatabaseError as e:
            logger.warning("translation_book_lookup_failed", translation_id=translation_id, error=str(e))
            return None
        finally:
            conn.close()
        return row["name"] if row else None

    def mark_download_in_progress(self, translation_id: str) -> None:
        self._prefs.set(f"{DOWNLOADING_PREFIX}{translation_id}", self._clock().isoformat())

    def mark_download_complete(self, translation_id: str) -> None:
        self._prefs.remove(f"{DOWNLOADING_PREFIX}{translation_id}")

    def is_download_in_progress(self, translation_id: str) -> bool:
        return self._prefs.contains(f"{DOWNLOADING_PREFIX}{translation_id}")

    def cleanup_incomplete_downloads(self) -> list[str]:
        """Remove files left by interrupted downloads. Returns the affected translation ids."""
        cleaned = []
        for key in self._prefs.keys(DOWNLOADING_PREFIX):
            translation_id = key[len(DOWNLOADING_PREFIX):]
            self.translation_path(translation_id).unlink(missing_ok=True)
            self._prefs.remove(key)
            self._metadata.set_downloaded(translation_id, False)
            cleaned.append(translation_id)
            logger.warning("incomplete_download_cleaned", translation_id=translation_id)
        return cleaned
