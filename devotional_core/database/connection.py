"""
SQLite connection handling shared by every local store.

Each concern (favorites, downloads, payments, verse cache, translation metadata,
preferences) lives in its own database file under the data directory. Stores open
one connection per operation; the context manager commits on success and rolls
back on error.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from devotional_core.logging import get_logger

logger = get_logger(__name__)


def connect(path: str | Path, *, timeout_sec: float = 5.0, read_only: bool = False) -> sqlite3.Connection:
    """Open a SQLite file with Row access. read_only opens through a file: URI (file must exist)."""
    path = Path(path)
    if read_only:
        conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True, timeout=timeout_sec)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path), timeout=timeout_sec)
    conn.row_factory = sqlite3.Row
    return conn


def contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere, literally. Use with ESCAPE '\\'."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
        (name,),
    ).fetchone()
    return row is not None


class SQLiteStore:
    """
    Base class for a single-file store.

    Subclasses set FILENAME and implement _create_schema(cur); ensure_schema() is idempotent.
    """

    FILENAME = ""

    def __init__(self, data_dir: str | Path, *, timeout_sec: float = 5.0) -> None:
        self._path = Path(data_dir) / self.FILENAME
        self._timeout_sec = timeout_sec

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        return connect(self._path, timeout_sec=self._timeout_sec)

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self._cursor() as cur:
            self._create_schema(cur)
        logger.debug("store_schema_ready", store=type(self).__name__, path=str(self._path))

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        raise NotImplementedError
