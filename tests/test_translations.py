"""
Pytest tests for Bible translation downloads, verification and reading.

Translation files are small SQLite databases built in tmp_path and served through
httpx.MockTransport; the manager's size and verse thresholds are lowered to match.
"""

from __future__ import annotations

import sqlite3

import httpx
import pytest

VERSES_PER_CHAPTER = 40


def _build_translation(path, abbreviation="KJV", chapters=3, text_size=2000):
    """Write a translation database with <ABBR>_verses and <ABBR>_books tables; return its bytes."""
    conn = sqlite3.connect(path)
    conn.execute(
        f"CREATE TABLE {abbreviation}_verses (id INTEGER PRIMARY KEY, book_id INTEGER, "
        "chapter INTEGER, verse INTEGER, text TEXT)"
    )
    conn.execute(f"CREATE TABLE {abbreviation}_books (id INTEGER PRIMARY KEY, name TEXT)")
    conn.executemany(
        f"INSERT INTO {abbreviation}_books (id, name) VALUES (?, ?)",
        [(1, "Genesis"), (43, "John")],
    )
    rows = []
    for chapter in range(1, chapters + 1):
        for verse in range(1, VERSES_PER_CHAPTER + 1):
            text = f"Chapter {chapter} verse {verse} light " + "x" * text_size
            rows.append((len(rows) + 1, 1, chapter, verse, text))
    conn.executemany(f"INSERT INTO {abbreviation}_verses VALUES (?, ?, ?, ?, ?)", rows)
    conn.commit()
    conn.close()
    return path.read_bytes()


@pytest.fixture
def make_manager(data_dir, translation_metadata, preferences):
    """Build a TranslationManager whose downloads are answered by handler."""
    from devotional_core.bible.manager import TranslationManager

    def _make(handler, min_file_bytes=1024, min_verse_count=100):
        manager = TranslationManager(
            data_dir,
            translation_metadata,
            preferences,
            transport=httpx.MockTransport(handler),
            min_file_bytes=min_file_bytes,
            min_verse_count=min_verse_count,
        )
        manager.initialize_translations()
        return manager

    return _make


def _serve(payload):
    def handler(request):
        return httpx.Response(200, content=payload)

    return handler


def test_download_reports_progress_and_verifies(tmp_path, make_manager):
    """Progress values never decrease and end at 1.0; the file is verified and flagged."""
    payload = _build_translation(tmp_path / "source.db")
    manager = make_manager(_serve(payload))
    progress = []

    result = manager.download_translation("kjv", on_progress=progress.append)

    assert result.ok
    assert result.verse_count == 3 * VERSES_PER_CHAPTER
    assert len(progress) > 1
    assert progress == sorted(progress)
    assert progress[-1] == 1.0
    assert manager.translation_path("kjv").read_bytes() == payload
    assert manager.get_translation("kjv").is_downloaded is True
    assert not manager.is_download_in_progress("kjv")


def test_download_follows_redirects(tmp_path, make_manager):
    """Hosted files answer with a redirect before the content."""
    payload = _build_translation(tmp_path / "source.db")

    def handler(request):
        if request.url.host == "drive.google.com":
            return httpx.Response(302, headers={"Location": "https://files.example.com/kjv.db"})
        return httpx.Response(200, content=payload)

    manager = make_manager(handler)
    assert manager.download_translation("kjv").ok


def test_download_http_error_leaves_nothing(make_manager):
    """A non-200 response raises and leaves no file, no flag and no in-progress marker."""
    from devotional_core.core.exceptions import TranslationDownloadError

    manager = make_manager(lambda request: httpx.Response(404))
    with pytest.raises(TranslationDownloadError, match="404"):
        manager.download_translation("asv")
    assert not manager.translation_path("asv").exists()
    assert manager.get_translation("asv").is_downloaded is False
    assert not manager.is_download_in_progress("asv")


def test_download_network_error(make_manager):
    """Transport failures surface as TranslationDownloadError."""
    from devotional_core.core.exceptions import TranslationDownloadError

    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    manager = make_manager(handler)
    with pytest.raises(TranslationDownloadError):
        manager.download_translation("kjv")
    assert not manager.translation_path("kjv").exists()


def test_failed_verification_deletes_file(tmp_path, make_manager):
    """Too few verses: the downloaded file is removed and the flag cleared."""
    from devotional_core.core.exceptions import TranslationVerificationError

    payload = _build_translation(tmp_path / "source.db", chapters=1)
    manager = make_manager(_serve(payload), min_verse_count=1000)
    with pytest.raises(TranslationVerificationError) as excinfo:
        manager.download_translation("kjv")
    assert excinfo.value.reason == f"insufficient verses ({VERSES_PER_CHAPTER})"
    assert not manager.translation_path("kjv").exists()
    assert manager.get_translation("kjv").is_downloaded is False


def test_failed_download_replaces_previous_file(tmp_path, make_manager):
    """A re-download that fails does not leave the old copy behind."""
    from devotional_core.core.exceptions import TranslationDownloadError

    payload = _build_translation(tmp_path / "source.db")
    manager = make_manager(_serve(payload))
    manager.download_translation("kjv")

    failing = make_manager(lambda request: httpx.Response(500))
    with pytest.raises(TranslationDownloadError):
        failing.download_translation("kjv")
    assert not failing.translation_path("kjv").exists()


def test_verify_database_reasons(tmp_path, make_manager):
    """Each structural problem yields its own reason."""
    manager = make_manager(_serve(b""), min_file_bytes=10, min_verse_count=1)

    assert manager.verify_database(tmp_path / "absent.db", "KJV").reason == "missing"

    tiny = tmp_path / "tiny.db"
    tiny.write_bytes(b"abc")
    assert manager.verify_database(tiny, "KJV").reason == "too small (3 bytes)"

    junk = tmp_path / "junk.db"
    junk.write_bytes(b"not sqlite at all " * 100)
    assert manager.verify_database(junk, "KJV").reason.startswith("not a database")

    other = tmp_path / "other.db"
    _build_translation(other, abbreviation="ASV", chapters=1, text_size=10)
    assert manager.verify_database(other, "KJV").reason == "KJV_verses table not found"

    bad_columns = tmp_path / "columns.db"
    conn = sqlite3.connect(bad_columns)
    conn.execute("CREATE TABLE kjv_verses (id INTEGER, book INTEGER, chapter INTEGER, verse INTEGER, text TEXT)")
    conn.commit()
    conn.close()
    assert manager.verify_database(bad_columns, "kjv").reason == "missing columns: book_id"

    result = manager.verify_database(other, "asv")
    assert result.ok
    assert result.verse_count == VERSES_PER_CHAPTER


def test_verify_database_in_unusual_directory(tmp_path, make_manager):
    """A valid file is accepted even when its directory name holds URI characters."""
    manager = make_manager(_serve(b""), min_file_bytes=10, min_verse_count=1)
    folder = tmp_path / "C#notes" / "50%"
    folder.mkdir(parents=True)
    path = folder / "bible_kjv.db"
    _build_translation(path, chapters=1, text_size=10)

    result = manager.verify_database(path, "KJV")
    assert result.ok
    assert result.verse_count == VERSES_PER_CHAPTER
    assert not (tmp_path / "C").exists()


def test_search_in_translation_is_literal(tmp_path, make_manager):
    """% and _ in a search do not act as wildcards."""
    manager = make_manager(_serve(_build_translation(tmp_path / "source.db")))
    manager.download_translation("kjv")

    assert manager.search_in_translation("kjv", "%") == []
    assert manager.search_in_translation("kjv", "l_ght") == []
    assert len(manager.search_in_translation("kjv", "light", limit=3)) == 3


def test_reading_downloaded_translation(tmp_path, make_manager):
    """Chapter reads are ordered, search is limited, book names come from the file."""
    manager = make_manager(_serve(_build_translation(tmp_path / "source.db")))
    manager.download_translation("kjv")

    verses = manager.get_translation_verses("kjv", 1, 2)
    assert [v.verse for v in verses] == list(range(1, VERSES_PER_CHAPTER + 1))
    assert all(v.chapter == 2 for v in verses)
    assert len(manager.search_in_translation("kjv", "light", limit=7)) == 7
    assert manager.get_book_name("kjv", 43) == "John"
    assert manager.get_book_name("kjv", 99) is None


def test_reading_missing_translation(make_manager):
    """Reads against a translation that is not on disk return empty results."""
    manager = make_manager(_serve(b""))
    assert manager.open_translation_database("nheb") is None
    assert manager.get_translation_verses("nheb", 1, 1) == []
    assert manager.search_in_translation("nheb", "love") == []
    assert manager.get_book_name("nheb", 1) is None


def test_flags_reconciled_with_files(make_manager, translation_metadata):
    """The downloaded flag follows the file on disk in both directions."""
    manager = make_manager(_serve(b""))
    translation_metadata.set_downloaded("asv", True)
    manager.translation_path("nheb").write_bytes(b"placeholder")

    flags = {t.id: t.is_downloaded for t in manager.get_all_translations()}
    assert flags == {"kjv": False, "asv": False, "nheb": True}
    assert manager.get_translation("nheb").is_downloaded is True


def test_cleanup_incomplete_downloads(make_manager):
    """Interrupted downloads are deleted on the next start."""
    manager = make_manager(_serve(b""))
    manager.mark_download_in_progress("kjv")
    manager.translation_path("kjv").write_bytes(b"partial")

    assert manager.cleanup_incomplete_downloads() == ["kjv"]
    assert not manager.translation_path("kjv").exists()
    assert not manager.is_download_in_progress("kjv")
    assert manager.cleanup_incomplete_downloads() == []


def test_current_translation_and_delete(tmp_path, make_manager):
    """Selection defaults to kjv; deleting clears file and flag."""
    from devotional_core.core.exceptions import TranslationNotFoundError

    manager = make_manager(_serve(_build_translation(tmp_path / "source.db", abbreviation="ASV")))
    assert manager.get_current_translation() == "kjv"
    manager.set_current_translation("asv")
    assert manager.get_current_translation() == "asv"

    manager.download_translation("asv")
    manager.delete_translation("asv")
    assert not manager.translation_path("asv").exists()
    assert manager.get_translation("asv").is_downloaded is False
    with pytest.raises(TranslationNotFoundError):
        manager.get_translation("web")
