"""
Read-mostly content from the hosted backend: devotionals, verse/theme of the month,
verse and confession of the day, and the admin password used to gate publishing.

Dated lookups fall back to fixed text when the row is missing or the request fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from devotional_core.core.clock import iso_date, now_local
from devotional_core.core.exceptions import NotFoundError, RemoteError
from devotional_core.database.models import Devotional
from devotional_core.logging import get_logger
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

FALLBACK_VERSE_TEXT = "I can do all things through Christ who strengthens me."
FALLBACK_VERSE_REFERENCE = "Philippians 4:13"
FALLBACK_THEME = "Walking in Faith and Victory"
FALLBACK_CONFESSION = "I am more than a conqueror through Christ!"


@dataclass(frozen=True)
class VerseOfTheDay:
    text: str
    reference: str


FALLBACK_VERSE = VerseOfTheDay(FALLBACK_VERSE_TEXT, FALLBACK_VERSE_REFERENCE)


class ContentService:
    def __init__(self, client: PostgrestClient) -> None:
        self._client = client

    def fetch_devotionals(self) -> list[Devotional]:
        rows = self._client.table("devotionals").select("*").order("date", ascending=False).execute()
        return [Devotional.from_remote(r) for r in rows]

    def add_devotional(self, title: str, content: str, when: datetime) -> bool:
        """Publish a devotional. Callers check the admin password first."""
        try:
            self._client.table("devotionals").insert(
                {"title": title, "content": content, "date": when.isoformat()},
                returning=False,
            )
        except RemoteError as e:
            logger.warning("devotional_publish_failed", title=title, error=str(e))
            return False
        logger.info("devotional_published", title=title, date=when.isoformat())
        return True

    def fetch_admin_password(self) -> str | None:
        try:
            row = (
                self._client.table("admin_settings")
                .select("value")
                .eq("key", "admin_password")
                .single()
            )
        except (NotFoundError, RemoteError) as e:
            logger.warning("admin_password_unavailable", error=str(e))
            return None
        return row.get("value")

    def verify_admin_password(self, candidate: str) -> bool:
        stored = self.fetch_admin_password()
        return stored is not None and candidate == stored

    def fetch_verse_of_the_month(self, today: date | None = None) -> VerseOfTheDay:
        today = today or now_local().date()
        try:
            row = (
                self._client.table("monthly_verses")
                .select("verse_text, verse_reference")
                .eq("year", today.year)
                .eq("month", today.month)
                .maybe_single()
            )
        except RemoteError as e:
            logger.warning("verse_of_month_fetch_failed", error=str(e))
            return FALLBACK_VERSE
        if row is None:
            return FALLBACK_VERSE
        return VerseOfTheDay(row["verse_text"], row["verse_reference"])

    def fetch_theme_of_the_month(self, today: date | None = None) -> str:
        today = today or now_local().date()
        try:
            row = (
                self._client.table("monthly_themes")
                .select("theme_text")
                .eq("year", today.year)
                .eq("month", today.month)
                .maybe_single()
            )
        except RemoteError as e:
            logger.warning("theme_of_month_fetch_failed", error=str(e))
            return FALLBACK_THEME
        return row["theme_text"] if row else FALLBACK_THEME

    def fetch_verse_of_the_day(self, today: date | None = None) -> VerseOfTheDay:
        today = today or now_local().date()
        try:
            row = (
                self._client.table("daily_verses")
                .select("verse_text, verse_reference")
                .eq("date", iso_date(today))
                .maybe_single()
            )
        except RemoteError as e:
            logger.warning("verse_of_day_fetch_failed", error=str(e))
            return FALLBACK_VERSE
        if row is None:
            return FALLBACK_VERSE
        return VerseOfTheDay(row["verse_text"], row["verse_reference"])

    def fetch_confession_of_the_day(self, today: date | None = None) -> str:
        today = today or now_local().date()
        try:
            row = (
                self._client.table("daily_confessions")
                .select("confession_text")
                .eq("date", iso_date(today))
                .maybe_single()
            )
        except RemoteError as e:
            logger.warning("confession_of_day_fetch_failed", error=str(e))
            return FALLBACK_CONFESSION
        return row["confession_text"] if row else FALLBACK_CONFESSION
