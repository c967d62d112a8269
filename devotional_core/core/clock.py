"""
Time helpers. Rules that depend on "now" take it as a parameter; these are the defaults.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def now_local() -> datetime:
    """Naive local wall-clock time (what the reader sees on the device)."""
    return datetime.now()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as written by us or by Postgres; None for empty input."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # Postgres trims trailing zeros; fromisoformat on 3.10 wants exactly 6 fraction digits.
    text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
    return datetime.fromisoformat(text)


def iso_date(d: date | datetime) -> str:
    """YYYY-MM-DD, the key used by the daily_* tables."""
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def is_sunday(d: date | datetime) -> bool:
    return d.weekday() == 6
