"""
Pytest tests for the time helpers shared by stores and services.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2026-01-10T08:00:00", datetime(2026, 1, 10, 8, 0)),
        ("2026-01-10T08:00:00.5", datetime(2026, 1, 10, 8, 0, 0, 500000)),
        ("2026-01-10T08:00:00.12345+00:00", datetime(2026, 1, 10, 8, 0, 0, 123450, tzinfo=timezone.utc)),
        ("2026-01-10T08:00:00.1234567Z", datetime(2026, 1, 10, 8, 0, 0, 123456, tzinfo=timezone.utc)),
        (
            "2026-01-10T08:00:00.12-05:00",
            datetime(2026, 1, 10, 8, 0, 0, 120000, tzinfo=timezone(timedelta(hours=-5))),
        ),
    ],
)
def test_parse_iso_normalizes_fractions(text, expected):
    """Any number of fraction digits parses, with or without an offset."""
    from devotional_core.core.clock import parse_iso

    assert parse_iso(text) == expected


def test_parse_iso_empty():
    """Empty and missing values are None."""
    from devotional_core.core.clock import parse_iso

    assert parse_iso(None) is None
    assert parse_iso("") is None


def test_iso_date_and_sunday():
    """Daily keys drop the time; 2026-04-05 is a Sunday."""
    from devotional_core.core.clock import is_sunday, iso_date

    assert iso_date(datetime(2026, 4, 5, 23, 59)) == "2026-04-05"
    assert is_sunday(date(2026, 4, 5))
    assert not is_sunday(date(2026, 4, 6))
