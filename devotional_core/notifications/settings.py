"""
Daily reminder settings and the pure time helpers used to schedule it.

The platform scheduler is outside this package; it reads is_enabled()/get_time() and
asks next_fire_time() when to fire.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from devotional_core.database.preferences import PreferencesStore
from devotional_core.logging import get_logger

logger = get_logger(__name__)

ENABLED_KEY = "notifications_enabled"
HOUR_KEY = "notification_hour"
MINUTE_KEY = "notification_minute"

_OFFSET_TIMEZONES = {
    -8: "America/Los_Angeles",
    -7: "America/Denver",
    -6: "America/Chicago",
    -5: "America/New_York",
    0: "Europe/London",
    1: "Africa/Lagos",
    2: "Africa/Cairo",
    3: "Africa/Nairobi",
    5: "Asia/Karachi",
    6: "Asia/Dhaka",
    8: "Asia/Shanghai",
    9: "Asia/Tokyo",
}


def guess_timezone_name(offset: timedelta | int) -> str:
    """Map a UTC offset (timedelta or whole hours) to a representative IANA zone; UTC if unknown."""
    if isinstance(offset, timedelta):
        total_minutes = int(offset.total_seconds() // 60)
        if total_minutes % 60:
            return "UTC"
        offset = total_minutes // 60
    return _OFFSET_TIMEZONES.get(offset, "UTC")


def _check_time(hour: int, minute: int) -> None:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute out of range: {minute}")


def next_fire_time(now: datetime, hour: int, minute: int) -> datetime:
    """Today at hour:minute if that is still ahead of now, otherwise tomorrow."""
    _check_time(hour, minute)
    scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if scheduled < now:
        scheduled += timedelta(days=1)
    return scheduled


def format_time(hour: int, minute: int) -> str:
    """12-hour clock, e.g. 0:05 -> '12:05 AM', 13:30 -> '1:30 PM'."""
    period = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:{minute:02d} {period}"


class NotificationSettings:
    def __init__(self, preferences: PreferencesStore) -> None:
        self._prefs = preferences

    def enable(self, hour: int = 0, minute: int = 0) -> None:
        _check_time(hour, minute)
        self._prefs.set_many({ENABLED_KEY: True, HOUR_KEY: hour, MINUTE_KEY: minute})
        logger.info("notifications_enabled", time=format_time(hour, minute))

    def disable(self) -> None:
        # Keep the chosen time so re-enabling restores it.
        self._prefs.set(ENABLED_KEY, False)
        logger.info("notifications_disabled")

    def update_time(self, hour: int, minute: int) -> None:
        _check_time(hour, minute)
        self._prefs.set_many({HOUR_KEY: hour, MINUTE_KEY: minute})
        logger.info("notification_time_updated", time=format_time(hour, minute))

    def set_enabled(self, enabled: bool) -> None:
        self._prefs.set(ENABLED_KEY, bool(enabled))

    def is_enabled(self) -> bool:
        return self._prefs.get_bool(ENABLED_KEY, False)

    def get_time(self) -> tuple[int, int]:
        return self._prefs.get_int(HOUR_KEY, 0), self._prefs.get_int(MINUTE_KEY, 0)
