from devotional_core.notifications.settings import (
    NotificationSettings,
    format_time,
    guess_timezone_name,
    next_fire_time,
)

__all__ = ["NotificationSettings", "format_time", "guess_timezone_name", "next_fire_time"]
