"""
Structured logging for devotional_core.

JSON logs with timestamp, level, event_type and bound context (user_id).
"""

from devotional_core.logging.logger import (
    bind_user,
    clear_user,
    configure_logging,
    get_logger,
)

__all__ = ["bind_user", "clear_user", "configure_logging", "get_logger"]
