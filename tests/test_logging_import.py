"""
Test that devotional_core.logging imports cleanly and the logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from devotional_core.logging and use the logger."""
    from devotional_core.logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    logger.info("test_message", key="value")


def test_bind_user_round_trip():
    """bind_user / clear_user can be called repeatedly around log calls."""
    from devotional_core.logging import bind_user, clear_user, configure_logging, get_logger

    configure_logging("DEBUG", "console")
    bind_user("user_123")
    get_logger("test").debug("bound_message")
    clear_user()
    clear_user()
    get_logger("test").debug("unbound_message")
