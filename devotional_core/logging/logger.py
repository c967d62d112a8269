"""
Structured logging: ISO timestamp, level, event_type, plus whatever context the caller binds.

Every module calls get_logger(__name__) and logs snake_case event names with keyword
context. The app bootstrap may call configure_logging() again with values from
Settings; until then LOG_LEVEL / LOG_FORMAT from the environment apply.

Uses only stdlib logging and structlog; no devotional_core imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _rename_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type so every record has the same key."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _level_value(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog.

    level: DEBUG / INFO / WARNING / ERROR (default LOG_LEVEL env, then INFO).
    fmt: "json" for one JSON object per line, anything else for the console renderer.
    """
    fmt = (fmt or os.getenv("LOG_FORMAT") or DEFAULT_LOG_FORMAT).strip().lower()
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _rename_event,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("favorite_added", user_id=uid, type="devotional", reference_id="42")
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_user(user_id: str) -> None:
    """Attach user_id to every log record emitted from this context (until clear_user)."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_user() -> None:
    structlog.contextvars.unbind_contextvars("user_id")
