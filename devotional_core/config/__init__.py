"""
Configuration management for devotional_core.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for backend, storage and payment configuration.
"""

from devotional_core.config.settings import (  # noqa: F401
    Settings,
    get_settings,
    load_settings,
    reset_settings_cache,
)

__all__ = ["Settings", "get_settings", "load_settings", "reset_settings_cache"]
