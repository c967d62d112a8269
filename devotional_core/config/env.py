"""
Environment variable loading for devotional_core.

- SUPABASE_URL / SUPABASE_ANON_KEY: hosted Postgrest backend (both required for remote features)
- DEVOTIONAL_DATA_DIR: directory for every local SQLite file and downloaded translation
- PAYSTACK_PUBLIC_KEY / PAYSTACK_SECRET_KEY / PAYSTACK_TEST_MODE / PAYSTACK_CURRENCY
- HTTP_TIMEOUT_SEC, CONNECTIVITY_PROBE_URL, CONNECTIVITY_TIMEOUT_SEC
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is devotional_core/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_CURRENCY = "NGN"
DEFAULT_HTTP_TIMEOUT_SEC = 20.0
DEFAULT_CONNECTIVITY_PROBE_URL = "https://www.google.com/generate_204"
DEFAULT_CONNECTIVITY_TIMEOUT_SEC = 5.0

_TRUTHY = ("1", "true", "yes", "on")


def load_devotional_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides the real environment."""
    from dotenv import load_dotenv

    if _ENV_PATH.exists():
        load_dotenv(_ENV_PATH, override=False)


def _get(name: str) -> str:
    load_devotional_env()
    return (os.getenv(name) or "").strip()


def _get_float(name: str, default: float) -> float:
    raw = _get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_supabase_url() -> str:
    """Return SUPABASE_URL without a trailing slash, or empty string."""
    return _get("SUPABASE_URL").rstrip("/")


def get_supabase_anon_key() -> str:
    return _get("SUPABASE_ANON_KEY")


def is_remote_configured() -> bool:
    """True when both the backend URL and anon key are present."""
    return bool(get_supabase_url() and get_supabase_anon_key())


def get_data_dir() -> Path:
    """
    Return DEVOTIONAL_DATA_DIR, or <project root>/data.
    The directory is not created here; stores create it on first connect.
    """
    raw = _get("DEVOTIONAL_DATA_DIR")
    if raw:
        return Path(raw).expanduser()
    return _ROOT / "data"


def is_paystack_test_mode() -> bool:
    """PAYSTACK_TEST_MODE defaults to on; only an explicit false-ish value disables it."""
    raw = _get("PAYSTACK_TEST_MODE").lower()
    if not raw:
        return True
    return raw in _TRUTHY


def get_paystack_public_key() -> str:
    return _get("PAYSTACK_PUBLIC_KEY")


def get_paystack_secret_key() -> str:
    return _get("PAYSTACK_SECRET_KEY")


def get_payment_currency() -> str:
    return (_get("PAYSTACK_CURRENCY") or DEFAULT_CURRENCY).upper()


def get_http_timeout_sec() -> float:
    return _get_float("HTTP_TIMEOUT_SEC", DEFAULT_HTTP_TIMEOUT_SEC)


def get_connectivity_probe_url() -> str:
    return _get("CONNECTIVITY_PROBE_URL") or DEFAULT_CONNECTIVITY_PROBE_URL


def get_connectivity_timeout_sec() -> float:
    return _get_float("CONNECTIVITY_TIMEOUT_SEC", DEFAULT_CONNECTIVITY_TIMEOUT_SEC)


def get_log_level() -> str:
    return (_get("LOG_LEVEL") or "INFO").upper()


def get_log_format() -> str:
    return (_get("LOG_FORMAT") or "json").lower()
