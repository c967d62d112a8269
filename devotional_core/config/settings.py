"""
Application settings.

Responsibilities:
- Collect the env getters from config.env into one typed, immutable object.
- Cache it for the process; tests call reset_settings_cache() after monkeypatching env.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from devotional_core.config import env


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment-backed configuration."""

    supabase_url: str
    supabase_anon_key: str
    data_dir: Path
    paystack_public_key: str
    paystack_secret_key: str
    paystack_test_mode: bool
    currency: str
    http_timeout_sec: float
    connectivity_probe_url: str
    connectivity_timeout_sec: float
    log_level: str
    log_format: str

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def rest_url(self) -> str:
        """Postgrest endpoint (<SUPABASE_URL>/rest/v1)."""
        return f"{self.supabase_url}/rest/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.supabase_url}/storage/v1"

    @property
    def payments_configured(self) -> bool:
        return bool(self.paystack_secret_key)


def load_settings() -> Settings:
    """Build Settings from the current environment (no caching)."""
    return Settings(
        supabase_url=env.get_supabase_url(),
        supabase_anon_key=env.get_supabase_anon_key(),
        data_dir=env.get_data_dir(),
        paystack_public_key=env.get_paystack_public_key(),
        paystack_secret_key=env.get_paystack_secret_key(),
        paystack_test_mode=env.is_paystack_test_mode(),
        currency=env.get_payment_currency(),
        http_timeout_sec=env.get_http_timeout_sec(),
        connectivity_probe_url=env.get_connectivity_probe_url(),
        connectivity_timeout_sec=env.get_connectivity_timeout_sec(),
        log_level=env.get_log_level(),
        log_format=env.get_log_format(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return load_settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()
