"""
Name + PIN accounts stored in the backend users table.

Names are stored lower-cased, so lookups are case-insensitive. PINs are 4 to 6 digits.
"""

from __future__ import annotations

import re
from typing import Any

from devotional_core.core.clock import now_local
from devotional_core.core.exceptions import (
    AuthError,
    InvalidCredentialsError,
    NotFoundError,
    RemoteError,
    UserExistsError,
)
from devotional_core.logging import get_logger
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

_PIN_RE = re.compile(r"^\d{4,6}$")

# Rows owned by a user, removed before the user row itself.
_USER_OWNED_TABLES = ("user_favorites", "payments", "subscriptions")


def validate_pin(pin: str) -> None:
    if not _PIN_RE.match(pin or ""):
        raise AuthError("PIN must be 4 to 6 digits")


def normalize_name(name: str) -> str:
    normalized = (name or "").strip().lower()
    if not normalized:
        raise AuthError("name must not be empty")
    return normalized


class AuthService:
    def __init__(self, client: PostgrestClient) -> None:
        self._client = client

    def _find_by_name(self, name: str) -> dict[str, Any] | None:
        return self._client.table("users").select("id").eq("name", name).maybe_single()

    def _check_pin(self, user_id: str, pin: str) -> None:
        try:
            row = self._client.table("users").select("pin").eq("id", user_id).single()
        except NotFoundError as e:
            raise InvalidCredentialsError("unknown user") from e
        if row.get("pin") != pin:
            raise InvalidCredentialsError("incorrect PIN")

    def register_user(self, name: str, pin: str) -> dict[str, Any]:
        name = normalize_name(name)
        validate_pin(pin)
        if self._find_by_name(name) is not None:
            raise UserExistsError("User with this name already exists")
        rows = self._client.table("users").insert(
            {"name": name, "pin": pin, "created_at": now_local().isoformat()}
        )
        logger.info("user_registered", name=name)
        return rows[0] if rows else {"name": name}

    def login_user(self, name: str, pin: str) -> dict[str, Any] | None:
        """The matching users row (id, name, pin, created_at), or None."""
        try:
            return (
                self._client.table("users")
                .select("id, name, pin, created_at")
                .eq("name", normalize_name(name))
                .eq("pin", pin)
                .maybe_single()
            )
        except (AuthError, RemoteError) as e:
            logger.warning("login_failed", error=str(e))
            return None

    def change_username(self, user_id: str, new_name: str, pin: str) -> str:
        new_name = normalize_name(new_name)
        self._check_pin(user_id, pin)
        existing = self._find_by_name(new_name)
        if existing is not None and str(existing.get("id")) != str(user_id):
            raise UserExistsError("User with this name already exists")
        self._client.table("users").eq("id", user_id).update({"name": new_name})
        logger.info("username_changed", user_id=user_id)
        return new_name

    def change_pin(self, user_id: str, old_pin: str, new_pin: str) -> None:
        validate_pin(new_pin)
        self._check_pin(user_id, old_pin)
        self._client.table("users").eq("id", user_id).update({"pin": new_pin})
        logger.info("pin_changed", user_id=user_id)

    def delete_account(self, user_id: str, pin: str) -> None:
        self._check_pin(user_id, pin)
        for table in _USER_OWNED_TABLES:
            self._client.table(table).eq("user_id", user_id).delete()
        self._client.table("users").eq("id", user_id).delete()
        logger.info("account_deleted", user_id=user_id)
