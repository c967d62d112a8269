"""
Application-level exceptions.

One root (DevotionalError) so callers at the edge can catch everything the
core raises; subclasses carry enough context for a user-facing message.
"""

from __future__ import annotations


class DevotionalError(Exception):
    """Base class for all devotional_core errors."""


class ConfigurationError(DevotionalError):
    """A required setting (backend URL/key, payment secret) is missing."""


class RemoteError(DevotionalError):
    """Non-2xx response or transport failure talking to the hosted backend."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_permission_denied(self) -> bool:
        """401/403: usually a row level security policy rejecting the request."""
        return self.status_code in (401, 403)


class NotFoundError(DevotionalError):
    """A lookup that requires exactly one row found none."""


class AuthError(DevotionalError):
    pass


class UserExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class NoActiveUserError(DevotionalError):
    """A per-user operation was attempted with nobody logged in."""


class TranslationError(DevotionalError):
    pass


class TranslationNotFoundError(TranslationError):
    pass


class TranslationDownloadError(TranslationError):
    pass


class TranslationVerificationError(TranslationError):
    """Downloaded file is not a usable translation database."""

    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class PaymentError(DevotionalError):
    pass
