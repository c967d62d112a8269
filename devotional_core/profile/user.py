"""
Locally cached identity of the signed-in user (preferences-backed).
"""

from __future__ import annotations

from datetime import datetime

from devotional_core.core.clock import now_local
from devotional_core.database.models import UserProfile
from devotional_core.database.preferences import PreferencesStore
from devotional_core.logging import bind_user, clear_user, get_logger

logger = get_logger(__name__)

USER_ID_KEY = "user_id"
USER_EMAIL_KEY = "user_email"
USER_NAME_KEY = "user_name"
USER_PHOTO_URL_KEY = "user_photo_url"

DEFAULT_EMAIL = "user@devotionalapp.com"
DEFAULT_NAME = "Devotional User"


class UserManager:
    def __init__(self, preferences: PreferencesStore) -> None:
        self._prefs = preferences

    def current_user_id(self) -> str | None:
        """The signed-in user id, or None. Never creates one."""
        return self._prefs.get_str(USER_ID_KEY)

    def get_user_id(self, now: datetime | None = None) -> str:
        """Existing id, or a new user_<epoch millis> id persisted for next time."""
        user_id = self.current_user_id()
        if user_id is None:
            now = now or now_local()
            user_id = f"user_{int(now.timestamp() * 1000)}"
            self._prefs.set(USER_ID_KEY, user_id)
            logger.info("user_id_generated", user_id=user_id)
        return user_id

    def get_user_email(self) -> str:
        return self._prefs.get_str(USER_EMAIL_KEY) or DEFAULT_EMAIL

    def get_user_name(self) -> str:
        return self._prefs.get_str(USER_NAME_KEY) or DEFAULT_NAME

    def set_user_profile(self, user_id: str, email: str, name: str, photo_url: str | None = None) -> None:
        values = {USER_ID_KEY: user_id, USER_EMAIL_KEY: email, USER_NAME_KEY: name}
        if photo_url is not None:
            values[USER_PHOTO_URL_KEY] = photo_url
        self._prefs.set_many(values)
        bind_user(user_id)
        logger.info("user_profile_set")

    def set_user_name(self, name: str) -> None:
        self._prefs.set(USER_NAME_KEY, name)

    def clear_user_profile(self) -> None:
        self._prefs.remove(USER_ID_KEY, USER_EMAIL_KEY, USER_NAME_KEY, USER_PHOTO_URL_KEY)
        logger.info("user_profile_cleared")
        clear_user()

    def is_logged_in(self) -> bool:
        return self.current_user_id() is not None

    def get_user_profile(self) -> UserProfile:
        return UserProfile(
            user_id=self.get_user_id(),
            email=self.get_user_email(),
            name=self.get_user_name(),
            photo_url=self._prefs.get_str(USER_PHOTO_URL_KEY) or "",
        )
