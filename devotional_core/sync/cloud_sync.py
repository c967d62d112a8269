"""
Two-way mirroring of favorites and notification settings with the backend.

Responsibilities:
- Upload: upsert every local favorite into user_favorites (conflict user_id,type,reference_id)
  and both notification settings into user_settings (conflict user_id,setting_key).
- Download: add cloud favorites missing locally; apply cloud settings to preferences.
  Rows belonging to another user are skipped.
- Full syncs run upload then download. Every entry point logs and re-raises on failure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from devotional_core.core.clock import now_utc
from devotional_core.core.exceptions import RemoteError
from devotional_core.database.favorites import FavoritesStore
from devotional_core.database.models import FAVORITE_TYPES, Favorite
from devotional_core.logging import get_logger
from devotional_core.notifications.settings import NotificationSettings
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

FAVORITES_TABLE = "user_favorites"
SETTINGS_TABLE = "user_settings"
FAVORITES_CONFLICT = "user_id,type,reference_id"
SETTINGS_CONFLICT = "user_id,setting_key"

SETTING_NOTIFICATIONS_ENABLED = "notifications_enabled"
SETTING_NOTIFICATION_TIME = "notification_time"


def parse_notification_time(value: str) -> tuple[int, int] | None:
    """'H:M' -> (hour, minute); None when malformed or out of range."""
    parts = (value or "").split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


class CloudSyncManager:
    def __init__(
        self,
        client: PostgrestClient,
        favorites: FavoritesStore,
        notifications: NotificationSettings,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._client = client
        self._favorites = favorites
        self._notifications = notifications
        self._clock = clock

    def sync_favorites_to_cloud(self, user_id: str) -> int:
        local = self._favorites.get_all_favorites(user_id)
        updated_at = self._clock().isoformat()
        try:
            for fav in local:
                body = fav.to_remote(updated_at)
                body["user_id"] = user_id
                self._client.table(FAVORITES_TABLE).upsert(body, on_conflict=FAVORITES_CONFLICT)
        except RemoteError as e:
            logger.error("favorites_upload_failed", user_id=user_id, error=str(e))
            raise
        logger.info("favorites_uploaded", user_id=user_id, count=len(local))
        return len(local)

    def download_favorites_from_cloud(self, user_id: str) -> int:
        try:
            rows = self._client.table(FAVORITES_TABLE).select("*").eq("user_id", user_id).execute()
        except RemoteError as e:
            logger.error("favorites_download_failed", user_id=user_id, error=str(e))
            raise
        added = 0
        for row in rows:
            if row.get("user_id") != user_id:
                logger.warning("favorite_owner_mismatch", user_id=user_id, row_user_id=row.get("user_id"))
                continue
            fav = Favorite.from_remote(row)
            if fav.type not in FAVORITE_TYPES:
                logger.warning(
                    "favorite_type_unknown", user_id=user_id, type=fav.type, reference_id=fav.reference_id
                )
                continue
            if self._favorites.is_favorite(user_id, fav.type, fav.reference_id):
                continue
            self._favorites.add_favorite(fav)
            added += 1
        logger.info("favorites_downloaded", user_id=user_id, cloud=len(rows), added=added)
        return added

    def full_favorites_sync(self, user_id: str) -> None:
        self.sync_favorites_to_cloud(user_id)
        self.download_favorites_from_cloud(user_id)

    def sync_notification_settings_to_cloud(self, user_id: str) -> None:
        hour, minute = self._notifications.get_time()
        updated_at = self._clock().isoformat()
        rows = [
            {
                "user_id": user_id,
                "setting_key": SETTING_NOTIFICATIONS_ENABLED,
                "setting_value": "true" if self._notifications.is_enabled() else "false",
                "updated_at": updated_at,
            },
            {
                "user_id": user_id,
                "setting_key": SETTING_NOTIFICATION_TIME,
                "setting_value": f"{hour}:{minute}",
                "updated_at": updated_at,
            },
        ]
        try:
            for row in rows:
                self._client.table(SETTINGS_TABLE).upsert(row, on_conflict=SETTINGS_CONFLICT)
        except RemoteError as e:
            logger.error("settings_upload_failed", user_id=user_id, error=str(e))
            raise
        logger.info("settings_uploaded", user_id=user_id)

    def download_notification_settings_from_cloud(self, user_id: str) -> int:
        """Apply cloud settings locally. Returns how many were applied."""
        try:
            rows = (
                self._client.table(SETTINGS_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .in_("setting_key", [SETTING_NOTIFICATIONS_ENABLED, SETTING_NOTIFICATION_TIME])
                .execute()
            )
        except RemoteError as e:
            logger.error("settings_download_failed", user_id=user_id, error=str(e))
            raise
        applied = 0
        for row in rows:
            if row.get("user_id") != user_id:
                logger.warning("setting_owner_mismatch", user_id=user_id)
                continue
            key = row.get("setting_key")
            value = row.get("setting_value") or ""
            if key == SETTING_NOTIFICATIONS_ENABLED:
                self._notifications.set_enabled(value == "true")
                applied += 1
            elif key == SETTING_NOTIFICATION_TIME:
                parsed = parse_notification_time(value)
                if parsed is None:
                    logger.warning("setting_value_malformed", key=key, value=value)
                    continue
                self._notifications.update_time(*parsed)
                applied += 1
        logger.info("settings_downloaded", user_id=user_id, applied=applied)
        return applied

    def full_settings_sync(self, user_id: str) -> None:
        self.sync_notification_settings_to_cloud(user_id)
        self.download_notification_settings_from_cloud(user_id)

    def sync_all(self, user_id: str) -> None:
        self.full_favorites_sync(user_id)
        self.full_settings_sync(user_id)
        logger.info("sync_all_completed", user_id=user_id)

    def push_favorite(self, favorite: Favorite) -> None:
        self._client.table(FAVORITES_TABLE).upsert(
            favorite.to_remote(self._clock().isoformat()), on_conflict=FAVORITES_CONFLICT
        )

    def remove_favorite_from_cloud(self, user_id: str, type: str, reference_id: str) -> None:
        try:
            (
                self._client.table(FAVORITES_TABLE)
                .eq("user_id", user_id)
                .eq("type", type)
                .eq("reference_id", reference_id)
                .delete()
            )
        except RemoteError as e:
            logger.error("favorite_cloud_remove_failed", user_id=user_id, error=str(e))
            raise
