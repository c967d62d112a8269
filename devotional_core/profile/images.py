"""
Profile pictures in the profile-images storage bucket, with a local file cache.

Responsibilities:
- Upload under a timestamped object name so every change gets a fresh public URL.
- Keep users.profile_image_url pointing at the current object.
- Cache the image file locally, remembering which URL it came from; a different
  cloud URL means the picture changed and the cache is refreshed.
- Serve the cached file when the backend is unreachable.
"""

from __future__ import annotations

import mimetypes
from datetime import datetime
from pathlib import Path

from devotional_core.core.clock import now_local
from devotional_core.core.exceptions import NotFoundError, RemoteError
from devotional_core.database.preferences import PreferencesStore
from devotional_core.logging import get_logger
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

BUCKET = "profile-images"
_CACHED_PATH_KEY = "cached_profile_image_{}"
_CACHED_URL_KEY = "cached_url_{}"
# Fixed object names written by older builds.
_LEGACY_OBJECT_NAMES = ("profile.jpg", "profile.png", "profile.jpeg")


class ProfileImageManager:
    def __init__(self, client: PostgrestClient, preferences: PreferencesStore, cache_dir: str | Path) -> None:
        self._client = client
        self._prefs = preferences
        self._cache_dir = Path(cache_dir)

    def _object_path_from_url(self, url: str) -> str | None:
        prefix = self._client.public_url(BUCKET, "")
        return url[len(prefix):] if url.startswith(prefix) else None

    def upload_profile_image(self, user_id: str, image_path: str | Path, now: datetime | None = None) -> str:
        """Upload a new picture and point the user row at it. Returns the public URL."""
        image_path = Path(image_path)
        now = now or now_local()
        object_name = f"{user_id}/profile_{int(now.timestamp() * 1000)}{image_path.suffix}"
        content_type = mimetypes.guess_type(image_path.name)[0] or "image/jpeg"
        data = image_path.read_bytes()
        self._client.upload(BUCKET, object_name, data, content_type=content_type)
        url = self._client.public_url(BUCKET, object_name)
        self._client.table("users").eq("id", user_id).update({"profile_image_url": url})
        local_path = self._write_cache(user_id, data)
        self._prefs.set_many(
            {
                _CACHED_PATH_KEY.format(user_id): str(local_path),
                _CACHED_URL_KEY.format(user_id): url,
            }
        )
        logger.info("profile_image_uploaded", user_id=user_id, object_name=object_name)
        return url

    def get_profile_image_url(self, user_id: str) -> str | None:
        try:
            row = self._client.table("users").select("profile_image_url").eq("id", user_id).single()
        except (NotFoundError, RemoteError) as e:
            logger.warning("profile_image_url_fetch_failed", user_id=user_id, error=str(e))
            return None
        return row.get("profile_image_url")

    def _write_cache(self, user_id: str, data: bytes) -> Path:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        local_path = self._cache_dir / f"profile_{user_id}.jpg"
        local_path.write_bytes(data)
        return local_path

    def get_cached_image_path(self, user_id: str) -> str | None:
        return self._prefs.get_str(_CACHED_PATH_KEY.format(user_id))

    def download_and_cache_image(self, user_id: str, image_url: str) -> str | None:
        try:
            data = self._client.download(image_url)
        except RemoteError as e:
            logger.warning("profile_image_download_failed", user_id=user_id, error=str(e))
            return None
        local_path = self._write_cache(user_id, data)
        self._prefs.set_many(
            {
                _CACHED_PATH_KEY.format(user_id): str(local_path),
                _CACHED_URL_KEY.format(user_id): image_url,
            }
        )
        logger.info("profile_image_cached", user_id=user_id, path=str(local_path))
        return str(local_path)

    def remove_profile_image(self, user_id: str) -> None:
        """Delete the stored object(s), clear the user row and drop the local cache."""
        objects = [f"{user_id}/{name}" for name in _LEGACY_OBJECT_NAMES]
        current_url = self._prefs.get_str(_CACHED_URL_KEY.format(user_id)) or self.get_profile_image_url(user_id)
        if current_url:
            current = self._object_path_from_url(current_url)
            if current:
                objects.insert(0, current)
        try:
            self._client.remove(BUCKET, objects)
        except RemoteError as e:
            logger.info("profile_image_object_missing", user_id=user_id, error=str(e))

        self._client.table("users").eq("id", user_id).update({"profile_image_url": None})

        cached = self.get_cached_image_path(user_id)
        if cached:
            Path(cached).unlink(missing_ok=True)
        self._prefs.remove(_CACHED_PATH_KEY.format(user_id), _CACHED_URL_KEY.format(user_id))
        logger.info("profile_image_removed", user_id=user_id)

    def get_profile_image(self, user_id: str, force_refresh: bool = False) -> str | None:
        """Local path of the current picture, downloading it when the cloud copy changed."""
        cloud_url = self.get_profile_image_url(user_id)
        cached_path = self.get_cached_image_path(user_id)
        if not cloud_url:
            return cached_path

        cached_url = self._prefs.get_str(_CACHED_URL_KEY.format(user_id))
        stale = (
            force_refresh
            or cached_path is None
            or not Path(cached_path).exists()
            or cached_url != cloud_url
        )
        if not stale:
            return cached_path
        return self.download_and_cache_image(user_id, cloud_url) or cached_path
