"""
Favorites for the signed-in user: local store first, cloud mirror when available.

Local writes always succeed independently of the backend; a failed mirror is logged
and picked up by the next full sync.
"""

from __future__ import annotations

from devotional_core.core.exceptions import NoActiveUserError, RemoteError
from devotional_core.database.favorites import SORT_NEWEST, FavoritesStore
from devotional_core.database.models import FAVORITE_BIBLE_VERSE, FAVORITE_DEVOTIONAL, Favorite
from devotional_core.logging import get_logger
from devotional_core.profile.user import UserManager
from devotional_core.sync.cloud_sync import CloudSyncManager

logger = get_logger(__name__)


class FavoritesService:
    def __init__(
        self,
        store: FavoritesStore,
        users: UserManager,
        cloud: CloudSyncManager | None = None,
    ) -> None:
        self._store = store
        self._users = users
        self._cloud = cloud

    def _require_user(self) -> str:
        user_id = self._users.current_user_id()
        if user_id is None:
            raise NoActiveUserError("sign in to save favorites")
        return user_id

    def add_favorite(
        self,
        type: str,
        reference_id: str,
        title: str,
        content: str | None = None,
        subtitle: str | None = None,
        book_id: int | None = None,
        chapter: int | None = None,
        verse: int | None = None,
        translation_id: str | None = None,
    ) -> Favorite:
        user_id = self._require_user()
        fav = self._store.add_favorite(
            Favorite(
                user_id=user_id,
                type=type,
                reference_id=str(reference_id),
                title=title,
                content=content,
                subtitle=subtitle,
                book_id=book_id,
                chapter=chapter,
                verse=verse,
                translation_id=translation_id,
            )
        )
        logger.info("favorite_added", user_id=user_id, type=type, reference_id=fav.reference_id)
        if self._cloud is not None:
            try:
                self._cloud.push_favorite(fav)
            except RemoteError as e:
                logger.warning("favorite_mirror_failed", user_id=user_id, error=str(e))
        return fav

    def remove_favorite(self, type: str, reference_id: str) -> bool:
        user_id = self._users.current_user_id()
        if user_id is None:
            return False
        removed = self._store.remove_favorite(user_id, type, str(reference_id))
        if removed:
            logger.info("favorite_removed", user_id=user_id, type=type, reference_id=reference_id)
        if self._cloud is not None:
            try:
                self._cloud.remove_favorite_from_cloud(user_id, type, str(reference_id))
            except RemoteError:
                pass  # logged by the sync manager
        return removed

    def toggle_favorite(self, type: str, reference_id: str, title: str, **fields) -> bool:
        """Add if absent, remove if present. Returns the new favorite state."""
        if self.is_favorite(type, reference_id):
            self.remove_favorite(type, reference_id)
            return False
        self.add_favorite(type, reference_id, title, **fields)
        return True

    def is_favorite(self, type: str, reference_id: str) -> bool:
        user_id = self._users.current_user_id()
        if user_id is None:
            return False
        return self._store.is_favorite(user_id, type, str(reference_id))

    def get_all_favorites(self) -> list[Favorite]:
        user_id = self._users.current_user_id()
        return self._store.get_all_favorites(user_id) if user_id else []

    def get_favorites_by_type(self, type: str) -> list[Favorite]:
        user_id = self._users.current_user_id()
        return self._store.get_favorites_by_type(user_id, type) if user_id else []

    def get_devotional_favorites(self) -> list[Favorite]:
        return self.get_favorites_by_type(FAVORITE_DEVOTIONAL)

    def get_bible_verse_favorites(self) -> list[Favorite]:
        return self.get_favorites_by_type(FAVORITE_BIBLE_VERSE)

    def search(self, query: str = "", order: str = SORT_NEWEST) -> list[Favorite]:
        user_id = self._users.current_user_id()
        return self._store.search_and_sort(user_id, query, order) if user_id else []

    def clear_all(self) -> int:
        user_id = self._users.current_user_id()
        return self._store.clear_all_favorites(user_id) if user_id else 0
