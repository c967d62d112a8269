"""
Application wiring: one object owning every store and service.

Responsibilities:
- Configure logging from Settings and make sure the data directory exists.
- Open each local store (creating or migrating its schema).
- Seed translation metadata and the built-in Genesis 1 sample.
- Remove files left behind by interrupted translation downloads.
- Build the backend-backed services only when the backend is configured.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from devotional_core.bible.manager import TranslationManager
from devotional_core.config import Settings, get_settings
from devotional_core.database import (
    DownloadsStore,
    FavoritesStore,
    PaymentStore,
    PreferencesStore,
    TranslationMetadataStore,
    VerseCache,
)
from devotional_core.logging import bind_user, configure_logging, get_logger
from devotional_core.notifications.settings import NotificationSettings
from devotional_core.payments.paystack import PaystackClient
from devotional_core.payments.restrictions import FeatureRestrictions
from devotional_core.payments.service import PaymentService
from devotional_core.payments.subscription import SubscriptionManager
from devotional_core.profile.images import ProfileImageManager
from devotional_core.profile.user import USER_ID_KEY, UserManager
from devotional_core.remote.auth import AuthService
from devotional_core.remote.connectivity import check_connectivity
from devotional_core.remote.content import ContentService
from devotional_core.remote.postgrest import PostgrestClient
from devotional_core.sync.cloud_sync import CloudSyncManager
from devotional_core.sync.favorites import FavoritesService

logger = get_logger(__name__)


@dataclass
class DevotionalApp:
    settings: Settings
    preferences: PreferencesStore
    downloads: DownloadsStore
    favorites_store: FavoritesStore
    payments_store: PaymentStore
    verse_cache: VerseCache
    translation_metadata: TranslationMetadataStore
    users: UserManager
    notifications: NotificationSettings
    translations: TranslationManager
    subscriptions: SubscriptionManager
    restrictions: FeatureRestrictions
    favorites: FavoritesService
    payments: PaymentService
    client: PostgrestClient | None = None
    content: ContentService | None = None
    auth: AuthService | None = None
    cloud_sync: CloudSyncManager | None = None
    profile_images: ProfileImageManager | None = None
    paystack: PaystackClient | None = None
    cleaned_downloads: list[str] = field(default_factory=list)

    @classmethod
    def bootstrap(
        cls,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "DevotionalApp":
        """Open everything. transport replaces the network layer for every HTTP client (tests)."""
        settings = settings or get_settings()
        configure_logging(settings.log_level, settings.log_format)
        data_dir = settings.data_dir
        data_dir.mkdir(parents=True, exist_ok=True)

        preferences = PreferencesStore(data_dir)
        preferences.ensure_schema()
        downloads = DownloadsStore(data_dir)
        downloads.ensure_schema()
        favorites_store = FavoritesStore(data_dir)
        favorites_store.ensure_schema(migration_user_id=preferences.get_str(USER_ID_KEY))
        payments_store = PaymentStore(data_dir)
        payments_store.ensure_schema()
        verse_cache = VerseCache(data_dir)
        verse_cache.ensure_schema()
        verse_cache.add_sample_data()
        translation_metadata = TranslationMetadataStore(data_dir)
        translation_metadata.ensure_schema()

        client = None
        if settings.remote_configured:
            client = PostgrestClient.from_settings(settings, transport=transport)
        else:
            logger.info("remote_backend_not_configured")
        paystack = None
        if settings.payments_configured:
            paystack = PaystackClient.from_settings(settings, transport=transport)

        users = UserManager(preferences)
        notifications = NotificationSettings(preferences)
        translations = TranslationManager(
            data_dir,
            translation_metadata,
            preferences,
            timeout_sec=settings.http_timeout_sec,
            transport=transport,
        )
        translations.initialize_translations()
        cleaned = translations.cleanup_incomplete_downloads()

        subscriptions = SubscriptionManager(preferences, client)
        cloud_sync = CloudSyncManager(client, favorites_store, notifications) if client else None

        app = cls(
            settings=settings,
            preferences=preferences,
            downloads=downloads,
            favorites_store=favorites_store,
            payments_store=payments_store,
            verse_cache=verse_cache,
            translation_metadata=translation_metadata,
            users=users,
            notifications=notifications,
            translations=translations,
            subscriptions=subscriptions,
            restrictions=FeatureRestrictions(subscriptions),
            favorites=FavoritesService(favorites_store, users, cloud_sync),
            payments=PaymentService(
                payments_store,
                subscriptions,
                currency=settings.currency,
                client=client,
                paystack=paystack,
            ),
            client=client,
            content=ContentService(client) if client else None,
            auth=AuthService(client) if client else None,
            cloud_sync=cloud_sync,
            profile_images=ProfileImageManager(client, preferences, data_dir / "profile_images") if client else None,
            paystack=paystack,
            cleaned_downloads=cleaned,
        )
        user_id = users.current_user_id()
        if user_id:
            bind_user(user_id)
        logger.info(
            "app_bootstrapped",
            data_dir=str(data_dir),
            remote=client is not None,
            payments=paystack is not None,
            logged_in=user_id is not None,
        )
        return app

    def is_online(self) -> bool:
        return check_connectivity(
            self.settings.connectivity_probe_url,
            self.settings.connectivity_timeout_sec,
        )

    def sync_user_data(self) -> bool:
        """Startup sync for a signed-in user. Returns False if nothing could run."""
        user_id = self.users.current_user_id()
        if user_id is None or self.cloud_sync is None:
            return False
        self.cloud_sync.sync_all(user_id)
        self.payments.sync_payments_from_cloud(user_id)
        self.subscriptions.restore_from_cloud(user_id)
        return True

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
        if self.paystack is not None:
            self.paystack.close()
