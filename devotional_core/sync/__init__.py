from devotional_core.sync.cloud_sync import CloudSyncManager, parse_notification_time
from devotional_core.sync.favorites import FavoritesService

__all__ = ["CloudSyncManager", "FavoritesService", "parse_notification_time"]
