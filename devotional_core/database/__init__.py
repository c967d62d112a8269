"""Local SQLite persistence, one file per concern under the data directory."""

from devotional_core.database.connection import SQLiteStore, connect, table_exists
from devotional_core.database.downloads import DownloadsStore
from devotional_core.database.favorites import FavoritesStore
from devotional_core.database.payments import PaymentStore
from devotional_core.database.preferences import PreferencesStore
from devotional_core.database.translations import TranslationMetadataStore
from devotional_core.database.verses import VerseCache

__all__ = [
    "SQLiteStore",
    "connect",
    "table_exists",
    "DownloadsStore",
    "FavoritesStore",
    "PaymentStore",
    "PreferencesStore",
    "TranslationMetadataStore",
    "VerseCache",
]
