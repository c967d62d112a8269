"""Hosted backend access: Postgrest client, content, accounts, connectivity probe."""

from devotional_core.remote.auth import AuthService
from devotional_core.remote.connectivity import check_connectivity
from devotional_core.remote.content import ContentService, VerseOfTheDay
from devotional_core.remote.postgrest import PostgrestClient, QueryBuilder

__all__ = [
    "AuthService",
    "ContentService",
    "PostgrestClient",
    "QueryBuilder",
    "VerseOfTheDay",
    "check_connectivity",
]
