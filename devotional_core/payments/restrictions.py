"""
Premium gating rules. Free readers get Sunday devotionals and the ASV; premium unlocks the rest.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, TypeVar

from devotional_core.core.clock import is_sunday
from devotional_core.database.models import Devotional
from devotional_core.payments.subscription import SubscriptionManager

FREE_TRANSLATION_CODE = "ASV"

PREMIUM_TRANSLATION_CODES = (
    "ASV", "KJV", "NIV", "ESV", "NKJV", "NLT", "NASB", "CSB",
    "AMP", "MSG", "HCSB", "RSV", "CEV", "GNT", "WEB", "YLT",
)

D = TypeVar("D", bound=Devotional)


class FeatureRestrictions:
    def __init__(self, subscriptions: SubscriptionManager) -> None:
        self._subscriptions = subscriptions

    def is_premium(self, now: datetime | None = None) -> bool:
        return self._subscriptions.has_premium_access(now)

    def can_access_devotional(self, devotional_date: date | datetime, now: datetime | None = None) -> bool:
        return self.is_premium(now) or is_sunday(devotional_date)

    def can_download_offline(self, now: datetime | None = None) -> bool:
        return self.is_premium(now)

    def can_access_translation(self, translation_code: str, now: datetime | None = None) -> bool:
        if translation_code.upper() == FREE_TRANSLATION_CODE:
            return True
        return self.is_premium(now)

    def can_take_screenshots(self, now: datetime | None = None) -> bool:
        return self.is_premium(now)

    def should_show_ads(self, now: datetime | None = None) -> bool:
        return not self.is_premium(now)

    def get_accessible_translations(self, now: datetime | None = None) -> list[str]:
        if self.is_premium(now):
            return list(PREMIUM_TRANSLATION_CODES)
        return [FREE_TRANSLATION_CODE]

    def filter_accessible_devotionals(self, devotionals: Iterable[D], now: datetime | None = None) -> list[D]:
        if self.is_premium(now):
            return list(devotionals)
        return [d for d in devotionals if is_sunday(d.date)]
