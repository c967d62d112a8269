"""
Subscription state on this device, with an optional copy in the subscriptions table.

Responsibilities:
- Persist tier index, expiry and purchase date in preferences.
- Answer premium / download / translation access questions for a given "now".
- Push the active subscription to the backend and restore it on a new device.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from devotional_core.core.clock import now_local, parse_iso
from devotional_core.core.exceptions import RemoteError
from devotional_core.database.preferences import PreferencesStore
from devotional_core.logging import get_logger
from devotional_core.payments.plans import SubscriptionPlan, SubscriptionTier
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

TIER_KEY = "subscription_tier"
EXPIRY_KEY = "subscription_expiry"
PURCHASE_DATE_KEY = "subscription_purchase_date"

DAYS_PER_MONTH = 30
MAX_DAYS_REMAINING = 999
ALWAYS_FREE_TRANSLATION = "asv"


def _naive(dt: datetime) -> datetime:
    """Compare in local wall-clock time; backend timestamps carry an offset."""
    return dt.astimezone().replace(tzinfo=None) if dt.tzinfo else dt


class SubscriptionManager:
    def __init__(self, preferences: PreferencesStore, client: PostgrestClient | None = None) -> None:
        self._prefs = preferences
        self._client = client

    def get_expiry_date(self) -> datetime | None:
        return parse_iso(self._prefs.get_str(EXPIRY_KEY))

    def get_purchase_date(self) -> datetime | None:
        return parse_iso(self._prefs.get_str(PURCHASE_DATE_KEY))

    def _stored_tier(self) -> SubscriptionTier:
        return SubscriptionTier.from_index(self._prefs.get_int(TIER_KEY, 0))

    def has_premium_access(self, now: datetime | None = None) -> bool:
        if self._stored_tier() is SubscriptionTier.FREE:
            return False
        expiry = self.get_expiry_date()
        if expiry is None:
            return False
        return _naive(now or now_local()) < _naive(expiry)

    def get_current_tier(self, now: datetime | None = None) -> SubscriptionTier:
        """Stored tier while it is valid; FREE once expired."""
        if not self.has_premium_access(now):
            return SubscriptionTier.FREE
        return self._stored_tier()

    def activate_subscription(self, plan: SubscriptionPlan, now: datetime | None = None) -> datetime:
        """Start plan now; returns the expiry (now + 30 days per month)."""
        now = now or now_local()
        expiry = now + timedelta(days=plan.duration_months * DAYS_PER_MONTH)
        self._prefs.set_many(
            {
                TIER_KEY: plan.tier.index,
                EXPIRY_KEY: expiry.isoformat(),
                PURCHASE_DATE_KEY: now.isoformat(),
            }
        )
        logger.info("subscription_activated", tier=plan.tier.value, expiry=expiry.isoformat())
        return expiry

    def cancel_subscription(self) -> None:
        self._prefs.set(TIER_KEY, SubscriptionTier.FREE.index)
        self._prefs.remove(EXPIRY_KEY, PURCHASE_DATE_KEY)
        logger.info("subscription_cancelled")

    def get_days_remaining(self, now: datetime | None = None) -> int:
        expiry = self.get_expiry_date()
        if expiry is None:
            return 0
        days = (_naive(expiry) - _naive(now or now_local())).days
        return max(0, min(days, MAX_DAYS_REMAINING))

    def can_download_devotionals(self, now: datetime | None = None) -> bool:
        return self.has_premium_access(now)

    def can_access_translation(self, translation_id: str, now: datetime | None = None) -> bool:
        if translation_id.lower() == ALWAYS_FREE_TRANSLATION:
            return True
        return self.has_premium_access(now)

    def sync_subscription_to_cloud(self, user_id: str, now: datetime | None = None) -> bool:
        """Record the current subscription remotely. Failures are logged, not raised."""
        if self._client is None:
            return False
        tier = self.get_current_tier(now)
        expiry = self.get_expiry_date()
        purchase = self.get_purchase_date()
        try:
            self._client.table("subscriptions").insert(
                {
                    "user_id": user_id,
                    "tier_index": tier.index,
                    "tier_name": tier.value,
                    "expiry_date": expiry.isoformat() if expiry else None,
                    "purchase_date": purchase.isoformat() if purchase else None,
                },
                returning=False,
            )
        except RemoteError as e:
            logger.warning("subscription_sync_failed", user_id=user_id, error=str(e))
            return False
        logger.info("subscription_synced", user_id=user_id, tier=tier.value)
        return True

    def restore_from_cloud(self, user_id: str, now: datetime | None = None) -> bool:
        """Adopt the latest unexpired remote subscription. Returns True if one was applied."""
        if self._client is None:
            return False
        now = now or now_local()
        try:
            row = (
                self._client.table("subscriptions")
                .select("tier_index, expiry_date, purchase_date")
                .eq("user_id", user_id)
                .order("expiry_date", ascending=False, nulls_last=True)
                .maybe_single()
            )
        except RemoteError as e:
            logger.warning("subscription_restore_failed", user_id=user_id, error=str(e))
            return False
        if not row:
            return False
        expiry = parse_iso(row.get("expiry_date"))
        tier = SubscriptionTier.from_index(int(row.get("tier_index") or 0))
        if tier is SubscriptionTier.FREE or expiry is None or _naive(expiry) <= _naive(now):
            return False
        purchase = parse_iso(row.get("purchase_date")) or now
        self._prefs.set_many(
            {
                TIER_KEY: tier.index,
                EXPIRY_KEY: _naive(expiry).isoformat(),
                PURCHASE_DATE_KEY: _naive(purchase).isoformat(),
            }
        )
        logger.info("subscription_restored", user_id=user_id, tier=tier.value)
        return True
