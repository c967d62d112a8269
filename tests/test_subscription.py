"""
Pytest tests for subscription plans, local subscription state, cloud restore and
premium feature gating.

Every rule takes an explicit "now" so results do not depend on the wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

USER = "user_1700000000000"
NOW = datetime(2026, 4, 5, 9, 0)


@pytest.fixture
def subscriptions(preferences, remote):
    from devotional_core.payments import SubscriptionManager

    return SubscriptionManager(preferences, remote)


@pytest.fixture
def restrictions(subscriptions):
    from devotional_core.payments import FeatureRestrictions

    return FeatureRestrictions(subscriptions)


def _plan(plan_id):
    from devotional_core.payments import plan_by_id

    return plan_by_id(plan_id)


def test_plans_catalog():
    """Four plans, stable tier indexes and display helpers."""
    from devotional_core.payments import SUBSCRIPTION_PLANS, SubscriptionTier

    assert [p.id for p in SUBSCRIPTION_PLANS] == ["free", "three_months", "six_months", "yearly"]
    assert [p.tier.index for p in SUBSCRIPTION_PLANS] == [0, 1, 2, 3]
    assert SubscriptionTier.from_index(2) is SubscriptionTier.SIX_MONTHS
    assert SubscriptionTier.from_index(7) is SubscriptionTier.FREE

    free, three, six, yearly = SUBSCRIPTION_PLANS
    assert free.is_free and free.price_display == "Free" and free.duration_display == "Forever"
    assert three.price_display == "$1.50"
    assert three.duration_display == "3 Months"
    assert yearly.duration_display == "1 Year"
    assert six.price_per_month == pytest.approx(2.00 / 6)
    assert free.price_per_month == 0.0
    assert _plan("lifetime") is None


def test_new_install_is_free(subscriptions):
    """No stored subscription means the free tier and nothing remaining."""
    from devotional_core.payments import SubscriptionTier

    assert subscriptions.get_current_tier(NOW) is SubscriptionTier.FREE
    assert not subscriptions.has_premium_access(NOW)
    assert subscriptions.get_days_remaining(NOW) == 0
    assert subscriptions.get_expiry_date() is None


def test_activate_three_months(subscriptions):
    """Three months is 90 days from purchase; premium until then, free afterwards."""
    from devotional_core.payments import SubscriptionTier

    expiry = subscriptions.activate_subscription(_plan("three_months"), NOW)
    assert expiry == NOW + timedelta(days=90)
    assert subscriptions.get_purchase_date() == NOW
    assert subscriptions.get_current_tier(NOW) is SubscriptionTier.THREE_MONTHS
    assert subscriptions.get_days_remaining(NOW) == 90
    assert subscriptions.can_download_devotionals(NOW)

    after = expiry + timedelta(seconds=1)
    assert subscriptions.get_current_tier(after) is SubscriptionTier.FREE
    assert not subscriptions.has_premium_access(expiry)
    assert subscriptions.get_days_remaining(after) == 0


def test_cancel_subscription(subscriptions):
    """Cancelling drops back to free immediately."""
    subscriptions.activate_subscription(_plan("yearly"), NOW)
    subscriptions.cancel_subscription()
    assert not subscriptions.has_premium_access(NOW)
    assert subscriptions.get_expiry_date() is None


def test_translation_access(subscriptions):
    """ASV is always available; anything else needs premium."""
    assert subscriptions.can_access_translation("asv", NOW)
    assert subscriptions.can_access_translation("ASV", NOW)
    assert not subscriptions.can_access_translation("kjv", NOW)
    subscriptions.activate_subscription(_plan("six_months"), NOW)
    assert subscriptions.can_access_translation("kjv", NOW)


def test_sync_subscription_to_cloud(subscriptions, backend):
    """The active subscription is written with tier index, name and dates."""
    subscriptions.activate_subscription(_plan("six_months"), NOW)
    assert subscriptions.sync_subscription_to_cloud(USER, NOW) is True
    row = backend.rows("subscriptions")[0]
    assert row["user_id"] == USER
    assert row["tier_index"] == 2
    assert row["tier_name"] == "six_months"
    assert row["expiry_date"] == (NOW + timedelta(days=180)).isoformat()
    assert row["purchase_date"] == NOW.isoformat()


def test_sync_subscription_failure_is_reported(subscriptions, backend):
    """A rejected write returns False instead of raising."""
    backend.fail("subscriptions", 403)
    assert subscriptions.sync_subscription_to_cloud(USER, NOW) is False


def test_restore_picks_latest_unexpired(subscriptions, backend):
    """The subscription with the latest expiry wins; null expiries sort last."""
    from devotional_core.payments import SubscriptionTier

    backend.seed(
        "subscriptions",
        {"user_id": USER, "tier_index": 3, "expiry_date": None, "purchase_date": None},
        {"user_id": USER, "tier_index": 1, "expiry_date": "2026-03-01T00:00:00", "purchase_date": "2025-12-01T00:00:00"},
        {"user_id": USER, "tier_index": 2, "expiry_date": "2026-08-01T00:00:00", "purchase_date": "2026-02-02T00:00:00"},
        {"user_id": "someone_else", "tier_index": 3, "expiry_date": "2027-01-01T00:00:00"},
    )
    assert subscriptions.restore_from_cloud(USER, NOW) is True
    assert subscriptions.get_current_tier(NOW) is SubscriptionTier.SIX_MONTHS
    assert subscriptions.get_expiry_date() == datetime(2026, 8, 1)
    assert subscriptions.get_purchase_date() == datetime(2026, 2, 2)


def test_restore_with_trimmed_fractional_seconds(subscriptions, backend):
    """Backend timestamps with five fraction digits and an offset restore cleanly."""
    from datetime import timezone

    backend.seed(
        "subscriptions",
        {
            "user_id": USER,
            "tier_index": 3,
            "expiry_date": "2026-08-01T00:00:00.12345+00:00",
            "purchase_date": "2026-02-02T00:00:00.1+00:00",
        },
    )
    assert subscriptions.restore_from_cloud(USER, NOW) is True
    expected = datetime(2026, 8, 1, 0, 0, 0, 123450, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert subscriptions.get_expiry_date() == expected
    assert subscriptions.get_purchase_date().microsecond == 100000


def test_restore_ignores_expired(subscriptions, backend):
    """An expired remote subscription is not applied."""
    backend.seed(
        "subscriptions",
        {"user_id": USER, "tier_index": 3, "expiry_date": "2026-01-01T00:00:00", "purchase_date": "2025-01-01T00:00:00"},
    )
    assert subscriptions.restore_from_cloud(USER, NOW) is False
    assert not subscriptions.has_premium_access(NOW)


def test_restore_without_backend(preferences):
    """With no backend there is nothing to sync or restore."""
    from devotional_core.payments import SubscriptionManager

    manager = SubscriptionManager(preferences)
    assert manager.restore_from_cloud(USER, NOW) is False
    assert manager.sync_subscription_to_cloud(USER, NOW) is False


def test_free_restrictions(restrictions):
    """Free readers: Sunday devotionals, ASV only, ads, no downloads or screenshots."""
    sunday = date(2026, 4, 5)
    monday = date(2026, 4, 6)
    assert restrictions.can_access_devotional(sunday, NOW)
    assert not restrictions.can_access_devotional(monday, NOW)
    assert not restrictions.can_download_offline(NOW)
    assert not restrictions.can_take_screenshots(NOW)
    assert restrictions.should_show_ads(NOW)
    assert restrictions.get_accessible_translations(NOW) == ["ASV"]
    assert restrictions.can_access_translation("asv", NOW)
    assert not restrictions.can_access_translation("NIV", NOW)


def test_premium_restrictions(restrictions, subscriptions):
    """Premium readers get every devotional and translation without ads."""
    subscriptions.activate_subscription(_plan("three_months"), NOW)
    assert restrictions.can_access_devotional(date(2026, 4, 6), NOW)
    assert restrictions.can_download_offline(NOW)
    assert restrictions.can_take_screenshots(NOW)
    assert not restrictions.should_show_ads(NOW)
    assert len(restrictions.get_accessible_translations(NOW)) == 16
    assert restrictions.can_access_translation("NIV", NOW)


def test_filter_accessible_devotionals(restrictions, subscriptions):
    """Free readers only see Sunday devotionals; premium readers see all."""
    from devotional_core.database.models import Devotional

    devotionals = [
        Devotional("1", "Sunday", "x", datetime(2026, 4, 5)),
        Devotional("2", "Monday", "y", datetime(2026, 4, 6)),
        Devotional("3", "Sunday", "z", datetime(2026, 3, 29)),
    ]
    assert [d.id for d in restrictions.filter_accessible_devotionals(devotionals, NOW)] == ["1", "3"]
    subscriptions.activate_subscription(_plan("yearly"), NOW)
    assert len(restrictions.filter_accessible_devotionals(devotionals, NOW)) == 3
