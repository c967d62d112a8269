"""
Subscription tiers and the plans offered for each.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SubscriptionTier(str, Enum):
    FREE = "free"
    THREE_MONTHS = "three_months"
    SIX_MONTHS = "six_months"
    YEARLY = "yearly"

    @property
    def index(self) -> int:
        """Stable ordinal persisted locally and in the subscriptions table."""
        return list(SubscriptionTier).index(self)

    @classmethod
    def from_index(cls, index: int) -> "SubscriptionTier":
        tiers = list(cls)
        if 0 <= index < len(tiers):
            return tiers[index]
        return cls.FREE


_PREMIUM_FEATURES = [
    "Access to ALL devotionals",
    "Offline devotional downloads",
    "All Bible translations",
    "Priority support",
    "Screenshot permission",
    "Ad-free experience",
]


@dataclass(frozen=True)
class SubscriptionPlan:
    tier: SubscriptionTier
    name: str
    price: float
    duration_months: int
    features: list[str] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.tier.value

    @property
    def is_free(self) -> bool:
        return self.tier is SubscriptionTier.FREE

    @property
    def price_display(self) -> str:
        return "Free" if self.price == 0 else f"${self.price:.2f}"

    @property
    def duration_display(self) -> str:
        if self.duration_months == 0:
            return "Forever"
        if self.duration_months == 12:
            return "1 Year"
        return f"{self.duration_months} Months"

    @property
    def price_per_month(self) -> float:
        return 0.0 if self.duration_months == 0 else self.price / self.duration_months


SUBSCRIPTION_PLANS: tuple[SubscriptionPlan, ...] = (
    SubscriptionPlan(
        tier=SubscriptionTier.FREE,
        name="Free Plan",
        price=0.00,
        duration_months=0,
        features=[
            "Sunday devotionals access",
            "ASV Bible translation only",
            "Basic Bible reading features",
            "Search functionality",
        ],
        limitations=[
            "No offline devotional downloads",
            "Limited to Sunday devotionals only",
            "Only one Bible translation (ASV)",
            "No access to weekday devotionals",
            "Inability to screenshot devotionals",
        ],
    ),
    SubscriptionPlan(
        tier=SubscriptionTier.THREE_MONTHS,
        name="3-Month Premium",
        price=1.50,
        duration_months=3,
        features=list(_PREMIUM_FEATURES),
    ),
    SubscriptionPlan(
        tier=SubscriptionTier.SIX_MONTHS,
        name="6-Month Premium",
        price=2.00,
        duration_months=6,
        features=_PREMIUM_FEATURES + ["Best value per month"],
    ),
    SubscriptionPlan(
        tier=SubscriptionTier.YEARLY,
        name="Yearly Premium",
        price=3.00,
        duration_months=12,
        features=_PREMIUM_FEATURES + ["Maximum savings", "Bonus features"],
    ),
)


def plan_by_id(plan_id: str) -> SubscriptionPlan | None:
    for plan in SUBSCRIPTION_PLANS:
        if plan.id == plan_id:
            return plan
    return None
