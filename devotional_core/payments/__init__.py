from devotional_core.payments.paystack import (
    PaystackClient,
    VerificationOutcome,
    generate_reference,
    to_minor_units,
)
from devotional_core.payments.plans import (
    SUBSCRIPTION_PLANS,
    SubscriptionPlan,
    SubscriptionTier,
    plan_by_id,
)
from devotional_core.payments.restrictions import FeatureRestrictions
from devotional_core.payments.service import CheckoutResponse, PaymentService, PaymentStatus
from devotional_core.payments.subscription import SubscriptionManager

__all__ = [
    "CheckoutResponse",
    "FeatureRestrictions",
    "PaymentService",
    "PaymentStatus",
    "PaystackClient",
    "SUBSCRIPTION_PLANS",
    "SubscriptionManager",
    "SubscriptionPlan",
    "SubscriptionTier",
    "VerificationOutcome",
    "generate_reference",
    "plan_by_id",
    "to_minor_units",
]
