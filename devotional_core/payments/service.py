"""
Recording checkout results and keeping payment history in step with the backend.

Responsibilities:
- Turn a checkout outcome into a PaymentRecord, store it locally and push it to the
  payments table (best effort; row level security rejections are expected on some setups).
- Activate the purchased plan when the payment succeeded.
- Import payments made on other devices, skipping transaction ids already known.
- Re-verify a reference with Paystack and update the stored status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from devotional_core.core.clock import now_local
from devotional_core.core.exceptions import ConfigurationError, RemoteError
from devotional_core.database.models import (
    PAYMENT_FAILED,
    PAYMENT_PENDING,
    PAYMENT_SUCCESSFUL,
    PaymentRecord,
    UserProfile,
)
from devotional_core.database.payments import PaymentStore
from devotional_core.logging import get_logger
from devotional_core.payments.paystack import PaystackClient, VerificationOutcome
from devotional_core.payments.plans import SubscriptionPlan, plan_by_id
from devotional_core.payments.subscription import SubscriptionManager
from devotional_core.remote.postgrest import PostgrestClient

logger = get_logger(__name__)

PAYMENT_METHOD = "paystack"
_FAILED_GATEWAY_STATUSES = frozenset({"failed", "abandoned", "reversed"})


class PaymentStatus(str, Enum):
    SUCCESSFUL = "successful"
    FAILED = "failed"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True)
class CheckoutResponse:
    status: PaymentStatus
    transaction_id: str
    tx_ref: str
    amount: float
    message: str = ""

    @property
    def is_successful(self) -> bool:
        return self.status is PaymentStatus.SUCCESSFUL

    @property
    def is_cancelled(self) -> bool:
        return self.status is PaymentStatus.CANCELLED


class PaymentService:
    def __init__(
        self,
        store: PaymentStore,
        subscriptions: SubscriptionManager,
        *,
        currency: str = "NGN",
        client: PostgrestClient | None = None,
        paystack: PaystackClient | None = None,
    ) -> None:
        self._store = store
        self._subscriptions = subscriptions
        self._currency = currency
        self._client = client
        self._paystack = paystack

    def record_checkout_result(
        self,
        response: CheckoutResponse,
        plan: SubscriptionPlan,
        user: UserProfile,
        now: datetime | None = None,
    ) -> PaymentRecord:
        now = now or now_local()
        record = PaymentRecord(
            user_id=user.user_id,
            user_email=user.email,
            user_name=user.name,
            transaction_id=response.transaction_id,
            tx_ref=response.tx_ref,
            amount=response.amount,
            currency=self._currency,
            plan_id=plan.id,
            plan_name=plan.name,
            plan_duration_months=plan.duration_months,
            status=response.status.value,
            created_at=now,
            verified_at=now if response.is_successful else None,
            metadata={"plan_id": plan.id, "payment_method": PAYMENT_METHOD},
        )
        self._store.insert_payment(record)
        self._push_to_cloud(record)
        if response.is_successful:
            self._subscriptions.activate_subscription(plan, now)
            self._subscriptions.sync_subscription_to_cloud(user.user_id, now)
        return record

    def _push_to_cloud(self, record: PaymentRecord) -> bool:
        if self._client is None:
            logger.info("payment_push_skipped", reason="backend_not_configured")
            return False
        try:
            self._client.table("payments").insert(record.to_remote(), returning=False)
        except RemoteError as e:
            if e.is_permission_denied:
                logger.warning(
                    "payment_push_denied",
                    transaction_id=record.transaction_id,
                    status_code=e.status_code,
                    hint="row level security policy on payments; the record is kept locally",
                )
            else:
                logger.warning("payment_push_failed", transaction_id=record.transaction_id, error=str(e))
            return False
        logger.info("payment_pushed", transaction_id=record.transaction_id)
        return True

    def get_user_payment_history(self, user_id: str) -> list[PaymentRecord]:
        return self._store.get_payments_by_user_id(user_id)

    def sync_payments_from_cloud(self, user_id: str) -> int:
        """Import remote payments missing locally. Returns how many were added."""
        if self._client is None:
            return 0
        try:
            rows = (
                self._client.table("payments")
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", ascending=False)
                .execute()
            )
        except RemoteError as e:
            logger.warning("payment_cloud_sync_failed", user_id=user_id, error=str(e))
            return 0
        added = 0
        for row in rows:
            record = PaymentRecord.from_remote(row)
            if self._store.has_transaction(record.transaction_id):
                continue
            self._store.insert_payment(record)
            added += 1
        logger.info("payments_imported", user_id=user_id, remote=len(rows), added=added)
        return added

    def verify_and_update(self, reference: str, now: datetime | None = None) -> VerificationOutcome:
        """Re-check a transaction with Paystack and store the resulting status."""
        if self._paystack is None:
            raise ConfigurationError("Paystack is not configured")
        outcome = self._paystack.verify_transaction(reference)
        if outcome.paid:
            status = PAYMENT_SUCCESSFUL
        elif outcome.status in _FAILED_GATEWAY_STATUSES:
            status = PAYMENT_FAILED
        else:
            status = PAYMENT_PENDING
        existing = self._store.get_payment_by_transaction_id(reference)
        now = now or now_local()
        self._store.update_payment_status(reference, status, now if outcome.paid else None)
        if outcome.paid and existing is not None and not existing.is_successful:
            plan = plan_by_id(existing.plan_id)
            if plan is not None:
                self._subscriptions.activate_subscription(plan, now)
        return outcome
