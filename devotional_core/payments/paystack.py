"""
Paystack REST helpers: transaction references, minor-unit amounts and verification.

The hosted checkout page is driven by the client app; this module only confirms the
outcome server-side by polling GET /transaction/verify/{reference}.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import httpx

from devotional_core.config import Settings
from devotional_core.core.clock import now_local
from devotional_core.core.exceptions import ConfigurationError, PaymentError
from devotional_core.logging import get_logger

logger = get_logger(__name__)

PAYSTACK_API_URL = "https://api.paystack.co"
POLL_INTERVAL_SEC = 3.0
MAX_POLLS = 60


@dataclass(frozen=True)
class VerificationOutcome:
    paid: bool
    status: str
    amount: float = 0.0
    currency: str = ""


def generate_reference(now: datetime | None = None) -> str:
    """DEV_<epoch millis>_<microsecond>."""
    now = now or now_local()
    return f"DEV_{int(now.timestamp() * 1000)}_{now.microsecond}"


def to_minor_units(amount: float) -> int:
    """Major currency units to kobo/cents."""
    return int(round(amount * 100))


class PaystackClient:
    def __init__(
        self,
        secret_key: str,
        *,
        base_url: str = PAYSTACK_API_URL,
        timeout_sec: float = 20.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not secret_key:
            raise ConfigurationError("PAYSTACK_SECRET_KEY must be set")
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout_sec,
            transport=transport,
            headers={"Authorization": f"Bearer {secret_key}", "Content-Type": "application/json"},
        )
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "PaystackClient":
        return cls(settings.paystack_secret_key, timeout_sec=settings.http_timeout_sec, transport=transport)

    def verify_transaction(self, reference: str) -> VerificationOutcome:
        """Ask Paystack for the transaction status. Raises PaymentError on HTTP failure."""
        try:
            resp = self._http.get(f"/transaction/verify/{reference}")
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("paystack_verify_failed", reference=reference, error=str(e))
            raise PaymentError(f"verification failed for {reference}: {e}") from e
        data = resp.json().get("data") or {}
        status = data.get("status") or "unknown"
        outcome = VerificationOutcome(
            paid=status == "success",
            status=status,
            amount=(data.get("amount") or 0) / 100,
            currency=data.get("currency") or "",
        )
        logger.info(
            "paystack_verified",
            reference=reference,
            status=outcome.status,
            paid=outcome.paid,
            amount=outcome.amount,
            currency=outcome.currency,
        )
        return outcome

    def poll_until_paid(
        self,
        reference: str,
        interval: float = POLL_INTERVAL_SEC,
        max_polls: int = MAX_POLLS,
        should_stop: Callable[[], bool] | None = None,
    ) -> bool:
        """Verify every interval seconds until paid, max_polls reached or should_stop() is true."""
        for attempt in range(1, max_polls + 1):
            if should_stop is not None and should_stop():
                return False
            try:
                if self.verify_transaction(reference).paid:
                    return True
            except PaymentError:
                logger.info("paystack_poll_retry", reference=reference, attempt=attempt)
            if attempt < max_polls:
                self._sleep(interval)
        return False

    def close(self) -> None:
        self._http.close()
