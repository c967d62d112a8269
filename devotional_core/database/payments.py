"""
Local payment history. transaction_id is unique; inserting a known id replaces the row.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime

from devotional_core.core.clock import now_local
from devotional_core.database.connection import SQLiteStore
from devotional_core.database.models import PAYMENT_SUCCESSFUL, PaymentRecord
from devotional_core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_PAYMENTS = """
CREATE TABLE IF NOT EXISTS payments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    user_email TEXT NOT NULL,
    user_name TEXT NOT NULL,
    transaction_id TEXT NOT NULL UNIQUE,
    tx_ref TEXT NOT NULL,
    amount REAL NOT NULL,
    currency TEXT NOT NULL,
    plan_id TEXT NOT NULL,
    plan_name TEXT NOT NULL,
    plan_duration_months INTEGER NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    verified_at TEXT,
    metadata TEXT
);
CREATE INDEX IF NOT EXISTS idx_payments_user ON payments(user_id);
CREATE INDEX IF NOT EXISTS idx_payments_email ON payments(user_email);
"""

_COLUMNS = (
    "id, user_id, user_email, user_name, transaction_id, tx_ref, amount, currency, "
    "plan_id, plan_name, plan_duration_months, status, created_at, verified_at, metadata"
)


class PaymentStore(SQLiteStore):
    FILENAME = "payments.db"

    def _create_schema(self, cur: sqlite3.Cursor) -> None:
        cur.executescript(SCHEMA_PAYMENTS)

    def insert_payment(self, payment: PaymentRecord) -> PaymentRecord:
        row = payment.to_row()
        with self._cursor() as cur:
            cur.execute(
                f"""
                INSERT OR REPLACE INTO payments ({", ".join(row)})
                VALUES ({", ".join("?" for _ in row)})
                """,
                tuple(row.values()),
            )
            payment.id = cur.lastrowid
        logger.info(
            "payment_recorded",
            transaction_id=payment.transaction_id,
            status=payment.status,
            plan_id=payment.plan_id,
        )
        return payment

    def _query(self, where: str, params: tuple) -> list[PaymentRecord]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE {where} ORDER BY created_at DESC",
                params,
            )
            rows = cur.fetchall()
        return [PaymentRecord.from_row(r) for r in rows]

    def get_payments_by_user_id(self, user_id: str) -> list[PaymentRecord]:
        return self._query("user_id = ?", (user_id,))

    def get_payments_by_email(self, email: str) -> list[PaymentRecord]:
        return self._query("user_email = ?", (email,))

    def get_successful_payments(self, user_id: str) -> list[PaymentRecord]:
        return self._query("user_id = ? AND status = ?", (user_id, PAYMENT_SUCCESSFUL))

    def get_payment_by_transaction_id(self, transaction_id: str) -> PaymentRecord | None:
        rows = self._query("transaction_id = ?", (transaction_id,))
        return rows[0] if rows else None

    def has_transaction(self, transaction_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("SELECT 1 FROM payments WHERE transaction_id = ?", (transaction_id,))
            return cur.fetchone() is not None

    def update_payment_status(
        self, transaction_id: str, status: str, verified_at: datetime | None = None
    ) -> bool:
        """Set status; a successful status also stamps verified_at (now if not given)."""
        if verified_at is None and status == PAYMENT_SUCCESSFUL:
            verified_at = now_local()
        with self._cursor() as cur:
            cur.execute(
                "UPDATE payments SET status = ?, verified_at = COALESCE(?, verified_at) "
                "WHERE transaction_id = ?",
                (status, verified_at.isoformat() if verified_at else None, transaction_id),
            )
            updated = cur.rowcount > 0
        if updated:
            logger.info("payment_status_updated", transaction_id=transaction_id, status=status)
        return updated

    def get_total_spent(self, user_id: str) -> float:
        with self._cursor() as cur:
            cur.execute(
                "SELECT COALESCE(SUM(amount), 0) AS total FROM payments WHERE user_id = ? AND status = ?",
                (user_id, PAYMENT_SUCCESSFUL),
            )
            return float(cur.fetchone()["total"])

    def get_payment_count(self, user_id: str) -> int:
        with self._cursor() as cur:
            cur.execute("SELECT COUNT(*) AS n FROM payments WHERE user_id = ?", (user_id,))
            return int(cur.fetchone()["n"])

    def delete_all_payments(self) -> int:
        with self._cursor() as cur:
            cur.execute("DELETE FROM payments")
            return cur.rowcount

    def delete_payments_for_user(self, user_id: str) -> int:
        with self._cursor() as cur:
            cur.execute("DELETE FROM payments WHERE user_id = ?", (user_id,))
            return cur.rowcount
