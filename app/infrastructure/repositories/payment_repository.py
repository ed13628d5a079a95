"""Repository for Payment persistence."""

import secrets
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.models.payment import Payment, PaymentMethod, PaymentStatus
from app.infrastructure.persistence.sqlite import (
    SQLiteDatabase,
    decode_json,
    decode_timestamp,
    encode_value,
    utc_now,
)

COLUMNS = (
    "id",
    "user_id",
    "subscription_id",
    "stripe_payment_intent_id",
    "stripe_charge_id",
    "status",
    "payment_method",
    "amount",
    "currency",
    "description",
    "paid_at",
    "failure_reason",
    "refunded_amount",
    "refunded_at",
    "receipt_url",
    "invoice_id",
    "billing_period_start",
    "billing_period_end",
    "is_trial",
    "metadata",
    "created_at",
    "updated_at",
)
LOOKUP_FIELDS = frozenset({"id", "user_id", "subscription_id", "stripe_payment_intent_id"})
MUTABLE_FIELDS = frozenset(COLUMNS) - {"id", "created_at", "updated_at"}


class PaymentRepository:
    """Repository for managing Payment entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def create(self, values: Dict[str, Any]) -> Payment:
        """Insert a payment built from ``values`` (attribute name -> value)."""
        now = utc_now()
        payment = Payment(
            id=secrets.token_hex(12),
            created_at=now,
            updated_at=now,
            **{key: value for key, value in values.items() if key in MUTABLE_FIELDS},
        )
        placeholders = ", ".join("?" for _ in COLUMNS)
        with self.database.transaction() as conn:
            conn.execute(
                f"INSERT INTO payments ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                tuple(encode_value(getattr(payment, column)) for column in COLUMNS),
            )
        return payment

    def list(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Payment]:
        with self.database.reading() as conn:
            rows = conn.execute(
                "SELECT * FROM payments ORDER BY created_at, rowid LIMIT ? OFFSET ?",
                (limit if limit else -1, offset or 0),
            ).fetchall()
        return [self._row_to_payment(row) for row in rows]

    def list_by_field(self, field: str, value: str) -> List[Payment]:
        """List payments whose ``field`` equals ``value``, oldest first."""
        self._check_lookup(field)
        with self.database.reading() as conn:
            rows = conn.execute(
                f"SELECT * FROM payments WHERE {field} = ? ORDER BY created_at, rowid",
                (value,),
            ).fetchall()
        return [self._row_to_payment(row) for row in rows]

    def get_by_field(self, field: str, value: str) -> Optional[Payment]:
        self._check_lookup(field)
        with self.database.reading() as conn:
            row = conn.execute(
                f"SELECT * FROM payments WHERE {field} = ? LIMIT 1", (value,)
            ).fetchone()
        return self._row_to_payment(row) if row else None

    def update_by_field(self, field: str, value: str, changes: Dict[str, Any]) -> Optional[Payment]:
        """Apply ``changes`` to the first payment matching ``field`` and return it."""
        self._check_lookup(field)
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown payment fields: {', '.join(sorted(unknown))}")

        assignments = dict(changes, updated_at=utc_now())
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        params = [encode_value(item) for item in assignments.values()]
        with self.database.transaction() as conn:
            match = conn.execute(
                f"SELECT id FROM payments WHERE {field} = ? LIMIT 1", (value,)
            ).fetchone()
            if not match:
                return None
            conn.execute(f"UPDATE payments SET {set_clause} WHERE id = ?", (*params, match["id"]))
            row = conn.execute("SELECT * FROM payments WHERE id = ?", (match["id"],)).fetchone()
        return self._row_to_payment(row)

    def delete(self, payment_id: str) -> Optional[Payment]:
        with self.database.transaction() as conn:
            row = conn.execute("SELECT * FROM payments WHERE id = ?", (payment_id,)).fetchone()
            if not row:
                return None
            conn.execute("DELETE FROM payments WHERE id = ?", (payment_id,))
        return self._row_to_payment(row)

    @staticmethod
    def _check_lookup(field: str) -> None:
        if field not in LOOKUP_FIELDS:
            raise ValueError(f"Unsupported payment lookup field: {field}")

    def _row_to_payment(self, row: sqlite3.Row) -> Payment:
        return Payment(
            id=row["id"],
            user_id=row["user_id"],
            subscription_id=row["subscription_id"],
            stripe_payment_intent_id=row["stripe_payment_intent_id"],
            stripe_charge_id=row["stripe_charge_id"],
            status=PaymentStatus(row["status"]),
            payment_method=PaymentMethod(row["payment_method"]),
            amount=row["amount"],
            currency=row["currency"],
            description=row["description"],
            paid_at=decode_timestamp(row["paid_at"]),
            failure_reason=row["failure_reason"],
            refunded_amount=row["refunded_amount"],
            refunded_at=decode_timestamp(row["refunded_at"]),
            receipt_url=row["receipt_url"],
            invoice_id=row["invoice_id"],
            billing_period_start=decode_timestamp(row["billing_period_start"]),
            billing_period_end=decode_timestamp(row["billing_period_end"]),
            is_trial=bool(row["is_trial"]),
            metadata=decode_json(row["metadata"]),
            created_at=decode_timestamp(row["created_at"]),
            updated_at=decode_timestamp(row["updated_at"]),
        )
