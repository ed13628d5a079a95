"""Repository for Subscription persistence."""

import secrets
import sqlite3
from typing import Any, Dict, List, Optional

from app.domain.models.subscription import Subscription, SubscriptionPlan, SubscriptionStatus
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
    "stripe_customer_id",
    "stripe_subscription_id",
    "status",
    "plan",
    "trial_start",
    "trial_end",
    "current_period_start",
    "current_period_end",
    "cancel_at_period_end",
    "card_validated",
    "canceled_at",
    "next_billing_date",
    "monthly_price",
    "yearly_price",
    "currency",
    "is_trial_active",
    "metadata",
    "created_at",
    "updated_at",
)
LOOKUP_FIELDS = frozenset({"id", "user_id", "stripe_customer_id", "stripe_subscription_id"})
MUTABLE_FIELDS = frozenset(COLUMNS) - {"id", "created_at", "updated_at"}


class SubscriptionRepository:
    """Repository for managing Subscription entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def create(self, values: Dict[str, Any]) -> Subscription:
        """
        Insert a subscription built from ``values`` (attribute name -> value).

        Raises:
            sqlite3.IntegrityError: If the user already owns a subscription
        """
        now = utc_now()
        subscription = Subscription(
            id=secrets.token_hex(12),
            created_at=now,
            updated_at=now,
            **{key: value for key, value in values.items() if key in MUTABLE_FIELDS},
        )
        row = {column: encode_value(getattr(subscription, column)) for column in COLUMNS}
        placeholders = ", ".join("?" for _ in COLUMNS)
        with self.database.transaction() as conn:
            conn.execute(
                f"INSERT INTO subscriptions ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                tuple(row[column] for column in COLUMNS),
            )
        return subscription

    def list(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Subscription]:
        """List subscriptions in creation order."""
        query = "SELECT * FROM subscriptions ORDER BY created_at, rowid LIMIT ? OFFSET ?"
        with self.database.reading() as conn:
            rows = conn.execute(query, (limit if limit else -1, offset or 0)).fetchall()
        return [self._row_to_subscription(row) for row in rows]

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        return self.get_by_field("id", subscription_id)

    def get_by_field(self, field: str, value: str) -> Optional[Subscription]:
        """Get the subscription whose ``field`` equals ``value``."""
        self._check_lookup(field)
        with self.database.reading() as conn:
            row = conn.execute(
                f"SELECT * FROM subscriptions WHERE {field} = ? LIMIT 1", (value,)
            ).fetchone()
        if not row:
            return None
        return self._row_to_subscription(row)

    def update_by_field(
        self, field: str, value: str, changes: Dict[str, Any]
    ) -> Optional[Subscription]:
        """
        Apply ``changes`` to the subscription matching ``field`` and return it.

        Returns:
            The updated Subscription, or None if nothing matched
        """
        self._check_lookup(field)
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown subscription fields: {', '.join(sorted(unknown))}")

        assignments = dict(changes, updated_at=utc_now())
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        params = [encode_value(item) for item in assignments.values()]
        with self.database.transaction() as conn:
            match = conn.execute(
                f"SELECT id FROM subscriptions WHERE {field} = ? LIMIT 1", (value,)
            ).fetchone()
            if not match:
                return None
            conn.execute(
                f"UPDATE subscriptions SET {set_clause} WHERE id = ?",
                (*params, match["id"]),
            )
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (match["id"],)
            ).fetchone()
        return self._row_to_subscription(row)

    def delete(self, subscription_id: str) -> Optional[Subscription]:
        """Delete a subscription and return the removed record."""
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (subscription_id,)
            ).fetchone()
            if not row:
                return None
            conn.execute("DELETE FROM subscriptions WHERE id = ?", (subscription_id,))
        return self._row_to_subscription(row)

    @staticmethod
    def _check_lookup(field: str) -> None:
        if field not in LOOKUP_FIELDS:
            raise ValueError(f"Unsupported subscription lookup field: {field}")

    def _row_to_subscription(self, row: sqlite3.Row) -> Subscription:
        """Convert database row to Subscription entity."""
        return Subscription(
            id=row["id"],
            user_id=row["user_id"],
            stripe_customer_id=row["stripe_customer_id"],
            stripe_subscription_id=row["stripe_subscription_id"],
            status=SubscriptionStatus(row["status"]),
            plan=SubscriptionPlan(row["plan"]),
            trial_start=decode_timestamp(row["trial_start"]),
            trial_end=decode_timestamp(row["trial_end"]),
            current_period_start=decode_timestamp(row["current_period_start"]),
            current_period_end=decode_timestamp(row["current_period_end"]),
            cancel_at_period_end=bool(row["cancel_at_period_end"]),
            card_validated=bool(row["card_validated"]),
            canceled_at=decode_timestamp(row["canceled_at"]),
            next_billing_date=decode_timestamp(row["next_billing_date"]),
            monthly_price=row["monthly_price"],
            yearly_price=row["yearly_price"],
            currency=row["currency"],
            is_trial_active=bool(row["is_trial_active"]),
            metadata=decode_json(row["metadata"]),
            created_at=decode_timestamp(row["created_at"]),
            updated_at=decode_timestamp(row["updated_at"]),
        )
