import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

MEMORY = ":memory:"


class SQLiteDatabase:
    """Shared SQLite connection used by every repository of the service."""

    def __init__(self, path: Union[Path, str]) -> None:
        if str(path) != MEMORY:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS subscriptions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL UNIQUE,
                    stripe_customer_id TEXT NOT NULL,
                    stripe_subscription_id TEXT,
                    status TEXT NOT NULL DEFAULT 'trial',
                    plan TEXT NOT NULL DEFAULT 'monthly',
                    trial_start TEXT,
                    trial_end TEXT,
                    current_period_start TEXT,
                    current_period_end TEXT,
                    cancel_at_period_end INTEGER NOT NULL DEFAULT 0,
                    card_validated INTEGER NOT NULL DEFAULT 0,
                    canceled_at TEXT,
                    next_billing_date TEXT,
                    monthly_price INTEGER NOT NULL DEFAULT 2000,
                    yearly_price INTEGER NOT NULL DEFAULT 20000,
                    currency TEXT NOT NULL DEFAULT 'eur',
                    is_trial_active INTEGER NOT NULL DEFAULT 1,
                    metadata TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_subscriptions_stripe_customer_id
                    ON subscriptions(stripe_customer_id);
                CREATE INDEX IF NOT EXISTS idx_subscriptions_stripe_subscription_id
                    ON subscriptions(stripe_subscription_id);

                CREATE TABLE IF NOT EXISTS payments (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    subscription_id TEXT NOT NULL,
                    stripe_payment_intent_id TEXT NOT NULL,
                    stripe_charge_id TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    payment_method TEXT NOT NULL,
                    amount INTEGER NOT NULL,
                    currency TEXT NOT NULL DEFAULT 'eur',
                    description TEXT,
                    paid_at TEXT,
                    failure_reason TEXT,
                    refunded_amount INTEGER NOT NULL DEFAULT 0,
                    refunded_at TEXT,
                    receipt_url TEXT,
                    invoice_id TEXT,
                    billing_period_start TEXT,
                    billing_period_end TEXT,
                    is_trial INTEGER NOT NULL DEFAULT 0,
                    metadata TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_payments_user_id ON payments(user_id);
                CREATE INDEX IF NOT EXISTS idx_payments_subscription_id ON payments(subscription_id);
                CREATE INDEX IF NOT EXISTS idx_payments_stripe_payment_intent_id
                    ON payments(stripe_payment_intent_id);
                """
            )

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the connection lock and commit (or roll back) on exit."""
        with self._lock, self._conn:
            yield self._conn

    @contextmanager
    def reading(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            yield self._conn

    def close(self) -> None:
        self._conn.close()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def encode_value(value: Any) -> Any:
    """Convert a domain value into something sqlite3 can bind."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, dict):
        return json.dumps(value, default=str, ensure_ascii=False)
    return value


def decode_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def decode_json(value: Optional[str]) -> Dict[str, Any]:
    if not value:
        return {}
    return json.loads(value)
