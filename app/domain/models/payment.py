"""Payment domain model linked to a subscription."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CARD = "card"
    SEPA = "sepa_debit"
    PAYPAL = "paypal"


@dataclass(slots=True)
class Payment:
    id: str
    user_id: str
    subscription_id: str
    stripe_payment_intent_id: str
    status: PaymentStatus
    payment_method: PaymentMethod
    amount: int
    currency: str = "eur"
    stripe_charge_id: Optional[str] = None
    description: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refunded_amount: int = 0
    refunded_at: Optional[datetime] = None
    receipt_url: Optional[str] = None
    invoice_id: Optional[str] = None
    billing_period_start: Optional[datetime] = None
    billing_period_end: Optional[datetime] = None
    is_trial: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<Payment id={self.id} subscription_id={self.subscription_id} status={self.status.value}>"
