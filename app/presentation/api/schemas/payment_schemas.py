"""Pydantic schemas for payment API endpoints."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.models.payment import PaymentMethod, PaymentStatus
from app.presentation.api.schemas.subscription_schemas import CamelModel, RequestModel


class CreatePaymentRequest(RequestModel):
    user_id: str = Field(..., min_length=1)
    subscription_id: str = Field(..., min_length=1)
    stripe_payment_intent_id: str = Field(..., min_length=1)
    stripe_charge_id: Optional[str] = None
    status: PaymentStatus
    payment_method: PaymentMethod
    amount: int = Field(..., ge=0)
    currency: str = Field(default="eur", min_length=3, max_length=3)
    description: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refunded_amount: int = Field(default=0, ge=0)
    refunded_at: Optional[datetime] = None
    receipt_url: Optional[str] = None
    invoice_id: Optional[str] = None
    billing_period_start: Optional[datetime] = None
    billing_period_end: Optional[datetime] = None
    is_trial: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump()


class UpdatePaymentRequest(RequestModel):
    user_id: Optional[str] = Field(default=None, min_length=1)
    subscription_id: Optional[str] = Field(default=None, min_length=1)
    stripe_payment_intent_id: Optional[str] = Field(default=None, min_length=1)
    stripe_charge_id: Optional[str] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    amount: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    description: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refunded_amount: Optional[int] = Field(default=None, ge=0)
    refunded_at: Optional[datetime] = None
    receipt_url: Optional[str] = None
    invoice_id: Optional[str] = None
    billing_period_start: Optional[datetime] = None
    billing_period_end: Optional[datetime] = None
    is_trial: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator(
        "user_id",
        "subscription_id",
        "stripe_payment_intent_id",
        "status",
        "payment_method",
        "amount",
        "currency",
        "refunded_amount",
        "is_trial",
        "metadata",
    )
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value


class UpdatePaymentStatusRequest(RequestModel):
    status: PaymentStatus


class PaymentResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    subscription_id: str
    stripe_payment_intent_id: str
    stripe_charge_id: Optional[str]
    status: PaymentStatus
    payment_method: PaymentMethod
    amount: int
    currency: str
    description: Optional[str]
    paid_at: Optional[datetime]
    failure_reason: Optional[str]
    refunded_amount: int
    refunded_at: Optional[datetime]
    receipt_url: Optional[str]
    invoice_id: Optional[str]
    billing_period_start: Optional[datetime]
    billing_period_end: Optional[datetime]
    is_trial: bool
    metadata: Dict[str, Any]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
