"""Pydantic schemas for subscription API endpoints."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.models.subscription import SubscriptionPlan, SubscriptionStatus


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON with the other services."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly sent by the caller, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class CreateSubscriptionRequest(RequestModel):
    """Request schema for creating a subscription."""

    user_id: str = Field(..., min_length=1)
    stripe_customer_id: str = Field(..., min_length=1)
    stripe_subscription_id: Optional[str] = None
    status: SubscriptionStatus = SubscriptionStatus.TRIAL
    plan: SubscriptionPlan = SubscriptionPlan.MONTHLY
    trial_start: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    card_validated: bool = False
    canceled_at: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    monthly_price: int = Field(default=2000, ge=0)
    yearly_price: int = Field(default=20000, ge=0)
    currency: str = Field(default="eur", min_length=3, max_length=3)
    is_trial_active: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump()


class UpdateSubscriptionRequest(RequestModel):
    """Request schema for a partial subscription update; only sent fields are written."""

    user_id: Optional[str] = Field(default=None, min_length=1)
    stripe_customer_id: Optional[str] = Field(default=None, min_length=1)
    stripe_subscription_id: Optional[str] = None
    status: Optional[SubscriptionStatus] = None
    plan: Optional[SubscriptionPlan] = None
    trial_start: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
    card_validated: Optional[bool] = None
    canceled_at: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    monthly_price: Optional[int] = Field(default=None, ge=0)
    yearly_price: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    is_trial_active: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator(
        "user_id",
        "stripe_customer_id",
        "status",
        "plan",
        "cancel_at_period_end",
        "card_validated",
        "monthly_price",
        "yearly_price",
        "currency",
        "is_trial_active",
        "metadata",
    )
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value


class UpdateSubscriptionStatusRequest(RequestModel):
    status: SubscriptionStatus


class ChangePlanRequest(RequestModel):
    plan: SubscriptionPlan


class SubscriptionResponse(CamelModel):
    """Response schema for subscription data."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    stripe_customer_id: str
    stripe_subscription_id: Optional[str]
    status: SubscriptionStatus
    plan: SubscriptionPlan
    trial_start: Optional[datetime]
    trial_end: Optional[datetime]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    cancel_at_period_end: bool
    card_validated: bool
    canceled_at: Optional[datetime]
    next_billing_date: Optional[datetime]
    monthly_price: int
    yearly_price: int
    currency: str
    is_trial_active: bool
    metadata: Dict[str, Any]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class IsActiveResponse(CamelModel):
    is_active: bool


class SubscriptionStatusResponse(CamelModel):
    subscription: Optional[SubscriptionResponse]
    is_active: bool
    is_trial_active: bool
    days_left: Optional[int]


class AuthServiceStatusResponse(CamelModel):
    """Subscription status in the shape the auth service consumes."""

    has_subscription: bool
    is_active: bool
    plan: Optional[SubscriptionPlan]
    status: Optional[SubscriptionStatus]
    trial_active: bool
    days_remaining: int = Field(..., ge=0)
    next_billing_date: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
