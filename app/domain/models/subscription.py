"""Subscription domain model and the activity window evaluation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

SECONDS_PER_DAY = 24 * 60 * 60


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"


class SubscriptionPlan(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(slots=True)
class Subscription:
    """
    A user's subscription record. At most one exists per ``user_id``.

    Attributes:
        id: Opaque identifier
        user_id: Owning user from the auth service
        stripe_customer_id: Billing provider customer ID
        stripe_subscription_id: Billing provider subscription ID
        status: Current lifecycle status
        plan: Billing plan
        trial_start / trial_end: Bounds of the trial window
        current_period_start / current_period_end: Bounds of the paid billing period
        is_trial_active: Stored hint set at creation, consulted by the evaluator
        monthly_price / yearly_price: Prices in cents
    """

    id: str
    user_id: str
    stripe_customer_id: str
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
    monthly_price: int = 2000
    yearly_price: int = 20000
    currency: str = "eur"
    is_trial_active: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def billed_amount(self) -> int:
        if self.plan == SubscriptionPlan.YEARLY:
            return self.yearly_price
        return self.monthly_price

    def activity(self, now: datetime) -> "ActivityWindow":
        return evaluate_activity(self, now)

    def __repr__(self) -> str:
        return f"<Subscription id={self.id} user_id={self.user_id} status={self.status.value}>"


@dataclass(frozen=True, slots=True)
class ActivityWindow:
    is_trial_active: bool
    is_paid_active: bool
    days_left: Optional[int]

    @property
    def is_active(self) -> bool:
        return self.is_trial_active or self.is_paid_active


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_until(end: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``end``, rounded up."""
    seconds = (ensure_utc(end) - ensure_utc(now)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def evaluate_activity(subscription: Subscription, now: datetime) -> ActivityWindow:
    """
    Derive trial/paid activity and the remaining days for ``subscription`` at ``now``.

    The trial window is checked first: when both windows are open the trial end
    determines ``days_left``. ``days_left`` is ``None`` when neither window is open.
    """
    now = ensure_utc(now)
    trial_end = ensure_utc(subscription.trial_end)
    period_end = ensure_utc(subscription.current_period_end)

    is_trial_active = (
        subscription.is_trial_active is True
        and trial_end is not None
        and trial_end > now
    )
    is_paid_active = (
        subscription.status == SubscriptionStatus.ACTIVE
        and period_end is not None
        and period_end > now
    )

    days_left: Optional[int] = None
    if is_trial_active:
        days_left = days_until(trial_end, now)
    elif is_paid_active:
        days_left = days_until(period_end, now)

    return ActivityWindow(
        is_trial_active=is_trial_active,
        is_paid_active=is_paid_active,
        days_left=days_left,
    )
