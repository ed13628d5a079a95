"""Domain models for the database service."""

from .payment import Payment, PaymentMethod, PaymentStatus
from .subscription import (
    ActivityWindow,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
    evaluate_activity,
)
from .user import User

__all__ = [
    "ActivityWindow",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Subscription",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "User",
    "evaluate_activity",
]
