"""Service for subscription records, activity status and lifecycle transitions."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.domain.errors import ConflictError, NotFoundError, ValidationError
from app.domain.models.subscription import Subscription, SubscriptionPlan, SubscriptionStatus
from app.domain.policies import PermissiveTransitionPolicy, TransitionPolicy
from app.domain.ports.persistence import SubscriptionRepository
from app.infrastructure.persistence.sqlite import utc_now
from app.services.failures import translate_failures
from app.services.subscription_notifier import SubscriptionNotifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SubscriptionStatusView:
    subscription: Optional[Subscription]
    is_active: bool
    is_trial_active: bool
    days_left: Optional[int]


@dataclass(slots=True)
class AuthServiceStatus:
    has_subscription: bool
    is_active: bool
    plan: Optional[SubscriptionPlan]
    status: Optional[SubscriptionStatus]
    trial_active: bool
    days_remaining: int
    next_billing_date: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None


class SubscriptionService:
    """Service for managing user subscriptions."""

    def __init__(
        self,
        subscription_repository: SubscriptionRepository,
        notifier: Optional[SubscriptionNotifier] = None,
        transition_policy: Optional[TransitionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.subscription_repository = subscription_repository
        self.notifier = notifier
        self.transition_policy = transition_policy or PermissiveTransitionPolicy()
        self.clock = clock

    async def create(self, values: Dict[str, Any]) -> Subscription:
        """
        Create the subscription for ``values["user_id"]``.

        Args:
            values: Subscription attributes keyed by field name

        Returns:
            The stored Subscription

        Raises:
            ConflictError: If the user already has a subscription
            ValidationError: If ``user_id`` is missing
        """
        with translate_failures("create subscription", logger):
            user_id = values.get("user_id")
            if not user_id:
                raise ValidationError("userId is required")
            if self.subscription_repository.get_by_field("user_id", user_id) is not None:
                raise ConflictError("User already has a subscription")
            try:
                subscription = self.subscription_repository.create(values)
            except sqlite3.IntegrityError as exc:
                # Lost the race against a concurrent create for the same user.
                raise ConflictError("User already has a subscription") from exc

        logger.info("Subscription %s created for user %s", subscription.id, user_id)
        if self.notifier is not None:
            self.notifier.subscription_created(subscription)
        return subscription

    async def find_all(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Subscription]:
        with translate_failures("retrieve subscriptions", logger):
            return self.subscription_repository.list(limit=limit, offset=offset)

    async def find_one(self, subscription_id: str) -> Subscription:
        with translate_failures("retrieve subscription", logger):
            subscription = self.subscription_repository.get_by_id(subscription_id)
            if subscription is None:
                raise NotFoundError(f"Subscription with ID {subscription_id} not found")
            return subscription

    async def find_by_user_id(self, user_id: str) -> Optional[Subscription]:
        with translate_failures("find subscription by user ID", logger):
            return self.subscription_repository.get_by_field("user_id", user_id)

    async def find_by_stripe_customer_id(self, stripe_customer_id: str) -> Optional[Subscription]:
        with translate_failures("find subscription by Stripe customer ID", logger):
            return self.subscription_repository.get_by_field("stripe_customer_id", stripe_customer_id)

    async def find_by_stripe_subscription_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        with translate_failures("find subscription by Stripe subscription ID", logger):
            return self.subscription_repository.get_by_field(
                "stripe_subscription_id", stripe_subscription_id
            )

    async def update(self, subscription_id: str, changes: Dict[str, Any]) -> Subscription:
        with translate_failures("update subscription", logger):
            return self._update("id", subscription_id, changes, f"Subscription with ID {subscription_id} not found")

    async def update_by_user_id(self, user_id: str, changes: Dict[str, Any]) -> Subscription:
        with translate_failures("update subscription by user ID", logger):
            return self._update("user_id", user_id, changes, f"Subscription for user ID {user_id} not found")

    async def update_by_stripe_subscription_id(
        self, stripe_subscription_id: str, changes: Dict[str, Any]
    ) -> Subscription:
        with translate_failures("update subscription by Stripe subscription ID", logger):
            return self._update(
                "stripe_subscription_id",
                stripe_subscription_id,
                changes,
                f"Subscription with Stripe subscription ID {stripe_subscription_id} not found",
            )

    async def remove(self, subscription_id: str) -> Subscription:
        with translate_failures("delete subscription", logger):
            removed = self.subscription_repository.delete(subscription_id)
            if removed is None:
                raise NotFoundError(f"Subscription with ID {subscription_id} not found")
        logger.info("Subscription %s deleted", subscription_id)
        return removed

    # Activity -------------------------------------------------------------
    async def is_active(self, user_id: str) -> bool:
        with translate_failures("check subscription activity", logger):
            subscription = self.subscription_repository.get_by_field("user_id", user_id)
            if subscription is None:
                return False
            return subscription.activity(self.clock()).is_active

    async def get_status(self, user_id: str) -> SubscriptionStatusView:
        """Status as consumed by the frontend; ``days_left`` is None when nothing is active."""
        with translate_failures("get subscription status", logger):
            subscription = self.subscription_repository.get_by_field("user_id", user_id)
            if subscription is None:
                return SubscriptionStatusView(
                    subscription=None, is_active=False, is_trial_active=False, days_left=None
                )
            window = subscription.activity(self.clock())
            return SubscriptionStatusView(
                subscription=subscription,
                is_active=window.is_active,
                is_trial_active=window.is_trial_active,
                days_left=window.days_left,
            )

    async def get_status_for_auth_service(self, user_id: str) -> AuthServiceStatus:
        """Status in the auth service's format; ``days_remaining`` is never negative."""
        with translate_failures("get subscription status for auth-service", logger):
            subscription = self.subscription_repository.get_by_field("user_id", user_id)
            if subscription is None:
                return AuthServiceStatus(
                    has_subscription=False,
                    is_active=False,
                    plan=None,
                    status=None,
                    trial_active=False,
                    days_remaining=0,
                )
            window = subscription.activity(self.clock())
            return AuthServiceStatus(
                has_subscription=True,
                is_active=window.is_active,
                plan=subscription.plan,
                status=subscription.status,
                trial_active=window.is_trial_active,
                days_remaining=max(0, window.days_left or 0),
                next_billing_date=subscription.next_billing_date,
                cancel_at_period_end=subscription.cancel_at_period_end,
            )

    # Transitions ----------------------------------------------------------
    async def update_status(self, subscription_id: str, status: SubscriptionStatus) -> Subscription:
        with translate_failures("update subscription status", logger):
            current = self.subscription_repository.get_by_id(subscription_id)
            if current is None:
                raise NotFoundError(f"Subscription with ID {subscription_id} not found")
            self.transition_policy.check(current.status, status)
            updated = self._update(
                "id", subscription_id, {"status": status}, f"Subscription with ID {subscription_id} not found"
            )
        logger.info("Subscription %s status changed from %s to %s", subscription_id, current.status.value, status.value)
        return updated

    async def change_plan(self, user_id: str, plan: SubscriptionPlan) -> Subscription:
        with translate_failures("change subscription plan", logger):
            if self.subscription_repository.get_by_field("user_id", user_id) is None:
                raise NotFoundError(f"Subscription for user ID {user_id} not found")
        return await self.update_by_user_id(user_id, {"plan": plan})

    def _update(self, field: str, value: str, changes: Dict[str, Any], missing: str) -> Subscription:
        try:
            updated = self.subscription_repository.update_by_field(field, value, changes)
        except sqlite3.IntegrityError as exc:
            raise ConflictError("User already has a subscription") from exc
        if updated is None:
            raise NotFoundError(missing)
        return updated
