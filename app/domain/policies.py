from __future__ import annotations

from typing import Dict, FrozenSet, Protocol

from .errors import ValidationError
from .models import SubscriptionStatus


class TransitionPolicy(Protocol):
    """Decides whether a subscription may move from one status to another."""

    def check(self, current: SubscriptionStatus, target: SubscriptionStatus) -> None:
        ...


class PermissiveTransitionPolicy:
    """Accepts every transition; billing webhooks are trusted to send sane statuses."""

    def check(self, current: SubscriptionStatus, target: SubscriptionStatus) -> None:
        return None


_ALLOWED: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    SubscriptionStatus.TRIAL: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELED}),
    SubscriptionStatus.ACTIVE: frozenset(
        {SubscriptionStatus.PAST_DUE, SubscriptionStatus.UNPAID, SubscriptionStatus.CANCELED}
    ),
    SubscriptionStatus.PAST_DUE: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELED}),
    SubscriptionStatus.UNPAID: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELED}),
    SubscriptionStatus.CANCELED: frozenset(),
}


class StrictTransitionPolicy:
    """Only allows the lifecycle transitions the billing flow can produce."""

    def check(self, current: SubscriptionStatus, target: SubscriptionStatus) -> None:
        if current == target or target in _ALLOWED[current]:
            return
        raise ValidationError(
            f"Cannot change subscription status from {current.value} to {target.value}"
        )


def build_transition_policy(strict: bool) -> TransitionPolicy:
    return StrictTransitionPolicy() if strict else PermissiveTransitionPolicy()
