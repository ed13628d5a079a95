from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ..models import Payment, Subscription, User


class SubscriptionRepository(Protocol):
    """Abstract storage for subscription records, keyed by id and by user."""

    def create(self, values: Dict[str, Any]) -> Subscription:
        ...

    def list(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Subscription]:
        ...

    def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        ...

    def get_by_field(self, field: str, value: str) -> Optional[Subscription]:
        ...

    def update_by_field(self, field: str, value: str, changes: Dict[str, Any]) -> Optional[Subscription]:
        ...

    def delete(self, subscription_id: str) -> Optional[Subscription]:
        ...


class PaymentRepository(Protocol):
    """Abstract storage for payment records."""

    def create(self, values: Dict[str, Any]) -> Payment:
        ...

    def list(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Payment]:
        ...

    def list_by_field(self, field: str, value: str) -> List[Payment]:
        ...

    def get_by_field(self, field: str, value: str) -> Optional[Payment]:
        ...

    def update_by_field(self, field: str, value: str, changes: Dict[str, Any]) -> Optional[Payment]:
        ...

    def delete(self, payment_id: str) -> Optional[Payment]:
        ...


class UserDirectory(Protocol):
    """Read access to user contact details."""

    def get_by_id(self, user_id: str) -> Optional[User]:
        ...
