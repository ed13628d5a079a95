"""Service for payment records attached to subscriptions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.domain.errors import NotFoundError
from app.domain.models.payment import Payment, PaymentStatus
from app.domain.ports.persistence import PaymentRepository
from app.services.failures import translate_failures

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for managing payments."""

    def __init__(self, payment_repository: PaymentRepository):
        self.payment_repository = payment_repository

    async def create(self, values: Dict[str, Any]) -> Payment:
        with translate_failures("create payment", logger):
            payment = self.payment_repository.create(values)
        logger.info("Payment %s recorded for subscription %s", payment.id, payment.subscription_id)
        return payment

    async def find_all(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Payment]:
        with translate_failures("retrieve payments", logger):
            return self.payment_repository.list(limit=limit, offset=offset)

    async def find_one(self, payment_id: str) -> Payment:
        with translate_failures("retrieve payment", logger):
            payment = self.payment_repository.get_by_field("id", payment_id)
            if payment is None:
                raise NotFoundError(f"Payment with ID {payment_id} not found")
            return payment

    async def find_by_user_id(self, user_id: str) -> List[Payment]:
        with translate_failures("find payments by user ID", logger):
            return self.payment_repository.list_by_field("user_id", user_id)

    async def find_by_subscription_id(self, subscription_id: str) -> List[Payment]:
        with translate_failures("find payments by subscription ID", logger):
            return self.payment_repository.list_by_field("subscription_id", subscription_id)

    async def find_by_stripe_payment_intent_id(self, stripe_payment_intent_id: str) -> Optional[Payment]:
        with translate_failures("find payment by Stripe payment intent ID", logger):
            return self.payment_repository.get_by_field("stripe_payment_intent_id", stripe_payment_intent_id)

    async def update(self, payment_id: str, changes: Dict[str, Any]) -> Payment:
        with translate_failures("update payment", logger):
            return self._update("id", payment_id, changes, f"Payment with ID {payment_id} not found")

    async def update_by_stripe_payment_intent_id(
        self, stripe_payment_intent_id: str, changes: Dict[str, Any]
    ) -> Payment:
        with translate_failures("update payment by Stripe payment intent ID", logger):
            return self._update(
                "stripe_payment_intent_id",
                stripe_payment_intent_id,
                changes,
                f"Payment with Stripe payment intent ID {stripe_payment_intent_id} not found",
            )

    async def update_status(self, payment_id: str, status: PaymentStatus) -> Payment:
        with translate_failures("update payment status", logger):
            return self._update("id", payment_id, {"status": status}, f"Payment with ID {payment_id} not found")

    async def remove(self, payment_id: str) -> Payment:
        with translate_failures("delete payment", logger):
            removed = self.payment_repository.delete(payment_id)
            if removed is None:
                raise NotFoundError(f"Payment with ID {payment_id} not found")
            return removed

    def _update(self, field: str, value: str, changes: Dict[str, Any], missing: str) -> Payment:
        updated = self.payment_repository.update_by_field(field, value, changes)
        if updated is None:
            raise NotFoundError(missing)
        return updated
