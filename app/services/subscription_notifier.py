from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from ..domain.models import Subscription, SubscriptionStatus
from ..domain.ports.persistence import UserDirectory
from .notification_client import NotificationServiceClient, SubscriptionEmail

logger = logging.getLogger(__name__)


class SubscriptionNotifier:
    """Fire-and-forget confirmation emails for newly created subscriptions."""

    def __init__(
        self,
        users: UserDirectory,
        client: Optional[NotificationServiceClient],
        *,
        shutdown_timeout: float = 20.0,
    ) -> None:
        self._users = users
        self._client = client
        self._shutdown_timeout = shutdown_timeout
        self._tasks: Set[asyncio.Task[None]] = set()

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def subscription_created(self, subscription: Subscription) -> None:
        """Schedule the confirmation email; never raises and never waits for delivery."""
        if self._client is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop; skipping confirmation email for subscription %s", subscription.id
            )
            return
        task = loop.create_task(self._deliver(subscription), name=f"subscription-email-{subscription.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for in-flight notifications, cancelling whatever outlives the shutdown timeout."""
        if not self._tasks:
            return
        logger.info("Waiting for %s pending subscription notification(s).", len(self._tasks))
        _, still_running = await asyncio.wait(set(self._tasks), timeout=self._shutdown_timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)

    async def _deliver(self, subscription: Subscription) -> None:
        try:
            user = self._users.get_by_id(subscription.user_id)
            if user is None or not user.email:
                logger.warning(
                    "User %s not found or has no email; skipping subscription confirmation email",
                    subscription.user_id,
                )
                return

            message = SubscriptionEmail(
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                plan=subscription.plan.value,
                status="trial" if subscription.status == SubscriptionStatus.TRIAL else "active",
                trial_end=subscription.trial_end,
                next_billing_date=subscription.next_billing_date or subscription.current_period_end,
                amount=subscription.billed_amount,
                currency=subscription.currency,
                user_id=subscription.user_id,
            )
            sent = await self._client.send_subscription_confirmation_email(message)
            if not sent:
                logger.warning("Subscription confirmation email not delivered for user %s", subscription.user_id)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            logger.exception("Error sending subscription confirmation email for user %s", subscription.user_id)
