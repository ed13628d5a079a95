"""HTTP client for the external notification (email) service."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SubscriptionEmail:
    email: str
    first_name: str
    last_name: str
    plan: str
    status: str
    trial_end: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    user_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "plan": self.plan,
            "status": self.status,
            "trialEnd": self.trial_end.isoformat() if self.trial_end else None,
            "nextBillingDate": self.next_billing_date.isoformat() if self.next_billing_date else None,
            "amount": self.amount,
            "currency": self.currency,
            "userId": self.user_id,
        }


class NotificationServiceClient:
    """
    Talks to the notification service over HTTP.

    Every call returns a boolean instead of raising, so callers never block on
    the notification service being down.
    """

    REQUEST_TIMEOUT = 10.0
    OVERALL_TIMEOUT = 15.0
    HEALTH_REQUEST_TIMEOUT = 5.0
    HEALTH_OVERALL_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport

    async def send_subscription_confirmation_email(self, message: SubscriptionEmail) -> bool:
        """
        POST /notifications/subscription-confirmation

        Returns:
            True if the notification service reported success, False otherwise
        """
        url = f"{self._base}/notifications/subscription-confirmation"
        logger.info("Sending subscription confirmation email to %s via notification service", message.email)
        try:
            data = await asyncio.wait_for(
                self._request("POST", url, self.REQUEST_TIMEOUT, json=message.to_payload()),
                timeout=self.OVERALL_TIMEOUT,
            )
        except (httpx.HTTPError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning(
                "Failed to send subscription confirmation email for %s, notification service may be down: %s",
                message.email,
                exc,
            )
            return False

        if data.get("success"):
            logger.info("Subscription confirmation email sent successfully to %s", message.email)
            return True
        logger.warning(
            "Notification service returned failure for %s: %s", message.email, data.get("message")
        )
        return False

    async def check_health(self) -> bool:
        url = f"{self._base}/notifications/health"
        try:
            data = await asyncio.wait_for(
                self._request("GET", url, self.HEALTH_REQUEST_TIMEOUT),
                timeout=self.HEALTH_OVERALL_TIMEOUT,
            )
        except (httpx.HTTPError, asyncio.TimeoutError, ValueError) as exc:
            logger.debug("Notification service is not available: %s", exc)
            return False
        return data.get("status") == "healthy"

    async def _request(self, method: str, url: str, timeout: float, **kwargs: Any) -> Dict[str, Any]:
        headers = {"X-API-Key": self._api_key}
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected notification service response")
        return data
