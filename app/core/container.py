from dataclasses import dataclass
from typing import Optional

from .config import Settings
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.user_repository import UserRepository
from ..services.notification_client import NotificationServiceClient
from ..services.payment_service import PaymentService
from ..services.subscription_notifier import SubscriptionNotifier
from ..services.subscription_service import SubscriptionService


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    database: SQLiteDatabase
    user_repository: UserRepository
    notification_client: Optional[NotificationServiceClient]
    subscription_notifier: SubscriptionNotifier
    subscription_service: SubscriptionService
    payment_service: PaymentService
