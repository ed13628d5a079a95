from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..domain.errors import ServiceError
from ..domain.policies import build_transition_policy
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.payment_repository import PaymentRepository
from ..infrastructure.repositories.subscription_repository import SubscriptionRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..presentation.api.middleware import RequestLoggingMiddleware
from ..presentation.api.routers import payments as payments_router
from ..presentation.api.routers import subscriptions as subscriptions_router
from ..presentation.api.routers import users as users_router
from ..services.notification_client import NotificationServiceClient
from ..services.payment_service import PaymentService
from ..services.subscription_notifier import SubscriptionNotifier
from ..services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    notification_client: Optional[NotificationServiceClient] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="Database Service",
        lifespan=_create_lifespan(settings, notification_client),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if not settings.is_production:
        app.add_middleware(RequestLoggingMiddleware)

    _register_error_handlers(app)

    app.include_router(subscriptions_router.router, prefix=settings.route_prefix)
    app.include_router(payments_router.router, prefix=settings.route_prefix)
    app.include_router(users_router.router, prefix=settings.route_prefix)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: ApplicationContainer = app.state.container  # type: ignore[attr-defined]
        client = container.notification_client
        return {
            "ok": True,
            "notificationService": await client.check_health() if client else False,
        }

    return app


def _error_body(status_code: int, message: Any, reason: str) -> Dict[str, Any]:
    return {"statusCode": status_code, "message": message, "error": reason}


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, exc.message, exc.reason),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = [
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(status.HTTP_400_BAD_REQUEST, messages, "Bad Request"),
        )


def _create_lifespan(settings: Settings, notification_client: Optional[NotificationServiceClient]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        database = SQLiteDatabase(settings.database_path)
        user_repository = UserRepository(database)

        client = notification_client
        if client is None and settings.notifications_enabled:
            client = NotificationServiceClient(
                settings.notification_service_url,
                settings.notification_service_api_key,
            )
        if client is None:
            logger.info("Subscription notifications are disabled")

        notifier = SubscriptionNotifier(
            user_repository,
            client,
            shutdown_timeout=settings.notification_shutdown_timeout,
        )
        subscription_service = SubscriptionService(
            SubscriptionRepository(database),
            notifier=notifier,
            transition_policy=build_transition_policy(settings.strict_status_transitions),
        )
        payment_service = PaymentService(PaymentRepository(database))

        app.state.container = ApplicationContainer(  # type: ignore[attr-defined]
            settings=settings,
            database=database,
            user_repository=user_repository,
            notification_client=client,
            subscription_notifier=notifier,
            subscription_service=subscription_service,
            payment_service=payment_service,
        )
        if not settings.internal_api_key:
            logger.warning("INTERNAL_API_KEY is not set. Service authentication is disabled outside production!")
        logger.info("Database service ready; routes mounted under %s", settings.route_prefix)

        try:
            yield
        finally:
            await notifier.drain()
            database.close()

    return lifespan
