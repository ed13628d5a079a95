"""API router for subscription records and their activity status."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_subscription_service
from app.domain.errors import NotFoundError
from app.presentation.api.dependencies import require_service_auth
from app.presentation.api.schemas.subscription_schemas import (
    AuthServiceStatusResponse,
    ChangePlanRequest,
    CreateSubscriptionRequest,
    IsActiveResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
    UpdateSubscriptionRequest,
    UpdateSubscriptionStatusRequest,
)
from app.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/subscriptions",
    tags=["subscriptions"],
    dependencies=[Depends(require_service_auth)],
)


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    request: CreateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    """Create a subscription; 409 if the user already has one."""
    logger.info("Creating new subscription for user: %s", request.user_id)
    subscription = await service.create(request.changes())
    return SubscriptionResponse.model_validate(subscription)


@router.get("", response_model=List[SubscriptionResponse])
async def list_subscriptions(
    limit: Optional[int] = Query(default=None, ge=0),
    offset: Optional[int] = Query(default=None, ge=0),
    service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionResponse]:
    subscriptions = await service.find_all(limit=limit, offset=offset)
    return [SubscriptionResponse.model_validate(item) for item in subscriptions]


# ============ BY USER ============

@router.get("/user/{user_id}", response_model=SubscriptionResponse)
async def get_subscription_by_user(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await service.find_by_user_id(user_id)
    if subscription is None:
        logger.warning("Subscription for user %s not found", user_id)
        raise NotFoundError(f"Subscription for user {user_id} not found")
    return SubscriptionResponse.model_validate(subscription)


@router.get("/user/{user_id}/active", response_model=IsActiveResponse)
async def is_subscription_active(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> IsActiveResponse:
    """Cheap gating check."""
    return IsActiveResponse(is_active=await service.is_active(user_id))


@router.get("/user/{user_id}/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionStatusResponse:
    view = await service.get_status(user_id)
    return SubscriptionStatusResponse(
        subscription=SubscriptionResponse.model_validate(view.subscription) if view.subscription else None,
        is_active=view.is_active,
        is_trial_active=view.is_trial_active,
        days_left=view.days_left,
    )


@router.get("/user/{user_id}/auth-status")
async def get_subscription_status_for_auth_service(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Dict[str, Any]:
    """Status in the auth service format; billing fields are omitted when absent."""
    result = await service.get_status_for_auth_service(user_id)
    payload = AuthServiceStatusResponse(
        has_subscription=result.has_subscription,
        is_active=result.is_active,
        plan=result.plan,
        status=result.status,
        trial_active=result.trial_active,
        days_remaining=result.days_remaining,
        next_billing_date=result.next_billing_date,
        cancel_at_period_end=result.cancel_at_period_end,
    )
    exclude = set()
    if not result.has_subscription:
        exclude = {"next_billing_date", "cancel_at_period_end"}
    elif result.next_billing_date is None:
        exclude = {"next_billing_date"}
    return payload.model_dump(mode="json", by_alias=True, exclude=exclude)


@router.put("/user/{user_id}", response_model=SubscriptionResponse)
async def update_subscription_by_user(
    user_id: str,
    request: UpdateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    logger.info("Updating subscription for user: %s", user_id)
    subscription = await service.update_by_user_id(user_id, request.changes())
    return SubscriptionResponse.model_validate(subscription)


@router.put("/user/{user_id}/plan", response_model=SubscriptionResponse)
async def change_subscription_plan(
    user_id: str,
    request: ChangePlanRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    logger.info("Changing subscription plan for user: %s to: %s", user_id, request.plan.value)
    subscription = await service.change_plan(user_id, request.plan)
    return SubscriptionResponse.model_validate(subscription)


# ============ BY BILLING PROVIDER ============

@router.get("/stripe-customer/{stripe_customer_id}", response_model=SubscriptionResponse)
async def get_subscription_by_stripe_customer(
    stripe_customer_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await service.find_by_stripe_customer_id(stripe_customer_id)
    if subscription is None:
        logger.warning("Subscription for Stripe customer %s not found", stripe_customer_id)
        raise NotFoundError(f"Subscription for Stripe customer {stripe_customer_id} not found")
    return SubscriptionResponse.model_validate(subscription)


@router.get("/stripe-subscription/{stripe_subscription_id}", response_model=SubscriptionResponse)
async def get_subscription_by_stripe_subscription(
    stripe_subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await service.find_by_stripe_subscription_id(stripe_subscription_id)
    if subscription is None:
        logger.warning("Subscription for Stripe subscription %s not found", stripe_subscription_id)
        raise NotFoundError(f"Subscription for Stripe subscription {stripe_subscription_id} not found")
    return SubscriptionResponse.model_validate(subscription)


@router.put("/stripe-subscription/{stripe_subscription_id}", response_model=SubscriptionResponse)
async def update_subscription_by_stripe_subscription(
    stripe_subscription_id: str,
    request: UpdateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    logger.info("Updating subscription with Stripe subscription ID: %s", stripe_subscription_id)
    subscription = await service.update_by_stripe_subscription_id(stripe_subscription_id, request.changes())
    return SubscriptionResponse.model_validate(subscription)


# ============ BY ID ============

@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    return SubscriptionResponse.model_validate(await service.find_one(subscription_id))


@router.put("/{subscription_id}", response_model=SubscriptionResponse)
async def update_subscription(
    subscription_id: str,
    request: UpdateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    logger.info("Updating subscription with ID: %s", subscription_id)
    subscription = await service.update(subscription_id, request.changes())
    return SubscriptionResponse.model_validate(subscription)


@router.put("/{subscription_id}/status", response_model=SubscriptionResponse)
async def update_subscription_status(
    subscription_id: str,
    request: UpdateSubscriptionStatusRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    logger.info("Updating subscription status for ID: %s to: %s", subscription_id, request.status.value)
    subscription = await service.update_status(subscription_id, request.status)
    return SubscriptionResponse.model_validate(subscription)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> Response:
    logger.info("Deleting subscription with ID: %s", subscription_id)
    await service.remove(subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
