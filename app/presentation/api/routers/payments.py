"""API router for payment records."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_payment_service
from app.domain.errors import NotFoundError
from app.presentation.api.dependencies import require_service_auth
from app.presentation.api.schemas.payment_schemas import (
    CreatePaymentRequest,
    PaymentResponse,
    UpdatePaymentRequest,
    UpdatePaymentStatusRequest,
)
from app.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    dependencies=[Depends(require_service_auth)],
)


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    request: CreatePaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    logger.info("Creating payment for subscription: %s", request.subscription_id)
    return PaymentResponse.model_validate(await service.create(request.changes()))


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    limit: Optional[int] = Query(default=None, ge=0),
    offset: Optional[int] = Query(default=None, ge=0),
    service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    return [PaymentResponse.model_validate(item) for item in await service.find_all(limit, offset)]


@router.get("/user/{user_id}", response_model=List[PaymentResponse])
async def list_payments_by_user(
    user_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    return [PaymentResponse.model_validate(item) for item in await service.find_by_user_id(user_id)]


@router.get("/subscription/{subscription_id}", response_model=List[PaymentResponse])
async def list_payments_by_subscription(
    subscription_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    payments = await service.find_by_subscription_id(subscription_id)
    return [PaymentResponse.model_validate(item) for item in payments]


@router.get("/stripe-payment-intent/{stripe_payment_intent_id}", response_model=PaymentResponse)
async def get_payment_by_stripe_payment_intent(
    stripe_payment_intent_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    payment = await service.find_by_stripe_payment_intent_id(stripe_payment_intent_id)
    if payment is None:
        logger.warning("Payment for Stripe payment intent %s not found", stripe_payment_intent_id)
        raise NotFoundError(f"Payment for Stripe payment intent {stripe_payment_intent_id} not found")
    return PaymentResponse.model_validate(payment)


@router.put("/stripe-payment-intent/{stripe_payment_intent_id}", response_model=PaymentResponse)
async def update_payment_by_stripe_payment_intent(
    stripe_payment_intent_id: str,
    request: UpdatePaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    payment = await service.update_by_stripe_payment_intent_id(stripe_payment_intent_id, request.changes())
    return PaymentResponse.model_validate(payment)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    return PaymentResponse.model_validate(await service.find_one(payment_id))


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    request: UpdatePaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    logger.info("Updating payment with ID: %s", payment_id)
    return PaymentResponse.model_validate(await service.update(payment_id, request.changes()))


@router.put("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: str,
    request: UpdatePaymentStatusRequest,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    logger.info("Updating payment status for ID: %s to: %s", payment_id, request.status.value)
    return PaymentResponse.model_validate(await service.update_status(payment_id, request.status))


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
) -> Response:
    logger.info("Deleting payment with ID: %s", payment_id)
    await service.remove(payment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
