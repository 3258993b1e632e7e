"""
Payment endpoints
=================

GET  /api/v1/bookings/{booking_id}/payment -- amount due, or the completed payment
POST /api/v1/payments                      -- pay for a booking
GET  /api/v1/payments                      -- the rider's payments, newest first
GET  /api/v1/payments/{payment_id}         -- payment detail

A declined digital payment answers 402 with the failed ``payment_id``;
the booking stays Pending and a new submission creates a new payment.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.api.dependencies import (
    get_db,
    get_payment_simulator,
    require_user_id,
)
from cab_booking.api.middleware import limiter
from cab_booking.api.schemas import (
    PaymentFailedResponse,
    PaymentPageResponse,
    PaymentRequest,
    PaymentResponse,
)
from cab_booking.config import settings
from cab_booking.domain.enums import PaymentStatus
from cab_booking.domain.errors import SettlementFailed
from cab_booking.domain.settlement import PaymentSimulator
from cab_booking.infrastructure.redis_client import get_redis
from cab_booking.services.payment_service import PaymentService

router = APIRouter(tags=["payments"])


@router.get(
    "/bookings/{booking_id}/payment",
    response_model=PaymentPageResponse,
    summary="Amount due for a booking",
)
@limiter.limit(settings.rate_limit)
async def payment_page(
    request: Request,
    booking_id: str,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: PaymentSimulator = Depends(get_payment_simulator),
):
    page = await PaymentService(db, simulator).payment_page(user_id, booking_id)
    return PaymentPageResponse.model_validate(page)


@router.post(
    "/payments",
    response_model=PaymentResponse,
    summary="Pay for a booking",
    responses={402: {"model": PaymentFailedResponse, "description": "Payment declined."}},
)
@limiter.limit(settings.rate_limit)
async def pay(
    request: Request,
    body: PaymentRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: PaymentSimulator = Depends(get_payment_simulator),
    redis: aioredis.Redis = Depends(get_redis),
):
    payment = await PaymentService(db, simulator, redis).pay(
        user_id,
        body.booking_id,
        body.payment_method,
        amount=body.amount,
        card_number=body.card_number,
        upi_id=body.upi_id,
        wallet_type=body.wallet_type,
    )
    if PaymentStatus(payment.status) == PaymentStatus.FAILED:
        raise SettlementFailed(payment.id)
    return payment


@router.get(
    "/payments",
    response_model=list[PaymentResponse],
    summary="List my payments",
)
@limiter.limit(settings.rate_limit)
async def my_payments(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: PaymentSimulator = Depends(get_payment_simulator),
):
    return await PaymentService(db, simulator).get_user_payments(user_id)


@router.get(
    "/payments/{payment_id}",
    response_model=PaymentResponse,
    summary="Get payment detail",
)
@limiter.limit(settings.rate_limit)
async def get_payment(
    request: Request,
    payment_id: str,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: PaymentSimulator = Depends(get_payment_simulator),
):
    return await PaymentService(db, simulator).get_payment(user_id, payment_id)
