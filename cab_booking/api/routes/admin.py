"""
Admin / observability endpoints
===============================

GET /api/v1/admin/bookings -- every booking with cab and rider details
GET /api/v1/admin/payments -- every payment with booking and rider details
GET /api/v1/admin/fleet    -- every cab and its availability
GET /api/v1/admin/health   -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.api.dependencies import get_db, require_user_id
from cab_booking.api.middleware import limiter
from cab_booking.api.schemas import (
    BookingResponse,
    CabResponse,
    HealthResponse,
    PaymentResponse,
)
from cab_booking.config import settings
from cab_booking.infrastructure.repositories import (
    BookingRepository,
    CabRepository,
    PaymentRepository,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/bookings",
    response_model=list[BookingResponse],
    summary="List all bookings, newest first",
)
@limiter.limit(settings.rate_limit)
async def all_bookings(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await BookingRepository(db).get_bookings_with_details()


@router.get(
    "/payments",
    response_model=list[PaymentResponse],
    summary="List all payments, newest first",
)
@limiter.limit(settings.rate_limit)
async def all_payments(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await PaymentRepository(db).get_payments_with_details()


@router.get("/fleet", response_model=list[CabResponse], summary="List the fleet")
@limiter.limit(settings.rate_limit)
async def fleet(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await CabRepository(db).get_all()


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
