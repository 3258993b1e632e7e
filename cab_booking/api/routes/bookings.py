"""
Booking endpoints
=================

POST /api/v1/bookings                 -- book a cab (returns 201, status Pending)
GET  /api/v1/bookings                 -- the rider's bookings, newest first
GET  /api/v1/bookings/{booking_id}    -- booking detail
POST /api/v1/bookings/{booking_id}/cancel -- cancel (no-op unless Pending/Confirmed)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.api.dependencies import get_db, require_user_id
from cab_booking.api.middleware import limiter
from cab_booking.api.schemas import BookingCreateRequest, BookingResponse
from cab_booking.config import settings
from cab_booking.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    status_code=201,
    response_model=BookingResponse,
    summary="Book a cab",
    responses={422: {"description": "Invalid request or unable to book this cab type."}},
)
@limiter.limit(settings.rate_limit)
async def create_booking(
    request: Request,
    body: BookingCreateRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await BookingService(db).create_booking(
        user_id,
        pickup_location=body.pickup_location,
        dropoff_location=body.dropoff_location,
        cab_type=body.cab_type,
        pickup_latitude=body.pickup_latitude,
        pickup_longitude=body.pickup_longitude,
        dropoff_latitude=body.dropoff_latitude,
        dropoff_longitude=body.dropoff_longitude,
    )


@router.get(
    "",
    response_model=list[BookingResponse],
    summary="List my bookings",
)
@limiter.limit(settings.rate_limit)
async def my_bookings(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await BookingService(db).get_user_bookings(user_id)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking detail",
)
@limiter.limit(settings.rate_limit)
async def get_booking(
    request: Request,
    booking_id: str,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await BookingService(db).get_booking(user_id, booking_id)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
    description=(
        "Transitions a Pending or Confirmed booking to Cancelled and returns "
        "its cab to the fleet.  Bookings in any other status are returned "
        "unchanged."
    ),
)
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    booking_id: str,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await BookingService(db).cancel_booking(user_id, booking_id)
