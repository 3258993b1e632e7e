"""
Dashboard endpoint
==================

GET /api/v1/dashboard -- this month's ride count and spend, recent bookings

Cancelled bookings are excluded from every figure.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.api.dependencies import get_db, require_user_id
from cab_booking.api.middleware import limiter
from cab_booking.api.schemas import DashboardResponse
from cab_booking.config import settings
from cab_booking.services.booking_service import BookingService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, summary="Rider dashboard")
@limiter.limit(settings.rate_limit)
async def get_dashboard(
    request: Request,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    summary = await BookingService(db).dashboard(user_id)
    return DashboardResponse.model_validate(summary)
