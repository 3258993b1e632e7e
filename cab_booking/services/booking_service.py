"""
Booking service - the request -> allocate -> price -> persist workflow.

Each step is a separate write against the request's unit of work:

1. validate the request shape
2. resolve the rider
3. allocate a cab (atomic claim, or find-or-create + later flip)
4. estimate distance and fare
5. persist a Pending booking with rider / cab snapshots
6. mark the cab unavailable (find-or-create mode only; a claim already did)

In find-or-create mode steps 3 and 6 are a read-check-then-act sequence,
so two concurrent requests for a scarce type can be handed the same cab.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.config import settings
from cab_booking.domain.distance import estimate_distance
from cab_booking.domain.entities import (
    CabSnapshot,
    RiderSnapshot,
    check_transition,
    is_cancellable,
)
from cab_booking.domain.enums import BookingStatus, CabType, parse_cab_type
from cab_booking.domain.errors import (
    AllocationFailed,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from cab_booking.domain.pricing import estimate_fare
from cab_booking.infrastructure.models import BookingModel, CabModel
from cab_booking.infrastructure.repositories import (
    BookingRepository,
    CabRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    total_rides: int = 0
    total_spent: Decimal = Decimal("0")
    recent_bookings: list[BookingModel] = field(default_factory=list)
    all_bookings: list[BookingModel] = field(default_factory=list)


class BookingService:
    """Service for booking operations"""

    def __init__(
        self,
        session: AsyncSession,
        *,
        atomic_claim: bool = settings.atomic_cab_claim,
        geodesic: bool = settings.use_geodesic_distance,
        rng: Optional[random.Random] = None,
    ):
        self.session = session
        self.bookings = BookingRepository(session)
        self.cabs = CabRepository(session)
        self.users = UserRepository(session)
        self.atomic_claim = atomic_claim
        self.geodesic = geodesic
        self.rng = rng

    async def _allocate(self, cab_type: CabType) -> CabModel:
        try:
            if self.atomic_claim:
                return await self.cabs.claim_available(cab_type)
            return await self.cabs.find_or_create_available(cab_type)
        except ValidationError as exc:
            raise AllocationFailed(
                f"Unable to book {cab_type.value} cab. Please try another type."
            ) from exc

    async def create_booking(
        self,
        user_id: Optional[str],
        *,
        pickup_location: str,
        dropoff_location: str,
        cab_type: Union[CabType, str],
        pickup_latitude: Optional[str] = None,
        pickup_longitude: Optional[str] = None,
        dropoff_latitude: Optional[str] = None,
        dropoff_longitude: Optional[str] = None,
    ) -> BookingModel:
        """
        Book a cab of *cab_type* for the rider.

        Raises:
            ValidationError: blank locations or unknown cab type
            Unauthenticated: no rider behind *user_id*
            AllocationFailed: the fleet could not resolve the type
        """
        if not (pickup_location and pickup_location.strip()):
            raise ValidationError("Pickup location is required.")
        if not (dropoff_location and dropoff_location.strip()):
            raise ValidationError("Dropoff location is required.")
        parsed_type = parse_cab_type(cab_type)
        if parsed_type is None:
            raise ValidationError(f"Unknown cab type: {cab_type}")

        if not user_id:
            raise Unauthenticated()
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise Unauthenticated()

        cab = await self._allocate(parsed_type)
        cab_snapshot = CabSnapshot.of(cab)

        distance = estimate_distance(
            pickup_latitude,
            pickup_longitude,
            dropoff_latitude,
            dropoff_longitude,
            geodesic=self.geodesic,
            rng=self.rng,
        )
        fare = estimate_fare(distance, parsed_type)

        booking = await self.bookings.add(
            BookingModel(
                pickup_location=pickup_location,
                dropoff_location=dropoff_location,
                pickup_latitude=pickup_latitude,
                pickup_longitude=pickup_longitude,
                dropoff_latitude=dropoff_latitude,
                dropoff_longitude=dropoff_longitude,
                cab_id=cab.id,
                cab=cab_snapshot.as_dict(),
                cab_type=parsed_type.value,
                distance=distance,
                fare=fare,
                status=BookingStatus.PENDING,
                booking_time=datetime.now(timezone.utc),
                user_id=user.id,
                rider=RiderSnapshot.of(user).as_dict(),
            )
        )

        if not self.atomic_claim:
            await self.cabs.set_availability(cab.id, False)

        logger.info(
            "Booking %s created: %s cab %s, %.2f km, fare %s",
            booking.id, parsed_type.value, cab.id, distance, fare,
        )
        return booking

    async def get_booking(self, user_id: Optional[str], booking_id: str) -> BookingModel:
        if not user_id:
            raise Unauthenticated()
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None or booking.user_id != user_id:
            raise NotFound("Booking not found")
        return booking

    async def cancel_booking(self, user_id: Optional[str], booking_id: str) -> BookingModel:
        """
        Cancel a Pending or Confirmed booking and release its cab.

        Any other status is left untouched and returned as-is (no error).
        """
        booking = await self.get_booking(user_id, booking_id)
        if not is_cancellable(booking.status):
            logger.info(
                "Cancel of booking %s ignored (status %s)",
                booking.id, BookingStatus(booking.status).value,
            )
            return booking

        check_transition(booking.status, BookingStatus.CANCELLED)
        booking.status = BookingStatus.CANCELLED

        if booking.cab_id:
            released = await self.cabs.set_availability(booking.cab_id, True)
            if not released:
                logger.warning(
                    "Cab %s of booking %s not found on release",
                    booking.cab_id, booking.id,
                )

        await self.bookings.update(booking)
        logger.info("Booking %s cancelled", booking.id)
        return booking

    async def get_user_bookings(self, user_id: Optional[str]) -> list[BookingModel]:
        if not user_id:
            raise Unauthenticated()
        return await self.bookings.get_user_bookings(user_id)

    async def dashboard(
        self, user_id: Optional[str], now: Optional[datetime] = None
    ) -> DashboardSummary:
        """Statistics over the rider's non-cancelled bookings."""
        now = now or datetime.now(timezone.utc)
        bookings = await self.get_user_bookings(user_id)
        active = [
            b for b in bookings if BookingStatus(b.status) != BookingStatus.CANCELLED
        ]
        this_month = [
            b
            for b in active
            if b.booking_time is not None
            and b.booking_time.month == now.month
            and b.booking_time.year == now.year
        ]
        return DashboardSummary(
            total_rides=len(this_month),
            total_spent=sum((Decimal(b.fare) for b in this_month), Decimal("0")),
            recent_bookings=active[:5],
            all_bookings=active,
        )
