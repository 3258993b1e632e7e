"""
Domain value objects and lifecycle rules.

Patterns used
-------------
- **Snapshot embedding**: bookings and payments carry frozen copies of the
  rider / cab / booking as they were at write time.  Snapshots are never
  kept live; edits to the source record after the snapshot are not
  reflected.
- **State Pattern** on booking status: ``check_transition`` enforces the
  transitions the workflow performs (Pending -> Confirmed | Cancelled,
  Confirmed -> Cancelled).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from .enums import ACTIVE_BOOKING_STATUSES, BOOKING_TRANSITIONS, BookingStatus


class InvalidStateTransition(Exception):
    """Raised when a booking status change violates the state machine."""


def check_transition(current: BookingStatus, new_status: BookingStatus) -> None:
    allowed = BOOKING_TRANSITIONS.get(BookingStatus(current), set())
    if new_status not in allowed:
        raise InvalidStateTransition(
            f"Cannot transition from {current} to {new_status}"
        )


def is_cancellable(status: BookingStatus) -> bool:
    return BookingStatus(status) in ACTIVE_BOOKING_STATUSES


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ── Snapshots ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RiderSnapshot:
    id: str
    first_name: str
    last_name: str
    email: str

    @classmethod
    def of(cls, user) -> "RiderSnapshot":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CabSnapshot:
    id: str
    cab_type: str
    is_available: bool

    @classmethod
    def of(cls, cab) -> "CabSnapshot":
        return cls(
            id=cab.id,
            cab_type=getattr(cab.cab_type, "value", cab.cab_type),
            is_available=bool(cab.is_available),
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BookingSnapshot:
    id: str
    pickup_location: str
    dropoff_location: str
    cab_id: Optional[str]
    cab_type: str
    distance: float
    fare: str  # Decimal as text so the snapshot stays JSON-safe
    status: str
    booking_time: Optional[str]

    @classmethod
    def of(cls, booking) -> "BookingSnapshot":
        return cls(
            id=booking.id,
            pickup_location=booking.pickup_location,
            dropoff_location=booking.dropoff_location,
            cab_id=booking.cab_id,
            cab_type=booking.cab_type,
            distance=booking.distance,
            fare=str(Decimal(booking.fare)),
            status=getattr(booking.status, "value", booking.status),
            booking_time=_iso(booking.booking_time),
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
