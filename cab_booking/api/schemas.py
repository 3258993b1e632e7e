"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from cab_booking.domain.enums import (
    BookingStatus,
    CabType,
    PaymentMethod,
    PaymentStatus,
)
from cab_booking.domain.pricing import round_fare

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    remember_me: bool = False


class BookingCreateRequest(BaseModel):
    pickup_location: str = Field(..., min_length=1, max_length=255)
    dropoff_location: str = Field(..., min_length=1, max_length=255)
    cab_type: CabType
    # Free text; only read when geodesic distance is enabled
    pickup_latitude: Optional[str] = Field(None, max_length=64)
    pickup_longitude: Optional[str] = Field(None, max_length=64)
    dropoff_latitude: Optional[str] = Field(None, max_length=64)
    dropoff_longitude: Optional[str] = Field(None, max_length=64)


class PaymentRequest(BaseModel):
    booking_id: str
    payment_method: PaymentMethod
    amount: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Defaults to the booking fare; must match it when given.",
    )
    card_number: Optional[str] = Field(None, max_length=32)
    card_holder_name: Optional[str] = Field(None, max_length=100)
    expiry_date: Optional[str] = Field(None, max_length=7)
    cvv: Optional[str] = Field(None, max_length=4)
    upi_id: Optional[str] = Field(None, max_length=100)
    wallet_type: Optional[str] = Field(None, max_length=50)


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    registration_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    token: str
    user: UserResponse


class RiderSnapshotResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str


class CabResponse(BaseModel):
    id: str
    cab_type: CabType
    is_available: bool

    model_config = {"from_attributes": True}


class BookingSnapshotResponse(BaseModel):
    id: str
    pickup_location: str
    dropoff_location: str
    cab_id: Optional[str] = None
    cab_type: str
    distance: float
    fare: Decimal
    status: str
    booking_time: Optional[str] = None

    @field_serializer("fare")
    def _present_fare(self, fare: Decimal) -> Decimal:
        return round_fare(fare)


class BookingResponse(BaseModel):
    id: str
    pickup_location: str
    dropoff_location: str
    pickup_latitude: Optional[str] = None
    pickup_longitude: Optional[str] = None
    dropoff_latitude: Optional[str] = None
    dropoff_longitude: Optional[str] = None
    cab_id: Optional[str] = None
    cab: Optional[CabResponse] = None
    cab_type: str
    distance: float
    fare: Decimal
    status: BookingStatus
    booking_time: Optional[datetime] = None
    user_id: str
    rider: Optional[RiderSnapshotResponse] = None

    model_config = {"from_attributes": True}

    @field_serializer("fare")
    def _present_fare(self, fare: Decimal) -> Decimal:
        return round_fare(fare)


class PaymentResponse(BaseModel):
    id: str
    booking_id: str
    booking: Optional[BookingSnapshotResponse] = None
    user_id: str
    rider: Optional[RiderSnapshotResponse] = None
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    payment_date: Optional[datetime] = None
    transaction_id: Optional[str] = None
    payment_details: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_serializer("amount")
    def _present_amount(self, amount: Decimal) -> Decimal:
        return round_fare(amount)


class PaymentPageResponse(BaseModel):
    booking: BookingResponse
    amount: Decimal
    completed_payment: Optional[PaymentResponse] = None

    model_config = {"from_attributes": True}

    @field_serializer("amount")
    def _present_amount(self, amount: Decimal) -> Decimal:
        return round_fare(amount)


class DashboardResponse(BaseModel):
    total_rides: int
    total_spent: Decimal
    recent_bookings: list[BookingResponse] = []
    all_bookings: list[BookingResponse] = []

    model_config = {"from_attributes": True}

    @field_serializer("total_spent")
    def _present_total(self, total: Decimal) -> Decimal:
        return round_fare(total)


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


class PaymentFailedResponse(ErrorResponse):
    payment_id: str
