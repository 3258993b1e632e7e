"""
SQLAlchemy ORM models.

Tables
------
* ``users``     -- registered riders
* ``cabs``      -- the fleet; one availability flag per vehicle
* ``bookings``  -- ride requests with embedded cab / rider snapshots
* ``payments``  -- payment attempts with embedded booking / rider snapshots

Snapshots are JSON copies taken at write time, not live references.

Indexes
-------
* **B-Tree** on ``(cab_type, is_available)`` for allocation, on
  ``user_id`` / ``status`` / ``booking_time`` for rider history, and on
  ``booking_id`` for payment look-ups.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)

from .database import Base
from cab_booking.domain.enums import (
    BookingStatus,
    CabType,
    PaymentMethod,
    PaymentStatus,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    # Persist the display values ("Mini", "Pending") rather than member names.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    registration_date = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )


class CabModel(Base):
    __tablename__ = "cabs"

    id = Column(String(36), primary_key=True, default=_new_id)
    cab_type = Column(_enum(CabType, "cabtype"), nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_cabs_type_available", "cab_type", "is_available"),
    )


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=_new_id)
    pickup_location = Column(String(255), nullable=False)
    dropoff_location = Column(String(255), nullable=False)

    # Free text as submitted; never parsed at rest
    pickup_latitude = Column(String(64), nullable=True)
    pickup_longitude = Column(String(64), nullable=True)
    dropoff_latitude = Column(String(64), nullable=True)
    dropoff_longitude = Column(String(64), nullable=True)

    cab_id = Column(String(36), ForeignKey("cabs.id"), nullable=True)
    cab = Column(JSON, nullable=True)
    cab_type = Column(String(20), nullable=False)
    distance = Column(Float, nullable=False)
    fare = Column(Numeric(asdecimal=True), nullable=False)
    status = Column(
        _enum(BookingStatus, "bookingstatus"),
        default=BookingStatus.PENDING,
        nullable=False,
    )
    booking_time = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    rider = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_bookings_user", "user_id"),
        Index("idx_bookings_status", "status"),
        Index("idx_bookings_time", "booking_time"),
    )


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False)
    booking = Column(JSON, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    rider = Column(JSON, nullable=True)
    amount = Column(Numeric(asdecimal=True), nullable=False)
    method = Column(_enum(PaymentMethod, "paymentmethod"), nullable=False)
    status = Column(
        _enum(PaymentStatus, "paymentstatus"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    payment_date = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    transaction_id = Column(String(100), nullable=True)
    payment_details = Column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_payments_booking", "booking_id"),
        Index("idx_payments_user", "user_id"),
    )
