"""Domain enumerations and state-transition rules."""

import enum


class CabType(str, enum.Enum):
    MINI = "Mini"
    SEDAN = "Sedan"
    SUV = "SUV"
    LUXURY = "Luxury"


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "InProgress"  # declared, never produced
    COMPLETED = "Completed"  # declared, never produced
    CANCELLED = "Cancelled"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    UPI = "UPI"
    WALLET = "Wallet"
    CASH = "Cash"


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"  # declared, never produced


# Only the transitions some operation actually performs.
BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.IN_PROGRESS: set(),
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Bookings that still hold a cab and count towards rider statistics.
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

CARD_METHODS = (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


def parse_cab_type(value: str) -> CabType | None:
    """Return the ``CabType`` named by *value*, or None if unknown."""
    try:
        return CabType(value)
    except ValueError:
        return None
