"""
Domain error taxonomy.

Every workflow failure surfaces as one of these; the API layer maps each
class to an HTTP status (see ``cab_booking.api.app``).
"""

from __future__ import annotations


class CabBookingError(Exception):
    """Base class for all expected workflow failures."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(CabBookingError):
    """Malformed input; no write was performed."""


class Unauthenticated(CabBookingError):
    """No rider identity could be resolved from the session."""

    def __init__(self, message: str = "Login required"):
        super().__init__(message)


class NotFound(CabBookingError):
    """Unknown id or an entity owned by another rider."""


class AllocationFailed(CabBookingError):
    """No cab could be resolved for the requested type."""


class SettlementFailed(CabBookingError):
    """Simulated payment decline; the booking stays Pending."""

    def __init__(self, payment_id: str, message: str = "Payment failed"):
        super().__init__(message)
        self.payment_id = payment_id


class PaymentInProgress(CabBookingError):
    """Another payment submission for the same booking holds the lock."""
