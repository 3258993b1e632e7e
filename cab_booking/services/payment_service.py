"""
Payment service - creates payment records and drives settlement.

Flow per submission
-------------------
1. Resolve the booking (unknown or foreign -> NotFound).
2. Take the per-booking Redis lock (held elsewhere -> PaymentInProgress).
3. A Completed payment already on record is returned unchanged.
4. Insert a Pending payment and commit it.
5. Settle: cash immediately, digital after the simulated gateway delay.
6. Persist the outcome.  Success confirms the booking only if it is still
   Pending (a cancel that landed during settlement wins); failure leaves it
   Pending and the cab stays allocated.  A retry is a new payment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from cab_booking.config import settings
from cab_booking.domain.entities import (
    BookingSnapshot,
    RiderSnapshot,
    is_cancellable,
)
from cab_booking.domain.enums import BookingStatus, PaymentMethod, PaymentStatus
from cab_booking.domain.errors import (
    NotFound,
    PaymentInProgress,
    Unauthenticated,
    ValidationError,
)
from cab_booking.domain.pricing import round_fare
from cab_booking.domain.settlement import PaymentSimulator, mask_payment_details
from cab_booking.infrastructure.locks import DistributedLock, LockUnavailable
from cab_booking.infrastructure.models import BookingModel, PaymentModel
from cab_booking.infrastructure.repositories import (
    BookingRepository,
    PaymentRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class PaymentPage:
    booking: BookingModel
    amount: Decimal
    completed_payment: Optional[PaymentModel] = None


class PaymentService:
    """Service for payment operations"""

    def __init__(
        self,
        session: AsyncSession,
        simulator: PaymentSimulator,
        redis: Optional[aioredis.Redis] = None,
        lock_ttl_seconds: int = settings.payment_lock_ttl_seconds,
    ):
        self.session = session
        self.simulator = simulator
        self.redis = redis
        self.lock_ttl = lock_ttl_seconds
        self.payments = PaymentRepository(session)
        self.bookings = BookingRepository(session)
        self.users = UserRepository(session)

    async def _owned_booking(self, user_id: Optional[str], booking_id: str) -> BookingModel:
        if not user_id:
            raise Unauthenticated()
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None or booking.user_id != user_id:
            raise NotFound("Booking not found")
        return booking

    async def payment_page(self, user_id: Optional[str], booking_id: str) -> PaymentPage:
        booking = await self._owned_booking(user_id, booking_id)
        completed = await self.payments.get_completed_for_booking(booking.id)
        return PaymentPage(
            booking=booking, amount=Decimal(booking.fare), completed_payment=completed
        )

    async def pay(
        self,
        user_id: Optional[str],
        booking_id: str,
        method: Union[PaymentMethod, str],
        *,
        amount: Optional[Decimal] = None,
        card_number: Optional[str] = None,
        upi_id: Optional[str] = None,
        wallet_type: Optional[str] = None,
    ) -> PaymentModel:
        """
        Pay for a booking.  The returned payment is Completed or Failed,
        or the earlier Completed payment if the booking was already paid.
        """
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Unsupported payment method: {method}") from None

        booking = await self._owned_booking(user_id, booking_id)

        if self.redis is None:
            return await self._pay_locked(
                booking, method, amount, card_number, upi_id, wallet_type
            )

        lock = DistributedLock.for_booking_payment(
            self.redis, booking.id, self.lock_ttl
        )
        try:
            async with lock:
                return await self._pay_locked(
                    booking, method, amount, card_number, upi_id, wallet_type
                )
        except LockUnavailable:
            raise PaymentInProgress(
                "A payment for this booking is already being processed."
            ) from None

    async def _pay_locked(
        self,
        booking: BookingModel,
        method: PaymentMethod,
        amount: Optional[Decimal],
        card_number: Optional[str],
        upi_id: Optional[str],
        wallet_type: Optional[str],
    ) -> PaymentModel:
        existing = await self.payments.get_completed_for_booking(booking.id)
        if existing is not None:
            logger.info(
                "Booking %s already paid by %s", booking.id, existing.id
            )
            return existing

        if not is_cancellable(booking.status):
            raise ValidationError(
                f"Booking in status {BookingStatus(booking.status).value} cannot be paid."
            )
        fare = Decimal(booking.fare)
        if amount is not None and round_fare(Decimal(amount)) != round_fare(fare):
            raise ValidationError(
                f"Amount {amount} does not match the fare {round_fare(fare)}."
            )

        user = await self.users.get_by_id(booking.user_id)
        payment = await self.payments.add(
            PaymentModel(
                booking_id=booking.id,
                booking=BookingSnapshot.of(booking).as_dict(),
                user_id=booking.user_id,
                rider=RiderSnapshot.of(user).as_dict() if user else None,
                amount=fare,
                method=method,
                status=PaymentStatus.PENDING,
                payment_details=mask_payment_details(
                    method.value,
                    card_number=card_number,
                    upi_id=upi_id,
                    wallet_type=wallet_type,
                ),
            )
        )
        await self.session.commit()

        result = await self.simulator.settle(method)
        if result.success:
            payment.status = PaymentStatus.COMPLETED
            payment.transaction_id = result.transaction_id
        else:
            payment.status = PaymentStatus.FAILED
            payment.transaction_id = None
        await self.payments.update(payment)

        if result.success:
            # The booking may have been cancelled while settlement was in
            # flight; only a row that is still Pending gets confirmed.
            confirmed = await self.bookings.confirm_if_pending(booking.id)
            await self.session.refresh(booking)
            if confirmed:
                logger.info(
                    "Payment %s completed (%s) for booking %s",
                    payment.id, method.value, booking.id,
                )
            else:
                logger.warning(
                    "Payment %s completed for booking %s in status %s; "
                    "booking left unchanged",
                    payment.id, booking.id, BookingStatus(booking.status).value,
                )
        else:
            logger.info(
                "Payment %s declined (%s) for booking %s",
                payment.id, method.value, booking.id,
            )

        await self.session.commit()
        return payment

    async def get_payment(self, user_id: Optional[str], payment_id: str) -> PaymentModel:
        if not user_id:
            raise Unauthenticated()
        payment = await self.payments.get_by_id(payment_id)
        if payment is None or payment.user_id != user_id:
            raise NotFound("Payment not found")
        return payment

    async def get_user_payments(self, user_id: Optional[str]) -> list[PaymentModel]:
        if not user_id:
            raise Unauthenticated()
        return await self.payments.get_user_payments(user_id)
