"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes the
generic document-store contract (``get_by_id``, ``get_all``, ``find``,
``add``, ``update``, ``delete``) plus domain-relevant queries.

Read paths fill an empty embedded snapshot from the live record without
marking the row dirty, so the back-fill is never written.
"""

from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar, Union

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from .models import BookingModel, CabModel, PaymentModel, UserModel
from cab_booking.domain.entities import BookingSnapshot, CabSnapshot, RiderSnapshot
from cab_booking.domain.enums import (
    ACTIVE_BOOKING_STATUSES,
    BookingStatus,
    CabType,
    PaymentStatus,
    parse_cab_type,
)
from cab_booking.domain.errors import ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# Seed set created on first start: 3 Mini, 3 Sedan, 2 SUV, 2 Luxury.
INITIAL_FLEET: dict[CabType, int] = {
    CabType.MINI: 3,
    CabType.SEDAN: 3,
    CabType.SUV: 2,
    CabType.LUXURY: 2,
}

# Conditional-update attempts before a claim falls back to a new cab.
MAX_CLAIM_ATTEMPTS = 5


class _Repository(Generic[ModelT]):
    model: type

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, entity_id: str) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def get_all(self) -> list[ModelT]:
        result = await self.session.execute(select(self.model))
        return list(result.scalars().all())

    async def find(self, *criteria) -> list[ModelT]:
        result = await self.session.execute(select(self.model).where(*criteria))
        return list(result.scalars().all())

    async def add(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: str) -> None:
        await self.session.execute(
            delete(self.model).where(self.model.id == entity_id)
        )


class UserRepository(_Repository[UserModel]):
    model = UserModel

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalars().first()

    async def exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None


class CabRepository(_Repository[CabModel]):
    model = CabModel

    @staticmethod
    def _require_type(cab_type: Union[CabType, str]) -> CabType:
        parsed = parse_cab_type(cab_type)
        if parsed is None:
            raise ValidationError(f"Unknown cab type: {cab_type}")
        return parsed

    def _available_query(self, cab_type: CabType):
        return (
            select(CabModel)
            .where(CabModel.cab_type == cab_type, CabModel.is_available.is_(True))
            .order_by(CabModel.created_at, CabModel.id)
        )

    async def get_available(self) -> list[CabModel]:
        result = await self.session.execute(
            select(CabModel).where(CabModel.is_available.is_(True))
        )
        return list(result.scalars().all())

    async def get_available_by_type(self, cab_type: Union[CabType, str]) -> list[CabModel]:
        parsed = parse_cab_type(cab_type)
        if parsed is None:
            return []
        result = await self.session.execute(self._available_query(parsed))
        return list(result.scalars().all())

    async def count_available(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(CabModel)
            .where(CabModel.is_available.is_(True))
        )
        return result.scalar() or 0

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(CabModel)
        )
        return result.scalar() or 0

    async def find_or_create_available(self, cab_type: Union[CabType, str]) -> CabModel:
        """
        First available cab of *cab_type*, or a brand-new available one.

        Read-only with respect to existing cabs: the caller flips
        availability afterwards, so two concurrent callers can both be
        handed the same cab.
        """
        parsed = self._require_type(cab_type)
        result = await self.session.execute(self._available_query(parsed).limit(1))
        cab = result.scalars().first()
        if cab is not None:
            return cab

        cab = await self.add(CabModel(cab_type=parsed, is_available=True))
        logger.info("No available %s cab; created %s", parsed.value, cab.id)
        return cab

    async def set_availability(self, cab_id: str, available: bool) -> bool:
        """Unconditional write.  Returns False when *cab_id* is unknown."""
        result = await self.session.execute(
            update(CabModel)
            .where(CabModel.id == cab_id)
            .values(is_available=available)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount > 0

    async def _next_candidate_id(self, cab_type: CabType) -> Optional[str]:
        result = await self.session.execute(
            self._available_query(cab_type).with_only_columns(CabModel.id).limit(1)
        )
        return result.scalar()

    async def claim_available(self, cab_type: Union[CabType, str]) -> CabModel:
        """
        Atomically take one available cab of *cab_type* out of the pool.

        Each attempt is a conditional ``UPDATE ... WHERE is_available``;
        losing a race on one candidate moves on to the next.  When nothing
        is claimable a new cab is inserted already unavailable.
        """
        parsed = self._require_type(cab_type)
        for _ in range(MAX_CLAIM_ATTEMPTS):
            candidate_id = await self._next_candidate_id(parsed)
            if candidate_id is None:
                break
            claimed = await self.session.execute(
                update(CabModel)
                .where(CabModel.id == candidate_id, CabModel.is_available.is_(True))
                .values(is_available=False)
                .execution_options(synchronize_session="evaluate")
            )
            if claimed.rowcount == 1:
                return await self.get_by_id(candidate_id)
            logger.debug("Lost claim on cab %s; retrying", candidate_id)

        cab = await self.add(CabModel(cab_type=parsed, is_available=False))
        logger.info("No claimable %s cab; created %s", parsed.value, cab.id)
        return cab

    async def bootstrap_fleet(self) -> int:
        """Insert the seed fleet if, and only if, there are no cabs yet."""
        if await self.count() > 0:
            return 0
        cabs = [
            CabModel(cab_type=cab_type, is_available=True)
            for cab_type, n in INITIAL_FLEET.items()
            for _ in range(n)
        ]
        self.session.add_all(cabs)
        await self.session.flush()
        logger.info("Seeded fleet with %d cabs", len(cabs))
        return len(cabs)


class BookingRepository(_Repository[BookingModel]):
    model = BookingModel

    async def _load_related(self, bookings: list[BookingModel]) -> list[BookingModel]:
        for booking in bookings:
            if booking.cab is None and booking.cab_id:
                cab = await self.session.get(CabModel, booking.cab_id)
                if cab is not None:
                    set_committed_value(booking, "cab", CabSnapshot.of(cab).as_dict())
            if booking.rider is None and booking.user_id:
                user = await self.session.get(UserModel, booking.user_id)
                if user is not None:
                    set_committed_value(
                        booking, "rider", RiderSnapshot.of(user).as_dict()
                    )
        return bookings

    async def _list(self, query) -> list[BookingModel]:
        result = await self.session.execute(query)
        return await self._load_related(list(result.scalars().all()))

    async def get_by_id(self, booking_id: str) -> Optional[BookingModel]:
        booking = await self.session.get(BookingModel, booking_id)
        if booking is not None:
            await self._load_related([booking])
        return booking

    async def get_all(self) -> list[BookingModel]:
        return await self._list(select(BookingModel))

    async def find(self, *criteria) -> list[BookingModel]:
        return await self._list(select(BookingModel).where(*criteria))

    async def confirm_if_pending(self, booking_id: str) -> bool:
        """
        Conditional ``Pending -> Confirmed``.  Returns False when the row has
        moved on (e.g. a concurrent cancel); in-session copies are not
        synchronised, so callers refresh.
        """
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking_id,
                BookingModel.status == BookingStatus.PENDING,
            )
            .values(status=BookingStatus.CONFIRMED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def get_user_bookings(self, user_id: str) -> list[BookingModel]:
        return await self._list(
            select(BookingModel)
            .where(BookingModel.user_id == user_id)
            .order_by(BookingModel.booking_time.desc())
        )

    async def get_active_bookings(self) -> list[BookingModel]:
        return await self._list(
            select(BookingModel).where(
                BookingModel.status.in_(ACTIVE_BOOKING_STATUSES)
            )
        )

    async def get_bookings_by_status(self, status: BookingStatus) -> list[BookingModel]:
        return await self._list(
            select(BookingModel)
            .where(BookingModel.status == status)
            .order_by(BookingModel.booking_time.desc())
        )

    async def get_recent_bookings(self, count: int = 5) -> list[BookingModel]:
        return await self._list(
            select(BookingModel)
            .order_by(BookingModel.booking_time.desc())
            .limit(count)
        )

    async def get_bookings_with_details(self) -> list[BookingModel]:
        return await self._list(
            select(BookingModel).order_by(BookingModel.booking_time.desc())
        )


class PaymentRepository(_Repository[PaymentModel]):
    model = PaymentModel

    async def _load_related(self, payments: list[PaymentModel]) -> list[PaymentModel]:
        for payment in payments:
            if payment.rider is None and payment.user_id:
                user = await self.session.get(UserModel, payment.user_id)
                if user is not None:
                    set_committed_value(
                        payment, "rider", RiderSnapshot.of(user).as_dict()
                    )
            if payment.booking is None and payment.booking_id:
                booking = await self.session.get(BookingModel, payment.booking_id)
                if booking is not None:
                    set_committed_value(
                        payment, "booking", BookingSnapshot.of(booking).as_dict()
                    )
        return payments

    async def _list(self, query) -> list[PaymentModel]:
        result = await self.session.execute(query)
        return await self._load_related(list(result.scalars().all()))

    async def get_by_id(self, payment_id: str) -> Optional[PaymentModel]:
        payment = await self.session.get(PaymentModel, payment_id)
        if payment is not None:
            await self._load_related([payment])
        return payment

    async def get_all(self) -> list[PaymentModel]:
        return await self._list(select(PaymentModel))

    async def find(self, *criteria) -> list[PaymentModel]:
        return await self._list(select(PaymentModel).where(*criteria))

    async def get_by_booking_id(self, booking_id: str) -> Optional[PaymentModel]:
        payments = await self._list(
            select(PaymentModel)
            .where(PaymentModel.booking_id == booking_id)
            .order_by(PaymentModel.payment_date)
            .limit(1)
        )
        return payments[0] if payments else None

    async def get_completed_for_booking(self, booking_id: str) -> Optional[PaymentModel]:
        payments = await self._list(
            select(PaymentModel)
            .where(
                PaymentModel.booking_id == booking_id,
                PaymentModel.status == PaymentStatus.COMPLETED,
            )
            .limit(1)
        )
        return payments[0] if payments else None

    async def get_user_payments(self, user_id: str) -> list[PaymentModel]:
        return await self._list(
            select(PaymentModel)
            .where(PaymentModel.user_id == user_id)
            .order_by(PaymentModel.payment_date.desc())
        )

    async def get_payments_with_details(self) -> list[PaymentModel]:
        return await self._list(
            select(PaymentModel).order_by(PaymentModel.payment_date.desc())
        )
