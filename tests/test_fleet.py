"""Fleet registry tests: bootstrap, find-or-create, claim, availability flips."""

from __future__ import annotations

import pytest

from cab_booking.domain.enums import CabType
from cab_booking.domain.errors import ValidationError
from cab_booking.infrastructure.models import CabModel
from cab_booking.infrastructure.repositories import INITIAL_FLEET, CabRepository


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_seeds_ten_cabs_by_type(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        assert seeded_fleet == 10
        assert await repo.count() == 10
        for cab_type, expected in INITIAL_FLEET.items():
            cabs = await repo.get_available_by_type(cab_type)
            assert len(cabs) == expected

    @pytest.mark.asyncio
    async def test_second_bootstrap_is_a_no_op(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        assert await repo.bootstrap_fleet() == 0
        assert await repo.count() == 10

    @pytest.mark.asyncio
    async def test_bootstrap_skipped_when_any_cab_exists(self, db_session):
        repo = CabRepository(db_session)
        await repo.add(CabModel(cab_type=CabType.SUV, is_available=False))
        assert await repo.bootstrap_fleet() == 0
        assert await repo.count() == 1


class TestFindOrCreate:
    @pytest.mark.asyncio
    async def test_returns_available_cab_of_type(self, db_session, seeded_fleet):
        cab = await CabRepository(db_session).find_or_create_available("Sedan")
        assert cab.cab_type == CabType.SEDAN
        assert cab.is_available is True

    @pytest.mark.asyncio
    async def test_grows_fleet_when_type_exhausted(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        for cab in await repo.get_available_by_type(CabType.LUXURY):
            await repo.set_availability(cab.id, False)

        created = await repo.find_or_create_available(CabType.LUXURY)
        assert created.is_available is True
        assert await repo.count() == 11

    @pytest.mark.asyncio
    async def test_unknown_type_raises(self, db_session, seeded_fleet):
        with pytest.raises(ValidationError):
            await CabRepository(db_session).find_or_create_available("Rickshaw")

    @pytest.mark.asyncio
    async def test_reads_before_flip_see_the_same_cab(self, db_session, seeded_fleet):
        """Two lookups with no flip in between are handed the same cab."""
        repo = CabRepository(db_session)
        first = await repo.find_or_create_available(CabType.MINI)
        second = await repo.find_or_create_available(CabType.MINI)
        assert first.id == second.id


class TestAvailability:
    @pytest.mark.asyncio
    async def test_flip_removes_cab_from_pool(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        cab = await repo.find_or_create_available(CabType.SUV)
        assert await repo.set_availability(cab.id, False) is True
        assert cab.is_available is False
        remaining = {c.id for c in await repo.get_available_by_type(CabType.SUV)}
        assert cab.id not in remaining
        assert await repo.count_available() == 9

    @pytest.mark.asyncio
    async def test_unknown_cab_id_reports_false(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        assert await repo.set_availability("no-such-cab", True) is False

    @pytest.mark.asyncio
    async def test_get_available_spans_all_types(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        taken = await repo.claim_available(CabType.LUXURY)
        available = await repo.get_available()
        assert len(available) == 9
        assert taken.id not in {c.id for c in available}
        assert {c.cab_type for c in available} == set(CabType)
        assert all(c.is_available for c in available)

    @pytest.mark.asyncio
    async def test_unknown_type_filter_is_empty(self, db_session, seeded_fleet):
        assert await CabRepository(db_session).get_available_by_type("Tuk") == []


class TestClaim:
    @pytest.mark.asyncio
    async def test_claims_hand_out_distinct_cabs(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        ids = [(await repo.claim_available(CabType.MINI)).id for _ in range(3)]
        assert len(set(ids)) == 3
        assert await repo.get_available_by_type(CabType.MINI) == []

    @pytest.mark.asyncio
    async def test_claim_marks_cab_unavailable(self, db_session, seeded_fleet):
        cab = await CabRepository(db_session).claim_available(CabType.SEDAN)
        assert cab.is_available is False

    @pytest.mark.asyncio
    async def test_exhausted_type_creates_unavailable_cab(self, db_session, seeded_fleet):
        repo = CabRepository(db_session)
        for _ in range(INITIAL_FLEET[CabType.SUV]):
            await repo.claim_available(CabType.SUV)

        extra = await repo.claim_available(CabType.SUV)
        assert extra.is_available is False
        assert extra.cab_type == CabType.SUV
        assert await repo.count() == 11

    @pytest.mark.asyncio
    async def test_claim_unknown_type_raises(self, db_session, seeded_fleet):
        with pytest.raises(ValidationError):
            await CabRepository(db_session).claim_available("Hovercraft")
