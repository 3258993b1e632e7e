"""Unit tests for the fare estimator and distance stand-in."""

import random
from decimal import Decimal

import pytest

from cab_booking.domain.distance import (
    estimate_distance,
    haversine_km,
    parse_coordinate,
    random_distance_km,
)
from cab_booking.domain.enums import CabType
from cab_booking.domain.pricing import (
    DEFAULT_RATE,
    estimate_fare,
    rate_for,
    round_fare,
)


class TestFareTable:
    def test_mini_zero_distance_is_base(self):
        assert estimate_fare(0, "Mini") == Decimal("25.00")

    def test_suv_ten_km(self):
        assert estimate_fare(10, "SUV") == Decimal("250.00")  # 50 + 10*20

    def test_sedan_and_luxury(self):
        assert estimate_fare(2, CabType.SEDAN) == Decimal("65")  # 35 + 2*15
        assert estimate_fare(2, CabType.LUXURY) == Decimal("140")  # 80 + 2*30

    @pytest.mark.parametrize("distance", [0, 1.5, 7.25, 20.999])
    def test_unknown_type_uses_default_rate(self, distance):
        expected = Decimal("30") + Decimal(repr(float(distance))) * Decimal("13")
        assert estimate_fare(distance, "unknown-type") == expected
        assert rate_for("unknown-type") is DEFAULT_RATE

    def test_full_precision_is_kept(self):
        fare = estimate_fare(5.123456, "Mini")
        assert fare == Decimal("25") + Decimal("5.123456") * 12
        assert fare != round_fare(fare)


class TestRounding:
    def test_half_up(self):
        assert round_fare(Decimal("10.005")) == Decimal("10.01")
        assert round_fare(Decimal("10.004")) == Decimal("10.00")

    def test_two_places(self):
        assert str(round_fare(Decimal("25"))) == "25.00"


class TestRandomDistance:
    def test_range_with_fixed_seed(self):
        rng = random.Random(1234)
        samples = [random_distance_km(rng) for _ in range(1000)]
        assert all(5 <= d < 21 for d in samples)
        # both ends of the integer range are reachable
        assert min(samples) < 6
        assert max(samples) >= 20

    def test_coordinates_ignored_by_default(self):
        d1 = estimate_distance("19.0", "72.0", "19.0", "72.0", rng=random.Random(5))
        d2 = estimate_distance(None, None, None, None, rng=random.Random(5))
        assert d1 == d2


class TestGeodesicDistance:
    def test_same_point_is_zero(self):
        assert haversine_km(19.0, 72.0, 19.0, 72.0) == 0.0

    def test_symmetric(self):
        d1 = haversine_km(19.0, 72.0, 20.0, 73.0)
        d2 = haversine_km(20.0, 73.0, 19.0, 72.0)
        assert abs(d1 - d2) < 1e-6

    def test_geodesic_mode_uses_coordinates(self):
        d = estimate_distance("19.0896", "72.8656", "19.1176", "72.8490", geodesic=True)
        assert 3.0 < d < 5.0

    def test_geodesic_mode_falls_back_when_unparseable(self):
        d = estimate_distance("north", "72.8", "19.1", "72.8", geodesic=True,
                              rng=random.Random(3))
        assert 5 <= d < 21

    @pytest.mark.parametrize("raw", ["", "abc", "nan", "inf", None])
    def test_parse_coordinate_rejects(self, raw):
        assert parse_coordinate(raw) is None

    def test_parse_coordinate_accepts_padded(self):
        assert parse_coordinate(" 19.5 ") == 19.5
