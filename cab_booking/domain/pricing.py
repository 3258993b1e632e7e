"""
Fare Estimator
==============

Formula
-------
Fare = Base_Fare(cab_type) + Distance x Rate_Per_KM(cab_type)

| type    | base | rate / km |
|---------|------|-----------|
| Mini    | 25   | 12        |
| Sedan   | 35   | 15        |
| SUV     | 50   | 20        |
| Luxury  | 80   | 30        |
| unknown | 30   | 13        |

Fares are ``Decimal`` and keep full precision; rounding (half-up, 2 dp)
happens only when a fare is presented.

Complexity: O(1) per fare.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .enums import CabType


@dataclass(frozen=True)
class FareRate:
    base: Decimal
    per_km: Decimal

    def fare_for(self, distance_km: float) -> Decimal:
        return self.base + Decimal(repr(float(distance_km))) * self.per_km


FARE_TABLE: dict[CabType, FareRate] = {
    CabType.MINI: FareRate(Decimal("25"), Decimal("12")),
    CabType.SEDAN: FareRate(Decimal("35"), Decimal("15")),
    CabType.SUV: FareRate(Decimal("50"), Decimal("20")),
    CabType.LUXURY: FareRate(Decimal("80"), Decimal("30")),
}

DEFAULT_RATE = FareRate(Decimal("30"), Decimal("13"))

CENTS = Decimal("0.01")


def rate_for(cab_type: Union[CabType, str]) -> FareRate:
    """Look up the rate card; unknown types fall back to ``DEFAULT_RATE``."""
    try:
        key = CabType(cab_type)
    except ValueError:
        return DEFAULT_RATE
    return FARE_TABLE.get(key, DEFAULT_RATE)


def estimate_fare(distance_km: float, cab_type: Union[CabType, str]) -> Decimal:
    return rate_for(cab_type).fare_for(distance_km)


def round_fare(amount: Decimal) -> Decimal:
    """Presentation rounding: half-up to two decimal places."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
