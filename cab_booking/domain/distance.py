"""
Trip distance estimation.

Assumption
----------
The booking form carries free-text coordinates that are never validated,
so the default estimate is a pseudo-random stand-in in ``[5, 21)`` km that
ignores them entirely.  Setting ``use_geodesic_distance`` switches to the
great-circle (Haversine) distance whenever all four coordinates parse;
otherwise the random stand-in is still used.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
import random
from typing import Optional

EARTH_RADIUS_KM = 6_371.0

MIN_RANDOM_KM = 5
MAX_RANDOM_KM = 20  # inclusive integer part, so results stay below 21


def random_distance_km(rng: Optional[random.Random] = None) -> float:
    """Integer part in ``[5, 20]`` plus a fraction in ``[0, 1)``."""
    rng = rng or random
    return rng.randint(MIN_RANDOM_KM, MAX_RANDOM_KM) + rng.random()


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def parse_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        parsed = float(value.strip())
    except ValueError:
        return None
    if math.isnan(parsed) or math.isinf(parsed):
        return None
    return parsed


def estimate_distance(
    pickup_lat: Optional[str] = None,
    pickup_lng: Optional[str] = None,
    dropoff_lat: Optional[str] = None,
    dropoff_lng: Optional[str] = None,
    *,
    geodesic: bool = False,
    rng: Optional[random.Random] = None,
) -> float:
    """Distance for a booking; coordinates are only consulted in geodesic mode."""
    if geodesic:
        coords = [
            parse_coordinate(v)
            for v in (pickup_lat, pickup_lng, dropoff_lat, dropoff_lng)
        ]
        if all(c is not None for c in coords):
            return haversine_km(*coords)
    return random_distance_km(rng)
