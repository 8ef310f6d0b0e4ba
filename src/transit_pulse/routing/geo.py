"""
Geo Utilities
=============

Great-circle distance and travel time estimates.

All coordinates are [lng, lat] in degrees.
"""

import math
from typing import Sequence

from transit_pulse.crowd.density import round_half_up
from transit_pulse.errors import InvalidInput


EARTH_RADIUS_KM = 6371.0


def validate_coordinates(coordinates: Sequence[float]) -> None:
    """
    Check a [lng, lat] pair.

    Raises:
        InvalidInput: If the pair is malformed or out of range
    """
    if coordinates is None or len(coordinates) != 2:
        raise InvalidInput(f"coordinates must be [lng, lat], got {coordinates!r}")
    lng, lat = coordinates
    if not -180.0 <= lng <= 180.0 or not -90.0 <= lat <= 90.0:
        raise InvalidInput(f"coordinates out of range: {coordinates!r}")


def haversine_km(a: Sequence[float], b: Sequence[float]) -> float:
    """Great-circle distance in kilometers between two [lng, lat] points."""
    lng1, lat1 = a
    lng2, lat2 = b
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    h = (
        math.sin(d_lat / 2) ** 2 +
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
        math.sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def eta_minutes(distance_km: float, average_speed_kmh: float = 30.0) -> int:
    """Travel time in whole minutes at a constant average speed, rounded half up."""
    if average_speed_kmh <= 0:
        raise InvalidInput("average_speed_kmh must be positive")
    return round_half_up(distance_km * 60 / average_speed_kmh)
