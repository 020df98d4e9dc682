"""Great-circle distance and display helpers.

Distances use the haversine formula on a spherical Earth; no ellipsoidal
correction is applied. Results are in meters.
"""

from __future__ import annotations

import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_METERS


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in degrees.

    >>> round(distance_meters(0.0, 0.0, 0.0, 1.0))
    111195
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def format_location(lat: Optional[float], lon: Optional[float]) -> str:
    if lat is None or lon is None:
        return "Location not available"
    return f"{lat:.6f}, {lon:.6f}"


def maps_link(lat: Optional[float], lon: Optional[float]) -> Optional[str]:
    if lat is None or lon is None:
        return None
    return f"https://www.google.com/maps?q={lat},{lon}"
