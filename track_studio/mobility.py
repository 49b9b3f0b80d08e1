"""Motion math between two consecutive points.

Every helper degrades to ``0.0`` when its inputs are missing instead of
raising, so metric computation never aborts on partial data.
"""

from __future__ import annotations

import math
from typing import Optional

from .geometry.models import Point

_EARTH_RADIUS_M = 6_371_000.0


def distance(start: Optional[Point], end: Optional[Point]) -> float:
    """Great-circle distance in metres (spherical earth, haversine)."""

    if start is None or end is None:
        return 0.0
    lat1_rad = math.radians(start.latitude)
    lat2_rad = math.radians(end.latitude)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = math.radians(end.longitude - start.longitude)
    sin_half_lat = math.sin(delta_lat / 2.0)
    sin_half_lon = math.sin(delta_lon / 2.0)
    a = sin_half_lat**2 + math.cos(lat1_rad) * math.cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return _EARTH_RADIUS_M * c


def elevation_delta(start: Optional[Point], end: Optional[Point]) -> float:
    """Altitude difference ``end - start`` in metres.

    A missing altitude on either side yields 0.0 rather than None. This can
    hide a gap between enriched and non-enriched points.
    """

    if start is None or end is None:
        return 0.0
    if start.altitude is None or end.altitude is None:
        return 0.0
    return end.altitude - start.altitude


def duration(start: Optional[Point], end: Optional[Point]) -> float:
    """Absolute time between the two points in seconds."""

    if start is None or end is None:
        return 0.0
    if start.timestamp is None or end.timestamp is None:
        return 0.0
    try:
        delta = end.timestamp - start.timestamp
    except TypeError:
        # Mixed naive / aware stamps: compare the wall clock values.
        delta = end.timestamp.replace(tzinfo=None) - start.timestamp.replace(
            tzinfo=None
        )
    return abs(delta.total_seconds())


def speed(distance_m: float, duration_s: float) -> float:
    """Speed in m/s, 0.0 when no time elapsed."""

    if not duration_s:
        return 0.0
    return distance_m / duration_s


def pace(distance_m: float, duration_s: float) -> float:
    """Pace in s/m, 0.0 when no distance was covered."""

    if not distance_m:
        return 0.0
    return duration_s / distance_m


__all__ = ["distance", "elevation_delta", "duration", "speed", "pace"]
