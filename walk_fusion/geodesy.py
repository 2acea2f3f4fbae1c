"""Spherical distance and longitude helpers."""

from __future__ import annotations

import math
from typing import Sequence

from .errors import NumericFaultError
from .models import LatLon

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(first: LatLon, second: LatLon) -> float:
    """Return the great-circle distance between two (lat, lon) points in metres."""

    lat1, lon1 = first
    lat2, lon2 = second
    sin = math.sin
    cos = math.cos
    radians = math.radians
    atan2 = math.atan2
    sqrt = math.sqrt
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    a = min(max(a, 0.0), 1.0)
    c = 2.0 * atan2(sqrt(a), sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def path_length_m(points: Sequence[LatLon], min_segment_m: float = 0.0) -> float:
    """Sum consecutive haversine distances, skipping segments below ``min_segment_m``."""

    if len(points) < 2:
        return 0.0
    total = 0.0
    previous = points[0]
    for current in points[1:]:
        distance = haversine_m(previous, current)
        if distance >= min_segment_m:
            total += distance
        previous = current
    return total


def normalize_longitude(lon: float) -> float:
    """Wrap ``lon`` into [-180, 180]."""

    ensure_finite(lon)
    while lon > 180.0:
        lon -= 360.0
    while lon < -180.0:
        lon += 360.0
    return lon


def unwrap_longitude(lon: float, reference: float) -> float:
    """Shift ``lon`` by whole turns until it lies within 180 degrees of ``reference``."""

    ensure_finite(lon, reference)
    while lon - reference > 180.0:
        lon -= 360.0
    while lon - reference < -180.0:
        lon += 360.0
    return lon


def ensure_finite(*values: float) -> None:
    """Raise :class:`NumericFaultError` when any value is NaN or infinite."""

    for value in values:
        if not math.isfinite(value):
            raise NumericFaultError(f"Non-finite value encountered: {value!r}")


__all__ = [
    "EARTH_RADIUS_M",
    "haversine_m",
    "path_length_m",
    "normalize_longitude",
    "unwrap_longitude",
    "ensure_finite",
]
