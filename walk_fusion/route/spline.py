"""Catmull-Rom interpolation of lat/lon control points."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from ..geodesy import ensure_finite, normalize_longitude, unwrap_longitude
from ..models import LatLon


def catmull_rom_weights(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return the (len(t), 4) blend weights applied to P0..P3.

    Expands ``q(t) = 0.5 * (2P1 + (-P0 + P2)t + (2P0 - 5P1 + 4P2 - P3)t^2
    + (-P0 + 3P1 - 3P2 + P3)t^3)`` into one weight per control point.
    """

    t2 = t * t
    t3 = t2 * t
    return 0.5 * np.column_stack(
        (
            -t + 2.0 * t2 - t3,
            2.0 - 5.0 * t2 + 3.0 * t3,
            t + 4.0 * t2 - 3.0 * t3,
            -t2 + t3,
        )
    )


def interpolate_catmull_rom(points: Sequence[LatLon], segments: int) -> List[LatLon]:
    """Interpolate ``segments`` points between each pair of control points.

    End segments reuse the nearest real point as the missing neighbour. The
    curve passes through every control point and each segment ends on its
    exact control point. Exactly two control points fall back to a straight
    line.
    """

    if segments < 1:
        raise ValueError("segments must be at least 1")
    if len(points) < 2:
        return list(points)
    if len(points) == 2:
        return interpolate_linear(points, segments)

    steps = np.arange(1, segments, dtype=float) / segments
    weights = catmull_rom_weights(steps)
    last = len(points) - 1
    smoothed: List[LatLon] = [points[0]]
    for i in range(last):
        p0 = points[i - 1] if i > 0 else points[i]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 <= last else points[i + 1]

        lats = weights @ np.array([p0[0], p1[0], p2[0], p3[0]], dtype=float)
        ref = p1[1]
        lons = weights @ np.array(
            [
                unwrap_longitude(p0[1], ref),
                ref,
                unwrap_longitude(p2[1], ref),
                unwrap_longitude(p3[1], ref),
            ],
            dtype=float,
        )
        for lat, lon in zip(lats.tolist(), lons.tolist()):
            ensure_finite(lat, lon)
            smoothed.append((lat, normalize_longitude(lon)))
        smoothed.append(p2)
    return smoothed


def interpolate_linear(points: Sequence[LatLon], segments: int) -> List[LatLon]:
    """Straight-line interpolation between two points, antimeridian aware."""

    start, end = points[0], points[1]
    end_lon = unwrap_longitude(end[1], start[1])
    smoothed: List[LatLon] = [start]
    for j in range(1, segments):
        fraction = j / segments
        lat = start[0] + (end[0] - start[0]) * fraction
        lon = start[1] + (end_lon - start[1]) * fraction
        ensure_finite(lat, lon)
        smoothed.append((lat, normalize_longitude(lon)))
    smoothed.append(end)
    return smoothed


__all__ = ["catmull_rom_weights", "interpolate_catmull_rom", "interpolate_linear"]
