"""Projection and simplification of a recorded route before spline fitting."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer
from shapely.geometry import LineString

from ..models import LatLon

MetricArray = NDArray[np.float64]

# Simplified vertices are matched back to the projected input within this slack.
_VERTEX_MATCH_TOLERANCE_M = 1e-6


def reproject_to_local_crs(
    points: Sequence[LatLon],
) -> Tuple[MetricArray, Transformer]:
    """Project lat/lon points into a local metric coordinate system."""

    if not points:
        raise ValueError("Cannot reproject an empty point collection")
    transformer = _build_local_transformer(points)
    metric = _project_points(points, transformer)
    return metric, transformer


def simplify_points(
    points: Iterable[Sequence[float]], tolerance_m: float
) -> MetricArray:
    """Simplify metric coordinates while preserving endpoints and overall shape."""

    array = _as_metric_array(points)
    if len(array) < 3 or tolerance_m <= 0:
        return array
    line = LineString(array)
    simplified = line.simplify(tolerance_m, preserve_topology=False)
    return _as_metric_array(simplified.coords)


def simplify_route(points: Sequence[LatLon], tolerance_m: float) -> List[LatLon]:
    """Return the subset of ``points`` kept by Douglas-Peucker in metric space.

    The returned coordinates are the original lat/lon values (never
    round-tripped through the projection), so the first and last points are
    reproduced exactly.
    """

    if len(points) < 3 or tolerance_m <= 0:
        return list(points)
    metric, _ = reproject_to_local_crs(points)
    if not np.all(np.isfinite(metric)):
        raise ValueError("Projected route contains non-finite coordinates")
    simplified = simplify_points(metric, tolerance_m)
    indices = _match_vertex_indices(metric, simplified)
    if indices[0] != 0:
        indices.insert(0, 0)
    if indices[-1] != len(points) - 1:
        indices.append(len(points) - 1)
    return [points[index] for index in indices]


def _match_vertex_indices(original: MetricArray, simplified: MetricArray) -> List[int]:
    """Map each simplified vertex onto its index in ``original`` (in order)."""

    indices: List[int] = []
    cursor = 0
    count = len(original)
    for vertex in simplified:
        while cursor < count and not np.allclose(
            original[cursor], vertex, rtol=0.0, atol=_VERTEX_MATCH_TOLERANCE_M
        ):
            cursor += 1
        if cursor >= count:
            raise ValueError("Simplified vertex does not belong to the input route")
        indices.append(cursor)
        cursor += 1
    return indices


def _build_local_transformer(points: Sequence[LatLon]) -> Transformer:
    """Build an azimuthal equidistant transformer centred on the first point.

    Centring on a route point keeps distances metric even for routes that
    cross the antimeridian, where a mean-longitude UTM zone would not.
    """

    lat0, lon0 = points[0]
    target_crs = CRS.from_dict(
        {
            "proj": "aeqd",
            "lat_0": float(lat0),
            "lon_0": float(lon0),
            "datum": "WGS84",
            "units": "m",
        }
    )
    return Transformer.from_crs(CRS.from_epsg(4326), target_crs, always_xy=True)


def _project_points(points: Sequence[LatLon], transformer: Transformer) -> MetricArray:
    """Project lat/lon pairs through an existing transformer."""

    if not points:
        return np.empty((0, 2), dtype=float)
    lats = np.asarray([pt[0] for pt in points], dtype=float)
    lons = np.asarray([pt[1] for pt in points], dtype=float)
    xs, ys = transformer.transform(lons, lats)
    return np.column_stack((xs, ys)).astype(float, copy=False)


def _as_metric_array(points: Iterable[Sequence[float]]) -> MetricArray:
    """Convert an arbitrary iterable of 2D coordinates into a float64 array."""

    array = np.asarray(list(points), dtype=float)
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError("Expected a sequence of 2D coordinates")
    return array


__all__ = ["reproject_to_local_crs", "simplify_points", "simplify_route"]
