"""Post-session route smoothing: Douglas-Peucker followed by a Catmull-Rom spline."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Tuple

from ..config import ROUTE_SEGMENTS_PER_INTERVAL, ROUTE_SIMPLIFY_TOLERANCE_M
from ..models import SmoothedRoute, WalkSessionBuffer
from .preprocessing import simplify_route
from .spline import interpolate_catmull_rom

_LOG = logging.getLogger(__name__)

CoordinateLists = Tuple[List[float], List[float]]


class RouteSmoother:
    """Turn the accepted-fix list of a finished session into a presentation route.

    Smoothing is an enhancement: degenerate inputs are returned unchanged and
    any failure inside the pipeline falls back to the unsmoothed input.
    """

    def __init__(
        self,
        simplify_tolerance_m: float = ROUTE_SIMPLIFY_TOLERANCE_M,
        segments_per_interval: int = ROUTE_SEGMENTS_PER_INTERVAL,
    ) -> None:
        self.simplify_tolerance_m = simplify_tolerance_m
        self.segments_per_interval = segments_per_interval

    def smooth(
        self,
        latitudes: Sequence[float],
        longitudes: Sequence[float],
        simplify_tolerance_m: float | None = None,
        segments_per_interval: int | None = None,
    ) -> CoordinateLists:
        """Return smoothed ``(latitudes, longitudes)`` lists."""

        lats = list(latitudes)
        lons = list(longitudes)
        if len(lats) < 2 or len(lats) != len(lons):
            _LOG.warning(
                "Cannot smooth route: %d latitudes, %d longitudes", len(lats), len(lons)
            )
            return lats, lons

        tolerance = (
            self.simplify_tolerance_m
            if simplify_tolerance_m is None
            else simplify_tolerance_m
        )
        segments = (
            self.segments_per_interval
            if segments_per_interval is None
            else segments_per_interval
        )
        try:
            points = [(float(lat), float(lon)) for lat, lon in zip(lats, lons)]
            simplified = simplify_route(points, tolerance)
            _LOG.debug("Simplified route %d -> %d points", len(points), len(simplified))
            smoothed = interpolate_catmull_rom(simplified, segments)
        except Exception:
            _LOG.error("Route smoothing failed, keeping original route", exc_info=True)
            return lats, lons

        _LOG.debug("Smoothed route has %d points", len(smoothed))
        return [pt[0] for pt in smoothed], [pt[1] for pt in smoothed]

    def smooth_route(self, buffer: WalkSessionBuffer) -> SmoothedRoute:
        """Smooth the accepted fixes of a session buffer."""

        lats, lons = self.smooth(buffer.latitudes, buffer.longitudes)
        return SmoothedRoute.from_lists(lats, lons)

    def stats(
        self,
        original_latitudes: Sequence[float],
        smoothed_latitudes: Sequence[float],
    ) -> Dict[str, Any]:
        """Summarise a smoothing run for diagnostics."""

        original_count = len(original_latitudes)
        smoothed_count = len(smoothed_latitudes)
        ratio = smoothed_count / original_count if original_count else 0.0
        return {
            "original_points": original_count,
            "smoothed_points": smoothed_count,
            "compression_ratio": round(ratio, 2),
            "simplify_tolerance_m": self.simplify_tolerance_m,
            "segments_per_interval": self.segments_per_interval,
            "algorithm": "catmull-rom",
        }


__all__ = ["RouteSmoother"]
