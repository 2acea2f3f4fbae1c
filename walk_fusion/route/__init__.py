"""Route simplification and spline smoothing for finished sessions."""

from .preprocessing import reproject_to_local_crs, simplify_points, simplify_route
from .smoother import RouteSmoother
from .spline import interpolate_catmull_rom, interpolate_linear

__all__ = [
    "RouteSmoother",
    "interpolate_catmull_rom",
    "interpolate_linear",
    "reproject_to_local_crs",
    "simplify_points",
    "simplify_route",
]
