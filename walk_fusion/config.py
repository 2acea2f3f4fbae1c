"""Central configuration for the walk tracking fusion core.

All values are constants imported by the rest of the package. Each calibration
value can be overridden through an environment variable (optionally via a
local `.env`) so recorded sessions can be replayed with different tuning.
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Live location filters
# ---------------------------------------------------------------------------
# Fixes reporting a larger accuracy radius (metres) are dropped outright.
ACCURACY_MAX_M = _env_float("WALK_ACCURACY_MAX_M", 50.0)

# Process noise of the recursive filter, expected GPS jitter in m/sqrt(s).
KALMAN_PROCESS_NOISE = _env_float("WALK_KALMAN_PROCESS_NOISE", 3.0)

# Highest plausible speed between consecutive accepted fixes (30 m/s = 108 km/h).
SPEED_MAX_MS = _env_float("WALK_SPEED_MAX_MS", 30.0)


# ---------------------------------------------------------------------------
# Hybrid distance estimation
# ---------------------------------------------------------------------------
# GPS segments shorter than this are treated as jitter and not accumulated.
GPS_JITTER_FLOOR_M = _env_float("WALK_GPS_JITTER_FLOOR_M", 5.0)

# Stride used until one has been learned for the session (adult average).
DEFAULT_STRIDE_M = _env_float("WALK_DEFAULT_STRIDE_M", 0.7)

# Weight kept by the previous stride estimate on each EMA update.
STRIDE_EMA_RETAIN = _env_float("WALK_STRIDE_EMA_RETAIN", 0.7)

# Minimum accepted fixes before GPS and step distances are fused.
MIN_FUSION_POINTS = _env_int("WALK_MIN_FUSION_POINTS", 3)

# The latest fix must be at least this accurate (metres) for GPS to be trusted.
GPS_TRUSTED_ACCURACY_M = _env_float("WALK_GPS_TRUSTED_ACCURACY_M", 20.0)

# Relative GPS/step disagreement tolerated before blending the two.
DISTANCE_AGREEMENT_RATIO = _env_float("WALK_DISTANCE_AGREEMENT_RATIO", 0.2)

# GPS share of the blended distance when the two sources disagree.
DISTANCE_GPS_WEIGHT = _env_float("WALK_DISTANCE_GPS_WEIGHT", 0.7)

# Share of the most recent segment in the 3-point speed average.
SPEED_RECENT_WEIGHT = _env_float("WALK_SPEED_RECENT_WEIGHT", 0.7)

# Elapsed time floor (seconds) used when deriving segment speeds.
SPEED_MIN_ELAPSED_S = _env_float("WALK_SPEED_MIN_ELAPSED_S", 0.1)


# ---------------------------------------------------------------------------
# Pedometer step validation
# ---------------------------------------------------------------------------
# Accelerometer magnitude above which a step burst without GPS motion is a shake.
STEP_SHAKE_ACCELERATION = _env_float("WALK_STEP_SHAKE_ACCELERATION", 2.5)
STEP_SHAKE_MAX_GPS_DISTANCE_M = _env_float("WALK_STEP_SHAKE_MAX_GPS_DISTANCE_M", 1.5)

# GPS speed implying a vehicle when the pedometer reports no new steps.
STEP_VEHICLE_SPEED_MS = _env_float("WALK_STEP_VEHICLE_SPEED_MS", 3.5)

# GPS speed implying a vehicle regardless of the pedometer (faster than a sprint).
STEP_VEHICLE_HARD_SPEED_MS = _env_float("WALK_STEP_VEHICLE_HARD_SPEED_MS", 8.0)

# Trailing window inspected for stationary walking.
STEP_STATIONARY_WINDOW_MS = _env_int("WALK_STEP_STATIONARY_WINDOW_MS", 30_000)
STEP_STATIONARY_MIN_SPAN_MS = _env_int("WALK_STEP_STATIONARY_MIN_SPAN_MS", 20_000)
STEP_STATIONARY_MIN_FIXES = _env_int("WALK_STEP_STATIONARY_MIN_FIXES", 3)
STEP_STATIONARY_MAX_RADIUS_M = _env_float("WALK_STEP_STATIONARY_MAX_RADIUS_M", 10.0)


# ---------------------------------------------------------------------------
# Movement state stabilisation
# ---------------------------------------------------------------------------
# A changed accelerometer state must persist this long before it is adopted.
MOVEMENT_STABLE_DURATION_MS = _env_int("WALK_MOVEMENT_STABLE_DURATION_MS", 3000)


# ---------------------------------------------------------------------------
# Route smoothing
# ---------------------------------------------------------------------------
# Douglas-Peucker tolerance (metres) applied before spline fitting.
ROUTE_SIMPLIFY_TOLERANCE_M = _env_float("WALK_ROUTE_SIMPLIFY_TOLERANCE_M", 5.0)

# Interpolated points generated between each pair of control points.
ROUTE_SEGMENTS_PER_INTERVAL = _env_int("WALK_ROUTE_SEGMENTS_PER_INTERVAL", 8)

# Disable to store the filtered route as-is (useful when debugging filters).
ROUTE_SMOOTHING_ENABLED = _env_bool("WALK_ROUTE_SMOOTHING_ENABLED", True)


# ---------------------------------------------------------------------------
# Finished session validation
# ---------------------------------------------------------------------------
SESSION_MIN_STRIDE_M = _env_float("WALK_SESSION_MIN_STRIDE_M", 0.2)
SESSION_MAX_STRIDE_M = _env_float("WALK_SESSION_MAX_STRIDE_M", 2.0)
SESSION_MAX_SPEED_KMH = _env_float("WALK_SESSION_MAX_SPEED_KMH", 20.0)
SESSION_MAX_STEPS = _env_int("WALK_SESSION_MAX_STEPS", 100_000)

# Below this total distance (metres) the session shows no meaningful movement.
SESSION_MEANINGFUL_DISTANCE_M = _env_float("WALK_SESSION_MEANINGFUL_DISTANCE_M", 10.0)
SESSION_STATIONARY_MAX_STRIDE_M = _env_float(
    "WALK_SESSION_STATIONARY_MAX_STRIDE_M", 0.3
)
SESSION_STATIONARY_MIN_STEPS = _env_int("WALK_SESSION_STATIONARY_MIN_STEPS", 300)
SESSION_SHAKE_MAX_SPEED_KMH = _env_float("WALK_SESSION_SHAKE_MAX_SPEED_KMH", 1.0)
SESSION_SHAKE_MAX_STRIDE_M = _env_float("WALK_SESSION_SHAKE_MAX_STRIDE_M", 0.25)
