"""Sensor-fusion core for walk tracking."""

from .distance import HybridDistanceEstimator
from .errors import NumericFaultError, SessionStateError, WalkFusionError
from .filters import (
    AccuracyGate,
    LiveFilterChain,
    PlausibilityGate,
    RecursiveNoiseFilter,
)
from .models import (
    Accepted,
    ActivityType,
    GeoFix,
    MovementState,
    Rejected,
    RejectionReason,
    SmoothedRoute,
    StepValidationInput,
    StepValidationResult,
    WalkSessionBuffer,
)
from .route import RouteSmoother
from .step_validator import StepMotionValidator
from .tracker import SessionSummary, WalkTracker

__all__ = [
    "Accepted",
    "AccuracyGate",
    "ActivityType",
    "GeoFix",
    "HybridDistanceEstimator",
    "LiveFilterChain",
    "MovementState",
    "NumericFaultError",
    "PlausibilityGate",
    "RecursiveNoiseFilter",
    "Rejected",
    "RejectionReason",
    "RouteSmoother",
    "SessionStateError",
    "SessionSummary",
    "SmoothedRoute",
    "StepMotionValidator",
    "StepValidationInput",
    "StepValidationResult",
    "WalkFusionError",
    "WalkSessionBuffer",
    "WalkTracker",
]
