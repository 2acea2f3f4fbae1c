"""Classification of pedometer deltas as genuine walking or not.

Rules are evaluated in order and the first match wins:

1. activity-recognition state is not walking/running compatible
2. accelerometer movement state is not walking/running compatible
3. strong acceleration with almost no GPS displacement (phone shake)
4. GPS speed of a vehicle
5. new steps while the recent GPS window stays within a small radius
   (stepping in place)

Anything else is accepted with the reported step delta.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

import numpy as np

from .activity_types import is_ambulatory_activity, is_ambulatory_movement
from .config import (
    STEP_SHAKE_ACCELERATION,
    STEP_SHAKE_MAX_GPS_DISTANCE_M,
    STEP_STATIONARY_MAX_RADIUS_M,
    STEP_STATIONARY_MIN_FIXES,
    STEP_STATIONARY_MIN_SPAN_MS,
    STEP_STATIONARY_WINDOW_MS,
    STEP_VEHICLE_HARD_SPEED_MS,
    STEP_VEHICLE_SPEED_MS,
)
from .geodesy import haversine_m, unwrap_longitude
from .models import (
    Accepted,
    GeoFix,
    Rejected,
    RejectionReason,
    StepValidationInput,
    StepValidationResult,
)

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepValidatorThresholds:
    """Calibration constants for :class:`StepMotionValidator`."""

    shake_acceleration: float = STEP_SHAKE_ACCELERATION
    shake_max_gps_distance_m: float = STEP_SHAKE_MAX_GPS_DISTANCE_M
    vehicle_speed_ms: float = STEP_VEHICLE_SPEED_MS
    vehicle_hard_speed_ms: float = STEP_VEHICLE_HARD_SPEED_MS
    stationary_window_ms: int = STEP_STATIONARY_WINDOW_MS
    stationary_min_span_ms: int = STEP_STATIONARY_MIN_SPAN_MS
    stationary_min_fixes: int = STEP_STATIONARY_MIN_FIXES
    stationary_max_radius_m: float = STEP_STATIONARY_MAX_RADIUS_M


class StepMotionValidator:
    """Stateless, deterministic evaluator of :class:`StepValidationInput`."""

    def __init__(self, thresholds: StepValidatorThresholds | None = None) -> None:
        self.thresholds = thresholds or StepValidatorThresholds()

    def evaluate(self, snapshot: StepValidationInput) -> StepValidationResult:
        reason = self._rejection_reason(snapshot)
        if reason is None:
            return Accepted(snapshot.step_delta)
        _LOG.debug("Rejected step delta %d: %s", snapshot.step_delta, reason.value)
        return Rejected(reason)

    def _rejection_reason(
        self, snapshot: StepValidationInput
    ) -> RejectionReason | None:
        limits = self.thresholds
        if not is_ambulatory_activity(snapshot.activity_type):
            return RejectionReason.INVALID_ACTIVITY_TYPE
        if not is_ambulatory_movement(snapshot.movement_state):
            return RejectionReason.INVALID_MOVEMENT_STATE
        if (
            snapshot.gps_distance < limits.shake_max_gps_distance_m
            and snapshot.acceleration > limits.shake_acceleration
        ):
            return RejectionReason.PHONE_SHAKE
        if snapshot.gps_speed > limits.vehicle_hard_speed_ms or (
            snapshot.gps_speed > limits.vehicle_speed_ms and snapshot.step_delta == 0
        ):
            return RejectionReason.VEHICLE_MOVEMENT
        if snapshot.step_delta > 0 and self._is_stationary(snapshot.locations):
            return RejectionReason.STATIONARY_WALKING
        return None

    def _is_stationary(self, locations: Sequence[GeoFix]) -> bool:
        """Return ``True`` when the trailing fix window shows no real displacement."""

        limits = self.thresholds
        if len(locations) < limits.stationary_min_fixes:
            return False
        newest = locations[-1].timestamp
        window = [
            fix
            for fix in locations
            if newest - fix.timestamp <= limits.stationary_window_ms
        ]
        if len(window) < limits.stationary_min_fixes:
            return False
        if newest - window[0].timestamp < limits.stationary_min_span_ms:
            return False
        return spread_radius_m(window) < limits.stationary_max_radius_m


def spread_radius_m(fixes: Sequence[GeoFix]) -> float:
    """Return the largest distance (metres) of any fix from the window centroid."""

    if not fixes:
        return 0.0
    reference = fixes[0].longitude
    lats = np.asarray([fix.latitude for fix in fixes], dtype=float)
    lons = np.asarray(
        [unwrap_longitude(fix.longitude, reference) for fix in fixes], dtype=float
    )
    centroid = (float(np.mean(lats)), float(np.mean(lons)))
    return max(haversine_m(centroid, (lat, lon)) for lat, lon in zip(lats, lons))


__all__ = ["StepMotionValidator", "StepValidatorThresholds", "spread_radius_m"]
