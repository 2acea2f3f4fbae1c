"""Per-session orchestration of the live filters, step validation and fusion.

A :class:`WalkTracker` owns every stateful component of one walking session.
Location fixes run through the live filter chain and, when kept, are
appended to the session buffer. Pedometer readings are turned into deltas,
validated against the latest activity, movement and GPS context, and only
accepted deltas advance the session step count. :meth:`WalkTracker.finish`
freezes the buffer, smooths the route and validates the session totals.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional, Tuple

from .activity_types import parse_activity_type, parse_movement_state
from .config import ROUTE_SMOOTHING_ENABLED
from .distance import HybridDistanceEstimator
from .errors import SessionStateError
from .filters import LiveFilterChain
from .models import (
    Accepted,
    ActivityType,
    GeoFix,
    LatLon,
    MovementState,
    SmoothedRoute,
    StepValidationInput,
    StepValidationResult,
    WalkSessionBuffer,
)
from .movement import MovementStateStabilizer
from .route import RouteSmoother
from .session_validator import SessionMetrics, SessionValidationResult, SessionValidator
from .step_validator import StepMotionValidator

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionSummary:
    """Final output of a walking session handed to persistence."""

    route: SmoothedRoute
    fixes: Tuple[GeoFix, ...]
    total_distance_m: float
    steps: int
    duration_ms: int
    average_step_length_m: float | None
    validation: SessionValidationResult


class WalkTracker:
    def __init__(
        self,
        *,
        chain: LiveFilterChain | None = None,
        step_validator: StepMotionValidator | None = None,
        estimator: HybridDistanceEstimator | None = None,
        smoother: RouteSmoother | None = None,
        session_validator: SessionValidator | None = None,
        stabilizer: MovementStateStabilizer | None = None,
        smoothing_enabled: bool = ROUTE_SMOOTHING_ENABLED,
    ) -> None:
        self.chain = chain or LiveFilterChain()
        self.step_validator = step_validator or StepMotionValidator()
        self.estimator = estimator or HybridDistanceEstimator()
        self.smoother = smoother or RouteSmoother()
        self.session_validator = session_validator or SessionValidator()
        self.stabilizer = stabilizer or MovementStateStabilizer()
        self.smoothing_enabled = smoothing_enabled
        self.buffer = WalkSessionBuffer()

        self.activity_type: ActivityType | None = None
        self.movement_state: MovementState | None = None
        self.acceleration = 0.0
        self._last_raw_steps: int | None = None
        self._first_timestamp: int | None = None
        self._last_timestamp: int | None = None
        self._finished = False

        self.chain.reset()

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def steps(self) -> int:
        """Accepted steps since the session started."""
        return self.buffer.step_count - self.buffer.initial_step_count

    def on_location(self, fix: GeoFix) -> Optional[LatLon]:
        """Filter one raw fix; return the kept coordinate or ``None``."""

        self._ensure_active()
        self._touch(fix.timestamp)
        filtered = self.chain.filter_fix(fix)
        if filtered is None:
            return None
        kept = GeoFix(filtered[0], filtered[1], fix.accuracy, fix.timestamp)
        self.buffer.append(kept)
        return filtered

    def on_activity(self, activity: Any, timestamp: int | None = None) -> ActivityType:
        self._ensure_active()
        if timestamp is not None:
            self._touch(timestamp)
        self.activity_type = parse_activity_type(activity)
        _LOG.debug("Activity state changed to %s", self.activity_type.name)
        return self.activity_type

    def on_acceleration(
        self, magnitude: float, movement_state: Any, timestamp: int
    ) -> MovementState:
        """Record an accelerometer sample; return the stabilised movement state."""

        self._ensure_active()
        self._touch(timestamp)
        self.acceleration = float(magnitude)
        detected = parse_movement_state(movement_state)
        self.movement_state = self.stabilizer.update(detected, timestamp)
        return self.movement_state

    def on_step_count(self, raw_steps: int, timestamp: int) -> StepValidationResult:
        """Validate the delta implied by a cumulative pedometer reading."""

        self._ensure_active()
        self._touch(timestamp)
        if self._last_raw_steps is None:
            self._last_raw_steps = raw_steps
            self.buffer.initial_step_count = raw_steps
            self.buffer.step_count = raw_steps
            self.estimator.initialize(raw_steps)

        delta = raw_steps - self._last_raw_steps
        if delta < 0:
            _LOG.warning(
                "Pedometer count went backwards (%d -> %d), rebasing",
                self._last_raw_steps,
                raw_steps,
            )
            delta = 0
        self._last_raw_steps = raw_steps

        fixes = self.buffer.fixes
        snapshot = StepValidationInput(
            step_delta=delta,
            activity_type=self.activity_type,
            movement_state=self.movement_state,
            gps_distance=self.estimator.gps_distance(fixes),
            gps_speed=self.estimator.speed(fixes),
            acceleration=self.acceleration,
            locations=tuple(fixes),
        )
        result = self.step_validator.evaluate(snapshot)
        if isinstance(result, Accepted):
            self.buffer.step_count += result.step_delta
        else:
            _LOG.info("Step delta %d rejected: %s", delta, result.reason.value)
        return result

    def distance(self) -> float:
        return self.estimator.total_distance(self.buffer.fixes, self.buffer.step_count)

    def speed(self) -> float:
        return self.estimator.speed(self.buffer.fixes)

    def finish(self) -> SessionSummary:
        """Freeze the session and produce the route, totals and validation."""

        self._ensure_active()
        total_distance = self.distance()
        fixes = self.buffer.freeze()
        self._finished = True

        if self.smoothing_enabled:
            route = self.smoother.smooth_route(self.buffer)
        else:
            route = SmoothedRoute.from_lists(
                self.buffer.latitudes, self.buffer.longitudes
            )

        duration_ms = 0
        if self._first_timestamp is not None and self._last_timestamp is not None:
            duration_ms = self._last_timestamp - self._first_timestamp
        metrics = SessionMetrics(
            step_count=self.steps,
            total_distance_m=total_distance,
            duration_ms=duration_ms,
        )
        validation = self.session_validator.validate(metrics)
        _LOG.info(
            "Session finished: %d fixes, %d steps, %.1fm over %.1fs",
            len(fixes),
            self.steps,
            total_distance,
            duration_ms / 1000.0,
        )
        return SessionSummary(
            route=route,
            fixes=fixes,
            total_distance_m=total_distance,
            steps=self.steps,
            duration_ms=duration_ms,
            average_step_length_m=self.estimator.average_step_length,
            validation=validation,
        )

    def _ensure_active(self) -> None:
        if self._finished:
            raise SessionStateError("Walking session already finished")

    def _touch(self, timestamp: int) -> None:
        if self._first_timestamp is None:
            self._first_timestamp = timestamp
        if self._last_timestamp is None or timestamp > self._last_timestamp:
            self._last_timestamp = timestamp


__all__ = ["SessionSummary", "WalkTracker"]
