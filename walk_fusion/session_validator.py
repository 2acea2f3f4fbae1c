"""Plausibility checks applied to a finished walking session.

Only physically impossible sessions are rejected outright; most suspicious
patterns merely exclude the session's steps from being credited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import List

from .config import (
    SESSION_MAX_SPEED_KMH,
    SESSION_MAX_STEPS,
    SESSION_MAX_STRIDE_M,
    SESSION_MEANINGFUL_DISTANCE_M,
    SESSION_MIN_STRIDE_M,
    SESSION_SHAKE_MAX_SPEED_KMH,
    SESSION_SHAKE_MAX_STRIDE_M,
    SESSION_STATIONARY_MAX_STRIDE_M,
    SESSION_STATIONARY_MIN_STEPS,
)

_LOG = logging.getLogger(__name__)


class FlagEffect(Enum):
    EXCLUDE_STEPS = "exclude_steps"
    REJECT_SESSION = "reject_session"


class SuspicionFlag(Enum):
    IMPOSSIBLE_STRIDE = ("impossible_stride", FlagEffect.EXCLUDE_STEPS)
    IMPOSSIBLE_SPEED = ("impossible_speed", FlagEffect.REJECT_SESSION)
    EXCESSIVE_STEPS = ("excessive_steps", FlagEffect.EXCLUDE_STEPS)
    STATIONARY_WALKING = ("stationary_walking", FlagEffect.EXCLUDE_STEPS)
    SHAKING_PATTERN = ("shaking_pattern", FlagEffect.EXCLUDE_STEPS)

    @property
    def effect(self) -> FlagEffect:
        return self.value[1]


class ValidationAction(Enum):
    ACCEPT = "accept"
    ACCEPT_FLAGGED = "accept_flagged"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class SessionMetrics:
    """Totals of a finished session as seen by the validator."""

    step_count: int
    total_distance_m: float
    duration_ms: int

    @property
    def average_stride_m(self) -> float:
        if self.step_count <= 0:
            return 0.0
        return self.total_distance_m / self.step_count

    @property
    def average_speed_kmh(self) -> float:
        duration_s = self.duration_ms / 1000.0
        if duration_s <= 0:
            return 0.0
        return self.total_distance_m / duration_s * 3.6

    @property
    def has_meaningful_movement(self) -> bool:
        return self.total_distance_m >= SESSION_MEANINGFUL_DISTANCE_M


@dataclass(slots=True)
class SessionValidationResult:
    flags: List[SuspicionFlag] = field(default_factory=list)
    action: ValidationAction = ValidationAction.ACCEPT
    should_count_steps: bool = True


class SessionValidator:
    def validate(self, metrics: SessionMetrics) -> SessionValidationResult:
        flags: List[SuspicionFlag] = []
        self._check_physical(metrics, flags)
        self._check_movement_patterns(metrics, flags)

        if any(flag.effect is FlagEffect.REJECT_SESSION for flag in flags):
            action = ValidationAction.REJECT
        elif flags:
            action = ValidationAction.ACCEPT_FLAGGED
        else:
            action = ValidationAction.ACCEPT
        should_count_steps = not any(
            flag.effect is FlagEffect.EXCLUDE_STEPS for flag in flags
        )
        _LOG.info(
            "Session validated: action=%s flags=%s count_steps=%s",
            action.value,
            [flag.name for flag in flags],
            should_count_steps,
        )
        return SessionValidationResult(flags, action, should_count_steps)

    def _check_physical(
        self, metrics: SessionMetrics, flags: List[SuspicionFlag]
    ) -> None:
        if metrics.step_count > 0 and metrics.total_distance_m > 0:
            stride = metrics.average_stride_m
            if stride < SESSION_MIN_STRIDE_M or stride > SESSION_MAX_STRIDE_M:
                flags.append(SuspicionFlag.IMPOSSIBLE_STRIDE)
        if metrics.average_speed_kmh > SESSION_MAX_SPEED_KMH:
            flags.append(SuspicionFlag.IMPOSSIBLE_SPEED)
        if metrics.step_count > SESSION_MAX_STEPS:
            flags.append(SuspicionFlag.EXCESSIVE_STEPS)

    def _check_movement_patterns(
        self, metrics: SessionMetrics, flags: List[SuspicionFlag]
    ) -> None:
        if metrics.has_meaningful_movement:
            return
        stride = metrics.average_stride_m
        if (
            0.0 <= stride <= SESSION_STATIONARY_MAX_STRIDE_M
            and metrics.step_count > SESSION_STATIONARY_MIN_STEPS
        ):
            flags.append(SuspicionFlag.STATIONARY_WALKING)
        if (
            metrics.step_count > 0
            and metrics.average_speed_kmh < SESSION_SHAKE_MAX_SPEED_KMH
            and stride < SESSION_SHAKE_MAX_STRIDE_M
        ):
            flags.append(SuspicionFlag.SHAKING_PATTERN)


__all__ = [
    "FlagEffect",
    "SessionMetrics",
    "SessionValidationResult",
    "SessionValidator",
    "SuspicionFlag",
    "ValidationAction",
]
