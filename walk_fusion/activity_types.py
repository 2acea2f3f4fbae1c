"""Utilities for classifying activity-recognition and accelerometer labels."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .models import ActivityType, MovementState

__all__ = [
    "normalize_label",
    "parse_activity_type",
    "parse_movement_state",
    "is_ambulatory_activity",
    "is_ambulatory_movement",
]

_LOG = logging.getLogger(__name__)

_ACTIVITY_ALIASES: Mapping[str, ActivityType] = {
    "walking": ActivityType.WALKING,
    "walk": ActivityType.WALKING,
    "running": ActivityType.RUNNING,
    "run": ActivityType.RUNNING,
    "on_foot": ActivityType.ON_FOOT,
    "onfoot": ActivityType.ON_FOOT,
    "in_vehicle": ActivityType.IN_VEHICLE,
    "invehicle": ActivityType.IN_VEHICLE,
    "vehicle": ActivityType.IN_VEHICLE,
    "on_bicycle": ActivityType.ON_BICYCLE,
    "onbicycle": ActivityType.ON_BICYCLE,
    "bicycle": ActivityType.ON_BICYCLE,
    "still": ActivityType.STILL,
    "unknown": ActivityType.UNKNOWN,
}

_MOVEMENT_ALIASES: Mapping[str, MovementState] = {
    "still": MovementState.STILL,
    "walking": MovementState.WALKING,
    "walk": MovementState.WALKING,
    "running": MovementState.RUNNING,
    "run": MovementState.RUNNING,
    "unknown": MovementState.UNKNOWN,
}

_AMBULATORY_ACTIVITIES = frozenset(
    {ActivityType.WALKING, ActivityType.RUNNING, ActivityType.ON_FOOT}
)
_AMBULATORY_MOVEMENTS = frozenset({MovementState.WALKING, MovementState.RUNNING})


def normalize_label(value: Any) -> str | None:
    """Return a lowercase, underscore-separated label or ``None`` when missing.

    Platform services report the same class as ``IN_VEHICLE``, ``in vehicle``
    or ``In-Vehicle`` depending on the source. Normalising once keeps the
    alias tables small and the lookups deterministic.
    """

    if value is None:
        return None
    normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    return normalized or None


def parse_activity_type(value: Any) -> ActivityType:
    """Map a raw activity label onto :class:`ActivityType`.

    Enum members are returned unchanged. Blank, missing or unrecognised
    labels map to ``ActivityType.UNKNOWN``, which the step validator treats as
    not walking-compatible.
    """

    if isinstance(value, ActivityType):
        return value
    label = normalize_label(value)
    if label is None:
        return ActivityType.UNKNOWN
    resolved = _ACTIVITY_ALIASES.get(label)
    if resolved is None:
        _LOG.debug("Unrecognised activity label %r, using UNKNOWN", value)
        return ActivityType.UNKNOWN
    return resolved


def parse_movement_state(value: Any) -> MovementState:
    """Map a raw movement label onto :class:`MovementState` (default ``UNKNOWN``)."""

    if isinstance(value, MovementState):
        return value
    label = normalize_label(value)
    if label is None:
        return MovementState.UNKNOWN
    resolved = _MOVEMENT_ALIASES.get(label)
    if resolved is None:
        _LOG.debug("Unrecognised movement label %r, using UNKNOWN", value)
        return MovementState.UNKNOWN
    return resolved


def is_ambulatory_activity(activity: ActivityType | None) -> bool:
    """Return ``True`` when ``activity`` is compatible with walking or running."""

    return activity in _AMBULATORY_ACTIVITIES


def is_ambulatory_movement(movement: MovementState | None) -> bool:
    return movement in _AMBULATORY_MOVEMENTS
