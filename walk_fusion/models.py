"""Dataclasses and enums shared by the filters, estimator and smoother."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple, Union


LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class GeoFix:
    """One raw location reading as delivered by the platform location service.

    ``accuracy`` is the reported 1-sigma radius in metres (``None`` when the
    platform did not supply one) and ``timestamp`` is epoch milliseconds.
    """

    latitude: float
    longitude: float
    accuracy: float | None
    timestamp: int

    @property
    def point(self) -> LatLon:
        return (self.latitude, self.longitude)


class ActivityType(Enum):
    """Activity classes reported by the activity-recognition service."""

    WALKING = "walking"
    RUNNING = "running"
    ON_FOOT = "on_foot"
    IN_VEHICLE = "in_vehicle"
    ON_BICYCLE = "on_bicycle"
    STILL = "still"
    UNKNOWN = "unknown"


class MovementState(Enum):
    """Movement classes derived from the accelerometer."""

    STILL = "still"
    WALKING = "walking"
    RUNNING = "running"
    UNKNOWN = "unknown"


class RejectionReason(Enum):
    """Why a pedometer delta was not credited to the session."""

    INVALID_ACTIVITY_TYPE = "invalid_activity_type"
    INVALID_MOVEMENT_STATE = "invalid_movement_state"
    PHONE_SHAKE = "phone_shake"
    VEHICLE_MOVEMENT = "vehicle_movement"
    STATIONARY_WALKING = "stationary_walking"


@dataclass(frozen=True, slots=True)
class StepValidationInput:
    """Snapshot assembled once per pedometer tick."""

    step_delta: int
    activity_type: ActivityType | None
    movement_state: MovementState | None
    gps_distance: float
    gps_speed: float
    acceleration: float
    locations: Tuple[GeoFix, ...] = ()


@dataclass(frozen=True, slots=True)
class Accepted:
    step_delta: int


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectionReason


StepValidationResult = Union[Accepted, Rejected]


@dataclass(slots=True)
class StrideCalibration:
    """Exponential moving average of metres per step for one session."""

    average_step_length: float | None = None

    def update(self, sample: float, retain: float) -> float:
        """Blend ``sample`` into the average and return the new value."""

        if self.average_step_length is None:
            self.average_step_length = sample
        else:
            self.average_step_length = (
                self.average_step_length * retain + sample * (1.0 - retain)
            )
        return self.average_step_length

    def reset(self) -> None:
        self.average_step_length = None


@dataclass(slots=True)
class WalkSessionBuffer:
    """Append-only record of accepted fixes and step counts for one session."""

    fixes: List[GeoFix] = field(default_factory=list)
    step_count: int = 0
    initial_step_count: int = 0
    frozen: bool = False

    def append(self, fix: GeoFix) -> None:
        if self.frozen:
            raise ValueError("Cannot append to a frozen session buffer")
        self.fixes.append(fix)

    def freeze(self) -> Tuple[GeoFix, ...]:
        """Stop accepting fixes and return the final ordered sequence."""

        self.frozen = True
        return tuple(self.fixes)

    @property
    def latitudes(self) -> List[float]:
        return [fix.latitude for fix in self.fixes]

    @property
    def longitudes(self) -> List[float]:
        return [fix.longitude for fix in self.fixes]

    def __len__(self) -> int:
        return len(self.fixes)


@dataclass(frozen=True, slots=True)
class SmoothedRoute:
    """Presentation route produced once at the end of a session."""

    latitudes: Tuple[float, ...]
    longitudes: Tuple[float, ...]

    @classmethod
    def from_lists(
        cls, latitudes: Sequence[float], longitudes: Sequence[float]
    ) -> "SmoothedRoute":
        return cls(tuple(latitudes), tuple(longitudes))

    def points(self) -> List[LatLon]:
        return list(zip(self.latitudes, self.longitudes))

    def __len__(self) -> int:
        return len(self.latitudes)


__all__ = [
    "LatLon",
    "GeoFix",
    "ActivityType",
    "MovementState",
    "RejectionReason",
    "StepValidationInput",
    "Accepted",
    "Rejected",
    "StepValidationResult",
    "StrideCalibration",
    "WalkSessionBuffer",
    "SmoothedRoute",
]
