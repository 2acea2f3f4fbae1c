"""Speed gate freezing the route when consecutive fixes imply impossible motion."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Optional

from ..config import SPEED_MAX_MS
from ..geodesy import ensure_finite, haversine_m
from ..models import LatLon

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class SpeedGateState:
    last_point: Optional[LatLon] = None
    last_timestamp: int = 0


class PlausibilityGate:
    """Reject GPS jumps faster than ``max_speed_ms`` relative to the last good fix.

    A rejected fix yields the previous accepted point unchanged; the gate
    never interpolates. Fixes with a non-positive elapsed time pass through
    unfiltered and do not update the gate.
    """

    def __init__(self, max_speed_ms: float = SPEED_MAX_MS) -> None:
        if max_speed_ms <= 0:
            raise ValueError("max_speed_ms must be greater than zero")
        self.max_speed_ms = float(max_speed_ms)
        self._state = SpeedGateState()

    @property
    def state(self) -> SpeedGateState:
        return replace(self._state)

    def restore(self, state: SpeedGateState) -> None:
        self._state = replace(state)

    def reset(self) -> None:
        self._state = SpeedGateState()

    def filter(self, latitude: float, longitude: float, timestamp: int) -> LatLon:
        current = (latitude, longitude)
        state = self._state
        if state.last_point is None:
            self._state = SpeedGateState(last_point=current, last_timestamp=timestamp)
            return current

        elapsed_s = (timestamp - state.last_timestamp) / 1000.0
        if elapsed_s <= 0:
            _LOG.warning(
                "GPS timestamp error: elapsed %.3fs, passing fix through", elapsed_s
            )
            return current

        distance_m = haversine_m(state.last_point, current)
        speed_ms = distance_m / elapsed_s
        ensure_finite(speed_ms)
        if speed_ms > self.max_speed_ms:
            _LOG.warning(
                "GPS speed %.1fm/s exceeds %.1fm/s (distance %.1fm over %.1fs), "
                "holding last point",
                speed_ms,
                self.max_speed_ms,
                distance_m,
                elapsed_s,
            )
            return state.last_point

        self._state = SpeedGateState(last_point=current, last_timestamp=timestamp)
        return current


__all__ = ["SpeedGateState", "PlausibilityGate"]
