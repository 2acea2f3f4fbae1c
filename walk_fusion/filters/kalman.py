"""One-dimensional recursive noise filter applied to latitude and longitude."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math

from ..config import KALMAN_PROCESS_NOISE
from ..geodesy import ensure_finite
from ..models import LatLon

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class KalmanState:
    """Mutable filter state owned by a single session."""

    variance: float = math.inf
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: int = 0
    initialized: bool = False


class RecursiveNoiseFilter:
    """Scalar Kalman filter sharing one variance between both coordinates.

    The first fix initialises the estimate with ``variance = accuracy**2``.
    Each later fix grows the variance by ``dt * q**2`` (time update) and then
    blends the measurement in with gain ``variance / (variance + accuracy**2)``.
    The filter never rejects a fix.
    """

    def __init__(self, process_noise: float = KALMAN_PROCESS_NOISE) -> None:
        if process_noise < 0:
            raise ValueError("process_noise must not be negative")
        self.process_noise = float(process_noise)
        self._state = KalmanState()

    @property
    def state(self) -> KalmanState:
        """Return a copy of the current state."""
        return replace(self._state)

    def restore(self, state: KalmanState) -> None:
        """Reinstate a snapshot previously obtained from :attr:`state`."""
        self._state = replace(state)

    def reset(self) -> None:
        self._state = KalmanState()

    def filter(
        self,
        latitude: float,
        longitude: float,
        accuracy: float,
        timestamp: int,
    ) -> LatLon:
        measurement_variance = float(accuracy) ** 2
        state = self._state
        if not state.initialized:
            ensure_finite(latitude, longitude, measurement_variance)
            self._state = KalmanState(
                variance=measurement_variance,
                latitude=latitude,
                longitude=longitude,
                timestamp=timestamp,
                initialized=True,
            )
            return (latitude, longitude)

        dt_seconds = (timestamp - state.timestamp) / 1000.0
        if dt_seconds < 0:
            _LOG.debug(
                "Non-increasing fix timestamp (dt=%.3fs), skipping time update",
                dt_seconds,
            )
            dt_seconds = 0.0
        variance = state.variance + dt_seconds * self.process_noise**2
        denominator = variance + measurement_variance
        gain = variance / denominator if denominator > 0 else 1.0
        new_lat = state.latitude + gain * (latitude - state.latitude)
        new_lon = state.longitude + gain * (longitude - state.longitude)
        variance *= 1.0 - gain
        ensure_finite(new_lat, new_lon, variance)

        self._state = KalmanState(
            variance=variance,
            latitude=new_lat,
            longitude=new_lon,
            timestamp=timestamp,
            initialized=True,
        )
        return (new_lat, new_lon)


__all__ = ["KalmanState", "RecursiveNoiseFilter"]
