"""Live filter chain applied to every incoming location fix.

Order is fixed: accuracy gate, then the recursive noise filter, then the
speed gate. Only the accuracy gate can drop a fix during normal operation;
an unexpected numeric fault also drops the fix but leaves the state built
from earlier fixes untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..geodesy import ensure_finite
from ..models import GeoFix, LatLon
from .accuracy import AccuracyGate
from .kalman import RecursiveNoiseFilter
from .speed import PlausibilityGate

_LOG = logging.getLogger(__name__)


class LiveFilterChain:
    """Compose the three live filters for one walking session.

    An instance must be confined to the single context delivering location
    events for its session; construct a new chain (or call :meth:`reset`
    once) when a new session starts.
    """

    def __init__(
        self,
        accuracy_gate: AccuracyGate | None = None,
        noise_filter: RecursiveNoiseFilter | None = None,
        speed_gate: PlausibilityGate | None = None,
    ) -> None:
        self.accuracy_gate = accuracy_gate or AccuracyGate()
        self.noise_filter = noise_filter or RecursiveNoiseFilter()
        self.speed_gate = speed_gate or PlausibilityGate()

    def filter(
        self,
        latitude: float,
        longitude: float,
        accuracy: Optional[float],
        timestamp: int,
    ) -> Optional[LatLon]:
        """Return the filtered coordinate or ``None`` when the fix is discarded."""

        after_accuracy = self.accuracy_gate.filter(latitude, longitude, accuracy)
        if after_accuracy is None:
            _LOG.debug("Accuracy gate dropped fix with accuracy=%s", accuracy)
            return None

        kalman_snapshot = self.noise_filter.state
        speed_snapshot = self.speed_gate.state
        try:
            ensure_finite(*after_accuracy)
            after_kalman = self.noise_filter.filter(
                after_accuracy[0],
                after_accuracy[1],
                float(accuracy),  # type: ignore[arg-type]
                timestamp,
            )
            result = self.speed_gate.filter(after_kalman[0], after_kalman[1], timestamp)
            ensure_finite(*result)
        except (ArithmeticError, ValueError, TypeError):
            self.noise_filter.restore(kalman_snapshot)
            self.speed_gate.restore(speed_snapshot)
            _LOG.error(
                "Location filtering failed for fix (%r, %r) at %s",
                latitude,
                longitude,
                timestamp,
                exc_info=True,
            )
            return None

        _LOG.debug(
            "Filtered fix (%.6f, %.6f) -> (%.6f, %.6f)",
            latitude,
            longitude,
            result[0],
            result[1],
        )
        return result

    def filter_fix(self, fix: GeoFix) -> Optional[LatLon]:
        return self.filter(fix.latitude, fix.longitude, fix.accuracy, fix.timestamp)

    def reset(self) -> None:
        """Clear the stateful stages; call once at the start of a session."""
        self.noise_filter.reset()
        self.speed_gate.reset()
        _LOG.debug("Live filter state reset")

    def describe(self) -> Dict[str, Any]:
        """Return the configured thresholds for diagnostics."""
        return {
            "accuracy_max_m": self.accuracy_gate.max_accuracy_m,
            "kalman_process_noise": self.noise_filter.process_noise,
            "speed_max_ms": self.speed_gate.max_speed_ms,
        }


__all__ = ["LiveFilterChain"]
