"""Accuracy gate dropping fixes with an unusable uncertainty radius."""

from __future__ import annotations

import math
from typing import Optional

from ..config import ACCURACY_MAX_M
from ..models import LatLon


class AccuracyGate:
    """Reject fixes whose reported accuracy radius exceeds ``max_accuracy_m``.

    Missing, NaN and non-positive radii are treated as unknown and rejected.
    Accepted coordinates pass through unchanged.
    """

    def __init__(self, max_accuracy_m: float = ACCURACY_MAX_M) -> None:
        if max_accuracy_m <= 0:
            raise ValueError("max_accuracy_m must be greater than zero")
        self.max_accuracy_m = float(max_accuracy_m)

    def accepts(self, accuracy: Optional[float]) -> bool:
        if accuracy is None:
            return False
        try:
            value = float(accuracy)
        except (TypeError, ValueError):
            return False
        if math.isnan(value) or value <= 0:
            return False
        return value <= self.max_accuracy_m

    def filter(
        self, latitude: float, longitude: float, accuracy: Optional[float]
    ) -> Optional[LatLon]:
        if not self.accepts(accuracy):
            return None
        return (latitude, longitude)


__all__ = ["AccuracyGate"]
