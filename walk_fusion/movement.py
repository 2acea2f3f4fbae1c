"""Debouncing of accelerometer movement states."""

from __future__ import annotations

from .config import MOVEMENT_STABLE_DURATION_MS
from .models import MovementState


class MovementStateStabilizer:
    """Adopt a new movement state only after it persists for a minimum duration.

    The first observed state becomes stable immediately. A different state is
    held as pending until it has been reported continuously for
    ``stable_duration_ms``; reporting the stable state again drops the
    pending candidate.
    """

    def __init__(self, stable_duration_ms: int = MOVEMENT_STABLE_DURATION_MS) -> None:
        self.stable_duration_ms = stable_duration_ms
        self._stable: MovementState | None = None
        self._pending: MovementState | None = None
        self._pending_since = 0

    @property
    def stable_state(self) -> MovementState | None:
        return self._stable

    def update(self, detected: MovementState, timestamp: int) -> MovementState:
        if self._stable is None:
            self._stable = detected
            return detected

        if detected == self._stable:
            self._pending = None
            self._pending_since = 0
            return self._stable

        if self._pending != detected:
            self._pending = detected
            self._pending_since = timestamp
        elif timestamp - self._pending_since >= self.stable_duration_ms:
            self._stable = detected
            self._pending = None
            self._pending_since = 0
        return self._stable

    def reset(self) -> None:
        self._stable = None
        self._pending = None
        self._pending_since = 0


__all__ = ["MovementStateStabilizer"]
