"""Central error types used across the package."""

from __future__ import annotations


class WalkFusionError(RuntimeError):
    """Base error for the walk tracking fusion core."""


class NumericFaultError(WalkFusionError, ArithmeticError):
    """Raised when an intermediate coordinate or estimate is NaN or infinite."""


class SessionStateError(WalkFusionError):
    """Raised when a finished walking session receives further events."""


class ReplayInputError(WalkFusionError):
    """Raised when a recorded event log is missing required columns or values."""


__all__ = [
    "WalkFusionError",
    "NumericFaultError",
    "SessionStateError",
    "ReplayInputError",
]
