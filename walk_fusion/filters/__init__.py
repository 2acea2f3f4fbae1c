"""Live location filters applied fix by fix during a walking session."""

from .accuracy import AccuracyGate
from .chain import LiveFilterChain
from .kalman import KalmanState, RecursiveNoiseFilter
from .speed import PlausibilityGate, SpeedGateState

__all__ = [
    "AccuracyGate",
    "KalmanState",
    "LiveFilterChain",
    "PlausibilityGate",
    "RecursiveNoiseFilter",
    "SpeedGateState",
]
