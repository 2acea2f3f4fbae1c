"""Hybrid GPS/pedometer distance estimation with an adaptive stride length."""

from __future__ import annotations

import logging
from typing import Sequence

from .config import (
    DEFAULT_STRIDE_M,
    DISTANCE_AGREEMENT_RATIO,
    DISTANCE_GPS_WEIGHT,
    GPS_JITTER_FLOOR_M,
    GPS_TRUSTED_ACCURACY_M,
    MIN_FUSION_POINTS,
    SPEED_MIN_ELAPSED_S,
    SPEED_RECENT_WEIGHT,
    STRIDE_EMA_RETAIN,
)
from .geodesy import haversine_m, path_length_m
from .models import GeoFix, StrideCalibration

_LOG = logging.getLogger(__name__)


class HybridDistanceEstimator:
    """Fuse the accepted GPS track and the pedometer count into one distance.

    ``total_distance`` is recomputed over the whole accepted-fix list on every
    call because a stride update can change how the two sources are weighted.
    One instance belongs to one session; :meth:`initialize` records the
    pedometer offset at which the session started.
    """

    def __init__(self, initial_step_count: int = 0) -> None:
        self.initial_step_count = initial_step_count
        self.calibration = StrideCalibration()

    @property
    def average_step_length(self) -> float | None:
        return self.calibration.average_step_length

    def initialize(self, initial_step_count: int) -> None:
        self.initial_step_count = initial_step_count
        self.calibration.reset()

    def reset(self) -> None:
        self.initial_step_count = 0
        self.calibration.reset()

    def steps_taken(self, step_count: int) -> int:
        return step_count - self.initial_step_count

    def gps_distance(self, locations: Sequence[GeoFix]) -> float:
        """Sum consecutive haversine distances, ignoring jitter below 5 m."""

        return path_length_m(
            [fix.point for fix in locations], min_segment_m=GPS_JITTER_FLOOR_M
        )

    def step_distance(self, step_count: int) -> float:
        steps = self.steps_taken(step_count)
        if steps <= 0:
            return 0.0
        stride = self.average_step_length
        if stride is None:
            stride = DEFAULT_STRIDE_M
        return steps * stride

    def total_distance(self, locations: Sequence[GeoFix], step_count: int) -> float:
        """Return the fused session distance in metres."""

        gps_distance = self.gps_distance(locations)
        step_distance = self.step_distance(step_count)

        if len(locations) < MIN_FUSION_POINTS:
            return step_distance

        steps = self.steps_taken(step_count)
        if steps > 0 and gps_distance > 0:
            stride = self.calibration.update(gps_distance / steps, STRIDE_EMA_RETAIN)
            _LOG.debug("Stride estimate updated to %.3fm", stride)

        if _is_trusted(locations[-1]) and gps_distance > 0:
            difference_ratio = abs(gps_distance - step_distance) / gps_distance
            if difference_ratio <= DISTANCE_AGREEMENT_RATIO:
                return gps_distance
            return (
                gps_distance * DISTANCE_GPS_WEIGHT
                + step_distance * (1.0 - DISTANCE_GPS_WEIGHT)
            )

        if self.average_step_length is not None and step_distance > 0:
            return step_distance
        # Untrusted GPS is still the best signal without a learned stride.
        return gps_distance

    def speed(self, locations: Sequence[GeoFix]) -> float:
        """Return the current speed in m/s from the last two or three fixes."""

        count = len(locations)
        if count < 2:
            return 0.0
        recent = _segment_speed(locations[-2], locations[-1])
        if count < 3:
            return recent
        older = _segment_speed(locations[-3], locations[-2])
        if older > 0 and recent > 0:
            return recent * SPEED_RECENT_WEIGHT + older * (1.0 - SPEED_RECENT_WEIGHT)
        if recent > 0:
            return recent
        return 0.0


def _is_trusted(fix: GeoFix) -> bool:
    accuracy = fix.accuracy
    return accuracy is not None and 0 < accuracy <= GPS_TRUSTED_ACCURACY_M


def _segment_speed(first: GeoFix, second: GeoFix) -> float:
    elapsed_s = max((second.timestamp - first.timestamp) / 1000.0, SPEED_MIN_ELAPSED_S)
    return haversine_m(first.point, second.point) / elapsed_s


__all__ = ["HybridDistanceEstimator"]
