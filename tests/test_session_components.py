"""Tests for the movement stabiliser, session buffer and session validator."""

from __future__ import annotations

import pytest

from track_builders import make_northbound_track
from walk_fusion.models import MovementState, StrideCalibration, WalkSessionBuffer
from walk_fusion.movement import MovementStateStabilizer
from walk_fusion.session_validator import (
    SessionMetrics,
    SessionValidator,
    SuspicionFlag,
    ValidationAction,
)


# --- Movement stabiliser ----------------------------------------------
def test_first_state_is_adopted_immediately() -> None:
    stabilizer = MovementStateStabilizer(stable_duration_ms=3_000)
    assert stabilizer.update(MovementState.WALKING, 0) is MovementState.WALKING


def test_change_requires_persistence() -> None:
    stabilizer = MovementStateStabilizer(stable_duration_ms=3_000)
    stabilizer.update(MovementState.WALKING, 0)
    assert stabilizer.update(MovementState.STILL, 1_000) is MovementState.WALKING
    assert stabilizer.update(MovementState.STILL, 3_000) is MovementState.WALKING
    assert stabilizer.update(MovementState.STILL, 4_000) is MovementState.STILL


def test_flicker_back_cancels_pending_change() -> None:
    stabilizer = MovementStateStabilizer(stable_duration_ms=3_000)
    stabilizer.update(MovementState.WALKING, 0)
    stabilizer.update(MovementState.STILL, 1_000)
    stabilizer.update(MovementState.WALKING, 2_000)
    # The STILL window restarts here.
    assert stabilizer.update(MovementState.STILL, 4_500) is MovementState.WALKING
    assert stabilizer.update(MovementState.STILL, 7_500) is MovementState.STILL


def test_stabilizer_reset() -> None:
    stabilizer = MovementStateStabilizer()
    stabilizer.update(MovementState.RUNNING, 0)
    stabilizer.reset()
    assert stabilizer.stable_state is None
    assert stabilizer.update(MovementState.STILL, 10) is MovementState.STILL


# --- Session buffer / calibration -------------------------------------
def test_buffer_freeze_blocks_appends() -> None:
    buffer = WalkSessionBuffer()
    track = make_northbound_track(3)
    for fix in track:
        buffer.append(fix)
    frozen = buffer.freeze()
    assert frozen == tuple(track)
    assert buffer.latitudes == [fix.latitude for fix in track]
    with pytest.raises(ValueError):
        buffer.append(track[0])


def test_stride_calibration_ema() -> None:
    calibration = StrideCalibration()
    assert calibration.update(0.8, retain=0.7) == pytest.approx(0.8)
    assert calibration.update(0.6, retain=0.7) == pytest.approx(0.74)
    calibration.reset()
    assert calibration.average_step_length is None


# --- Session validator ------------------------------------------------
def test_plausible_session_is_accepted() -> None:
    metrics = SessionMetrics(step_count=1_400, total_distance_m=1_000.0, duration_ms=720_000)
    result = SessionValidator().validate(metrics)
    assert result.action is ValidationAction.ACCEPT
    assert result.flags == []
    assert result.should_count_steps


def test_impossible_speed_rejects_session() -> None:
    # 10 km in 20 minutes is 30 km/h.
    metrics = SessionMetrics(step_count=12_000, total_distance_m=10_000.0, duration_ms=1_200_000)
    result = SessionValidator().validate(metrics)
    assert SuspicionFlag.IMPOSSIBLE_SPEED in result.flags
    assert result.action is ValidationAction.REJECT


def test_impossible_stride_excludes_steps() -> None:
    metrics = SessionMetrics(step_count=100, total_distance_m=500.0, duration_ms=3_600_000)
    result = SessionValidator().validate(metrics)
    assert result.flags == [SuspicionFlag.IMPOSSIBLE_STRIDE]
    assert result.action is ValidationAction.ACCEPT_FLAGGED
    assert not result.should_count_steps


def test_stepping_in_place_is_flagged() -> None:
    metrics = SessionMetrics(step_count=800, total_distance_m=2.0, duration_ms=600_000)
    result = SessionValidator().validate(metrics)
    assert SuspicionFlag.STATIONARY_WALKING in result.flags
    assert SuspicionFlag.SHAKING_PATTERN in result.flags
    assert not result.should_count_steps


def test_empty_session_is_not_flagged() -> None:
    result = SessionValidator().validate(SessionMetrics(0, 0.0, 0))
    assert result.action is ValidationAction.ACCEPT


def test_session_metrics_derived_values() -> None:
    metrics = SessionMetrics(step_count=1_000, total_distance_m=700.0, duration_ms=500_000)
    assert metrics.average_stride_m == pytest.approx(0.7)
    assert metrics.average_speed_kmh == pytest.approx(5.04)
    assert metrics.has_meaningful_movement
