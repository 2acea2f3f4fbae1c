"""End-to-end tests for the per-session tracker."""

from __future__ import annotations

import pytest

from track_builders import START_LAT, START_LON, make_fix, make_northbound_track
from walk_fusion.errors import SessionStateError
from walk_fusion.models import Accepted, MovementState, Rejected, RejectionReason
from walk_fusion.session_validator import ValidationAction
from walk_fusion.tracker import WalkTracker

T0 = 1_000_000


def _walking_tracker() -> WalkTracker:
    tracker = WalkTracker()
    tracker.on_activity("WALKING", T0)
    tracker.on_acceleration(1.0, "WALKING", T0)
    return tracker


def _walk(tracker: WalkTracker, fixes, raw_start: int = 5_000, per_fix: int = 10):
    tracker.on_step_count(raw_start, T0)
    results = []
    for index, fix in enumerate(fixes):
        tracker.on_location(fix)
        if index:
            raw = raw_start + index * per_fix
            results.append(tracker.on_step_count(raw, fix.timestamp))
    return results


def test_accepted_fixes_are_buffered_and_rejected_fixes_dropped() -> None:
    tracker = WalkTracker()
    good = make_fix(START_LAT, START_LON, accuracy=5.0, timestamp=T0)
    vague = make_fix(START_LAT, START_LON, accuracy=90.0, timestamp=T0 + 1_000)
    assert tracker.on_location(good) == (START_LAT, START_LON)
    assert tracker.on_location(vague) is None
    assert len(tracker.buffer) == 1


def test_walking_session_fuses_distance_and_learns_stride() -> None:
    tracker = _walking_tracker()
    results = _walk(tracker, make_northbound_track(10))

    assert all(isinstance(result, Accepted) for result in results)
    assert tracker.steps == 90
    gps_distance = tracker.estimator.gps_distance(tracker.buffer.fixes)
    assert gps_distance == pytest.approx(63.0, abs=5.0)
    assert tracker.distance() == pytest.approx(gps_distance)
    assert tracker.estimator.average_step_length == pytest.approx(gps_distance / 90)
    assert tracker.speed() == pytest.approx(1.4, abs=0.2)


def test_rejected_steps_are_not_credited() -> None:
    tracker = _walking_tracker()
    tracker.on_step_count(5_000, T0)
    tracker.on_activity("IN_VEHICLE", T0 + 1_000)
    result = tracker.on_step_count(5_050, T0 + 2_000)
    assert result == Rejected(RejectionReason.INVALID_ACTIVITY_TYPE)
    assert tracker.steps == 0

    tracker.on_activity("WALKING", T0 + 3_000)
    assert tracker.on_step_count(5_060, T0 + 4_000) == Accepted(10)
    assert tracker.steps == 10


def test_pedometer_reset_is_rebased() -> None:
    tracker = _walking_tracker()
    tracker.on_step_count(5_000, T0)
    tracker.on_step_count(5_020, T0 + 1_000)
    assert tracker.on_step_count(10, T0 + 2_000) == Accepted(0)
    assert tracker.on_step_count(25, T0 + 3_000) == Accepted(15)
    assert tracker.steps == 35


def test_acceleration_uses_stabilised_movement_state() -> None:
    tracker = _walking_tracker()
    assert tracker.on_acceleration(0.1, "STILL", T0 + 1_000) is MovementState.WALKING
    assert tracker.on_acceleration(0.1, "STILL", T0 + 5_000) is MovementState.STILL
    assert tracker.acceleration == pytest.approx(0.1)


def test_finish_produces_summary() -> None:
    tracker = _walking_tracker()
    track = make_northbound_track(10)
    _walk(tracker, track)
    summary = tracker.finish()

    assert summary.steps == 90
    assert summary.duration_ms == track[-1].timestamp - T0
    assert len(summary.fixes) == 10
    assert summary.route.points()[0] == summary.fixes[0].point
    assert summary.route.points()[-1] == summary.fixes[-1].point
    assert summary.validation.action is ValidationAction.ACCEPT
    assert summary.average_step_length_m is not None
    assert tracker.finished


def test_events_after_finish_raise() -> None:
    tracker = _walking_tracker()
    tracker.finish()
    with pytest.raises(SessionStateError):
        tracker.on_location(make_fix(START_LAT, START_LON, timestamp=T0))
    with pytest.raises(SessionStateError):
        tracker.on_step_count(10, T0)
    with pytest.raises(SessionStateError):
        tracker.finish()


def test_smoothing_can_be_disabled() -> None:
    tracker = WalkTracker(smoothing_enabled=False)
    for fix in make_northbound_track(5):
        tracker.on_location(fix)
    summary = tracker.finish()
    assert summary.route.latitudes == tuple(fix.latitude for fix in summary.fixes)


def test_new_tracker_starts_from_fresh_state() -> None:
    first = _walking_tracker()
    _walk(first, make_northbound_track(10))
    second = WalkTracker()
    assert second.buffer.fixes == []
    assert second.estimator.average_step_length is None
    assert not second.chain.noise_filter.state.initialized
