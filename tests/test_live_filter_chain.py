"""Tests for the composed live filter chain."""

from __future__ import annotations

import logging

import pytest

from track_builders import DEG_PER_M, START_LAT, START_LON, make_fix
from walk_fusion.filters import LiveFilterChain, RecursiveNoiseFilter


def test_chain_drops_inaccurate_fix_without_touching_state() -> None:
    chain = LiveFilterChain()
    assert chain.filter(START_LAT, START_LON, 80.0, 1_000) is None
    assert not chain.noise_filter.state.initialized
    assert chain.speed_gate.state.last_point is None


def test_chain_first_accepted_fix_passes_unchanged() -> None:
    chain = LiveFilterChain()
    assert chain.filter(START_LAT, START_LON, 5.0, 1_000) == (START_LAT, START_LON)


def test_chain_smooths_subsequent_fixes() -> None:
    chain = LiveFilterChain()
    chain.filter(START_LAT, START_LON, 10.0, 0)
    target = START_LAT + 10 * DEG_PER_M
    lat, lon = chain.filter(target, START_LON, 10.0, 5_000)
    assert START_LAT < lat < target
    assert lon == pytest.approx(START_LON)


def test_chain_holds_last_point_on_gps_jump() -> None:
    chain = LiveFilterChain()
    first = chain.filter(START_LAT, START_LON, 5.0, 0)
    # A very accurate fix 2 km away after one second: the filter follows it,
    # the speed gate freezes the route at the previous point.
    result = chain.filter(START_LAT + 2_000 * DEG_PER_M, START_LON, 1.0, 1_000)
    assert result == first


def test_chain_filter_fix_uses_fix_fields() -> None:
    chain = LiveFilterChain()
    fix = make_fix(START_LAT, START_LON, accuracy=5.0, timestamp=42)
    assert chain.filter_fix(fix) == (START_LAT, START_LON)
    assert chain.noise_filter.state.timestamp == 42


def test_chain_rejects_nan_fix_and_keeps_prior_state(
    caplog: pytest.LogCaptureFixture,
) -> None:
    chain = LiveFilterChain()
    chain.filter(START_LAT, START_LON, 5.0, 0)
    kalman_before = chain.noise_filter.state
    speed_before = chain.speed_gate.state

    with caplog.at_level(logging.ERROR, logger="walk_fusion.filters.chain"):
        assert chain.filter(float("nan"), START_LON, 5.0, 1_000) is None

    assert chain.noise_filter.state == kalman_before
    assert chain.speed_gate.state == speed_before
    assert "location filtering failed" in caplog.text.lower()


def test_chain_rolls_back_when_a_stage_raises() -> None:
    class ExplodingFilter(RecursiveNoiseFilter):
        def filter(self, latitude, longitude, accuracy, timestamp):
            super().filter(latitude, longitude, accuracy, timestamp)
            raise OverflowError("boom")

    chain = LiveFilterChain(noise_filter=ExplodingFilter())
    assert chain.filter(START_LAT, START_LON, 5.0, 0) is None
    assert not chain.noise_filter.state.initialized


def test_chain_reset_clears_both_stateful_stages() -> None:
    chain = LiveFilterChain()
    chain.filter(START_LAT, START_LON, 5.0, 0)
    chain.reset()
    assert not chain.noise_filter.state.initialized
    assert chain.speed_gate.state.last_point is None
    # A new session starting elsewhere is not clamped to the old location.
    assert chain.filter(0.0, 0.0, 5.0, 1_000) == (0.0, 0.0)


def test_chain_describe_reports_thresholds() -> None:
    info = LiveFilterChain().describe()
    assert info == {
        "accuracy_max_m": 50.0,
        "kalman_process_noise": 3.0,
        "speed_max_ms": 30.0,
    }
