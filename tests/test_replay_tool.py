from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from track_builders import make_northbound_track
from walk_fusion.errors import ReplayInputError
from walk_fusion.session_validator import ValidationAction
from walk_fusion.tools import replay_session


def _write_walk_log(path: Path) -> Path:
    track = make_northbound_track(10)
    start = track[0].timestamp
    rows = [
        {"kind": "activity", "timestamp": start, "activity": "WALKING"},
        {
            "kind": "acceleration",
            "timestamp": start,
            "acceleration": 1.0,
            "movement": "WALKING",
        },
        {"kind": "steps", "timestamp": start, "steps": 2_000},
    ]
    for index, fix in enumerate(track):
        rows.append(
            {
                "kind": "location",
                "timestamp": fix.timestamp,
                "latitude": fix.latitude,
                "longitude": fix.longitude,
                "accuracy": fix.accuracy,
            }
        )
        if index:
            steps = 2_000 + index * 10
            rows.append({"kind": "steps", "timestamp": fix.timestamp, "steps": steps})
    # One fix too vague to keep.
    rows.append(
        {
            "kind": "location",
            "timestamp": track[-1].timestamp + 1_000,
            "latitude": track[-1].latitude,
            "longitude": track[-1].longitude,
            "accuracy": 120.0,
        }
    )
    pd.DataFrame(rows).sample(frac=1.0, random_state=7).to_csv(path, index=False)
    return path


def test_load_events_sorts_by_timestamp(tmp_path: Path) -> None:
    events = replay_session.load_events(_write_walk_log(tmp_path / "events.csv"))
    assert events["timestamp"].is_monotonic_increasing
    assert set(events["kind"]) == {"activity", "acceleration", "steps", "location"}


def test_replay_produces_session_summary(tmp_path: Path) -> None:
    events = replay_session.load_events(_write_walk_log(tmp_path / "events.csv"))
    summary = replay_session.replay(events)
    assert summary.steps == 90
    assert len(summary.fixes) == 10
    assert summary.total_distance_m == pytest.approx(63.0, abs=5.0)
    assert summary.validation.action is ValidationAction.ACCEPT


@pytest.mark.parametrize(
    "content, message",
    [
        ("kind,latitude\nlocation,1.0\n", "missing columns"),
        ("kind,timestamp\nteleport,1\n", "Unknown event kinds"),
        ("kind,timestamp,latitude\nlocation,1,37.5\n", "'longitude'"),
        ("kind,timestamp\nsteps,1\n", "'steps'"),
        ("", "Unable to read"),
        ("kind,timestamp,steps\nsteps,1,\nsteps,2,10\n", "numeric 'steps' value .line 2"),
        ("kind,timestamp,steps\nsteps,1,10\nsteps,soon,12\n", "numeric 'timestamp' value .line 3"),
        ("kind,timestamp,latitude,longitude\nlocation,1,north,127.0\n", "numeric 'latitude'"),
        ("kind,timestamp,acceleration,movement\nacceleration,1,,WALKING\n", "numeric 'acceleration'"),
        ("kind,timestamp,steps\nsteps,1,inf\n", "numeric 'steps'"),
    ],
)
def test_load_events_rejects_malformed_logs(
    tmp_path: Path, content: str, message: str
) -> None:
    path = tmp_path / "events.csv"
    path.write_text(content)
    with pytest.raises(ReplayInputError, match=message):
        replay_session.load_events(path)


def test_load_events_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ReplayInputError):
        replay_session.load_events(tmp_path / "absent.csv")


def test_main_writes_smoothed_route(tmp_path: Path) -> None:
    events = _write_walk_log(tmp_path / "events.csv")
    output = tmp_path / "out" / "route.csv"
    assert replay_session.main([str(events), "--output", str(output)]) == 0

    route = pd.read_csv(output)
    assert list(route.columns) == ["latitude", "longitude"]
    assert len(route) >= 2


def test_main_reports_bad_input(tmp_path: Path) -> None:
    path = tmp_path / "events.csv"
    path.write_text("kind\nlocation\n")
    assert replay_session.main([str(path)]) == 1


def test_blank_cells_of_other_kinds_are_allowed(tmp_path: Path) -> None:
    path = tmp_path / "events.csv"
    path.write_text(
        "kind,timestamp,latitude,longitude,accuracy,steps\n"
        "location,1,37.5,127.0,,\n"
        "steps,2,,,,10\n"
    )
    events = replay_session.load_events(path)
    assert events["steps"].isna().tolist() == [True, False]
    assert pd.isna(events.loc[0, "accuracy"])


def test_main_reports_blank_step_count(tmp_path: Path) -> None:
    path = tmp_path / "events.csv"
    path.write_text("kind,timestamp,steps\nsteps,1,\nsteps,2,10\n")
    assert replay_session.main([str(path)]) == 1
