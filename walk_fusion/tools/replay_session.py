#!/usr/bin/env python3
"""Replay a recorded walking session through the fusion core.

The input is a CSV event log with one row per platform event. Every row has
a ``kind`` and an epoch-millisecond ``timestamp``; the remaining columns are
read depending on the kind:

    location      latitude, longitude, accuracy
    steps         steps (cumulative pedometer count)
    activity      activity (e.g. ``WALKING``, ``IN_VEHICLE``)
    acceleration  acceleration, movement (e.g. ``WALKING``, ``STILL``)

Usage examples:

    python -m walk_fusion.tools.replay_session events.csv

    # Write the smoothed route next to the log
    python -m walk_fusion.tools.replay_session events.csv --output route.csv
"""

from __future__ import annotations

import argparse
from collections import Counter
import logging
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from walk_fusion.errors import ReplayInputError
from walk_fusion.models import GeoFix, Rejected
from walk_fusion.tracker import SessionSummary, WalkTracker

_LOG = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("kind", "timestamp")
_KIND_COLUMNS = {
    "location": ("latitude", "longitude"),
    "steps": ("steps",),
    "activity": ("activity",),
    "acceleration": ("acceleration", "movement"),
}
# Blank or unparseable cells in these columns become NaN.
_NUMERIC_COLUMNS = (
    "timestamp",
    "latitude",
    "longitude",
    "accuracy",
    "steps",
    "acceleration",
)


def load_events(path: Path) -> pd.DataFrame:
    """Read and validate an event log, returning rows in timestamp order."""

    try:
        frame = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ReplayInputError(f"Unable to read event log {path}: {exc}") from exc
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ReplayInputError(f"Event log missing columns: {', '.join(missing)}")
    frame["kind"] = frame["kind"].astype(str).str.strip().str.lower()
    unknown = sorted(set(frame["kind"]) - set(_KIND_COLUMNS))
    if unknown:
        raise ReplayInputError(f"Unknown event kinds: {', '.join(unknown)}")
    for kind in frame["kind"].unique():
        for column in _KIND_COLUMNS[kind]:
            if column not in frame.columns:
                raise ReplayInputError(f"'{kind}' events require a '{column}' column")

    for column in _NUMERIC_COLUMNS:
        if column in frame.columns:
            values = pd.to_numeric(frame[column], errors="coerce")
            frame[column] = values.replace([float("inf"), float("-inf")], float("nan"))
    _require_values(frame, frame.index, "timestamp", "Events")
    for kind in frame["kind"].unique():
        rows = frame.index[frame["kind"] == kind]
        for column in _KIND_COLUMNS[kind]:
            if column in _NUMERIC_COLUMNS:
                _require_values(frame, rows, column, f"'{kind}' events")

    # Stable sort keeps the recorded order of events sharing a timestamp.
    return frame.sort_values("timestamp", kind="mergesort").reset_index(drop=True)


def _require_values(
    frame: pd.DataFrame, rows: pd.Index, column: str, label: str
) -> None:
    missing = frame.loc[rows, column].isna()
    if missing.any():
        # Header is line 1 of the file.
        line = int(missing.idxmax()) + 2
        raise ReplayInputError(
            f"{label} need a numeric '{column}' value (line {line})"
        )


def replay(events: pd.DataFrame, tracker: WalkTracker | None = None) -> SessionSummary:
    """Feed ``events`` through a fresh tracker and finish the session."""

    tracker = tracker or WalkTracker()
    rejections: Counter[str] = Counter()
    dropped_fixes = 0
    for row in events.itertuples(index=False):
        timestamp = int(row.timestamp)
        if row.kind == "location":
            accuracy = getattr(row, "accuracy", None)
            fix = GeoFix(
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                accuracy=None if pd.isna(accuracy) else float(accuracy),
                timestamp=timestamp,
            )
            if tracker.on_location(fix) is None:
                dropped_fixes += 1
        elif row.kind == "steps":
            result = tracker.on_step_count(int(row.steps), timestamp)
            if isinstance(result, Rejected):
                rejections[result.reason.value] += 1
        elif row.kind == "activity":
            tracker.on_activity(row.activity, timestamp)
        else:
            tracker.on_acceleration(float(row.acceleration), row.movement, timestamp)

    if dropped_fixes:
        _LOG.info("Dropped %d fixes in the live filter chain", dropped_fixes)
    for reason, count in sorted(rejections.items()):
        _LOG.info("Rejected %d step updates: %s", count, reason)
    return tracker.finish()


def write_route(summary: SessionSummary, path: Path) -> None:
    frame = pd.DataFrame(
        {
            "latitude": list(summary.route.latitudes),
            "longitude": list(summary.route.longitudes),
        }
    )
    frame.to_csv(path, index=False)


def _build_parser() -> argparse.ArgumentParser:
    """Return the CLI argument parser for the replay tool."""

    parser = argparse.ArgumentParser(
        description=(
            "Replay a recorded location/pedometer event log through the live "
            "filters, step validator and distance estimator."
        )
    )
    parser.add_argument("events", type=Path, help="CSV event log to replay")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional CSV path for the smoothed route",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m walk_fusion.tools.replay_session``."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )

    try:
        events = load_events(args.events)
    except ReplayInputError as exc:
        logging.error("%s", exc)
        return 1

    logging.info("Replaying %d events from %s", len(events), args.events)
    summary = replay(events)
    logging.info("Distance %.1f m, steps %d", summary.total_distance_m, summary.steps)
    if summary.average_step_length_m is not None:
        logging.info("Learned stride %.2f m", summary.average_step_length_m)
    logging.info(
        "Route %d fixes -> %d smoothed points",
        len(summary.fixes),
        len(summary.route),
    )
    logging.info("Session action: %s", summary.validation.action.value)

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        write_route(summary, args.output)
        logging.info("Smoothed route written to %s", args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
