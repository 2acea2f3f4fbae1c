"""Global pytest fixtures & helpers.

Adds project root to path and exposes the shared fix/track factories as
fixtures so the filter, estimator and smoother tests share one notion of a
walking route.
"""
from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from track_builders import make_northbound_track, make_snapshot


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def northbound_track():
    return make_northbound_track(10)


@pytest.fixture
def walking_snapshot():
    return make_snapshot()
