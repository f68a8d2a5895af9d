"""Pytest configuration: make `src` importable without installing the package, and shared curves."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()

from nurbseval import NurbsCurve  # noqa: E402

SQRT2_2 = float(np.sqrt(2.0) / 2.0)


@pytest.fixture
def line_curve() -> NurbsCurve:
    """Degree 1 segment from the origin to (1, 1, 1)."""
    return NurbsCurve(1, [0.0, 0.0, 1.0, 1.0], [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])


@pytest.fixture
def quarter_circle() -> NurbsCurve:
    """Exact quarter of the unit circle in the xy plane, from (1, 0) to (0, 1)."""
    return NurbsCurve(
        2,
        [0.0, 0.0, 0.0, 1.0, 1.0, 1.0],
        [[1.0, 0.0, 0.0, 1.0], [1.0, 1.0, 0.0, SQRT2_2], [0.0, 1.0, 0.0, 1.0]],
    )


@pytest.fixture
def cubic_curve() -> NurbsCurve:
    """Non-rational cubic with interior knots and unit weights."""
    knots = [0.0, 0.0, 0.0, 0.0, 0.3, 0.6, 1.0, 1.0, 1.0, 1.0]
    control_points = [
        [0.0, 0.0, 0.0],
        [1.0, 2.0, 0.5],
        [2.0, -1.0, 1.0],
        [3.0, 3.0, -0.5],
        [4.0, 0.0, 2.0],
        [5.0, 1.0, 0.0],
    ]
    return NurbsCurve(3, knots, control_points)


@pytest.fixture
def rational_cubic() -> NurbsCurve:
    """Rational cubic sharing the geometry of `cubic_curve` but with varying weights."""
    knots = [0.0, 0.0, 0.0, 0.0, 0.3, 0.6, 1.0, 1.0, 1.0, 1.0]
    control_points = [
        [0.0, 0.0, 0.0, 1.0],
        [1.0, 2.0, 0.5, 0.5],
        [2.0, -1.0, 1.0, 2.0],
        [3.0, 3.0, -0.5, 1.5],
        [4.0, 0.0, 2.0, 0.7],
        [5.0, 1.0, 0.0, 1.0],
    ]
    return NurbsCurve(3, knots, control_points)
