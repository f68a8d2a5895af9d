"""Smoke tests for package metadata.

Validates public attributes exposed via the package API.
"""

from __future__ import annotations

import importlib
import logging
from typing import Final

import nurbseval


def test_package_all_exports() -> None:
    """Ensure all expected symbols are exported."""
    expected_metadata: Final[set[str]] = {"__version__", "__license__"}
    assert expected_metadata.issubset(set(nurbseval.__all__))

    expected_public_api: Final[set[str]] = {
        # Control points
        "ControlPoint",
        "ControlPointLike",
        "Point2",
        "Point3",
        "Point4",
        "normalize_control_point",
        "normalize_control_points",
        # Curves
        "NurbsCurve",
        "ParametricCurve",
        "get_bounding_box",
        "get_length",
        "get_lengths",
        "get_points",
        "get_spaced_points",
        "get_u_to_t_mapping",
        "point_at_arc_length",
        "tangent_at_arc_length",
        # Tolerance
        "get_conservative_tolerance",
        "get_default_tolerance",
        "get_machine_epsilon",
        "get_strict_tolerance",
    }
    assert expected_public_api.issubset(set(nurbseval.__all__))

    private_in_all = {name for name in nurbseval.__all__ if name.startswith("_")}
    assert private_in_all.issubset(expected_metadata)

    assert set(nurbseval.__all__) == expected_metadata | expected_public_api


def test_package_metadata_values() -> None:
    """Validate the package metadata constants."""
    assert nurbseval.__version__ == "0.1.0"
    assert nurbseval.__license__ == "MIT"


def test_package_logger_is_silent_by_default() -> None:
    """The package logger carries a NullHandler."""
    handlers = logging.getLogger("nurbseval").handlers
    assert any(isinstance(handler, logging.NullHandler) for handler in handlers)


def test_metadata_import_stability() -> None:
    """Verify metadata survives module reloads."""
    module = importlib.reload(nurbseval)
    assert module.__version__ == "0.1.0"
