"""Generic parametric curve capability and the services built on it.

Any object providing vectorized `point_at` and `tangent_at` over a normalized
parameter in [0, 1] is a `ParametricCurve`. The functions in this module
sample such curves, reparameterize them by arc length and bound them, using
only those two operations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from numpy import typing as npt

_DEFAULT_ARC_DIVISIONS = 200


@runtime_checkable
class ParametricCurve(Protocol):
    """A curve evaluated through a normalized parameter `t` in [0, 1]."""

    def point_at(
        self, t: npt.ArrayLike, out: npt.NDArray[np.floating] | None = None
    ) -> npt.NDArray[np.floating]:
        """Points at normalized parameters `t`, with shape `(*np.shape(t), 3)`."""
        ...

    def tangent_at(
        self, t: npt.ArrayLike, out: npt.NDArray[np.floating] | None = None
    ) -> npt.NDArray[np.floating]:
        """Unit tangents at normalized parameters `t`, with shape `(*np.shape(t), 3)`."""
        ...


def _check_divisions(divisions: int) -> None:
    if divisions < 1:
        raise ValueError(f"divisions must be at least 1. Got {divisions}.")


def get_points(curve: ParametricCurve, divisions: int = 5) -> npt.NDArray[np.floating]:
    """Sample `divisions + 1` points uniformly in the curve parameter.

    Args:
        curve (ParametricCurve): Curve to sample.
        divisions (int): Number of parameter intervals. Defaults to 5.

    Returns:
        npt.NDArray[np.floating]: Points with shape (divisions + 1, 3).

    Raises:
        ValueError: If `divisions` is smaller than 1.
    """
    _check_divisions(divisions)
    return curve.point_at(np.linspace(0.0, 1.0, divisions + 1))


def get_lengths(
    curve: ParametricCurve, divisions: int = _DEFAULT_ARC_DIVISIONS
) -> npt.NDArray[np.floating]:
    """Cumulative chord lengths of the curve sampled uniformly in its parameter.

    Args:
        curve (ParametricCurve): Curve to measure.
        divisions (int): Number of parameter intervals. Defaults to 200.

    Returns:
        npt.NDArray[np.floating]: Array of shape (divisions + 1,) starting at 0;
            the last entry approximates the total curve length.

    Raises:
        ValueError: If `divisions` is smaller than 1.
    """
    pts = get_points(curve, divisions)
    lengths = np.zeros(divisions + 1, dtype=pts.dtype)
    lengths[1:] = np.cumsum(np.linalg.norm(np.diff(pts, axis=0), axis=1))
    return lengths


def get_length(curve: ParametricCurve, divisions: int = _DEFAULT_ARC_DIVISIONS) -> float:
    """Approximate the total curve length by the length of a sampled polyline."""
    return float(get_lengths(curve, divisions)[-1])


def get_u_to_t_mapping(
    curve: ParametricCurve,
    u: npt.ArrayLike,
    divisions: int = _DEFAULT_ARC_DIVISIONS,
    lengths: npt.NDArray[np.floating] | None = None,
) -> npt.NDArray[np.floating]:
    """Map normalized arc length `u` in [0, 1] to the curve parameter `t`.

    The mapping interpolates linearly in the cumulative chord length table.

    Args:
        curve (ParametricCurve): Curve to reparameterize.
        u (npt.ArrayLike): Fractions of the total length, clipped to [0, 1].
        divisions (int): Number of parameter intervals for the length table.
            Defaults to 200.
        lengths (npt.NDArray[np.floating] | None): Precomputed table from
            `get_lengths(curve, divisions)`. Defaults to None.

    Returns:
        npt.NDArray[np.floating]: Parameters `t` with the same shape as `u`.
            A curve of zero length maps `u` to itself.

    Raises:
        ValueError: If `divisions` is smaller than 1, or if `lengths` does not
            have `divisions + 1` entries.
    """
    if lengths is None:
        lengths = get_lengths(curve, divisions)
    elif lengths.shape != (divisions + 1,):
        raise ValueError(
            f"lengths must have shape {(divisions + 1,)} to match divisions. Got {lengths.shape}."
        )

    u_arr = np.clip(np.asarray(u, dtype=np.float64), 0.0, 1.0)
    total = float(lengths[-1])
    if total <= 0.0:
        return u_arr

    t_table = np.linspace(0.0, 1.0, divisions + 1)
    return np.interp(u_arr * total, lengths, t_table)


def point_at_arc_length(
    curve: ParametricCurve, u: npt.ArrayLike, divisions: int = _DEFAULT_ARC_DIVISIONS
) -> npt.NDArray[np.floating]:
    """Evaluate points at fractions `u` of the curve length."""
    return curve.point_at(get_u_to_t_mapping(curve, u, divisions))


def tangent_at_arc_length(
    curve: ParametricCurve, u: npt.ArrayLike, divisions: int = _DEFAULT_ARC_DIVISIONS
) -> npt.NDArray[np.floating]:
    """Evaluate unit tangents at fractions `u` of the curve length."""
    return curve.tangent_at(get_u_to_t_mapping(curve, u, divisions))


def get_spaced_points(
    curve: ParametricCurve,
    divisions: int = 5,
    arc_divisions: int = _DEFAULT_ARC_DIVISIONS,
) -> npt.NDArray[np.floating]:
    """Sample `divisions + 1` points equally spaced along the curve length.

    Args:
        curve (ParametricCurve): Curve to sample.
        divisions (int): Number of arc length intervals. Defaults to 5.
        arc_divisions (int): Number of parameter intervals of the length table.
            Defaults to 200.

    Returns:
        npt.NDArray[np.floating]: Points with shape (divisions + 1, 3).

    Raises:
        ValueError: If `divisions` or `arc_divisions` is smaller than 1.
    """
    _check_divisions(divisions)
    return point_at_arc_length(curve, np.linspace(0.0, 1.0, divisions + 1), arc_divisions)


def get_bounding_box(
    curve: ParametricCurve, divisions: int = _DEFAULT_ARC_DIVISIONS
) -> tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]:
    """Axis-aligned bounding box of the sampled curve.

    The box encloses the sampled points only, so it may slightly underestimate
    the extent of the curve between samples.

    Args:
        curve (ParametricCurve): Curve to bound.
        divisions (int): Number of parameter intervals. Defaults to 200.

    Returns:
        tuple[npt.NDArray[np.floating], npt.NDArray[np.floating]]: The minimum
            and maximum corners, each of shape (3,).

    Raises:
        ValueError: If `divisions` is smaller than 1.
    """
    pts = get_points(curve, divisions)
    return pts.min(axis=0), pts.max(axis=0)


__all__ = [
    "ParametricCurve",
    "get_bounding_box",
    "get_length",
    "get_lengths",
    "get_points",
    "get_spaced_points",
    "get_u_to_t_mapping",
    "point_at_arc_length",
    "tangent_at_arc_length",
]
