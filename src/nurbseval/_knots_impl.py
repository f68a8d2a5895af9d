"""Knot vector validation, span search and domain checks.

This module provides low-level, Numba-accelerated helpers shared by the
basis and NURBS evaluation kernels.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(nopython=True, cache=True)
def _check_curve_info_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    num_control_points: int,
) -> None:
    """Validate the knot vector of a curve against its degree and control points.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector to check.
        degree (int): Curve degree.
        num_control_points (int): Number of control points of the curve.

    Raises:
        TypeError: If `knots` is not 1-dimensional.
        ValueError: If `degree` is smaller than 1, if the number of knots is not
            `num_control_points + degree + 1`, if the knots are not finite, if the
            knot vector is not non-decreasing, or if the curve domain is empty.
    """
    if knots.ndim != 1:
        raise TypeError("knots must be a 1D array")
    if degree < 1:
        raise ValueError("degree must be at least 1")
    if num_control_points < degree + 1:
        raise ValueError("the number of control points must be at least degree+1")
    if knots.size != num_control_points + degree + 1:
        raise ValueError("the number of knots must be the number of control points plus degree+1")
    if not np.all(np.isfinite(knots)):
        raise ValueError("knots must be finite")
    if not np.all(np.diff(knots) >= knots.dtype.type(0.0)):
        raise ValueError("knots must be non-decreasing")
    if not knots[degree] < knots[knots.size - degree - 1]:
        raise ValueError("the curve domain [knots[degree], knots[-degree-1]] must not be empty")


@nb_jit(nopython=True, cache=True)
def _find_span_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    u: float,
) -> int:
    """Find the knot span index `i` such that `knots[i] <= u < knots[i+1]`.

    The search is restricted to the spans of the curve domain, so that the
    last domain knot maps to the last non-empty span.
    See The NURBS Book (2nd Ed.), Algorithm A2.1.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Non-decreasing knot vector.
        degree (int): Curve degree.
        u (float): Parameter, assumed to lie in the curve domain.

    Returns:
        int: The span index, between `degree` and `len(knots) - degree - 2`.
    """
    last = knots.size - degree - 2
    if u >= knots[last + 1]:
        return last
    span = np.searchsorted(knots, u, side="right") - 1
    if span < degree:
        return degree
    return span


@nb_jit(nopython=True, cache=True)
def _is_in_domain_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    pts: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> npt.NDArray[np.bool_]:
    """Check if parameters lie within the curve domain (up to tolerance).

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): Curve degree.
        pts (npt.NDArray[np.float32 | np.float64]): Parameters (1D array) to check.
        tol (float): Tolerance for numerical comparisons.

    Returns:
        npt.NDArray[np.bool_]: True where the parameter is in the domain.
            NaN parameters are never in the domain.
    """
    knot_begin, knot_end = knots[degree], knots[knots.size - degree - 1]
    return np.logical_and(pts >= knot_begin - tol, pts <= knot_end + tol)


@nb_jit(nopython=True, cache=True)
def _snap_to_domain_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    pts: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Clip parameters to the curve domain, returning a new array.

    Used after `_is_in_domain_impl` to absorb round-off at the domain ends.
    """
    knot_begin, knot_end = knots[degree], knots[knots.size - degree - 1]
    out = np.empty_like(pts)
    for i in range(pts.size):
        out[i] = min(max(pts[i], knot_begin), knot_end)
    return out


__all__ = [
    "_check_curve_info_impl",
    "_find_span_impl",
    "_is_in_domain_impl",
    "_snap_to_domain_impl",
]
