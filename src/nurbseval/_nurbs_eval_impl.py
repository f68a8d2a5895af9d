"""Homogeneous point and rational derivative kernels for NURBS curves.

Control points are stored unmultiplied as rows `(x, y, z, w)`. The kernels
apply the weights while accumulating, so that the homogeneous curve is
`Cw(u) = sum_i N_i(u) * (w_i x_i, w_i y_i, w_i z_i, w_i)`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from ._basis_impl import _eval_basis_derivatives_impl, _eval_basis_impl
from ._knots_impl import _find_span_impl, nb_jit


@nb_jit(nopython=True, cache=True)
def _eval_homogeneous_points_impl(
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    control_points: npt.NDArray[np.float32 | np.float64],
    pts: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate the homogeneous curve `(wx, wy, wz, w)` at every parameter.

    See The NURBS Book (2nd Ed.), Algorithm A4.1.

    Args:
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        control_points (npt.NDArray[np.float32 | np.float64]): Unmultiplied
            control points with shape (n, 4).
        pts (npt.NDArray[np.float32 | np.float64]): Parameters (1D array),
            already inside the curve domain.
        out (npt.NDArray[np.float32 | np.float64]): Output array with shape
            (pts.size, 4).

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    dtype = knots.dtype
    basis = np.empty(degree + 1, dtype=dtype)

    out.fill(dtype.type(0.0))
    for pt_id in range(pts.size):
        u = pts[pt_id]
        span = _find_span_impl(knots, degree, u)
        _eval_basis_impl(knots, degree, span, u, basis)

        first = span - degree
        for j in range(degree + 1):
            cp = control_points[first + j]
            nw = basis[j] * cp[3]
            out[pt_id, 0] += nw * cp[0]
            out[pt_id, 1] += nw * cp[1]
            out[pt_id, 2] += nw * cp[2]
            out[pt_id, 3] += nw


@nb_jit(nopython=True, cache=True)
def _binomial(n: int, k: int) -> int:
    """Binomial coefficient `n choose k` for small non-negative integers."""
    result = 1
    for i in range(1, k + 1):
        result = result * (n - k + i) // i
    return result


@nb_jit(nopython=True, cache=True)
def _eval_rational_derivatives_impl(  # noqa: PLR0913
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    control_points: npt.NDArray[np.float32 | np.float64],
    pts: npt.NDArray[np.float32 | np.float64],
    order: int,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate the Euclidean curve and its derivatives up to `order`.

    Derivatives of the homogeneous curve are computed first (Algorithm A3.2)
    and then resolved into Euclidean space with the quotient rule
    (Algorithm A4.2), both from The NURBS Book (2nd Ed.).

    Args:
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        control_points (npt.NDArray[np.float32 | np.float64]): Unmultiplied
            control points with shape (n, 4).
        pts (npt.NDArray[np.float32 | np.float64]): Parameters (1D array),
            already inside the curve domain.
        order (int): Highest derivative order. Orders above `degree` are
            allowed; the homogeneous derivatives vanish there but the rational
            ones, in general, do not.
        out (npt.NDArray[np.float32 | np.float64]): Output array with shape
            (pts.size, order+1, 3). `out[i, k]` is the k-th derivative at `pts[i]`.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    dtype = knots.dtype
    zero = dtype.type(0.0)

    du = min(order, degree)
    ders = np.empty((du + 1, degree + 1), dtype=dtype)
    hders = np.empty((order + 1, 4), dtype=dtype)
    v = np.empty(3, dtype=dtype)

    for pt_id in range(pts.size):
        u = pts[pt_id]
        span = _find_span_impl(knots, degree, u)
        _eval_basis_derivatives_impl(knots, degree, span, u, du, ders)

        hders.fill(zero)
        first = span - degree
        for k in range(du + 1):
            for j in range(degree + 1):
                cp = control_points[first + j]
                nw = ders[k, j] * cp[3]
                hders[k, 0] += nw * cp[0]
                hders[k, 1] += nw * cp[1]
                hders[k, 2] += nw * cp[2]
                hders[k, 3] += nw

        ck = out[pt_id]
        w0 = hders[0, 3]
        for k in range(order + 1):
            for c in range(3):
                v[c] = hders[k, c]
            for i in range(1, k + 1):
                coef = dtype.type(_binomial(k, i)) * hders[i, 3]
                for c in range(3):
                    v[c] -= coef * ck[k - i, c]
            for c in range(3):
                ck[k, c] = v[c] / w0


def _warmup_numba_functions() -> None:
    """Precompile the evaluation kernels with float64 signatures for faster first call.

    Curves freeze their knots and control points, so the read-only variants
    are the ones compiled here.
    """
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype=np.float64)
    control_points_dummy = np.ones((3, 4), dtype=np.float64)
    knots_dummy.setflags(write=False)
    control_points_dummy.setflags(write=False)
    pts_dummy = np.array([0.5], dtype=np.float64)
    degree_dummy = 2

    points_dummy = np.empty((pts_dummy.size, 4), dtype=np.float64)
    _eval_homogeneous_points_impl(
        degree_dummy, knots_dummy, control_points_dummy, pts_dummy, points_dummy
    )

    ders_dummy = np.empty((pts_dummy.size, 2, 3), dtype=np.float64)
    _eval_rational_derivatives_impl(
        degree_dummy, knots_dummy, control_points_dummy, pts_dummy, 1, ders_dummy
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_eval_homogeneous_points_impl",
    "_eval_rational_derivatives_impl",
]
