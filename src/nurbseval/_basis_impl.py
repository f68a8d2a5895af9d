"""Core B-spline basis function evaluation kernels.

This module provides Numba-compiled routines for evaluating the non-vanishing
B-spline basis functions of a knot span, and their derivatives, following
The NURBS Book (2nd Ed.), Algorithms A2.2 and A2.3.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ._knots_impl import nb_jit


@nb_jit(nopython=True, cache=True)
def _eval_basis_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    span: int,
    u: float,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate the `degree+1` non-vanishing basis functions at `u`.

    Results are written directly to the output array (C-style).

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): B-spline knot vector.
        degree (int): B-spline degree.
        span (int): Knot span index containing `u`.
        u (float): Evaluation parameter.
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape
            (degree+1,). `out[j]` is the value of basis `span - degree + j`.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    dtype = knots.dtype
    zero = dtype.type(0.0)
    one = dtype.type(1.0)

    left = np.empty(degree + 1, dtype=dtype)
    right = np.empty(degree + 1, dtype=dtype)

    out[0] = one
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = zero
        for r in range(j):
            tmp = out[r] / (right[r + 1] + left[j - r])
            out[r] = saved + right[r + 1] * tmp
            saved = left[j - r] * tmp
        out[j] = saved


@nb_jit(nopython=True, cache=True)
def _eval_basis_derivatives_impl(  # noqa: PLR0913
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    span: int,
    u: float,
    n_ders: int,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate the non-vanishing basis functions and their derivatives at `u`.

    Results are written directly to the output array (C-style).

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): B-spline knot vector.
        degree (int): B-spline degree.
        span (int): Knot span index containing `u`.
        u (float): Evaluation parameter.
        n_ders (int): Highest derivative order. Must not exceed `degree`.
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape
            (n_ders+1, degree+1). `out[k, j]` is the k-th derivative of basis
            `span - degree + j`.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    dtype = knots.dtype
    zero = dtype.type(0.0)
    one = dtype.type(1.0)
    order = degree + 1

    ndu = np.empty((order, order), dtype=dtype)
    a = np.empty((2, order), dtype=dtype)
    left = np.empty(order, dtype=dtype)
    right = np.empty(order, dtype=dtype)

    # Basis values in the upper triangle, knot differences in the lower one.
    ndu[0, 0] = one
    for j in range(1, order):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = zero
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            tmp = ndu[r, j - 1] / ndu[j, r]
            ndu[r, j] = saved + right[r + 1] * tmp
            saved = left[j - r] * tmp
        ndu[j, j] = saved

    for j in range(order):
        out[0, j] = ndu[j, degree]

    for r in range(order):
        s1, s2 = 0, 1
        a[0, 0] = one
        for k in range(1, n_ders + 1):
            d = zero
            rk, pk = r - k, degree - k
            if r >= k:
                a[s2, 0] = a[s1, 0] / ndu[pk + 1, rk]
                d = a[s2, 0] * ndu[rk, pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else degree - r
            for j in range(j1, j2 + 1):
                a[s2, j] = (a[s1, j] - a[s1, j - 1]) / ndu[pk + 1, rk + j]
                d += a[s2, j] * ndu[rk + j, pk]
            if r <= pk:
                a[s2, k] = -a[s1, k - 1] / ndu[pk + 1, r]
                d += a[s2, k] * ndu[r, pk]
            out[k, r] = d
            s1, s2 = s2, s1

    factor = degree
    for k in range(1, n_ders + 1):
        for j in range(order):
            out[k, j] *= factor
        factor *= degree - k


__all__ = [
    "_eval_basis_derivatives_impl",
    "_eval_basis_impl",
]
