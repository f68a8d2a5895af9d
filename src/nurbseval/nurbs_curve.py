"""NurbsCurve class: rational B-spline curve evaluation in 3D."""

from __future__ import annotations

import logging
import numbers
from collections.abc import Sequence
from typing import Any, cast

import numpy as np
from numpy import typing as npt
from scipy import integrate

from ._curve_utils import _compute_output_shape, _normalize_params_1D, _validate_out_array
from ._knots_impl import _check_curve_info_impl, _is_in_domain_impl, _snap_to_domain_impl
from ._nurbs_eval_impl import _eval_homogeneous_points_impl, _eval_rational_derivatives_impl
from .control_points import ControlPointLike, normalize_control_points
from .tolerance import get_default_tolerance, get_strict_tolerance

logger = logging.getLogger(__name__)


def _check_index(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"{name} must be an integer. Got {type(value).__name__}.")
    return int(value)


class NurbsCurve:
    """A Non-Uniform Rational B-Spline curve in 3D space.

    The curve is defined by a degree, a knot vector and weighted control points
    `(x, y, z, w)`. It is evaluated through a normalized parameter `t` that is
    mapped linearly onto the active knot span
    `[knots[start_knot], knots[end_knot]]`. Narrowing the active span hides the
    auxiliary spans that periodic curves carry for smooth closure.

    Both points and tangents are evaluated on the active span, so `point_at(t)`
    and `tangent_at(t)` always refer to the same location on the curve.

    Instances are immutable: the knot vector and control points are exposed
    as read-only arrays and there is no mutation API. A curve can therefore be
    evaluated concurrently from several threads, as long as each call gets its
    own `out` array.

    Example:
        >>> curve = NurbsCurve(1, [0, 0, 1, 1], [[0, 0, 0], [1, 1, 1]])
        >>> curve.point_at(0.5)
        array([0.5, 0.5, 0.5])
    """

    def __init__(  # noqa: PLR0913
        self,
        degree: int,
        knots: npt.ArrayLike,
        control_points: Sequence[ControlPointLike] | npt.NDArray[np.floating],
        start_knot: int | None = None,
        end_knot: int | None = None,
        dtype: npt.DTypeLike | None = None,
    ) -> None:
        """Initialize a NURBS curve.

        Args:
            degree (int): Curve degree. Must be at least 1.
            knots (npt.ArrayLike): Non-decreasing knot vector with
                `len(control_points) + degree + 1` entries.
            control_points (Sequence[ControlPointLike] | npt.NDArray[np.floating]):
                Control points with 2, 3 or 4 components `(x, y[, z[, w]])`.
                Missing `z` defaults to 0 and missing `w` to 1.
            start_knot (int | None): Index of the knot where the active span
                starts. Defaults to 0. `0` is a valid explicit index.
            end_knot (int | None): Index of the knot where the active span
                ends. Defaults to `len(knots) - 1`.
            dtype (npt.DTypeLike | None): Floating dtype (float32 or float64).
                If None, float32 knots keep their dtype and anything else is
                evaluated in float64. Defaults to None.

        Raises:
            TypeError: If `degree`, `start_knot` or `end_knot` is not an integer,
                or if the knots are not 1-dimensional.
            ValueError: If the knot vector is inconsistent with the degree and
                the number of control points, if the control points are invalid
                (see `normalize_control_points`), or if the knot indices do not
                satisfy `0 <= start_knot < end_knot <= len(knots) - 1`.
        """
        self._degree = _check_index("degree", degree)

        knots_arr = np.asarray(knots)
        if knots_arr.ndim != 1:
            raise TypeError(f"knots must be a 1D array. Got shape {knots_arr.shape}.")
        if dtype is None:
            dtype = np.float32 if knots_arr.dtype == np.float32 else np.float64
        self._dtype = cast(np.dtype[np.floating[Any]], np.dtype(dtype))
        if self._dtype not in (np.dtype(np.float32), np.dtype(np.float64)):
            raise ValueError(f"dtype must be float32 or float64. Got {self._dtype}.")

        # Private copies, so that freezing them does not affect the caller's arrays.
        self._knots = np.array(knots_arr, dtype=self._dtype, order="C", copy=True)
        self._control_points = np.ascontiguousarray(
            normalize_control_points(control_points, dtype=self._dtype)
        )
        _check_curve_info_impl(self._knots, self._degree, self._control_points.shape[0])

        last_knot = self._knots.size - 1
        self._start_knot = 0 if start_knot is None else _check_index("start_knot", start_knot)
        self._end_knot = last_knot if end_knot is None else _check_index("end_knot", end_knot)
        if not 0 <= self._start_knot < self._end_knot <= last_knot:
            raise ValueError(
                f"Knot indices must satisfy 0 <= start_knot < end_knot <= {last_knot}. "
                f"Got start_knot={self._start_knot} and end_knot={self._end_knot}."
            )

        # Vanishing first derivatives are judged against the curve size per unit of knot range.
        knot_begin, knot_end = self.domain
        extent = float(np.linalg.norm(np.ptp(self._control_points[:, :3], axis=0)))
        strict_tol = get_strict_tolerance(self._dtype)
        self._degenerate_speed = strict_tol * extent / (knot_end - knot_begin)

        self._knots.setflags(write=False)
        self._control_points.setflags(write=False)

        logger.debug(
            "Created NURBS curve: degree=%d, %d control points, active span [%d, %d], %s",
            self._degree,
            self.num_control_points,
            self._start_knot,
            self._end_knot,
            self._dtype,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(degree={self._degree}, "
            f"num_control_points={self.num_control_points}, "
            f"start_knot={self._start_knot}, end_knot={self._end_knot}, "
            f"dtype={self._dtype})"
        )

    @property
    def degree(self) -> int:
        """The degree of the curve."""
        return self._degree

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """The knot vector (read-only)."""
        return self._knots

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The unmultiplied weighted control points, shape (n, 4) (read-only)."""
        return self._control_points

    @property
    def weights(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control point weights (read-only view)."""
        return self._control_points[:, 3]

    @property
    def num_control_points(self) -> int:
        """The number of control points."""
        return int(self._control_points.shape[0])

    @property
    def start_knot(self) -> int:
        """Index of the knot where the active span starts."""
        return self._start_knot

    @property
    def end_knot(self) -> int:
        """Index of the knot where the active span ends."""
        return self._end_knot

    @property
    def dtype(self) -> np.dtype[np.floating[Any]]:
        """The floating dtype used for evaluation."""
        return self._dtype

    @property
    def tolerance(self) -> float:
        """The tolerance used for parameter domain checks."""
        return get_default_tolerance(self._dtype)

    @property
    def is_rational(self) -> bool:
        """Whether any control point has a weight different from 1."""
        return bool(np.any(self.weights != 1.0))

    @property
    def domain(self) -> tuple[float, float]:
        """The knot range `[knots[degree], knots[-degree-1]]` where the basis is defined."""
        return float(self._knots[self._degree]), float(self._knots[-self._degree - 1])

    @property
    def active_domain(self) -> tuple[float, float]:
        """The knot range `[knots[start_knot], knots[end_knot]]` mapped onto `t` in [0, 1]."""
        return float(self._knots[self._start_knot]), float(self._knots[self._end_knot])

    def map_parameter(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Map normalized parameters onto the active knot span.

        Computes `u = knots[start_knot] + t * (knots[end_knot] - knots[start_knot])`.
        Values outside [0, 1] are extrapolated, not clamped.

        Args:
            t (npt.ArrayLike): Normalized parameters (scalar or array).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Knot parameters with the same
                shape as `t` (0-dimensional for scalars).
        """
        t_arr, input_shape = _normalize_params_1D(t, self._dtype)
        return self._map_parameter_1D(t_arr).reshape(input_shape)

    def _map_parameter_1D(
        self, t: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        k0 = self._knots[self._start_knot]
        k1 = self._knots[self._end_knot]
        return k0 + t * (k1 - k0)

    def _prepare_knot_params(
        self, u: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Check knot parameters against the domain and absorb round-off at its ends.

        Raises:
            ValueError: If any parameter lies outside the curve domain.
        """
        if not np.all(_is_in_domain_impl(self._knots, self._degree, u, self.tolerance)):
            raise ValueError(
                f"One or more parameters map outside the curve domain {self.domain}. "
                f"Got knot parameters in [{u.min()}, {u.max()}]."
            )
        return cast(
            npt.NDArray[np.float32 | np.float64], _snap_to_domain_impl(self._knots, self._degree, u)
        )

    def _homogeneous_1D(
        self, u: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        hpts = np.empty((u.size, 4), dtype=self._dtype)
        _eval_homogeneous_points_impl(
            self._degree, self._knots, self._control_points, self._prepare_knot_params(u), hpts
        )
        return hpts

    def _points_1D(
        self, u: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        hpts = self._homogeneous_1D(u)
        w = hpts[:, 3]
        # Exact comparison: polynomial points skip the projection.
        rational = w != 1.0
        hpts[rational, :3] /= w[rational, np.newaxis]
        return hpts[:, :3]

    def _derivatives_1D(
        self, u: npt.NDArray[np.float32 | np.float64], order: int
    ) -> npt.NDArray[np.float32 | np.float64]:
        ders = np.empty((u.size, order + 1, 3), dtype=self._dtype)
        _eval_rational_derivatives_impl(
            self._degree,
            self._knots,
            self._control_points,
            self._prepare_knot_params(u),
            order,
            ders,
        )
        return ders

    def _tangents_1D(
        self, u: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        first = self._derivatives_1D(u, 1)[:, 1, :]
        norms = np.linalg.norm(first, axis=1)

        degenerate = ~(norms > self._degenerate_speed)
        tangents = np.full_like(first, np.nan)
        regular = ~degenerate
        tangents[regular] = first[regular] / norms[regular, np.newaxis]

        if np.any(degenerate):
            logger.debug(
                "Vanishing first derivative at knot parameters %s: tangent is undefined (NaN).",
                u[degenerate],
            )
        return tangents

    @staticmethod
    def _write_result(
        result: npt.NDArray[np.float32 | np.float64],
        expected_shape: tuple[int, ...],
        out: npt.NDArray[np.float32 | np.float64] | None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        if out is None:
            return result.reshape(expected_shape)
        out[...] = result.reshape(expected_shape)
        return out

    def _prepare_out(
        self,
        out: npt.NDArray[np.float32 | np.float64] | None,
        expected_shape: tuple[int, ...],
    ) -> None:
        if out is not None:
            _validate_out_array(out, expected_shape, self._dtype)

    def evaluate(
        self,
        u: npt.ArrayLike,
        out: npt.NDArray[np.float32 | np.float64] | None = None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate curve points directly at knot parameters `u`, bypassing the active span.

        Args:
            u (npt.ArrayLike): Knot parameters within `domain`.
            out (npt.NDArray[np.float32 | np.float64] | None): Optional output
                array with shape `(*np.shape(u), 3)` and the curve dtype.
                Defaults to None.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Points with shape `(*np.shape(u), 3)`.
                If `out` was provided, returns the same array.

        Raises:
            ValueError: If any parameter lies outside `domain`, or if `out` has
                an incorrect shape or dtype or is not writeable.
        """
        u_arr, input_shape = _normalize_params_1D(u, self._dtype)
        expected_shape = _compute_output_shape(input_shape, 3)
        self._prepare_out(out, expected_shape)
        return self._write_result(self._points_1D(u_arr), expected_shape, out)

    def homogeneous_point_at(
        self,
        t: npt.ArrayLike,
        out: npt.NDArray[np.float32 | np.float64] | None = None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the homogeneous curve `(wx, wy, wz, w)` at normalized parameters.

        Args:
            t (npt.ArrayLike): Normalized parameters.
            out (npt.NDArray[np.float32 | np.float64] | None): Optional output
                array with shape `(*np.shape(t), 4)`. Defaults to None.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Homogeneous points with shape
                `(*np.shape(t), 4)`. If `out` was provided, returns the same array.

        Raises:
            ValueError: If any parameter maps outside `domain`, or if `out` is invalid.
        """
        t_arr, input_shape = _normalize_params_1D(t, self._dtype)
        expected_shape = _compute_output_shape(input_shape, 4)
        self._prepare_out(out, expected_shape)
        hpts = self._homogeneous_1D(self._map_parameter_1D(t_arr))
        return self._write_result(hpts, expected_shape, out)

    def point_at(
        self,
        t: npt.ArrayLike,
        out: npt.NDArray[np.float32 | np.float64] | None = None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate curve points at normalized parameters.

        Each parameter is mapped onto the active knot span, the homogeneous
        point is evaluated and, unless its weight is exactly 1, projected to
        Euclidean space by dividing by the weight.

        Args:
            t (npt.ArrayLike): Normalized parameters, nominally in [0, 1].
            out (npt.NDArray[np.float32 | np.float64] | None): Optional output
                array where the points will be stored. If None, a new array is
                allocated. Must have shape `(*np.shape(t), 3)` and the curve
                dtype. This follows NumPy's style for output arrays.
                Defaults to None.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Points with shape `(*np.shape(t), 3)`.
                If `out` was provided, returns the same array.

        Raises:
            ValueError: If any parameter maps outside `domain`, or if `out` has
                an incorrect shape or dtype or is not writeable.

        Example:
            >>> curve = NurbsCurve(1, [0, 0, 1, 1], [[0, 0, 0], [1, 1, 1]])
            >>> curve.point_at([0.0, 1.0])
            array([[0., 0., 0.],
                   [1., 1., 1.]])
        """
        t_arr, input_shape = _normalize_params_1D(t, self._dtype)
        expected_shape = _compute_output_shape(input_shape, 3)
        self._prepare_out(out, expected_shape)
        points = self._points_1D(self._map_parameter_1D(t_arr))
        return self._write_result(points, expected_shape, out)

    def tangent_at(
        self,
        t: npt.ArrayLike,
        out: npt.NDArray[np.float32 | np.float64] | None = None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate unit tangent directions at normalized parameters.

        The parameter mapping is the same as in `point_at`. The first
        derivative of the rational curve is normalized to unit length.
        Where the first derivative vanishes (e.g., coincident consecutive
        control points) the direction is undefined and every component of
        the result is NaN. The derivative counts as vanishing when its norm
        is negligible relative to the control point extent per unit of knot
        range, so the check does not depend on the scale of the curve.

        Args:
            t (npt.ArrayLike): Normalized parameters, nominally in [0, 1].
            out (npt.NDArray[np.float32 | np.float64] | None): Optional output
                array with shape `(*np.shape(t), 3)` and the curve dtype.
                Defaults to None.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Unit tangents with shape
                `(*np.shape(t), 3)`. If `out` was provided, returns the same array.

        Raises:
            ValueError: If any parameter maps outside `domain`, or if `out` has
                an incorrect shape or dtype or is not writeable.
        """
        t_arr, input_shape = _normalize_params_1D(t, self._dtype)
        expected_shape = _compute_output_shape(input_shape, 3)
        self._prepare_out(out, expected_shape)
        tangents = self._tangents_1D(self._map_parameter_1D(t_arr))
        return self._write_result(tangents, expected_shape, out)

    def derivatives_at(
        self,
        t: npt.ArrayLike,
        order: int = 1,
        out: npt.NDArray[np.float32 | np.float64] | None = None,
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve point and its derivatives with respect to the knot parameter.

        Derivatives are taken with respect to `u`, not `t`; multiply the k-th
        derivative by `(knots[end_knot] - knots[start_knot])**k` to obtain the
        derivative with respect to `t`.

        Args:
            t (npt.ArrayLike): Normalized parameters.
            order (int): Highest derivative order. Must be non-negative.
                Defaults to 1.
            out (npt.NDArray[np.float32 | np.float64] | None): Optional output
                array with shape `(*np.shape(t), order+1, 3)`. Defaults to None.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Array with shape
                `(*np.shape(t), order+1, 3)`; index `k` along the second to
                last axis holds the k-th derivative, index 0 the point.

        Raises:
            TypeError: If `order` is not an integer.
            ValueError: If `order` is negative, if any parameter maps outside
                `domain`, or if `out` is invalid.
        """
        order = _check_index("order", order)
        if order < 0:
            raise ValueError(f"order must be non-negative. Got {order}.")

        t_arr, input_shape = _normalize_params_1D(t, self._dtype)
        expected_shape = _compute_output_shape(input_shape, order + 1, 3)
        self._prepare_out(out, expected_shape)
        ders = self._derivatives_1D(self._map_parameter_1D(t_arr), order)
        return self._write_result(ders, expected_shape, out)

    def arc_length(self, t0: float = 0.0, t1: float = 1.0) -> float:
        """Compute the arc length between two normalized parameters.

        The speed `|C'(u)|` is integrated over the mapped knot interval with
        adaptive quadrature, splitting at the interior knots where the curve
        may lose smoothness.

        Args:
            t0 (float): Start parameter. Defaults to 0.
            t1 (float): End parameter. Defaults to 1.

        Returns:
            float: The arc length, negative if `t1 < t0`.

        Raises:
            ValueError: If `t0` or `t1` maps outside `domain`.
        """
        ends = self._map_parameter_1D(np.array([t0, t1], dtype=self._dtype))
        u0, u1 = (float(u) for u in self._prepare_knot_params(ends))
        if u0 == u1:
            return 0.0

        lo, hi = min(u0, u1), max(u0, u1)

        def speed(u: float) -> float:
            der = self._derivatives_1D(np.array([u], dtype=self._dtype), 1)
            return float(np.linalg.norm(der[0, 1]))

        breaks = np.unique(self._knots[(self._knots > lo) & (self._knots < hi)])
        length, _ = integrate.quad(
            speed,
            lo,
            hi,
            points=breaks if breaks.size > 0 else None,
            limit=max(50, 4 * (breaks.size + 1)),
        )
        return float(length) if u1 > u0 else -float(length)
