"""Tests for the knot, basis and NURBS evaluation kernels."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest
from scipy.interpolate import BSpline

from nurbseval._basis_impl import _eval_basis_derivatives_impl, _eval_basis_impl
from nurbseval._knots_impl import (
    _check_curve_info_impl,
    _find_span_impl,
    _is_in_domain_impl,
    _snap_to_domain_impl,
)
from nurbseval._nurbs_eval_impl import (
    _eval_homogeneous_points_impl,
    _eval_rational_derivatives_impl,
)
from nurbseval.tolerance import get_default_tolerance

KNOTS = np.array([0.0, 0.0, 0.0, 0.25, 0.7, 0.7, 1.0, 1.0, 1.0])
DEGREE = 2


def _scipy_basis(knots: np.ndarray, degree: int, u: float, nu: int = 0) -> np.ndarray:
    """All basis functions (or their derivatives) at `u` through SciPy."""
    spline = BSpline(knots, np.eye(knots.size - degree - 1), degree)
    return spline.derivative(nu)(u) if nu else spline(u)


class TestFindSpan:
    """Tests for `_find_span_impl`."""

    @pytest.mark.parametrize(
        ("u", "expected"),
        [(0.0, 2), (0.1, 2), (0.25, 3), (0.5, 3), (0.7, 5), (0.9, 5), (1.0, 5)],
    )
    def test_open_knots(self, u: float, expected: int) -> None:
        """Spans satisfy knots[i] <= u < knots[i+1], the last knot mapping to the last span."""
        assert _find_span_impl(KNOTS, DEGREE, u) == expected

    def test_unclamped_knots(self) -> None:
        """Spans stay within the domain of unclamped knot vectors."""
        knots = np.arange(8, dtype=np.float64)
        assert _find_span_impl(knots, 2, 2.0) == 2
        assert _find_span_impl(knots, 2, 4.5) == 4
        assert _find_span_impl(knots, 2, 5.0) == 4


class TestDomain:
    """Tests for the domain helpers."""

    def test_is_in_domain(self) -> None:
        """Values within tolerance of the domain ends are accepted; NaN is not."""
        tol = get_default_tolerance(np.float64)
        pts = np.array([-1e-3, -0.5 * tol, 0.0, 0.5, 1.0 + 0.5 * tol, 1.001, np.nan])
        result = _is_in_domain_impl(KNOTS, DEGREE, pts, tol)
        nptest.assert_array_equal(result, [False, True, True, True, True, False, False])

    def test_snap_to_domain(self) -> None:
        """Values are clipped to the domain ends."""
        pts = np.array([-1e-14, 0.5, 1.0 + 1e-14])
        nptest.assert_array_equal(_snap_to_domain_impl(KNOTS, DEGREE, pts), [0.0, 0.5, 1.0])

    def test_check_curve_info_accepts_valid_input(self) -> None:
        """A consistent knot vector passes validation."""
        _check_curve_info_impl(KNOTS, DEGREE, 6)

    def test_check_curve_info_count_error(self) -> None:
        """The knot count must match the control point count."""
        with pytest.raises(ValueError, match="number of knots"):
            _check_curve_info_impl(KNOTS, DEGREE, 5)


class TestBasis:
    """Tests for the basis kernels."""

    @pytest.mark.parametrize("u", [0.0, 0.1, 0.25, 0.5, 0.7, 0.85, 1.0])
    def test_matches_scipy(self, u: float) -> None:
        """Non-vanishing basis values agree with SciPy."""
        span = _find_span_impl(KNOTS, DEGREE, u)
        out = np.empty(DEGREE + 1)
        _eval_basis_impl(KNOTS, DEGREE, span, u, out)

        expected = _scipy_basis(KNOTS, DEGREE, u)
        nptest.assert_allclose(out, expected[span - DEGREE : span + 1], atol=1e-14)

    @pytest.mark.parametrize("u", np.linspace(0.0, 1.0, 13))
    def test_partition_of_unity(self, u: float) -> None:
        """Basis values are non-negative and sum to one."""
        span = _find_span_impl(KNOTS, DEGREE, u)
        out = np.empty(DEGREE + 1)
        _eval_basis_impl(KNOTS, DEGREE, span, u, out)

        assert np.all(out >= 0.0)
        assert out.sum() == pytest.approx(1.0, abs=1e-14)

    @pytest.mark.parametrize("u", [0.1, 0.3, 0.5, 0.85])
    def test_derivatives_match_scipy(self, u: float) -> None:
        """Basis derivatives agree with SciPy."""
        knots = np.array([0.0, 0.0, 0.0, 0.0, 0.2, 0.45, 0.8, 1.0, 1.0, 1.0, 1.0])
        degree = 3
        span = _find_span_impl(knots, degree, u)
        out = np.empty((degree + 1, degree + 1))
        _eval_basis_derivatives_impl(knots, degree, span, u, degree, out)

        for k in range(degree + 1):
            expected = _scipy_basis(knots, degree, u, nu=k)[span - degree : span + 1]
            nptest.assert_allclose(out[k], expected, rtol=1e-10, atol=1e-9)

    def test_derivatives_row_zero_is_basis(self) -> None:
        """The zeroth derivative row equals the basis values."""
        u = 0.4
        span = _find_span_impl(KNOTS, DEGREE, u)
        values = np.empty(DEGREE + 1)
        ders = np.empty((2, DEGREE + 1))
        _eval_basis_impl(KNOTS, DEGREE, span, u, values)
        _eval_basis_derivatives_impl(KNOTS, DEGREE, span, u, 1, ders)

        nptest.assert_allclose(ders[0], values, atol=1e-15)
        assert ders[1].sum() == pytest.approx(0.0, abs=1e-12)


class TestNurbsKernels:
    """Tests for the homogeneous point and rational derivative kernels."""

    def test_homogeneous_point_applies_weights(self) -> None:
        """Coordinates are weighted while accumulating."""
        knots = np.array([0.0, 0.0, 1.0, 1.0])
        control_points = np.array([[0.0, 0.0, 0.0, 1.0], [2.0, 4.0, 6.0, 3.0]])
        out = np.empty((1, 4))
        _eval_homogeneous_points_impl(1, knots, control_points, np.array([0.5]), out)

        nptest.assert_allclose(out[0], [3.0, 6.0, 9.0, 2.0])

    def test_rational_derivatives_point_is_projected(self) -> None:
        """Index 0 of the derivatives is the projected homogeneous point."""
        knots = np.array([0.0, 0.0, 1.0, 1.0])
        control_points = np.array([[0.0, 0.0, 0.0, 1.0], [2.0, 4.0, 6.0, 3.0]])
        pts = np.array([0.0, 0.5, 1.0])
        hpts = np.empty((3, 4))
        ders = np.empty((3, 2, 3))
        _eval_homogeneous_points_impl(1, knots, control_points, pts, hpts)
        _eval_rational_derivatives_impl(1, knots, control_points, pts, 1, ders)

        nptest.assert_allclose(ders[:, 0], hpts[:, :3] / hpts[:, 3:], atol=1e-15)

    def test_rational_line_derivative(self) -> None:
        """A weighted segment keeps its direction but is traversed at varying speed."""
        knots = np.array([0.0, 0.0, 1.0, 1.0])
        control_points = np.array([[0.0, 0.0, 0.0, 1.0], [1.0, 0.0, 0.0, 3.0]])
        ders = np.empty((1, 2, 3))
        _eval_rational_derivatives_impl(1, knots, control_points, np.array([0.0]), 1, ders)

        # C(u) = 3u / (1 + 2u), so C'(0) = 3.
        nptest.assert_allclose(ders[0, 1], [3.0, 0.0, 0.0], atol=1e-14)

    def test_float32_kernels(self) -> None:
        """Kernels run in float32 when given float32 arrays."""
        knots = KNOTS.astype(np.float32)
        control_points = np.ones((6, 4), dtype=np.float32)
        pts = np.array([0.0, 0.5, 1.0], dtype=np.float32)
        hpts = np.empty((3, 4), dtype=np.float32)
        _eval_homogeneous_points_impl(DEGREE, knots, control_points, pts, hpts)

        nptest.assert_allclose(hpts, 1.0, atol=1e-6)
