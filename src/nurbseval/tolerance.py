"""Tolerance utilities for knot comparisons and degenerate geometry checks."""

from functools import cache
from typing import Any, NamedTuple, cast

import numpy as np
from numpy import typing as npt


@cache
def _float_dtype_from_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached lookup of a supported floating dtype from its canonical name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: The validated floating-point dtype.

    Raises:
        ValueError: If the dtype is not float32 or float64.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported dtype: {name}. Curves are evaluated in float32 or float64.")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def _as_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize and validate a dtype-like into a supported floating dtype."""
    return _float_dtype_from_name(np.dtype(dtype).name)


class _Tolerances(NamedTuple):
    """Tolerance values for each supported floating-point type."""

    float32: float
    float64: float


_DEFAULT = _Tolerances(float32=1e-6, float64=1e-12)
_STRICT = _Tolerances(float32=1e-7, float64=1e-15)
_CONSERVATIVE = _Tolerances(float32=1e-5, float64=1e-10)


def _pick(dtype: npt.DTypeLike, tolerances: _Tolerances) -> float:
    dtype_obj = _as_float_dtype(dtype)
    return tolerances.float32 if dtype_obj.type == np.float32 else tolerances.float64


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used to compare knot values and parameters.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Tolerance for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("float64")
        1e-12
    """
    return _pick(dtype, _DEFAULT)


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance below which a derivative is treated as vanishing.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Strict tolerance for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _pick(dtype, _STRICT)


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a conservative tolerance for comparisons of values with accumulated round-off.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Conservative tolerance for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return _pick(dtype, _CONSERVATIVE)


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for a given floating-point dtype.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point data type.

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    return float(np.finfo(_as_float_dtype(dtype)).eps)
