"""Utility functions for parameter handling and output arrays of curve evaluations."""

import numpy as np
from numpy import typing as npt


def _normalize_params_1D(
    t: npt.ArrayLike, dtype: npt.DTypeLike
) -> tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]:
    """Normalize parameters to a 1D array of the curve dtype.

    Scalars become one-element arrays and multi-dimensional arrays are
    flattened.

    Args:
        t (npt.ArrayLike): Parameters (scalar, list, or numpy array).
        dtype (npt.DTypeLike): Floating dtype of the curve.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]: The 1D
            contiguous parameter array and the shape of the input before
            normalization (`()` for scalars).

    Raises:
        ValueError: If there are no parameters.
    """
    arr = np.asarray(t)
    input_shape = arr.shape
    arr = np.ascontiguousarray(arr, dtype=dtype).ravel()
    if arr.size == 0:
        raise ValueError("At least one parameter is required.")
    return arr, input_shape


def _compute_output_shape(input_shape: tuple[int, ...], *trailing: int) -> tuple[int, ...]:
    """Output shape of an evaluation: the input shape followed by `trailing` dimensions.

    Args:
        input_shape (tuple[int, ...]): Shape of the parameters before normalization.
        *trailing (int): Per-parameter result dimensions, e.g. `3` for points.

    Returns:
        tuple[int, ...]: The final output shape.
    """
    return (*input_shape, *trailing)


def _validate_out_array(
    out: npt.NDArray[np.float32 | np.float64],
    expected_shape: tuple[int, ...],
    expected_dtype: npt.DTypeLike,
) -> None:
    """Validate that a caller-supplied output array can receive a result.

    This function follows NumPy's style for output array validation.

    Args:
        out (npt.NDArray[np.float32 | np.float64]): The output array to validate.
        expected_shape (tuple[int, ...]): The expected shape of the output array.
        expected_dtype (npt.DTypeLike): The expected dtype.

    Raises:
        TypeError: If `out` is not a numpy array.
        ValueError: If the array shape or dtype does not match expectations, or if
            the array is not writeable.
    """
    if not isinstance(out, np.ndarray):
        raise TypeError(f"Output must be a numpy array. Got {type(out).__name__}")
    if out.shape != expected_shape:
        raise ValueError(f"Output array has shape {out.shape}, but expected shape {expected_shape}")
    if out.dtype != expected_dtype:
        raise ValueError(f"Output array has dtype {out.dtype}, but expected dtype {expected_dtype}")
    if not out.flags.writeable:
        raise ValueError("Output array is not writeable")
