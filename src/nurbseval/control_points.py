"""Control point types and normalization into weighted `(x, y, z, w)` rows."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple, TypeAlias

import numpy as np
import numpy.typing as npt

_NUM_WEIGHTED_COMPONENTS = 4


class Point2(NamedTuple):
    """A planar control point. It is lifted to `z = 0` with unit weight."""

    x: float
    y: float


class Point3(NamedTuple):
    """A spatial control point with unit weight."""

    x: float
    y: float
    z: float


class Point4(NamedTuple):
    """A spatial control point with an explicit weight `w`.

    Coordinates are not premultiplied by the weight.
    """

    x: float
    y: float
    z: float
    w: float


ControlPoint: TypeAlias = Point2 | Point3 | Point4
ControlPointLike: TypeAlias = ControlPoint | Sequence[float] | npt.NDArray[np.floating]


def normalize_control_point(point: ControlPointLike) -> Point4:
    """Normalize a single 2-, 3- or 4-component point into a `Point4`.

    Args:
        point (ControlPointLike): Point with components `(x, y[, z[, w]])`.

    Returns:
        Point4: The point with `z` defaulting to 0 and `w` defaulting to 1.

    Raises:
        TypeError: If the point is not 1-dimensional.
        ValueError: If the point does not have 2, 3 or 4 components.

    Example:
        >>> normalize_control_point(Point2(1.0, 2.0))
        Point4(x=1.0, y=2.0, z=0.0, w=1.0)
    """
    arr = np.asarray(point, dtype=np.float64)
    if arr.ndim != 1:
        raise TypeError(f"A control point must be 1-dimensional. Got shape {arr.shape}.")
    values = [float(v) for v in arr]
    if len(values) == 2:  # noqa: PLR2004
        return Point4(values[0], values[1], 0.0, 1.0)
    if len(values) == 3:  # noqa: PLR2004
        return Point4(values[0], values[1], values[2], 1.0)
    if len(values) == _NUM_WEIGHTED_COMPONENTS:
        return Point4(*values)
    raise ValueError(f"Control points must have 2, 3 or 4 components. Got {len(values)}.")


def normalize_control_points(
    points: Sequence[ControlPointLike] | npt.NDArray[np.floating],
    dtype: npt.DTypeLike | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize control points into an array of weighted `(x, y, z, w)` rows.

    The point count and ordering are preserved, missing `z` components are set
    to 0 and missing weights to 1. Coordinates are stored unmultiplied.
    Points of mixed dimension are accepted when given as a sequence.

    Args:
        points (Sequence[ControlPointLike] | npt.NDArray[np.floating]): Input
            points, either a sequence of 2-, 3- or 4-component points or an array
            with shape (n, 2), (n, 3) or (n, 4).
        dtype (npt.DTypeLike | None): Floating dtype of the result (float32 or
            float64). If None, float32 arrays keep their dtype and anything else
            becomes float64. Defaults to None.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array with shape (n, 4).

    Raises:
        ValueError: If there are no points, if a point does not have 2, 3 or 4
            components, if any value is not finite, or if any weight is not
            strictly positive.
        TypeError: If an array input is not 2-dimensional, or if a point of a
            sequence input is not 1-dimensional.

    Example:
        >>> normalize_control_points([[0.0, 0.0], [1.0, 2.0, 3.0], [1.0, 1.0, 1.0, 2.0]])
        array([[0., 0., 0., 1.],
               [1., 2., 3., 1.],
               [1., 1., 1., 2.]])
    """
    if dtype is None:
        is_float32 = isinstance(points, np.ndarray) and points.dtype == np.float32
        dtype = np.float32 if is_float32 else np.float64
    dtype = np.dtype(dtype)
    if dtype not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ValueError(f"dtype must be float32 or float64. Got {dtype}.")

    if isinstance(points, np.ndarray):
        if points.ndim != 2:  # noqa: PLR2004
            raise TypeError(
                f"control points array must be 2-dimensional. Got shape {points.shape}."
            )
        num_components = points.shape[1]
        if num_components not in (2, 3, 4):
            raise ValueError(
                f"Control points must have 2, 3 or 4 components. Got {num_components}."
            )
        weighted = np.zeros((points.shape[0], _NUM_WEIGHTED_COMPONENTS), dtype=dtype)
        weighted[:, 3] = 1.0
        weighted[:, :num_components] = points
    else:
        weighted = np.array([normalize_control_point(pt) for pt in points], dtype=dtype)
        weighted = weighted.reshape(-1, _NUM_WEIGHTED_COMPONENTS)

    if weighted.shape[0] == 0:
        raise ValueError("At least one control point is required.")
    if not np.all(np.isfinite(weighted)):
        raise ValueError("Control point coordinates and weights must be finite.")
    if not np.all(weighted[:, 3] > 0.0):
        bad = np.flatnonzero(weighted[:, 3] <= 0.0)
        raise ValueError(
            f"Control point weights must be strictly positive. Got {weighted[bad, 3]}."
        )

    return weighted


__all__ = [
    "ControlPoint",
    "ControlPointLike",
    "Point2",
    "Point3",
    "Point4",
    "normalize_control_point",
    "normalize_control_points",
]
