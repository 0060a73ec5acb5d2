"""Utility functions for normalizing evaluation and construction inputs."""

from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy import typing as npt

from .vector import Vector3


def _normalize_points_1D(
    pts: npt.ArrayLike, dtype: npt.DTypeLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize parameter values to a contiguous 1D array of the given dtype.

    Zero-dimensional arrays (scalars) are converted to 1D arrays with a single
    element. Multi-dimensional arrays are flattened.

    Raises:
        ValueError: If any of the values is not finite.
    """
    arr = np.ascontiguousarray(np.asarray(pts, dtype=dtype).ravel())
    if not np.all(np.isfinite(arr)):
        raise ValueError("Parameter values must be finite")
    return arr


def _check_finite_parameters(*values: float) -> None:
    """Reject NaN or infinite scalar parameters.

    Raises:
        ValueError: If any of the values is not finite.
    """
    if not all(np.isfinite(value) for value in values):
        raise ValueError("Parameter values must be finite")


def _as_point_row(point: Any) -> tuple[float, ...] | Any:
    if isinstance(point, Vector3):
        return point.to_tuple()
    return point


def _to_points_array(
    points: Sequence[Any] | npt.ArrayLike,
    dtype: npt.DTypeLike,
    grid_ndim: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Convert control points to a read-only array of shape (*grid, 3).

    Points may be given as `Vector3` instances or as triples of reals.

    Args:
        points (Sequence[Any] | npt.ArrayLike): A sequence (grid_ndim=1) or a
            rectangular grid (grid_ndim=2) of points.
        dtype (npt.DTypeLike): Target floating point type.
        grid_ndim (int): Number of grid dimensions (1 for curves, 2 for surfaces).

    Raises:
        ValueError: If the points do not form a rectangular grid of 3D points,
            or if any coordinate is not finite.
    """
    if isinstance(points, np.ndarray):
        rows: Any = points
    elif grid_ndim == 1:
        rows = [_as_point_row(pt) for pt in points]  # type: ignore[union-attr]
    else:
        rows = [[_as_point_row(pt) for pt in row] for row in points]  # type: ignore[union-attr]
        lengths = {len(row) for row in rows}
        if len(lengths) > 1:
            raise ValueError(
                f"Control point grid must be rectangular, got rows of lengths {sorted(lengths)}"
            )

    try:
        arr = np.array(rows, dtype=dtype)
    except ValueError as err:
        raise ValueError("Control points must be triples of real numbers") from err

    if arr.ndim != grid_ndim + 1 or arr.shape[-1] != 3:  # noqa: PLR2004
        raise ValueError(
            f"Control points must have shape {('n',) * grid_ndim + (3,)}, got {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("Control points must be finite")

    arr = np.ascontiguousarray(arr)
    arr.flags.writeable = False
    return arr


def _to_weights_array(
    weights: npt.ArrayLike,
    dtype: npt.DTypeLike,
    expected_shape: tuple[int, int],
) -> npt.NDArray[np.float32 | np.float64]:
    """Convert a grid of weights to a read-only 2D array.

    Raises:
        ValueError: If the grid is jagged, does not match `expected_shape`, or
            contains negative or non-finite weights.
    """
    if not isinstance(weights, np.ndarray):
        rows = [list(row) for row in weights]  # type: ignore[union-attr]
        lengths = {len(row) for row in rows}
        if len(lengths) > 1:
            raise ValueError(
                f"Weight grid must be rectangular, got rows of lengths {sorted(lengths)}"
            )
        weights = rows

    arr = np.array(weights, dtype=dtype)
    if arr.shape != expected_shape:
        raise ValueError(
            f"Weight grid has shape {arr.shape}, but the control point grid has shape "
            f"{expected_shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("Weights must be finite")
    if np.any(arr < 0):
        raise ValueError("Weights must be non-negative")

    arr = np.ascontiguousarray(arr)
    arr.flags.writeable = False
    return arr
