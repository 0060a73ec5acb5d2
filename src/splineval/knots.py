"""Knot vectors for B-spline curves and surfaces.

This module provides the immutable `KnotVector` container consumed by the
basis evaluator, together with a generator of uniform open (clamped) knot
vectors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, cast, overload

import numpy as np
import numpy.typing as npt

from ._knots_impl import _get_unique_knots_and_multiplicity_impl, _is_non_decreasing_impl
from .tolerance import ensure_float_dtype, resolve_tolerance

logger = logging.getLogger(__name__)


class KnotVector:
    """An immutable, non-decreasing sequence of knots.

    The knots are always copied on construction into a read-only contiguous
    array, so later changes to the source data never reach a `KnotVector`,
    and through it, a curve or surface built from it.

    Attributes:
        _knots (npt.NDArray[np.float32 | np.float64]): Read-only knot values.
        _tolerance (float): Absolute tolerance for domain checks.
    """

    _knots: npt.NDArray[np.float32 | np.float64]
    _tolerance: float

    def __init__(
        self,
        knots: npt.ArrayLike | KnotVector,
        dtype: npt.DTypeLike | None = None,
        tolerance: float | None = None,
    ) -> None:
        """Initialize a knot vector.

        Args:
            knots (npt.ArrayLike | KnotVector): Knot values. If a `KnotVector` is
                given, its values are copied and its tolerance is reused unless
                `tolerance` is provided.
            dtype (npt.DTypeLike | None): Floating point type of the knots (float32
                or float64). If None, floating inputs keep their type and any other
                input is converted to float64.
            tolerance (float | None): Absolute tolerance used to decide whether a
                parameter lies in the domain. Defaults to the strict tolerance of
                the dtype.

        Raises:
            TypeError: If the knots are not a 1D sequence of real numbers.
            ValueError: If the knot vector is empty, contains non-finite values,
                is not non-decreasing, or if dtype or tolerance are invalid.
        """
        if isinstance(knots, KnotVector):
            if tolerance is None:
                tolerance = knots.tolerance
            knots = knots._knots

        try:
            values = np.array(knots, copy=True)
        except (TypeError, ValueError) as err:
            raise TypeError("knots must be a 1D sequence of real numbers") from err

        if values.ndim != 1:
            raise TypeError("knots must be a 1D sequence of real numbers")
        if values.dtype.kind not in "iuf":
            raise TypeError(f"knots type must be real, got {values.dtype}")

        if dtype is None:
            dtype = values.dtype if values.dtype.kind == "f" else np.float64
        dtype_obj = ensure_float_dtype(dtype)

        values = np.ascontiguousarray(values, dtype=dtype_obj)
        if values.size == 0:
            raise ValueError("knots must not be empty")
        if not np.all(np.isfinite(values)):
            raise ValueError("knots must be finite")
        if not _is_non_decreasing_impl(values):
            raise ValueError("knots must be non-decreasing")

        values.flags.writeable = False
        self._knots = values
        self._tolerance = resolve_tolerance(tolerance, dtype_obj)

    @property
    def values(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the knot values as a read-only array.

        Returns:
            npt.NDArray[np.float32 | np.float64]: The knots.
        """
        return self._knots

    @property
    def dtype(self) -> np.dtype[np.floating[Any]]:
        """Get the floating point type of the knots."""
        return cast(np.dtype[np.floating[Any]], self._knots.dtype)

    @property
    def tolerance(self) -> float:
        """Get the absolute tolerance used for domain checks."""
        return self._tolerance

    def __len__(self) -> int:
        return int(self._knots.size)

    @overload
    def __getitem__(self, index: int) -> float: ...

    @overload
    def __getitem__(self, index: slice) -> npt.NDArray[np.float32 | np.float64]: ...

    def __getitem__(
        self, index: int | slice
    ) -> float | npt.NDArray[np.float32 | np.float64]:
        if isinstance(index, slice):
            return self._knots[index]
        return float(self._knots[index])

    def __iter__(self) -> Iterator[float]:
        return iter(self._knots.tolist())

    def __array__(self, dtype: npt.DTypeLike | None = None, copy: bool | None = None) -> Any:
        return np.array(self._knots, dtype=dtype, copy=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KnotVector):
            return NotImplemented
        return self.dtype == other.dtype and np.array_equal(self._knots, other._knots)

    def __hash__(self) -> int:
        return hash((self._knots.dtype.str, self._knots.tobytes()))

    def __repr__(self) -> str:
        return f"KnotVector({self._knots.tolist()})"

    def copy(self) -> KnotVector:
        """Return an independent copy of this knot vector."""
        return KnotVector(self)

    def num_basis(self, degree: int) -> int:
        """Get the number of basis functions of the given degree on these knots.

        Args:
            degree (int): B-spline degree.

        Returns:
            int: `len(knots) - degree - 1`.

        Raises:
            ValueError: If the degree is negative or the knot vector is too short
                to hold a single basis function of that degree.
        """
        if degree < 0:
            raise ValueError("degree must be non-negative")
        num_basis = len(self) - degree - 1
        if num_basis < 1:
            raise ValueError(
                f"knots must have at least {degree + 2} elements for degree {degree}"
            )
        return num_basis

    def domain(self, degree: int) -> tuple[float, float]:
        """Get the parametric domain `[knots[degree], knots[num_basis]]`.

        Args:
            degree (int): B-spline degree.

        Returns:
            tuple[float, float]: The start and end of the domain.
        """
        num_basis = self.num_basis(degree)
        return float(self._knots[degree]), float(self._knots[num_basis])

    def is_in_domain(self, degree: int, pts: npt.ArrayLike) -> bool | npt.NDArray[np.bool_]:
        """Check whether parameter values lie in the domain, up to tolerance.

        Args:
            degree (int): B-spline degree.
            pts (npt.ArrayLike): Parameter value(s).

        Returns:
            bool | npt.NDArray[np.bool_]: A bool for scalar input, otherwise a
            boolean array with the shape of `pts`.
        """
        start, end = self.domain(degree)
        pts_arr = np.asarray(pts, dtype=np.float64)
        inside = (pts_arr >= start - self._tolerance) & (pts_arr <= end + self._tolerance)
        if inside.ndim == 0:
            return bool(inside)
        return inside

    def get_unique_knots_and_multiplicity(
        self,
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
        """Get the distinct knot values and how many times each one is repeated.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
            Unique knots and their multiplicities.

        Example:
            >>> KnotVector([0, 0, 0, 0.5, 1, 1, 1]).get_unique_knots_and_multiplicity()
            (array([0. , 0.5, 1. ]), array([3, 1, 3]))
        """
        return cast(
            tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]],
            _get_unique_knots_and_multiplicity_impl(self._knots, self._tolerance),
        )

    def is_clamped(self, degree: int) -> bool:
        """Check whether the first and last knots are repeated at least `degree+1` times.

        Curves and surfaces built on clamped knot vectors interpolate their
        first and last control points.

        Args:
            degree (int): B-spline degree.

        Returns:
            bool: True if the knot vector is clamped at both ends.
        """
        self.num_basis(degree)
        _, mult = self.get_unique_knots_and_multiplicity()
        return bool(mult[0] >= degree + 1 and mult[-1] >= degree + 1)


def _validate_knot_input(
    num_intervals: int,
    degree: int,
    continuity: int,
    domain: tuple[float, float],
) -> None:
    """Validate input parameters for knot vector generation.

    Raises:
        ValueError: If any parameter is invalid.
    """
    if domain[0] >= domain[1]:
        raise ValueError("domain[0] must be less than domain[1]")

    if num_intervals < 1:
        raise ValueError("num_intervals must be at least 1")

    if degree < 0:
        raise ValueError("degree must be non-negative")

    if continuity < -1 or continuity >= degree:
        raise ValueError(f"Continuity must be between -1 and {degree - 1} for degree {degree}.")


def create_uniform_open_knot_vector(
    num_intervals: int,
    degree: int,
    continuity: int | None = None,
    domain: tuple[float, float] | None = None,
    dtype: npt.DTypeLike | None = None,
) -> KnotVector:
    """Create a uniform open (clamped) knot vector.

    An open knot vector has the first and last knots repeated (degree+1) times,
    ensuring the B-spline interpolates the first and last control points.

    Args:
        num_intervals (int): Number of non-empty intervals in the domain. Must be
            at least 1.
        degree (int): B-spline degree. Must be non-negative.
        continuity (int | None): Continuity level at interior knots.
            Must be between -1 and degree-1. Defaults to degree-1 (maximum continuity).
        domain (tuple[float, float] | None): Domain boundaries as (start, end).
            Defaults to (0.0, 1.0).
        dtype (npt.DTypeLike | None): float32 or float64. Defaults to float64.

    Returns:
        KnotVector: Open knot vector with uniform spacing. It supports
        `len(knots) - degree - 1` control points.

    Raises:
        ValueError: If any parameter is invalid.

    Example:
        >>> create_uniform_open_knot_vector(2, 2, domain=(0.0, 1.0))
        KnotVector([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
    """
    start, end = (0.0, 1.0) if domain is None else (float(domain[0]), float(domain[1]))
    continuity = degree - 1 if continuity is None else continuity
    dtype_obj = ensure_float_dtype(np.float64 if dtype is None else dtype)

    _validate_knot_input(num_intervals, degree, continuity, (start, end))

    unique_knots = np.linspace(start, end, num_intervals + 1, dtype=dtype_obj)
    interior_multiplicity = degree - continuity

    knots = [unique_knots[0]] * (degree + 1)
    for knot in unique_knots[1:-1]:
        knots.extend([knot] * interior_multiplicity)
    knots.extend([unique_knots[-1]] * (degree + 1))

    logger.debug(
        "Created open knot vector with %d intervals, degree %d and continuity %d",
        num_intervals,
        degree,
        continuity,
    )
    return KnotVector(np.array(knots, dtype=dtype_obj))


__all__ = [
    "KnotVector",
    "create_uniform_open_knot_vector",
]
