"""Knot vector kernels.

Low-level, Numba-compiled helpers for validating knot vectors, grouping
repeated knots and locating the knot span that holds a parameter value.
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


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _is_non_decreasing_impl(knots: npt.NDArray[np.float32 | np.float64]) -> bool:
    """Check that every knot is greater than or equal to its predecessor.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): 1D knot array.

    Returns:
        bool: True if the knot array is non-decreasing.
    """
    for i in range(1, knots.size):
        if knots[i] < knots[i - 1]:
            return False
    return True


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _get_unique_knots_and_multiplicity_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Get unique knots and their multiplicities.

    A knot is counted as a repetition of the previous unique knot when both
    differ by at most `tol`.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Non-decreasing knot array.
        tol (float): Tolerance for numerical comparisons.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple of
            (unique_knots, multiplicities), both with the same length.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    n = knots.size
    unique_ids = np.empty(n, dtype=np.int_)
    mult = np.zeros(n, dtype=np.int_)

    j = -1
    for i in range(n):
        if j >= 0 and knots[i] - knots[unique_ids[j]] <= tol:
            mult[j] += 1
        else:
            j += 1
            unique_ids[j] = i
            mult[j] = 1

    return knots[unique_ids[: j + 1]], mult[: j + 1]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_span_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    num_basis: int,
    pt: float,
) -> int:
    """Find the index of the non-empty knot span that contains `pt`.

    The returned index `span` satisfies `knots[span] <= pt < knots[span + 1]`
    and `degree <= span < num_basis`. When `pt` coincides with (or exceeds) the
    end of the domain `knots[num_basis]`, the last non-empty span is returned
    instead, so that evaluation there takes the limit from the left.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): B-spline knot vector.
        degree (int): B-spline degree.
        num_basis (int): Number of basis functions (`len(knots) - degree - 1`).
        pt (float): Parameter value, not smaller than `knots[degree]`.

    Returns:
        int: Knot span index.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    last = num_basis
    if pt >= knots[last]:
        span = last - 1
        while span > degree and knots[span] >= knots[last]:
            span -= 1
        return span

    # Binary search keeping knots[low] <= pt < knots[high].
    low = degree
    high = last
    while high - low > 1:
        mid = (low + high) // 2
        if pt < knots[mid]:
            high = mid
        else:
            low = mid
    return low


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)
    degree_dummy = 2

    _is_non_decreasing_impl(knots_dummy)
    _get_unique_knots_and_multiplicity_impl(knots_dummy, 1e-15)
    _find_span_impl(knots_dummy, degree_dummy, 4, 0.25)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_find_span_impl",
    "_get_unique_knots_and_multiplicity_impl",
    "_is_non_decreasing_impl",
]
