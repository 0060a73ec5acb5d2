"""Core B-spline basis function evaluation implementations.

This module provides Numba-compiled kernels for the Cox-de Boor recursion:
one evaluating a single basis function for any parameter value, and one
tabulating all the basis functions that are non-zero at points of the domain.

Both kernels replace the recursive definition by the bottom-up triangular
table, performing the same arithmetic operations in the same order, and
follow the convention that a ratio whose denominator is exactly zero
(repeated knots) is taken as zero.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from ._knots_impl import _find_span_impl

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
def _left_coefficient(
    knots: npt.NDArray[np.float32 | np.float64], basis_id: int, sub_degree: int, pt: float
) -> float:
    """Compute `(pt - k[i]) / (k[i+j] - k[i])`, or 0 if the denominator is 0."""
    diff = knots[basis_id + sub_degree] - knots[basis_id]
    if diff == 0.0:
        return 0.0
    return (pt - knots[basis_id]) / diff


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _right_coefficient(
    knots: npt.NDArray[np.float32 | np.float64], basis_id: int, sub_degree: int, pt: float
) -> float:
    """Compute `1 - (pt - k[i+1]) / (k[i+j+1] - k[i+1])`, the ratio being 0 if its
    denominator is 0."""
    diff = knots[basis_id + sub_degree + 1] - knots[basis_id + 1]
    ratio = 0.0
    if diff != 0.0:
        ratio = (pt - knots[basis_id + 1]) / diff
    return 1.0 - ratio


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _eval_basis_function_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    basis_id: int,
    pt: float,
) -> float:
    """Evaluate the `basis_id`-th B-spline basis function of the given degree.

    The step functions of degree 0 are 1 on the half-open intervals
    `[knots[i], knots[i+1])` and 0 elsewhere; higher degrees follow from

        N[i, j](t) = coef1 * N[i, j-1](t) + coef2 * N[i+1, j-1](t).

    The table holds, after processing `sub_degree`, the values
    `N[basis_id + k, sub_degree](pt)` for `k = 0, ..., degree - sub_degree`.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): B-spline knot vector.
        degree (int): B-spline degree.
        basis_id (int): Index of the basis function.
        pt (float): Parameter value.

    Returns:
        float: Value of the basis function at `pt`.

    Note:
        Inputs are assumed to be correct (no validation performed): it is
        required that `basis_id + degree + 1 < knots.size`.
    """
    order = degree + 1
    table = np.zeros(order, dtype=np.float64)

    for k in range(order):
        if knots[basis_id + k] <= pt and pt < knots[basis_id + k + 1]:
            table[k] = 1.0

    for sub_degree in range(1, order):
        for k in range(order - sub_degree):
            knot_id = basis_id + k
            first = _left_coefficient(knots, knot_id, sub_degree, pt) * table[k]
            second = _right_coefficient(knots, knot_id, sub_degree, pt) * table[k + 1]
            table[k] = first + second

    return table[0]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _tabulate_basis_impl(  # noqa: PLR0913
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    num_basis: int,
    pts: npt.NDArray[np.float32 | np.float64],
    out_basis: npt.NDArray[np.float32 | np.float64],
    out_first_basis: npt.NDArray[np.int_],
) -> None:
    """Tabulate the non-zero B-spline basis functions at the given points.

    For a point in the knot span `span`, only the basis functions with indices
    `span - degree, ..., span` can be non-zero. Starting from the degree-0
    step function of that span, the triangular table is raised one degree at
    a time. At the end of the domain the last non-empty span is used, so that
    the values there are the limits from the left.

    Results are written directly to the output arrays (C-style).

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): B-spline knot vector.
        degree (int): B-spline degree.
        num_basis (int): Number of basis functions.
        pts (npt.NDArray[np.float32 | np.float64]): Points (1D array), all of them
            inside the domain `[knots[degree], knots[num_basis]]`.
        out_basis (npt.NDArray[np.float32 | np.float64]): Output array for basis values.
            Must have shape (n_pts, degree+1).
        out_first_basis (npt.NDArray[np.int_]): Output array for first basis indices.
            Must have shape (n_pts,) and dtype int.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    order = degree + 1

    for pt_id in range(pts.size):
        pt = pts[pt_id]
        span = _find_span_impl(knots, degree, num_basis, pt)
        first_id = span - degree

        basis_i = out_basis[pt_id]
        basis_i[:] = 0.0
        basis_i[degree] = 1.0

        for sub_degree in range(1, order):
            for pos in range(degree - sub_degree, order):
                knot_id = first_id + pos
                value = _left_coefficient(knots, knot_id, sub_degree, pt) * basis_i[pos]
                if pos < degree:
                    value += _right_coefficient(knots, knot_id, sub_degree, pt) * basis_i[pos + 1]
                basis_i[pos] = value

        out_first_basis[pt_id] = first_id


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call.

    This function triggers compilation of the numba-decorated functions
    with float64 arrays, ensuring they are cached and ready for use.
    """
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype=np.float64)
    pts_dummy = np.array([0.5], dtype=np.float64)
    degree_dummy = 2
    basis_dummy = np.empty((pts_dummy.size, degree_dummy + 1), dtype=np.float64)
    first_basis_dummy = np.empty(pts_dummy.size, dtype=np.int_)

    _eval_basis_function_impl(knots_dummy, degree_dummy, 0, 0.5)
    _tabulate_basis_impl(
        knots_dummy, degree_dummy, 3, pts_dummy, basis_dummy, first_basis_dummy
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_eval_basis_function_impl",
    "_tabulate_basis_impl",
]
