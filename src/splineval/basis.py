"""Public API for B-spline basis function evaluation."""

from __future__ import annotations

import numpy as np
from numpy import typing as npt

from ._basis_impl import _eval_basis_function_impl, _tabulate_basis_impl
from ._utils import _normalize_points_1D
from .exceptions import OutOfDomainError
from .knots import KnotVector


def _ensure_knot_vector(knots: npt.ArrayLike | KnotVector) -> KnotVector:
    return knots if isinstance(knots, KnotVector) else KnotVector(knots)


def evaluate_basis(
    basis_id: int,
    degree: int,
    knots: npt.ArrayLike | KnotVector,
    t: float,
) -> float:
    """Evaluate a single B-spline basis function with the Cox-de Boor recursion.

    The degree-0 functions are the indicator functions of the half-open knot
    intervals `[knots[i], knots[i+1])`. For `j > 0`,

        N[i, j](t) = coef1 * N[i, j-1](t) + coef2 * N[i+1, j-1](t),
        coef1 = (t - knots[i]) / (knots[i+j] - knots[i]),
        coef2 = 1 - (t - knots[i+1]) / (knots[i+j+1] - knots[i+1]),

    where each ratio is taken as 0 when its denominator is exactly 0. Any
    parameter value is accepted; outside the support of the function the
    result is 0. In particular, at the last knot of a clamped knot vector every
    basis function vanishes (see `tabulate_basis` for the closed domain).

    Args:
        basis_id (int): Index of the basis function.
        degree (int): B-spline degree.
        knots (npt.ArrayLike | KnotVector): Knot vector.
        t (float): Parameter value.

    Returns:
        float: The value `N[basis_id, degree](t)`.

    Raises:
        ValueError: If `degree` or `basis_id` is negative, if the knot vector is
            too short for the requested function, or if `t` is not finite.

    Example:
        >>> evaluate_basis(1, 1, [0.0, 0.0, 1.0, 1.0], 0.25)
        0.25
    """
    knot_vector = _ensure_knot_vector(knots)
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if basis_id < 0:
        raise ValueError("basis_id must be non-negative")
    if basis_id + degree + 1 >= len(knot_vector):
        raise ValueError(
            f"Basis function {basis_id} of degree {degree} needs {basis_id + degree + 2} "
            f"knots, but the knot vector has {len(knot_vector)}"
        )
    if not np.isfinite(t):
        raise ValueError("Parameter values must be finite")

    return float(_eval_basis_function_impl(knot_vector.values, degree, basis_id, float(t)))


def tabulate_basis(
    knots: npt.ArrayLike | KnotVector,
    degree: int,
    pts: npt.ArrayLike,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Evaluate the non-zero B-spline basis functions at points of the domain.

    At every point at most `degree + 1` consecutive basis functions are non-zero.
    This function returns their values together with the index of the first
    one. The domain `[knots[degree], knots[n]]`, with `n = len(knots) - degree - 1`
    the number of basis functions, is treated as closed: at its upper end the
    values are the limits from the left, so that the basis functions of a
    clamped knot vector take the values (0, ..., 0, 1) there. Points outside
    the domain by no more than the knot vector tolerance are moved onto it.

    Args:
        knots (npt.ArrayLike | KnotVector): Knot vector.
        degree (int): B-spline degree.
        pts (npt.ArrayLike): Evaluation points.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple
        containing:
            - basis_values: array of shape `(*pts.shape, degree+1)`, with the dtype
              of the knots, holding the values of the basis functions
              `first, ..., first + degree` at each point.
            - first_basis_indices: integer array of shape `pts.shape` with the
              index of the first of those basis functions at each point.

    Raises:
        OutOfDomainError: If any point lies outside the domain.
        ValueError: If the degree is invalid for the knot vector, if its domain is
            empty, or if any point is not finite.

    Example:
        >>> tabulate_basis([0, 0, 0, 0.25, 0.7, 0.7, 1, 1, 1], 2, [0.0, 0.5, 0.75, 1.0])
        (array([[1.        , 0.        , 0.        ],
                [0.12698413, 0.5643739 , 0.30864198],
                [0.69444444, 0.27777778, 0.02777778],
                [0.        , 0.        , 1.        ]]),
         array([0, 1, 3, 3]))
    """
    knot_vector = _ensure_knot_vector(knots)
    num_basis = knot_vector.num_basis(degree)
    start, end = knot_vector.domain(degree)
    if not start < end:
        raise ValueError(f"The knot vector domain [{start}, {end}] is empty")

    input_shape = np.shape(pts)
    pts_1d = _normalize_points_1D(pts, knot_vector.dtype)

    inside = knot_vector.is_in_domain(degree, pts_1d)
    if not np.all(inside):
        bad = pts_1d[~np.asarray(inside)][0]
        raise OutOfDomainError(float(bad), (start, end))
    pts_1d = np.clip(pts_1d, start, end).astype(knot_vector.dtype, copy=False)

    out_basis = np.empty((pts_1d.size, degree + 1), dtype=knot_vector.dtype)
    out_first_basis = np.empty(pts_1d.size, dtype=np.int_)
    _tabulate_basis_impl(
        knot_vector.values, degree, num_basis, pts_1d, out_basis, out_first_basis
    )

    return (
        out_basis.reshape(*input_shape, degree + 1),
        out_first_basis.reshape(input_shape),
    )


__all__ = [
    "evaluate_basis",
    "tabulate_basis",
]
