"""Tensor-product B-spline and NURBS surfaces.

The points grid is indexed as `points[i][j]`, with `i` running along the
u-direction (rows) and `j` along the v-direction (columns). For a grid with
3 rows and 5 columns:

    j=4  4*----9*---14*
          |     |     |
    j=3  3*----8*---13*
          |     |     |
    j=2  2*----7*---12*
          |     |     |
    j=1  1*----6*---11*
          |     |     |
    j=0  0*----5*---10*
        i=0   i=1   i=2

Both surface classes evaluate the two families of 1D basis functions once
per parameter value and only accumulate over the `(pu+1) x (pv+1)` block of
control points whose basis functions do not vanish there.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
from numpy import typing as npt

from ._basis_impl import _eval_basis_function_impl
from ._utils import (
    _check_finite_parameters,
    _normalize_points_1D,
    _to_points_array,
    _to_weights_array,
)
from .basis import tabulate_basis
from .exceptions import DegenerateDenominatorError, OutOfDomainError
from .knots import KnotVector
from .vector import Vector3

logger = logging.getLogger(__name__)


@runtime_checkable
class ParametricSurface(Protocol):
    """Capability of evaluating points of a surface over a grid of control points."""

    def evaluate(self, u: float, v: float) -> Vector3: ...

    def row_count(self) -> int: ...

    def column_count(self) -> int: ...


class _TensorProductBasis:
    """Pair of 1D B-spline bases (u and v) sharing a grid of control points."""

    def __init__(
        self,
        shape: tuple[int, int],
        knots_u: npt.ArrayLike | KnotVector,
        degree_u: int,
        knots_v: npt.ArrayLike | KnotVector,
        degree_v: int,
    ) -> None:
        self.knots = (KnotVector(knots_u), KnotVector(knots_v))
        self.degrees = (int(degree_u), int(degree_v))

        if self.knots[0].dtype != self.knots[1].dtype:
            raise ValueError("The u and v knot vectors must have the same data type.")

        for direction, count, knots, degree in zip(
            "uv", shape, self.knots, self.degrees, strict=True
        ):
            if degree < 0:
                raise ValueError(f"degree_{direction} must be non-negative")
            if count <= degree:
                raise ValueError(
                    f"A surface of degree {degree} in the {direction}-direction needs at "
                    f"least {degree + 1} control points in that direction, got {count}"
                )
            expected_knots = count + degree + 1
            if len(knots) != expected_knots:
                raise ValueError(
                    f"The {direction} knot vector must have {expected_knots} elements for "
                    f"{count} control points and degree {degree}, got {len(knots)}"
                )
            start, end = knots.domain(degree)
            if not start < end:
                raise ValueError(
                    f"The {direction} knot vector domain [{start}, {end}] is empty"
                )

    @property
    def dtype(self) -> np.dtype[Any]:
        return self.knots[0].dtype

    @property
    def domain(self) -> tuple[tuple[float, float], tuple[float, float]]:
        return (
            self.knots[0].domain(self.degrees[0]),
            self.knots[1].domain(self.degrees[1]),
        )

    def is_in_domain(self, u: npt.ArrayLike, v: npt.ArrayLike) -> bool | npt.NDArray[np.bool_]:
        in_u = self.knots[0].is_in_domain(self.degrees[0], u)
        in_v = self.knots[1].is_in_domain(self.degrees[1], v)
        return in_u & in_v

    def check_domain(self, us: npt.ArrayLike, vs: npt.ArrayLike) -> None:
        for pts, knots, degree in zip((us, vs), self.knots, self.degrees, strict=True):
            inside = knots.is_in_domain(degree, pts)
            if not np.all(inside):
                pts_arr = np.atleast_1d(np.asarray(pts, dtype=np.float64))
                bad = pts_arr[~np.atleast_1d(inside)][0]
                raise OutOfDomainError(float(bad), knots.domain(degree))

    def tabulate(
        self, us: npt.ArrayLike, vs: npt.ArrayLike
    ) -> tuple[
        npt.NDArray[np.float32 | np.float64],
        npt.NDArray[np.float32 | np.float64],
        npt.NDArray[np.int_],
        npt.NDArray[np.int_],
    ]:
        """Tabulate both bases at paired parameters.

        Returns:
            The u basis values (n_pts, pu+1), the v basis values (n_pts, pv+1), and
            the row (n_pts, pu+1, 1) and column (n_pts, 1, pv+1) indices of the
            control point block each point depends on.
        """
        if np.shape(us) != np.shape(vs):
            raise ValueError(
                f"u and v must have the same shape, got {np.shape(us)} and {np.shape(vs)}"
            )
        us_1d = _normalize_points_1D(us, self.dtype)
        vs_1d = _normalize_points_1D(vs, self.dtype)
        self.check_domain(us_1d, vs_1d)

        basis_u, first_u = tabulate_basis(self.knots[0], self.degrees[0], us_1d)
        basis_v, first_v = tabulate_basis(self.knots[1], self.degrees[1], vs_1d)
        rows = first_u[:, np.newaxis] + np.arange(self.degrees[0] + 1)
        cols = first_v[:, np.newaxis] + np.arange(self.degrees[1] + 1)
        return basis_u, basis_v, rows[:, :, np.newaxis], cols[:, np.newaxis, :]

    def all_basis(self, u: float, v: float, shape: tuple[int, int]) -> tuple[
        npt.NDArray[np.float64], npt.NDArray[np.float64]
    ]:
        """Evaluate every basis function of both directions, for any (u, v)."""
        return tuple(  # type: ignore[return-value]
            np.array(
                [
                    _eval_basis_function_impl(knots.values, degree, i, float(pt))
                    for i in range(count)
                ]
            )
            for pt, knots, degree, count in zip(
                (u, v), self.knots, self.degrees, shape, strict=True
            )
        )


def _output_shape(us: npt.ArrayLike) -> tuple[int, ...]:
    return (*np.shape(us), 3)


class BsplineSurface:
    """A non-rational tensor-product B-spline surface in 3D space.

    `S(u, v) = sum_ij N[i, pu](u) * N[j, pv](v) * P[i][j]`.
    """

    def __init__(
        self,
        control_points: Sequence[Sequence[Vector3]] | npt.ArrayLike,
        knots_u: npt.ArrayLike | KnotVector,
        degree_u: int,
        knots_v: npt.ArrayLike | KnotVector,
        degree_v: int,
    ) -> None:
        """Initialize a B-spline surface.

        Args:
            control_points (Sequence[Sequence[Vector3]] | npt.ArrayLike): Rectangular
                grid of control points, the outer sequence running along u.
            knots_u (npt.ArrayLike | KnotVector): Knot vector in the u-direction
                (copied).
            degree_u (int): Degree in the u-direction.
            knots_v (npt.ArrayLike | KnotVector): Knot vector in the v-direction
                (copied).
            degree_v (int): Degree in the v-direction.

        Raises:
            ValueError: If the grid is jagged or does not hold 3D points, or if a
                degree, a knot vector length or a knot domain is invalid.
        """
        dtype = KnotVector(knots_u).dtype
        self._control_points = _to_points_array(control_points, dtype, grid_ndim=2)
        self._basis = _TensorProductBasis(
            self.shape, knots_u, degree_u, knots_v, degree_v
        )
        logger.debug(
            "Created B-spline surface of degrees %s with a %dx%d control grid",
            self.degrees,
            *self.shape,
        )

    @property
    def shape(self) -> tuple[int, int]:
        """Number of control points along u and along v."""
        return (int(self._control_points.shape[0]), int(self._control_points.shape[1]))

    def row_count(self) -> int:
        """Number of control points along the u-direction."""
        return self.shape[0]

    def column_count(self) -> int:
        """Number of control points along the v-direction."""
        return self.shape[1]

    @property
    def degrees(self) -> tuple[int, int]:
        return self._basis.degrees

    @property
    def knots(self) -> tuple[KnotVector, KnotVector]:
        return self._basis.knots

    @property
    def domain(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """The parametric domains along u and along v."""
        return self._basis.domain

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control points, as a read-only array of shape (nu+1, nv+1, 3)."""
        return self._control_points

    def is_in_domain(self, u: npt.ArrayLike, v: npt.ArrayLike) -> bool | npt.NDArray[np.bool_]:
        return self._basis.is_in_domain(u, v)

    def evaluate(self, u: float, v: float, check_domain: bool = True) -> Vector3:
        """Evaluate the surface at a parameter pair.

        Args:
            u (float): Parameter along the u-direction.
            v (float): Parameter along the v-direction.
            check_domain (bool): If True, parameters outside the domain raise an
                error; otherwise the full tensor-product sum is returned (usually
                the zero vector). Defaults to True.

        Returns:
            Vector3: The surface point.

        Raises:
            OutOfDomainError: If `(u, v)` is outside the domain and `check_domain`
                is True.
            ValueError: If `u` or `v` is not finite.
        """
        _check_finite_parameters(u, v)
        if not self.is_in_domain(u, v):
            if check_domain:
                self._basis.check_domain(u, v)
            logger.debug("Evaluating surface outside its domain at (u, v)=(%g, %g)", u, v)
            basis_u, basis_v = self._basis.all_basis(u, v, self.shape)
            products = np.einsum("i,j->ij", basis_u, basis_v)
            point = np.einsum("ij,ijk->k", products, self._control_points)
            return Vector3.from_array(point)

        return Vector3.from_array(self.evaluate_many(u, v))

    def evaluate_many(
        self, us: npt.ArrayLike, vs: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the surface at paired parameters `(us[k], vs[k])`.

        Args:
            us (npt.ArrayLike): Parameters along u.
            vs (npt.ArrayLike): Parameters along v, with the same shape as `us`.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Surface points, with shape
            `(*us.shape, 3)`.

        Raises:
            OutOfDomainError: If any parameter is outside the domain.
            ValueError: If `us` and `vs` have different shapes.
        """
        basis_u, basis_v, rows, cols = self._basis.tabulate(us, vs)
        products = np.einsum("ni,nj->nij", basis_u, basis_v)
        points = np.einsum("nij,nijk->nk", products, self._control_points[rows, cols])
        return points.reshape(_output_shape(us))

    def __repr__(self) -> str:
        return f"BsplineSurface(degrees={self.degrees}, shape={self.shape})"


class NurbsSurface:
    """A rational (NURBS) tensor-product surface in 3D space.

    Every control point `P[i][j]` carries a non-negative weight `w[i][j]`:

                  sum_ij N[i, pu](u) * N[j, pv](v) * w[i][j] * P[i][j]
        S(u, v) = ----------------------------------------------------
                  sum_ij N[i, pu](u) * N[j, pv](v) * w[i][j]

    When every weight is exactly 1 the denominator is not applied, and the
    surface coincides with the `BsplineSurface` of the same control points.
    """

    def __init__(  # noqa: PLR0913
        self,
        control_points: Sequence[Sequence[Vector3]] | npt.ArrayLike,
        weights: Sequence[Sequence[float]] | npt.ArrayLike,
        knots_u: npt.ArrayLike | KnotVector,
        degree_u: int,
        knots_v: npt.ArrayLike | KnotVector,
        degree_v: int,
    ) -> None:
        """Initialize a NURBS surface.

        Args:
            control_points (Sequence[Sequence[Vector3]] | npt.ArrayLike): Rectangular
                grid of control points, the outer sequence running along u.
            weights (Sequence[Sequence[float]] | npt.ArrayLike): Grid of non-negative
                weights with the same shape as the control points grid.
            knots_u (npt.ArrayLike | KnotVector): Knot vector in the u-direction
                (copied).
            degree_u (int): Degree in the u-direction.
            knots_v (npt.ArrayLike | KnotVector): Knot vector in the v-direction
                (copied).
            degree_v (int): Degree in the v-direction.

        Raises:
            ValueError: If either grid is jagged, if their shapes differ, if a weight
                is negative or not finite, or if a degree, a knot vector length or a
                knot domain is invalid.
        """
        dtype = KnotVector(knots_u).dtype
        self._control_points = _to_points_array(control_points, dtype, grid_ndim=2)
        self._weights = _to_weights_array(weights, dtype, self.shape)
        self._basis = _TensorProductBasis(
            self.shape, knots_u, degree_u, knots_v, degree_v
        )
        logger.debug(
            "Created NURBS surface of degrees %s with a %dx%d control grid (rational=%s)",
            self.degrees,
            *self.shape,
            self.is_rational,
        )

    @property
    def shape(self) -> tuple[int, int]:
        """Number of control points along u and along v."""
        return (int(self._control_points.shape[0]), int(self._control_points.shape[1]))

    def row_count(self) -> int:
        """Number of control points along the u-direction."""
        return self.shape[0]

    def column_count(self) -> int:
        """Number of control points along the v-direction."""
        return self.shape[1]

    @property
    def degrees(self) -> tuple[int, int]:
        return self._basis.degrees

    @property
    def knots(self) -> tuple[KnotVector, KnotVector]:
        return self._basis.knots

    @property
    def domain(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """The parametric domains along u and along v."""
        return self._basis.domain

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control points, as a read-only array of shape (nu+1, nv+1, 3)."""
        return self._control_points

    @property
    def weights(self) -> npt.NDArray[np.float32 | np.float64]:
        """The weights, as a read-only array of shape (nu+1, nv+1)."""
        return self._weights

    @functools.cached_property
    def is_rational(self) -> bool:
        """Whether any weight differs from 1."""
        return not bool(np.all(self._weights == 1))

    def is_in_domain(self, u: npt.ArrayLike, v: npt.ArrayLike) -> bool | npt.NDArray[np.bool_]:
        return self._basis.is_in_domain(u, v)

    def evaluate(self, u: float, v: float, check_domain: bool = True) -> Vector3:
        """Evaluate the surface at a parameter pair.

        Args:
            u (float): Parameter along the u-direction.
            v (float): Parameter along the v-direction.
            check_domain (bool): If True, parameters outside the domain raise an
                error; otherwise the rational sum over the full grid is attempted,
                which usually fails with a zero denominator. Defaults to True.

        Returns:
            Vector3: The surface point.

        Raises:
            OutOfDomainError: If `(u, v)` is outside the domain and `check_domain`
                is True.
            ValueError: If `u` or `v` is not finite.
            DegenerateDenominatorError: If the weighted basis sum is zero at `(u, v)`.

        Example:
            >>> square = [[(0, 0, 0), (0, 1, 0)], [(1, 0, 0), (1, 1, 0)]]
            >>> ones = [[1.0, 1.0], [1.0, 1.0]]
            >>> surface = NurbsSurface(square, ones, [0, 0, 1, 1], 1, [0, 0, 1, 1], 1)
            >>> surface.evaluate(0.5, 0.5)
            Vector3(x=0.5, y=0.5, z=0.0)
        """
        _check_finite_parameters(u, v)
        if not self.is_in_domain(u, v):
            if check_domain:
                self._basis.check_domain(u, v)
            logger.debug("Evaluating surface outside its domain at (u, v)=(%g, %g)", u, v)
            basis_u, basis_v = self._basis.all_basis(u, v, self.shape)
            weighted = np.einsum("i,j,ij->ij", basis_u, basis_v, self._weights)
            denominator = float(weighted.sum())
            if denominator == 0.0:
                raise DegenerateDenominatorError(u, v)
            numerator = np.einsum("ij,ijk->k", weighted, self._control_points)
            return Vector3.from_array(numerator / denominator)

        return Vector3.from_array(self.evaluate_many(u, v))

    def evaluate_many(
        self, us: npt.ArrayLike, vs: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the surface at paired parameters `(us[k], vs[k])`.

        Args:
            us (npt.ArrayLike): Parameters along u.
            vs (npt.ArrayLike): Parameters along v, with the same shape as `us`.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Surface points, with shape
            `(*us.shape, 3)`.

        Raises:
            OutOfDomainError: If any parameter is outside the domain.
            DegenerateDenominatorError: If the weighted basis sum is zero at any of
                the parameters.
            ValueError: If `us` and `vs` have different shapes.
        """
        basis_u, basis_v, rows, cols = self._basis.tabulate(us, vs)
        weighted = np.einsum("ni,nj,nij->nij", basis_u, basis_v, self._weights[rows, cols])
        denominators = weighted.sum(axis=(1, 2))

        degenerate = np.flatnonzero(denominators == 0)
        if degenerate.size > 0:
            pt_id = degenerate[0]
            us_1d = np.ravel(us)
            vs_1d = np.ravel(vs)
            raise DegenerateDenominatorError(float(us_1d[pt_id]), float(vs_1d[pt_id]))

        points = np.einsum("nij,nijk->nk", weighted, self._control_points[rows, cols])
        if self.is_rational:
            points = points / denominators[:, np.newaxis]
        return points.reshape(_output_shape(us))

    def __repr__(self) -> str:
        return (
            f"NurbsSurface(degrees={self.degrees}, shape={self.shape}, "
            f"rational={self.is_rational})"
        )
