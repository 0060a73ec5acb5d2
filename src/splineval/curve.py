"""BsplineCurve class."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy import typing as npt

from ._basis_impl import _eval_basis_function_impl
from ._utils import _check_finite_parameters, _to_points_array
from .basis import tabulate_basis
from .exceptions import OutOfDomainError
from .knots import KnotVector
from .vector import Vector3

logger = logging.getLogger(__name__)


class BsplineCurve:
    """A non-rational B-spline curve in 3D space.

    The curve point at `t` is the weighted sum `sum_i N[i, p](t) * P[i]` of the
    control points `P[i]` with the B-spline basis functions of degree `p`. No
    normalization is applied: on a clamped knot vector the basis functions add
    up to one over the whole domain.

    Attributes:
        _control_points (npt.NDArray[np.float32 | np.float64]): Read-only array of
            shape (n+1, 3).
        _knots (KnotVector): Knot vector owned by the curve.
        _degree (int): Polynomial degree.
    """

    def __init__(
        self,
        control_points: Sequence[Vector3] | npt.ArrayLike,
        knots: npt.ArrayLike | KnotVector,
        degree: int,
    ) -> None:
        """Initialize a B-spline curve.

        Args:
            control_points (Sequence[Vector3] | npt.ArrayLike): The n+1 control points,
                as `Vector3` instances or triples of reals.
            knots (npt.ArrayLike | KnotVector): Knot vector with n+degree+2 knots. It is
                copied, so later changes to it do not affect the curve.
            degree (int): Polynomial degree. Must be non-negative and smaller than the
                number of control points.

        Raises:
            ValueError: If the degree is negative, if there are not more control points
                than the degree, if the number of knots does not match, or if the domain
                of the knot vector is empty.
        """
        if degree < 0:
            raise ValueError("degree must be non-negative")

        self._knots = KnotVector(knots)
        self._degree = int(degree)
        self._control_points = _to_points_array(control_points, self._knots.dtype, grid_ndim=1)

        num_points = self._control_points.shape[0]
        if num_points <= degree:
            raise ValueError(
                f"A curve of degree {degree} needs at least {degree + 1} control points, "
                f"got {num_points}"
            )
        expected_knots = num_points + degree + 1
        if len(self._knots) != expected_knots:
            raise ValueError(
                f"The knot vector must have {expected_knots} elements for {num_points} "
                f"control points and degree {degree}, got {len(self._knots)}"
            )
        start, end = self.domain
        if not start < end:
            raise ValueError(f"The knot vector domain [{start}, {end}] is empty")

        logger.debug(
            "Created B-spline curve of degree %d with %d control points on [%g, %g]",
            degree,
            num_points,
            start,
            end,
        )

    @property
    def degree(self) -> int:
        """The polynomial degree of the curve."""
        return self._degree

    @property
    def knots(self) -> KnotVector:
        """The knot vector of the curve."""
        return self._knots

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """The control points, as a read-only array of shape (n+1, 3)."""
        return self._control_points

    @property
    def num_control_points(self) -> int:
        return int(self._control_points.shape[0])

    @property
    def domain(self) -> tuple[float, float]:
        """The parametric domain `(knots[degree], knots[n+1])`."""
        return self._knots.domain(self._degree)

    def is_in_domain(self, t: npt.ArrayLike) -> bool | npt.NDArray[np.bool_]:
        """Check whether parameter value(s) lie in the domain, up to tolerance."""
        return self._knots.is_in_domain(self._degree, t)

    def evaluate(self, t: float, check_domain: bool = True) -> Vector3:
        """Evaluate the curve at a parameter value.

        Args:
            t (float): Parameter value.
            check_domain (bool): If True, parameters outside the domain raise an
                error. If False, the Cox-de Boor sum over all the control points is
                returned instead; it is usually the zero vector, since no basis
                function is supported there. Defaults to True.

        Returns:
            Vector3: The curve point.

        Raises:
            OutOfDomainError: If `t` is outside the domain and `check_domain` is True.
            ValueError: If `t` is not finite.

        Example:
            >>> curve = BsplineCurve([(0, 0, 0), (1, 0, 0)], [0, 0, 1, 1], 1)
            >>> curve.evaluate(0.5)
            Vector3(x=0.5, y=0.0, z=0.0)
        """
        _check_finite_parameters(t)
        if not self.is_in_domain(t):
            if check_domain:
                raise OutOfDomainError(t, self.domain)
            logger.debug("Evaluating curve outside its domain %s at t=%g", self.domain, t)
            return Vector3.from_array(self._evaluate_all_basis(t) @ self._control_points)

        return Vector3.from_array(self.evaluate_many(t))

    def evaluate_many(self, ts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at several parameter values.

        Args:
            ts (npt.ArrayLike): Parameter values, all of them in the domain.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Curve points, with shape
            `(*ts.shape, 3)`.

        Raises:
            OutOfDomainError: If any parameter is outside the domain.
        """
        basis, first = tabulate_basis(self._knots, self._degree, ts)
        ids = first[..., np.newaxis] + np.arange(self._degree + 1)
        local_points = self._control_points[ids]
        return np.einsum("...i,...ik->...k", basis, local_points)

    def _evaluate_all_basis(self, t: float) -> npt.NDArray[np.float64]:
        knots = self._knots.values
        return np.array(
            [
                _eval_basis_function_impl(knots, self._degree, i, float(t))
                for i in range(self.num_control_points)
            ]
        )

    def __repr__(self) -> str:
        return (
            f"BsplineCurve(degree={self._degree}, "
            f"num_control_points={self.num_control_points}, knots={self._knots!r})"
        )
