"""Tests for B-spline curves."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from splineval.basis import evaluate_basis
from splineval.curve import BsplineCurve
from splineval.exceptions import OutOfDomainError
from splineval.knots import KnotVector, create_uniform_open_knot_vector
from splineval.vector import Vector3

QUADRATIC_POINTS = [
    (0.0, 0.0, 0.0),
    (1.0, 2.0, 0.0),
    (2.0, -1.0, 1.0),
    (3.0, 0.5, 2.0),
    (4.0, 0.0, 0.0),
]


class TestBsplineCurveEvaluation:
    """Test curve point evaluation."""

    def test_linear_segment_midpoint(self) -> None:
        """A degree 1 curve on [0, 0, 1, 1] is the straight segment."""
        curve = BsplineCurve(
            [Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0)], [0.0, 0.0, 1.0, 1.0], 1
        )
        assert curve.evaluate(0.5) == Vector3(0.5, 0.0, 0.0)
        assert curve.evaluate(0.0) == Vector3(0.0, 0.0, 0.0)
        assert curve.evaluate(1.0) == Vector3(1.0, 0.0, 0.0)

    def test_clamped_endpoints_are_interpolated(self, quadratic_knots: list[float]) -> None:
        """Clamped curves start and end at their first and last control points."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        assert curve.evaluate(0.0) == Vector3(*QUADRATIC_POINTS[0])
        assert curve.evaluate(1.0) == Vector3(*QUADRATIC_POINTS[-1])

    def test_quadratic_bezier(self) -> None:
        """A single-span quadratic is a Bezier curve."""
        points = [(0.0, 0.0, 0.0), (1.0, 2.0, 0.0), (2.0, 0.0, 0.0)]
        curve = BsplineCurve(points, [0.0, 0.0, 0.0, 1.0, 1.0, 1.0], 2)
        point = curve.evaluate(0.5)
        assert point.is_close(Vector3(1.0, 1.0, 0.0), 1e-15)
        assert curve.evaluate(0.0) == Vector3(0.0, 0.0, 0.0)
        assert curve.evaluate(1.0) == Vector3(2.0, 0.0, 0.0)

    def test_matches_basis_sum(self, quadratic_knots: list[float]) -> None:
        """Inside the domain the point is the basis-weighted sum of control points."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        points = np.array(QUADRATIC_POINTS)
        for t in np.linspace(0.0, 1.0, 23)[:-1]:
            weights = np.array(
                [evaluate_basis(i, 2, quadratic_knots, float(t)) for i in range(len(points))]
            )
            expected = weights @ points
            nptest.assert_allclose(curve.evaluate(float(t)).to_array(), expected, atol=1e-14)

    def test_affine_invariance(self, quadratic_knots: list[float]) -> None:
        """Translating the control points translates the curve."""
        shift = np.array([1.0, -2.0, 0.5])
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        moved = BsplineCurve(np.array(QUADRATIC_POINTS) + shift, quadratic_knots, 2)
        ts = np.linspace(0.0, 1.0, 11)
        expected = curve.evaluate_many(ts) + shift
        nptest.assert_allclose(moved.evaluate_many(ts), expected, atol=1e-14)

    def test_degree_zero_curve(self) -> None:
        """Degree 0 curves are piecewise constant."""
        points = [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0)]
        curve = BsplineCurve(points, [0.0, 0.5, 1.0], 0)
        assert curve.evaluate(0.25) == Vector3(0.0, 0.0, 0.0)
        assert curve.evaluate(0.5) == Vector3(1.0, 1.0, 1.0)
        assert curve.evaluate(1.0) == Vector3(1.0, 1.0, 1.0)

    def test_evaluate_many_shapes(self, quadratic_knots: list[float]) -> None:
        """evaluate_many appends a coordinate axis to the input shape."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        assert curve.evaluate_many(0.3).shape == (3,)
        assert curve.evaluate_many([0.1, 0.2, 0.3]).shape == (3, 3)
        assert curve.evaluate_many(np.full((2, 4), 0.5)).shape == (2, 4, 3)

    def test_evaluate_many_matches_evaluate(self, quadratic_knots: list[float]) -> None:
        """Vectorized and point-wise evaluation agree."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        ts = np.linspace(0.0, 1.0, 17)
        many = curve.evaluate_many(ts)
        for t, point in zip(ts, many, strict=True):
            point_at_t = curve.evaluate(float(t)).to_array()
            nptest.assert_allclose(point_at_t, point, rtol=0.0, atol=1e-15)

    def test_float32_curve(self) -> None:
        """Single precision knots give single precision points."""
        knots = KnotVector(np.array([0.0, 0.0, 1.0, 1.0], dtype=np.float32))
        curve = BsplineCurve([(0.0, 0.0, 0.0), (2.0, 0.0, 0.0)], knots, 1)
        assert curve.control_points.dtype == np.float32
        assert curve.evaluate_many([0.25]).dtype == np.float32
        assert curve.evaluate(0.25) == Vector3(0.5, 0.0, 0.0)


class TestBsplineCurveDomain:
    """Test the behavior at and outside the domain bounds."""

    def test_out_of_domain_raises(self, quadratic_knots: list[float]) -> None:
        """By default, parameters outside the domain are rejected."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        with pytest.raises(OutOfDomainError):
            curve.evaluate(1.5)
        with pytest.raises(OutOfDomainError):
            curve.evaluate(-0.1)
        with pytest.raises(OutOfDomainError):
            curve.evaluate_many([0.5, 2.0])

    def test_unchecked_evaluation_outside_domain(self, quadratic_knots: list[float]) -> None:
        """Without the domain check, points far outside give the zero vector."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        assert curve.evaluate(1.5, check_domain=False) == Vector3.zero()
        assert curve.evaluate(-3.0, check_domain=False) == Vector3.zero()

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    @pytest.mark.parametrize("check_domain", [True, False])
    def test_non_finite_parameter(self, bad: float, check_domain: bool) -> None:
        """NaN and infinite parameters are rejected instead of giving a NaN point."""
        curve = BsplineCurve([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], [0.0, 0.0, 1.0, 1.0], 1)
        with pytest.raises(ValueError, match="must be finite"):
            curve.evaluate(bad, check_domain=check_domain)
        with pytest.raises(ValueError, match="must be finite"):
            curve.evaluate_many([0.5, bad])

    def test_within_tolerance_is_clamped(self) -> None:
        """Parameters just outside the domain, within tolerance, evaluate at the end."""
        knots = KnotVector([0.0, 0.0, 1.0, 1.0], tolerance=1e-9)
        curve = BsplineCurve([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], knots, 1)
        assert curve.evaluate(1.0 + 1e-10) == Vector3(1.0, 0.0, 0.0)
        assert curve.evaluate(-1e-10) == Vector3(0.0, 0.0, 0.0)

    def test_is_in_domain(self, quadratic_knots: list[float]) -> None:
        """Domain queries delegate to the knot vector."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        assert curve.domain == (0.0, 1.0)
        assert curve.is_in_domain(0.5)
        assert not curve.is_in_domain(1.1)
        nptest.assert_array_equal(curve.is_in_domain([0.0, 2.0]), [True, False])

    def test_unclamped_domain(self) -> None:
        """Unclamped curves are only defined on the central knot interval."""
        points = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)]
        curve = BsplineCurve(points, [0.0, 1.0, 2.0, 3.0, 4.0, 5.0], 2)
        assert curve.domain == (2.0, 3.0)
        assert curve.evaluate(2.5).is_close(Vector3(1.0, 0.0, 0.0), 1e-15)
        with pytest.raises(OutOfDomainError):
            curve.evaluate(1.0)


class TestBsplineCurveConstruction:
    """Test curve construction, validation and ownership of the data."""

    def test_properties(self, quadratic_knots: list[float]) -> None:
        """The curve exposes its degree, knots and control points."""
        curve = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        assert curve.degree == 2  # noqa: PLR2004
        assert curve.num_control_points == 5  # noqa: PLR2004
        assert curve.knots == KnotVector(quadratic_knots)
        nptest.assert_array_equal(curve.control_points, QUADRATIC_POINTS)
        assert "degree=2" in repr(curve)

    def test_vector_and_tuple_points_agree(self, quadratic_knots: list[float]) -> None:
        """Control points can be Vector3 instances or triples."""
        as_vectors = [Vector3(*pt) for pt in QUADRATIC_POINTS]
        a = BsplineCurve(as_vectors, quadratic_knots, 2)
        b = BsplineCurve(QUADRATIC_POINTS, quadratic_knots, 2)
        nptest.assert_array_equal(a.control_points, b.control_points)

    def test_knots_are_copied(self) -> None:
        """Changing the caller's knot array later does not affect the curve."""
        knots = np.array([0.0, 0.0, 1.0, 1.0])
        curve = BsplineCurve([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], knots, 1)
        knots[2] = 4.0
        knots[3] = 4.0
        assert curve.domain == (0.0, 1.0)
        assert curve.evaluate(0.5) == Vector3(0.5, 0.0, 0.0)

    def test_control_points_are_copied(self) -> None:
        """The curve owns a read-only copy of its control points."""
        points = np.array([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        curve = BsplineCurve(points, [0.0, 0.0, 1.0, 1.0], 1)
        points[1, 0] = 10.0
        assert curve.evaluate(1.0) == Vector3(1.0, 0.0, 0.0)
        with pytest.raises(ValueError):
            curve.control_points[0, 0] = 1.0

    def test_compatible_with_uniform_knots(self) -> None:
        """Uniform open knot vectors have the right length for n+1 points."""
        knots = create_uniform_open_knot_vector(3, 2)
        points = [(float(i), 0.0, 0.0) for i in range(5)]
        curve = BsplineCurve(points, knots, 2)
        assert curve.evaluate(1.0) == Vector3(4.0, 0.0, 0.0)

    @pytest.mark.parametrize(
        ("points", "knots", "degree", "message"),
        [
            ([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], [0.0, 0.0, 1.0, 1.0], -1, "non-negative"),
            ([(0.0, 0.0, 0.0)], [0.0, 0.0, 1.0], 1, "needs at least 2 control points"),
            (
                [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)],
                [0.0, 0.0, 0.5, 1.0, 1.0],
                1,
                "must have 4 elements",
            ),
            ([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], [0.0, 1.0, 1.0, 1.0], 1, "is empty"),
            ([(0.0, 0.0), (1.0, 0.0)], [0.0, 0.0, 1.0, 1.0], 1, "must have shape"),
            ([(0.0, 0.0, 0.0), (1.0, 0.0)], [0.0, 0.0, 1.0, 1.0], 1, "triples of real"),
            ([(0.0, np.nan, 0.0), (1.0, 0.0, 0.0)], [0.0, 0.0, 1.0, 1.0], 1, "finite"),
            ([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)], [0.0, 1.0, 0.0, 1.0], 1, "non-decreasing"),
        ],
    )
    def test_invalid_construction(
        self,
        points: list[tuple[float, ...]],
        knots: list[float],
        degree: int,
        message: str,
    ) -> None:
        """Inconsistent input is rejected with ValueError."""
        with pytest.raises(ValueError, match=message):
            BsplineCurve(points, knots, degree)
