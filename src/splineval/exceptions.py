"""Exceptions raised while evaluating curves and surfaces.

Malformed construction input is reported with the built-in ``ValueError`` and
``TypeError``. The classes below flag failures that only show up at
evaluation time, so that callers can tell them apart from bad input.
"""


class SplinevalError(Exception):
    """Base class for evaluation errors."""


class OutOfDomainError(SplinevalError, ValueError):
    """A parameter lies outside the domain spanned by the knot vector."""

    def __init__(self, value: object, domain: tuple[float, float]) -> None:
        self.value = value
        self.domain = domain
        super().__init__(f"Parameter {value} is outside the knot vector domain {domain}")


class DegenerateDenominatorError(SplinevalError, ZeroDivisionError):
    """The weighted basis sum of a rational surface vanished at a parameter."""

    def __init__(self, u: float, v: float) -> None:
        self.u = u
        self.v = v
        super().__init__(
            f"Rational denominator is zero at (u, v) = ({u}, {v}); "
            "the surface point is undefined"
        )
