"""Public API surface for splineval.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private functions via: splineval._basis_impl._function_name, etc.
from . import (
    _basis_impl,  # noqa: F401
    _knots_impl,  # noqa: F401
)

# Public API imports
from .basis import evaluate_basis, tabulate_basis
from .curve import BsplineCurve
from .exceptions import DegenerateDenominatorError, OutOfDomainError, SplinevalError
from .knots import KnotVector, create_uniform_open_knot_vector
from .surface import BsplineSurface, NurbsSurface, ParametricSurface
from .tolerance import (
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
)
from .vector import Vector3

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "Pablo Antolin <pablo.antolin@epfl.ch>"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "BsplineCurve",
    "BsplineSurface",
    "DegenerateDenominatorError",
    "KnotVector",
    "NurbsSurface",
    "OutOfDomainError",
    "ParametricSurface",
    "SplinevalError",
    "Vector3",
    "__author__",
    "__license__",
    "__version__",
    "create_uniform_open_knot_vector",
    "evaluate_basis",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_machine_epsilon",
    "get_strict_tolerance",
    "tabulate_basis",
]
