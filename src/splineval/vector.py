"""Immutable 3D vector shared by curves and surfaces."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from numpy import typing as npt


@dataclass(frozen=True)
class Vector3:
    """A point or vector in 3D space.

    Instances are immutable values: arithmetic returns new vectors and two
    vectors are equal when their coordinates are.

    Example:
        >>> Vector3(1.0, 2.0, 3.0).scale(2.0) + Vector3(1.0, 0.0, 0.0)
        Vector3(x=3.0, y=4.0, z=6.0)
    """

    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values: npt.ArrayLike) -> Vector3:
        """Build a vector from a sequence of three reals.

        Raises:
            ValueError: If `values` does not hold exactly three numbers.
        """
        arr = np.asarray(values, dtype=np.float64)
        if arr.shape != (3,):
            raise ValueError(f"Expected 3 coordinates, got shape {arr.shape}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    def add(self, other: Vector3) -> Vector3:
        """Return the component-wise sum of two vectors."""
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def scale(self, factor: float) -> Vector3:
        """Return the vector multiplied by a scalar."""
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def __add__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return self.add(other)

    def __mul__(self, factor: float) -> Vector3:
        if not isinstance(factor, (int, float, np.floating, np.integer)):
            return NotImplemented
        return self.scale(float(factor))

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vector3:
        if not isinstance(divisor, (int, float, np.floating, np.integer)):
            return NotImplemented
        if divisor == 0:
            raise ZeroDivisionError("Vector3 division by zero")
        return Vector3(self.x / divisor, self.y / divisor, self.z / divisor)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_array(self) -> npt.NDArray[np.float64]:
        """Return the coordinates as a float64 array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_close(self, other: Vector3, tol: float) -> bool:
        """Check whether every coordinate differs from `other` by at most `tol`."""
        return (
            abs(self.x - other.x) <= tol
            and abs(self.y - other.y) <= tol
            and abs(self.z - other.z) <= tol
        )
