"""Host-side three-component vector used to describe scenes.

Scene descriptions (entity positions, light positions, camera eye) are built
in Python scope from ``Vector3`` values and uploaded to Taichi fields before
rendering. Kernel code works with ``taichi.math.vec3`` instead; see
``whitted.core.ray`` for the kernel-side helpers.

The dot product is available as the infix ``@`` operator:

Example:
    >>> a = Vector3(1.0, 2.0, 3.0)
    >>> b = Vector3(4.0, 5.0, 6.0)
    >>> a @ b
    32.0
    >>> (a - b).length_squared()
    27.0
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector of floats.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "z", float(self.z))

    @classmethod
    def of(cls, value: Vector3 | Sequence[float]) -> Vector3:
        """Coerce a Vector3 or any 3-sequence into a Vector3.

        Args:
            value: An existing vector or a sequence of exactly three numbers.

        Returns:
            The vector itself, or a new vector built from the sequence.

        Raises:
            ValueError: If the sequence does not have three components.
        """
        if isinstance(value, Vector3):
            return value
        if len(value) != 3:
            raise ValueError(f"Expected 3 components, got {len(value)}")
        return cls(value[0], value[1], value[2])

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, scale: float) -> Vector3:
        return Vector3(self.x * scale, self.y * scale, self.z * scale)

    def __rmul__(self, scale: float) -> Vector3:
        return self.__mul__(scale)

    def __truediv__(self, scale: float) -> Vector3:
        return Vector3(self.x / scale, self.y / scale, self.z / scale)

    def __matmul__(self, other: Vector3) -> float:
        return self.dot(other)

    def dot(self, other: Vector3) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Return the cross product ``self x other``."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        """Return the squared Euclidean length.

        Cheaper than length() when only comparing magnitudes.
        """
        return self.dot(self)

    def length(self) -> float:
        """Return the Euclidean length."""
        return math.sqrt(self.length_squared())

    def normalize(self) -> Vector3:
        """Return a unit vector in the same direction.

        Returns:
            The vector divided by its length.

        Raises:
            ValueError: If the vector has zero or non-finite length.
        """
        length = self.length()
        if length == 0.0 or not math.isfinite(length):
            raise ValueError(f"Cannot normalize vector with length {length}: {self}")
        return self / length

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)
