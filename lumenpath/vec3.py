"""
Vector3 class for 3D math operations.

This is the fundamental building block of the path tracer, used for:
- Points in 3D space
- Direction vectors
- Linear RGB color values

Vectors are immutable values; every operation returns a new Vec3.
"""

from __future__ import annotations
import math
from typing import Iterator, Union
import numpy as np


class Vec3:
    """An immutable 3D vector.

    Scalar arithmetic is done on plain floats, which is far cheaper than
    numpy for the millions of tiny vectors a render creates. Use
    `from_array` / `to_array` at the boundary with image buffers.
    """

    __slots__ = ('x', 'y', 'z')

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        object.__setattr__(self, 'x', float(x))
        object.__setattr__(self, 'y', float(y))
        object.__setattr__(self, 'z', float(z))

    def __setattr__(self, name, value):
        raise AttributeError("Vec3 is immutable")

    @classmethod
    def from_array(cls, arr) -> Vec3:
        """Create Vec3 from a numpy array or any 3-element sequence."""
        return cls(arr[0], arr[1], arr[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return (
            math.isclose(self.x, other.x, abs_tol=1e-9)
            and math.isclose(self.y, other.y, abs_tol=1e-9)
            and math.isclose(self.z, other.z, abs_tol=1e-9)
        )

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.z))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)
        return Vec3(self.x + other, self.y + other, self.z + other)

    __radd__ = __add__

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)
        return Vec3(self.x - other, self.y - other, self.z - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3(other - self.x, other - self.y, other - self.z)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        """Scale by a number, or multiply component-wise by another Vec3."""
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vec3(self.x * other, self.y * other, self.z * other)

    __rmul__ = __mul__

    def __truediv__(self, other: float) -> Vec3:
        return Vec3(self.x / other, self.y / other, self.z / other)

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        The zero vector has no direction and is returned unchanged.
        """
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return self / length

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return abs(self.x) < epsilon and abs(self.y) < epsilon and abs(self.z) < epsilon

    def to_array(self) -> np.ndarray:
        """Return the components as a float64 numpy array."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)


# Convenience type aliases
Point3 = Vec3
Color = Vec3


def encode_rgb8(linear: np.ndarray) -> np.ndarray:
    """Encode averaged linear light values as 8-bit pixel values.

    Applies gamma 2 (square root), clamps to [0, 0.999] and scales by 256,
    so 1.0 maps to 255 and nothing overflows.

    Args:
        linear: Array of linear values, any shape

    Returns:
        uint8 array of the same shape
    """
    corrected = np.sqrt(np.clip(linear, 0.0, None))
    return (256.0 * np.clip(corrected, 0.0, 0.999)).astype(np.uint8)
