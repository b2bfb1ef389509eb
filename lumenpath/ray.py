"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
from typing import NamedTuple

from .vec3 import Vec3, Point3


class Ray(NamedTuple):
    """An immutable ray with origin and direction.

    The direction is not required to be unit length; `t` is measured in
    multiples of it.
    """

    origin: Point3
    direction: Vec3

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
