"""
Geometric shapes for the path tracer.

Each shape implements the Hittable interface with a `hit` method. The
family is closed: spheres and infinite cylinders.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The unit surface normal (always points against the ray)
        t: The ray parameter at intersection
        front_face: True if ray hit from outside the object
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None

    @classmethod
    def from_outward_normal(
        cls,
        ray: Ray,
        t: float,
        outward_normal: Vec3,
        material: Optional[Material] = None
    ) -> HitRecord:
        """Build a record whose normal is flipped to oppose the ray.

        Args:
            ray: The incoming ray
            t: Ray parameter of the hit
            outward_normal: The geometric normal pointing out of the surface
            material: Material of the object that was hit
        """
        front_face = ray.direction.dot(outward_normal) < 0
        return cls(
            point=ray.at(t),
            normal=outward_normal if front_face else -outward_normal,
            t=t,
            front_face=front_face,
            material=material
        )


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Exclusive lower bound on t (avoids self-intersection)
            t_max: Inclusive upper bound on t

        Returns:
            HitRecord for the nearest hit in (t_min, t_max], None otherwise
        """
        pass


def _in_range(t: float, t_min: float, t_max: float) -> bool:
    return t_min < t <= t_max


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (negative flips the normals inward,
                which makes a hollow glass shell when nested in a sphere)
            material: Material for shading
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
        With b = 2h the roots are t = (-h ± √(h² - ac)) / a.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if not _in_range(root, t_min, t_max):
            root = (-half_b + sqrtd) / a
            if not _in_range(root, t_min, t_max):
                return None

        outward_normal = (ray.at(root) - self.center) / self.radius
        return HitRecord.from_outward_normal(ray, root, outward_normal, self.material)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Cylinder(Hittable):
    """An infinite cylinder without caps.

    Defined by any point on its axis, the axis direction and a radius.
    """

    def __init__(
        self,
        axis_point: Point3,
        axis_direction: Vec3,
        radius: float,
        material: Optional[Material] = None
    ):
        """Create a cylinder.

        Args:
            axis_point: Any point on the cylinder's axis
            axis_direction: Direction of the axis (normalized on construction)
            radius: Radius of the cylinder
            material: Material for shading
        """
        self.axis_point = axis_point
        self.axis_direction = axis_direction.normalize()
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-cylinder intersection.

        First finds where the ray line passes closest to the axis line by
        solving O + t·d + k·(d×a) = A + s·a for (t, s, k). The ray misses
        when that distance is at least the radius. Otherwise the two surface
        crossings sit symmetrically around the closest approach, offset by
        the half-chord length over the ray's speed perpendicular to the axis.
        """
        d = ray.direction
        a = self.axis_direction

        # Rays running along the axis never cross the side wall
        d_perp = d - a * d.dot(a)
        if d_perp.length_squared() <= 1e-12 * d.length_squared():
            return None

        n = d.cross(a)

        system = np.column_stack((d.to_array(), -a.to_array(), n.to_array()))
        try:
            t_closest, _, k = np.linalg.solve(system, (self.axis_point - ray.origin).to_array())
        except np.linalg.LinAlgError:
            # Ray parallel to the axis (or degenerate direction)
            return None

        distance = abs(k) * n.length()
        if distance >= self.radius:
            return None

        half_chord = math.sqrt(self.radius * self.radius - distance * distance)
        dt = half_chord / d_perp.length()

        root = float(t_closest) - dt
        if not _in_range(root, t_min, t_max):
            root = float(t_closest) + dt
            if not _in_range(root, t_min, t_max):
                return None

        outward_normal = self._radial(ray.at(root)) / self.radius
        return HitRecord.from_outward_normal(ray, root, outward_normal, self.material)

    def _radial(self, point: Point3) -> Vec3:
        """Vector from the nearest point on the axis to `point`."""
        rel = point - self.axis_point
        return rel - self.axis_direction * rel.dot(self.axis_direction)

    def __repr__(self) -> str:
        return (
            f"Cylinder(axis_point={self.axis_point}, "
            f"axis_direction={self.axis_direction}, radius={self.radius})"
        )
