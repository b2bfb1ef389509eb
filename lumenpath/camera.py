"""
Camera module for generating primary rays.

Supports:
- Perspective projection
- Depth of field (defocus blur)
- Configurable field of view
- Arbitrary positioning via look-at
- Incremental configuration through CameraBuilder
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Optional
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray
from .sampling import random_in_unit_disk


class Camera:
    """A camera with perspective projection and depth of field.

    All viewport geometry is derived once in the constructor; a camera is
    never modified afterwards and can be shared between render threads.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0))
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens diameter for depth of field (0 = pinhole)
            focus_dist: Distance to the plane in perfect focus
        """
        theta = math.radians(vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        # Compute orthonormal camera basis
        self.w = (look_from - look_at).normalize()  # Points backward from camera
        self.u = vup.cross(self.w).normalize()       # Points right
        self.v = self.w.cross(self.u)                # Points up

        self.origin = look_from
        self.horizontal = self.u * (viewport_width * focus_dist)
        self.vertical = self.v * (viewport_height * focus_dist)
        self.lower_left_corner = (
            self.origin
            - self.horizontal / 2
            - self.vertical / 2
            - self.w * focus_dist
        )

        self.lens_radius = aperture / 2

    def get_ray(self, s: float, t: float, rng: np.random.Generator) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random source used to pick a point on the lens

        Returns:
            A ray from the lens through the specified viewport point
        """
        if self.lens_radius > 0:
            rd = random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )
        return Ray(self.origin + offset, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"


@dataclass
class CameraBuilder:
    """Camera parameters that can be filled in one at a time.

    Used where a camera is configured incrementally (a scene file, an
    interactive control panel). `build` never invents missing values.
    """
    look_from: Optional[Point3] = None
    look_at: Optional[Point3] = None
    vup: Optional[Vec3] = None
    vfov: Optional[float] = None
    aspect_ratio: Optional[float] = None
    aperture: Optional[float] = None
    focus_dist: Optional[float] = None

    def missing(self) -> list[str]:
        """Names of the parameters that are still unset."""
        return [f.name for f in fields(self) if getattr(self, f.name) is None]

    def build(self) -> Optional[Camera]:
        """Create the camera, or return None if any parameter is unset."""
        if self.missing():
            return None
        return Camera(
            look_from=self.look_from,
            look_at=self.look_at,
            vup=self.vup,
            vfov=self.vfov,
            aspect_ratio=self.aspect_ratio,
            aperture=self.aperture,
            focus_dist=self.focus_dist
        )
