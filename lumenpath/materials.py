"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Scattering is pure given the random source: the same generator state
always produces the same scattered ray.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

import numpy as np

from .vec3 import Color
from .ray import Ray
from .shapes import HitRecord
from .sampling import random_double, random_in_unit_sphere, random_unit_vector, reflect, refract


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered: Ray


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            rec: The hit being shaded
            rng: Random source for this render pass

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        scatter_direction = rec.normal + random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = rec.normal

        return ScatterResult(self.albedo, Ray(rec.point, scatter_direction))

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Blur radius of the reflection (0 = perfect mirror)
        """
        self.albedo = albedo
        self.fuzz = fuzz

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        reflected = reflect(ray_in.direction.normalize(), rec.normal)
        if self.fuzz > 0:
            reflected = reflected + random_in_unit_sphere(rng) * self.fuzz

        # Fuzz can push the reflection below the surface; absorb those
        if reflected.dot(rec.normal) <= 0:
            return None
        return ScatterResult(self.albedo, Ray(rec.point, reflected))

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, ir: float = 1.5):
        """Create a dielectric material.

        Args:
            ir: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.ir = ir

    def scatter(self, ray_in: Ray, rec: HitRecord, rng: np.random.Generator) -> Optional[ScatterResult]:
        attenuation = Color(1.0, 1.0, 1.0)
        refraction_ratio = 1.0 / self.ir if rec.front_face else self.ir

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0
        if cannot_refract or self.reflectance(cos_theta) > random_double(rng):
            direction = reflect(unit_direction, rec.normal)
        else:
            direction = refract(unit_direction, rec.normal, refraction_ratio)

        return ScatterResult(attenuation, Ray(rec.point, direction))

    def reflectance(self, cosine: float) -> float:
        """Schlick's approximation for reflectance."""
        r0 = (1 - self.ir) / (1 + self.ir)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)

    def __repr__(self) -> str:
        return f"Dielectric(ir={self.ir})"
