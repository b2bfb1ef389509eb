"""
Random sampling and reflection helpers.

Every sampler takes the random source explicitly so that a render pass
seeded with a fixed value always draws the same sequence, no matter which
thread runs it.
"""

from __future__ import annotations
import math
import numpy as np

from .vec3 import Vec3


def random_double(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> float:
    """Return a uniform random float in [min_val, max_val)."""
    return min_val + (max_val - min_val) * float(rng.random())


def random_vec(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
    """Generate a random vector with components in [min_val, max_val)."""
    x, y, z = min_val + (max_val - min_val) * rng.random(3)
    return Vec3(x, y, z)


def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
    """Generate a random point inside the unit sphere by rejection."""
    while True:
        p = random_vec(rng, -1.0, 1.0)
        if p.length_squared() < 1:
            return p


def random_unit_vector(rng: np.random.Generator) -> Vec3:
    """Generate a random unit vector (uniform on sphere surface)."""
    while True:
        p = random_in_unit_sphere(rng)
        # Points too close to the center lose precision when normalized
        if p.length_squared() > 1e-160:
            return p.normalize()


def random_in_unit_disk(rng: np.random.Generator) -> Vec3:
    """Generate a random point inside the unit disk (z=0)."""
    while True:
        x, y = 2.0 * rng.random(2) - 1.0
        p = Vec3(x, y, 0)
        if p.length_squared() < 1:
            return p


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Reflect v about the unit normal n: v - 2(v.n)n."""
    return v - n * (2.0 * v.dot(n))


def refract(uv: Vec3, n: Vec3, etai_over_etat: float) -> Vec3:
    """Refract the unit vector uv through a surface with unit normal n.

    Snell's law split into the components perpendicular and parallel to
    the normal. The caller is responsible for ruling out total internal
    reflection first.

    Args:
        uv: Unit incoming direction
        n: Unit surface normal on the incoming side
        etai_over_etat: Ratio of refractive indices (n1/n2)

    Returns:
        Refracted direction (unit length when uv and n are)
    """
    cos_theta = min(-uv.dot(n), 1.0)
    r_out_perp = (uv + n * cos_theta) * etai_over_etat
    r_out_parallel = n * -math.sqrt(abs(1.0 - r_out_perp.length_squared()))
    return r_out_perp + r_out_parallel
