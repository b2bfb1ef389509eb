"""
Built-in scenes.

Each builder returns the world together with a CameraBuilder that has
every parameter except the aspect ratio filled in; the caller supplies
that from its render parameters and builds the camera. Every builder
takes a seed; only the randomly laid out scenes use it.
"""

from __future__ import annotations
from typing import Callable, Dict, Tuple

import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import CameraBuilder
from .shapes import Sphere, Cylinder
from .materials import Lambertian, Metal, Dielectric
from .world import World

SceneBuilder = Callable[..., Tuple[World, CameraBuilder]]


def _camera(look_from: Point3, look_at: Point3, vfov: float,
            aperture: float = 0.0, focus_dist: float = 1.0) -> CameraBuilder:
    return CameraBuilder(
        look_from=look_from,
        look_at=look_at,
        vup=Vec3(0, 1, 0),
        vfov=vfov,
        aperture=aperture,
        focus_dist=focus_dist
    )


def single_sphere(seed: int = 0) -> Tuple[World, CameraBuilder]:
    """One grey diffuse sphere in front of a pinhole camera at the origin."""
    world = World()
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.5, 0.5, 0.5))))
    return world, _camera(Point3(0, 0, 0), Point3(0, 0, -1), vfov=90)


def material_showcase(seed: int = 0) -> Tuple[World, CameraBuilder]:
    """Diffuse, hollow glass and metal spheres on a large ground sphere."""
    world = World()

    ground = Lambertian(Color(0.8, 0.8, 0.0))
    center = Lambertian(Color(0.1, 0.2, 0.5))
    glass = Dielectric(1.5)
    gold = Metal(Color(0.8, 0.6, 0.2), 0.0)

    world.add(Sphere(Point3(0, -100.5, -1), 100, ground))
    world.add(Sphere(Point3(0, 0, -1), 0.5, center))
    # Negative inner radius turns the glass ball into a bubble
    world.add(Sphere(Point3(-1, 0, -1), 0.5, glass))
    world.add(Sphere(Point3(-1, 0, -1), -0.45, glass))
    world.add(Sphere(Point3(1, 0, -1), 0.5, gold))

    look_from = Point3(3, 3, 2)
    look_at = Point3(0, 0, -1)
    return world, _camera(
        look_from, look_at, vfov=20,
        aperture=2.0, focus_dist=(look_from - look_at).length()
    )


def cylinders(seed: int = 0) -> Tuple[World, CameraBuilder]:
    """Infinite cylinders crossing a diffuse ground."""
    world = World()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Cylinder(Point3(-2, 0, 0), Vec3(0, 1, 0), 0.5, Metal(Color(0.7, 0.6, 0.5), 0.05)))
    world.add(Cylinder(Point3(0, 0.6, 0), Vec3(1, 0, 1), 0.4, Dielectric(1.5)))
    world.add(Cylinder(Point3(2.5, 0, -1), Vec3(0.2, 1, 0), 0.6, Lambertian(Color(0.7, 0.2, 0.2))))

    return world, _camera(Point3(0, 2, 8), Point3(0, 1, 0), vfov=40)


def random_spheres(seed: int = 0) -> Tuple[World, CameraBuilder]:
    """A field of small random spheres around three large ones.

    The layout is drawn from its own generator so the same seed always
    builds the same scene.
    """
    rng = np.random.default_rng(seed)
    world = World()

    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Color(*rng.random(3)) * Color(*rng.random(3))
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                albedo = Color(*(0.5 + 0.5 * rng.random(3)))
                material = Metal(albedo, 0.5 * rng.random())
            else:
                material = Dielectric(1.5)
            world.add(Sphere(center, 0.2, material))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return world, _camera(Point3(13, 2, 3), Point3(0, 0, 0), vfov=20, aperture=0.1, focus_dist=10.0)


SCENES: Dict[str, SceneBuilder] = {
    'single': single_sphere,
    'materials': material_showcase,
    'cylinders': cylinders,
    'random': random_spheres,
}
