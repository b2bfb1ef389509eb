"""Tests for geometric shapes."""

import pytest
import math
import numpy as np
from lumenpath.vec3 import Vec3, Point3, Color
from lumenpath.ray import Ray
from lumenpath.shapes import HitRecord, Sphere, Cylinder
from lumenpath.materials import Lambertian


class TestHitRecord:
    """Test the face-normal rule."""

    def test_front_face_keeps_outward_normal(self):
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        rec = HitRecord.from_outward_normal(ray, 4.0, Vec3(0, 0, 1))
        assert rec.front_face is True
        assert rec.normal == Vec3(0, 0, 1)
        assert rec.point == Point3(0, 0, 1)

    def test_back_face_flips_normal(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        rec = HitRecord.from_outward_normal(ray, 1.0, Vec3(0, 0, 1))
        assert rec.front_face is False
        assert rec.normal == Vec3(0, 0, -1)

    def test_frozen(self):
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        rec = HitRecord.from_outward_normal(ray, 4.0, Vec3(0, 0, 1))
        with pytest.raises(AttributeError):
            rec.t = 1.0


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0)
        assert sphere.center == center
        assert sphere.radius == 1.0

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-9  # Hits at z=-1
        assert abs(hit.point.z - (-1.0)) < 1e-9

    def test_roots_symmetric_about_center(self):
        """Both roots of a ray through the center sit one radius either side."""
        sphere = Sphere(Point3(0, 0, 0), 2.0)
        ray = Ray(Point3(0, 0, -10), Vec3(0, 0, 1))

        near = sphere.hit(ray, 0.001, float('inf'))
        far = sphere.hit(ray, near.t, float('inf'))

        assert near.t == pytest.approx(8.0)
        assert far.t == pytest.approx(12.0)
        assert (near.t + far.t) / 2 == pytest.approx(10.0)

    def test_tangent_ray(self):
        """A ray offset by exactly the radius grazes the sphere."""
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(1, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert hit.t == pytest.approx(5.0)
        assert hit.normal == Vec3(1, 0, 0) or hit.normal == Vec3(-1, 0, 0)

    def test_unnormalized_direction(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 2))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit.t == pytest.approx(2.0)
        assert abs(hit.normal.length() - 1.0) < 1e-9

    def test_hit_front_face(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit.front_face is True
        # Normal should point outward (against ray)
        assert hit.normal.z < 0

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert hit.front_face is False
        assert hit.normal.z < 0

    def test_negative_radius_flips_normal(self):
        sphere = Sphere(Point3(0, 0, 0), -1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit.front_face is False
        assert hit.normal.z < 0

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))  # Ray passes above sphere
        assert sphere.hit(ray, 0.001, float('inf')) is None

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))  # Ray points away from sphere
        assert sphere.hit(ray, 0.001, float('inf')) is None

    def test_t_range(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))

        # Hit is at t=4, exclude it with t_min
        hit = sphere.hit(ray, 4.5, float('inf'))
        assert hit is not None
        assert hit.t == pytest.approx(6.0)

        assert sphere.hit(ray, 0.001, 3.9) is None

    def test_t_max_is_inclusive(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, 4.0)
        assert hit is not None
        assert hit.t == 4.0

    def test_with_material(self):
        material = Lambertian(Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit.material is material


class TestCylinder:
    """Test infinite Cylinder class."""

    def test_creation_normalizes_axis(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 5, 0), 1.0)
        assert cyl.axis_direction == Vec3(0, 1, 0)
        assert cyl.radius == 1.0

    def test_hit_side(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        ray = Ray(Point3(5, 1, 0), Vec3(-1, 0, 0))
        hit = cyl.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert hit.t == pytest.approx(4.0)
        assert hit.point.x == pytest.approx(1.0)
        assert hit.point.y == pytest.approx(1.0)
        assert hit.front_face is True
        assert hit.normal == Vec3(1, 0, 0)

    def test_hit_off_center(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        ray = Ray(Point3(5, 0, 0.6), Vec3(-1, 0, 0))
        hit = cyl.hit(ray, 0.001, float('inf'))

        assert hit.point.x == pytest.approx(0.8)
        assert hit.point.z == pytest.approx(0.6)
        assert hit.normal == Vec3(0.8, 0, 0.6)

    def test_slanted_ray_lands_on_surface(self):
        axis_point = Point3(1, 2, 3)
        axis = Vec3(1, 1, 0).normalize()
        cyl = Cylinder(axis_point, axis, 0.75)
        # Aimed at a point 0.41 from the axis
        ray = Ray(Point3(-4, 6, 9), Vec3(5.2, -4.2, -5.7))
        hit = cyl.hit(ray, 0.001, float('inf'))

        assert hit is not None
        rel = hit.point - axis_point
        radial = rel - axis * rel.dot(axis)
        assert radial.length() == pytest.approx(0.75)
        assert abs(hit.normal.length() - 1.0) < 1e-9
        assert hit.normal.dot(ray.direction) < 0

    def test_normal_points_outward_for_any_axis_sign(self):
        """Flipping the axis direction must not flip the outward normal."""
        ray = Ray(Point3(0, 0, 5), Vec3(0.1, 0.2, -1))
        up = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0).hit(ray, 0.001, 100)
        down = Cylinder(Point3(0, 0, 0), Vec3(0, -1, 0), 1.0).hit(ray, 0.001, 100)

        assert up.front_face is True
        assert down.front_face is True
        assert up.normal == down.normal
        assert up.normal.z > 0

    def test_hit_from_inside(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        ray = Ray(Point3(0, 3, 0), Vec3(1, 0, 0))
        hit = cyl.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert hit.t == pytest.approx(1.0)
        assert hit.front_face is False
        assert hit.normal == Vec3(-1, 0, 0)

    def test_miss(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        ray = Ray(Point3(5, 0, 2), Vec3(-1, 0, 0))
        assert cyl.hit(ray, 0.001, float('inf')) is None

    def test_ray_parallel_to_axis_misses(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        outside = Ray(Point3(3, 0, 0), Vec3(0, 1, 0))
        inside = Ray(Point3(0.5, 0, 0), Vec3(0, -1, 0))
        assert cyl.hit(outside, 0.001, float('inf')) is None
        assert cyl.hit(inside, 0.001, float('inf')) is None

    def test_ray_along_slanted_axis_misses(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(1, 2, 3), 1.0)
        for scale in (0.5, 1.0, 2.0, -3.0):
            for origin in (Point3(0.2, 0.1, 0), Point3(0, 0, 0), Point3(4, -1, 2)):
                ray = Ray(origin, cyl.axis_direction * scale)
                assert cyl.hit(ray, 0.001, float('inf')) is None

    def test_rays_along_random_axes_never_raise(self):
        rng = np.random.default_rng(17)
        for _ in range(2000):
            axis = Vec3(*(rng.random(3) * 2 - 1))
            if axis.near_zero():
                continue
            cyl = Cylinder(Point3(0, 0, 0), axis, 1.0)
            ray = Ray(Point3(0.2, 0.1, 0), cyl.axis_direction * (0.5 + 2.5 * rng.random()))
            assert cyl.hit(ray, 0.001, float('inf')) is None

    def test_zero_direction_misses(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(1, 2, 3), 1.0)
        assert cyl.hit(Ray(Point3(0.2, 0.1, 0), Vec3(0, 0, 0)), 0.001, float('inf')) is None

    def test_behind_ray(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0)
        ray = Ray(Point3(5, 0, 0), Vec3(1, 0, 0))
        assert cyl.hit(ray, 0.001, float('inf')) is None

    def test_t_range(self):
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 0, 1), 1.0)
        ray = Ray(Point3(-5, 0, 0), Vec3(1, 0, 0))

        far = cyl.hit(ray, 4.5, float('inf'))
        assert far.t == pytest.approx(6.0)
        assert cyl.hit(ray, 0.001, 3.5) is None

    def test_with_material(self):
        material = Lambertian(Color(0, 1, 0))
        cyl = Cylinder(Point3(0, 0, 0), Vec3(0, 1, 0), 1.0, material)
        hit = cyl.hit(Ray(Point3(5, 0, 0), Vec3(-1, 0, 0)), 0.001, float('inf'))
        assert hit.material is material
