"""
lumenpath - A Python Path Tracing Renderer

An offline Monte-Carlo path tracer with:
- Diffuse, metal and glass materials
- Spheres and infinite cylinders
- Depth of field
- Multi-threaded progressive sample accumulation
- Live progress and preview reporting with cooperative cancellation
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color, encode_rgb8
from .ray import Ray
from .sampling import (
    random_double, random_vec, random_in_unit_sphere, random_unit_vector,
    random_in_unit_disk, reflect, refract
)
from .shapes import Hittable, HitRecord, Sphere, Cylinder
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from .world import World
from .camera import Camera, CameraBuilder
from .progress import ProgressReporter, NullProgress, TqdmProgress, PreviewProgress
from .renderer import (
    Renderer, RenderParams, Accumulator, AspectRatioError,
    parse_aspect_ratio, ray_color, sky_color
)
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .scenes import SCENES
from .session import RenderManager, RenderJob
