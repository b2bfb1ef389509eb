"""
Renderer module - the heart of the path tracer.

Implements:
- Recursive path tracing with fixed-depth truncation
- Progressive sample accumulation with live preview snapshots
- Multi-threaded rendering, one sample pass per task
- Cooperative cancellation
"""

from __future__ import annotations
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .vec3 import Color, encode_rgb8
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .progress import NullProgress, ProgressReporter

logger = logging.getLogger(__name__)

# Hits closer than this are rounding error from the surface the ray left
T_MIN = 0.001
T_MAX = 1000.0


class AspectRatioError(ValueError):
    """Malformed "W:H" aspect ratio string."""
    pass


def parse_aspect_ratio(text: str) -> float:
    """Parse an aspect ratio written as "W:H", e.g. "16:9".

    Raises:
        AspectRatioError: If the string is not two positive numbers
            separated by a colon
    """
    parts = text.split(':')
    if len(parts) != 2:
        raise AspectRatioError(f"Aspect ratio must look like W:H, got {text!r}")
    try:
        width, height = float(parts[0]), float(parts[1])
    except ValueError:
        raise AspectRatioError(f"Aspect ratio must look like W:H, got {text!r}") from None
    if width <= 0 or height <= 0:
        raise AspectRatioError(f"Aspect ratio parts must be positive, got {text!r}")
    return width / height


@dataclass(frozen=True)
class RenderParams:
    """Configuration for a render."""
    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    num_threads: int = 0  # 0 = auto-detect

    def __post_init__(self):
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_height <= 0:
            raise ValueError(
                f"image_width {self.image_width} at aspect ratio {self.aspect_ratio} "
                "leaves no rows to render"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")

    @property
    def image_height(self) -> int:
        return int(self.image_width / self.aspect_ratio)

    @property
    def worker_count(self) -> int:
        """Number of threads to render with."""
        if self.num_threads > 0:
            return self.num_threads
        return os.cpu_count() or 4


def sky_color(ray: Ray) -> Color:
    """Background seen by rays that escape the scene.

    A vertical blend from white at the horizon-down to sky blue overhead.
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return Color(1.0, 1.0, 1.0) * (1.0 - t) + Color(0.5, 0.7, 1.0) * t


def ray_color(ray: Ray, world: Hittable, depth: int, rng: np.random.Generator) -> Color:
    """Estimate the light arriving along a ray.

    Args:
        ray: The ray to trace
        world: The scene to trace against
        depth: Remaining number of bounces
        rng: Random source for scattering

    Returns:
        Linear RGB radiance estimate
    """
    if depth <= 0:
        return Color(0, 0, 0)

    rec = world.hit(ray, T_MIN, T_MAX)
    if rec is None:
        return sky_color(ray)

    if rec.material is None:
        # No material - shade by normal (for debugging)
        return (rec.normal + Color(1, 1, 1)) * 0.5

    result = rec.material.scatter(ray, rec, rng)
    if result is None:
        return Color(0, 0, 0)
    return result.attenuation * ray_color(result.scattered, world, depth - 1, rng)


class Accumulator:
    """Running per-pixel sum of sample passes.

    Stored as float64 RGBA with rows bottom-up (row 0 is v = 0). The alpha
    channel counts the passes merged into each pixel and is the divisor
    when the image is read.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.data = np.zeros((height, width, 4), dtype=np.float64)
        self.passes = 0
        self._lock = threading.Lock()

    def add(self, sample: np.ndarray) -> None:
        """Merge one finished sample pass."""
        with self._lock:
            self.data += sample
            self.passes += 1

    def to_rgba8(self) -> np.ndarray:
        """Normalize to an 8-bit RGBA image with row 0 at the top.

        Each pixel is averaged over its merged passes, gamma corrected and
        clamped. Pixels no pass reached stay fully transparent black.
        """
        with self._lock:
            data = self.data.copy()

        weight = data[..., 3:]
        average = np.divide(data[..., :3], weight, out=np.zeros_like(data[..., :3]), where=weight > 0)

        image = np.zeros(data.shape, dtype=np.uint8)
        image[..., :3] = encode_rgb8(average)
        image[..., 3] = np.where(weight[..., 0] > 0, 255, 0)
        return np.ascontiguousarray(image[::-1])


class Renderer:
    """Multi-threaded progressive path tracer.

    Sample passes run on a thread pool so they can be cancelled and merged
    as they finish. Tracing is pure Python and holds the GIL, so extra
    threads bring little speedup on CPython. Each pass draws from its own
    generator, so the thread count changes only the order in which passes
    are merged.
    """

    def __init__(self, params: RenderParams = None):
        """Create a renderer with the given parameters.

        Args:
            params: Render configuration (uses defaults if None)
        """
        self.params = params if params else RenderParams()

    def render(
        self,
        world: Hittable,
        camera: Camera,
        progress: Optional[ProgressReporter] = None,
        cancel: Optional[threading.Event] = None
    ) -> np.ndarray:
        """Render the scene and return the image.

        Sample passes run in parallel. Pass `i` draws all its random
        numbers from a generator seeded with `seed + i`, so each pass is
        reproducible on its own. Setting `cancel` stops the render at the
        next scanline; a pass interrupted that way is dropped and the image
        holds only the passes that finished.

        Args:
            world: The scene to render (any Hittable)
            camera: The camera to render from
            progress: Receives one unit per finished pass
            cancel: Cooperative cancellation flag

        Returns:
            RGBA image as uint8 array of shape (height, width, 4), row 0 at
            the top
        """
        params = self.params
        progress = progress if progress is not None else NullProgress()
        cancel = cancel if cancel is not None else threading.Event()
        accumulator = Accumulator(params.image_width, params.image_height)

        logger.info(
            "Rendering %dx%d, %d spp, depth %d, %d threads",
            params.image_width, params.image_height, params.samples_per_pixel,
            params.max_depth, params.worker_count
        )
        start_time = time.perf_counter()
        progress.set_length(params.samples_per_pixel)

        def run_pass(index: int) -> bool:
            if cancel.is_set():
                return False
            sample = self.render_pass(world, camera, index, cancel)
            if sample is None:
                return False
            accumulator.add(sample)
            logger.debug("Merged sample pass %d", index)
            progress.increment(1, accumulator.to_rgba8)
            return True

        passes = range(params.samples_per_pixel)
        try:
            if params.worker_count > 1:
                with ThreadPoolExecutor(max_workers=params.worker_count) as executor:
                    completed = sum(executor.map(run_pass, passes))
            else:
                completed = sum(run_pass(index) for index in passes)
        finally:
            progress.finish()

        elapsed = time.perf_counter() - start_time
        if cancel.is_set():
            logger.info(
                "Render cancelled after %d of %d passes (%.2fs)",
                completed, params.samples_per_pixel, elapsed
            )
        else:
            logger.info("Render finished in %.2fs", elapsed)

        return accumulator.to_rgba8()

    def render_pass(
        self,
        world: Hittable,
        camera: Camera,
        index: int,
        cancel: Optional[threading.Event] = None
    ) -> Optional[np.ndarray]:
        """Render one jittered sample for every pixel.

        Args:
            world: The scene to render
            camera: The camera to render from
            index: Sample index, added to the base seed
            cancel: Polled before every scanline

        Returns:
            Float RGBA buffer (rows bottom-up, alpha 1), or None if cancelled
        """
        width = self.params.image_width
        height = self.params.image_height
        max_depth = self.params.max_depth
        rng = np.random.default_rng(self.params.seed + index)

        # Guard single-pixel dimensions against dividing by zero
        u_scale = max(width - 1, 1)
        v_scale = max(height - 1, 1)

        buffer = np.empty((height, width, 4), dtype=np.float64)
        for j in range(height):
            if cancel is not None and cancel.is_set():
                return None
            row = []
            for i in range(width):
                u = (i + rng.random()) / u_scale
                v = (j + rng.random()) / v_scale
                color = ray_color(camera.get_ray(u, v, rng), world, max_depth, rng)
                row.append((color.x, color.y, color.z, 1.0))
            buffer[j] = row

        return buffer
