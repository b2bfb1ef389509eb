"""
The scene container.

A World is a flat list of hittables scanned linearly for every ray; it is
built once and only read while rendering, so render threads share it
without locking.
"""

from __future__ import annotations
from typing import Iterator, Optional

from .ray import Ray
from .shapes import Hittable, HitRecord


class World(Hittable):
    """A collection of hittable objects."""

    def __init__(self, objects: Optional[list[Hittable]] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the scene."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects.

        Each object is tested against the closest t found so far, so the
        result is the nearest hit in (t_min, t_max].
        """
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)
