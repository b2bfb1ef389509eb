"""
Scene description file parser.

Reads YAML or JSON scene files with:
- Render parameters
- Camera configuration
- Materials library
- Objects (spheres and cylinders with materials)

Example scene file:
```yaml
render:
  width: 400
  aspect_ratio: "16:9"
  samples: 50
  max_depth: 20

camera:
  look_from: [3, 3, 2]
  look_at: [0, 0, -1]
  vfov: 20
  aperture: 0.5
  focus_dist: 5.2

materials:
  ground:
    type: lambertian
    albedo: [0.8, 0.8, 0.0]
  glass:
    type: dielectric
    ir: 1.5

objects:
  - type: sphere
    center: [0, -100.5, -1]
    radius: 100
    material: ground

  - type: cylinder
    axis_point: [1, 0, -1]
    axis_direction: [0, 1, 0]
    radius: 0.3
    material: {type: metal, albedo: [0.8, 0.8, 0.8], fuzz: 0.1}
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .vec3 import Vec3, Color
from .camera import Camera, CameraBuilder
from .shapes import Sphere, Cylinder
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderParams, parse_aspect_ratio
from .world import World

logger = logging.getLogger(__name__)

CAMERA_DEFAULTS: Dict[str, Any] = {
    'look_from': [0, 0, 0],
    'look_at': [0, 0, -1],
    'vup': [0, 1, 0],
    'vfov': 90.0,
    'aperture': 0.0,
    'focus_dist': 1.0,
}


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.world: World = World()

    def parse_file(self, filepath: str) -> Tuple[World, Camera, RenderParams]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (.yaml, .yml or .json)

        Returns:
            Tuple of (world, camera, params)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.info("Loading scene from %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[World, Camera, RenderParams]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (world, camera, params)
        """
        params = self._parse_params(data.get('render') or {})

        # Parse materials first (objects reference them)
        self._parse_materials(data.get('materials') or {})
        self._parse_objects(data.get('objects') or [])

        camera = self._parse_camera(data.get('camera') or {}, params.aspect_ratio)
        logger.debug("Parsed %d objects, %d named materials", len(self.world), len(self.materials))
        return self.world, camera, params

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an {x, y, z} mapping."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            try:
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            except (TypeError, ValueError):
                raise SceneParseError(f"Cannot parse Vec3 from: {data}") from None
        elif isinstance(data, dict):
            return Vec3(
                self._parse_float(data, 'x', 0.0),
                self._parse_float(data, 'y', 0.0),
                self._parse_float(data, 'z', 0.0)
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_float(self, data: Dict[str, Any], key: str, default: float) -> float:
        """Read a numeric field from a mapping."""
        value = data.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise SceneParseError(f"Field '{key}' must be a number, got: {value!r}") from None

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, an {r, g, b} mapping or a hex string."""
        if isinstance(data, dict):
            return Color(
                self._parse_float(data, 'r', 0.0),
                self._parse_float(data, 'g', 0.0),
                self._parse_float(data, 'b', 0.0)
            )
        elif isinstance(data, str):
            hex_color = data[1:] if data.startswith('#') else ''
            if len(hex_color) != 6:
                raise SceneParseError(f"Cannot parse color from string: {data}")
            try:
                r, g, b = (int(hex_color[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
            except ValueError:
                raise SceneParseError(f"Cannot parse color from string: {data}") from None
            return Color(r, g, b)
        return self._parse_vec3(data)

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Material must be a mapping, got: {mat_data!r}")
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            return Lambertian(self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5])))
        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            return Metal(albedo, self._parse_float(mat_data, 'fuzz', 0.0))
        elif mat_type == 'dielectric':
            return Dielectric(self._parse_float(mat_data, 'ir', 1.5))
        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        if not isinstance(materials_data, dict):
            raise SceneParseError("'materials' must be a mapping of name to material")
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        if not isinstance(objects_data, list):
            raise SceneParseError("'objects' must be a list")
        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Object must be a mapping, got: {obj_data!r}")
            obj_type = str(obj_data.get('type', 'sphere')).lower()
            if 'material' not in obj_data:
                raise SceneParseError(f"Object has no material: {obj_data}")
            material = self._get_material(obj_data['material'])

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = self._parse_float(obj_data, 'radius', 1.0)
                self.world.add(Sphere(center, radius, material))

            elif obj_type == 'cylinder':
                axis_point = self._parse_vec3(obj_data.get('axis_point', [0, 0, 0]))
                axis_direction = self._parse_vec3(obj_data.get('axis_direction', [0, 1, 0]))
                if axis_direction.near_zero():
                    raise SceneParseError("Cylinder axis_direction must not be zero")
                radius = self._parse_float(obj_data, 'radius', 1.0)
                self.world.add(Cylinder(axis_point, axis_direction, radius, material))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any], aspect_ratio: float) -> Camera:
        """Parse camera section through a CameraBuilder."""
        if not isinstance(camera_data, dict):
            raise SceneParseError("'camera' must be a mapping")
        settings = {**CAMERA_DEFAULTS, **camera_data}
        builder = CameraBuilder(
            look_from=self._parse_vec3(settings['look_from']),
            look_at=self._parse_vec3(settings['look_at']),
            vup=self._parse_vec3(settings['vup']),
            vfov=self._parse_float(settings, 'vfov', 90.0),
            aspect_ratio=aspect_ratio,
            aperture=self._parse_float(settings, 'aperture', 0.0),
            focus_dist=self._parse_float(settings, 'focus_dist', 1.0)
        )
        camera = builder.build()
        if camera is None:
            raise SceneParseError(f"Camera is missing: {', '.join(builder.missing())}")
        return camera

    def _parse_params(self, render_data: Dict[str, Any]) -> RenderParams:
        """Parse render parameters section."""
        if not isinstance(render_data, dict):
            raise SceneParseError("'render' must be a mapping")
        aspect = render_data.get('aspect_ratio', '16:9')
        try:
            aspect_ratio = parse_aspect_ratio(aspect) if isinstance(aspect, str) else float(aspect)
            return RenderParams(
                image_width=int(render_data.get('width', 400)),
                aspect_ratio=aspect_ratio,
                samples_per_pixel=int(render_data.get('samples', 100)),
                max_depth=int(render_data.get('max_depth', 50)),
                seed=int(render_data.get('seed', 0)),
                num_threads=int(render_data.get('threads', 0))
            )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render section: {e}") from e


def load_scene(filepath: str) -> Tuple[World, Camera, RenderParams]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (world, camera, params)
    """
    return SceneParser().parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[World, Camera, RenderParams]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (world, camera, params)
    """
    return SceneParser().parse_dict(data)
