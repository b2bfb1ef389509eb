"""
Command-line entry point for rendering scenes to PNG files.
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from .renderer import Renderer, RenderParams, AspectRatioError, parse_aspect_ratio
from .progress import TqdmProgress
from .scene_parser import SceneParseError, load_scene
from .scenes import SCENES


def save_image(image: np.ndarray, filename: str) -> None:
    """Save an RGBA8 image; the extension picks the format."""
    Image.fromarray(image).save(filename)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lumenpath',
        description='lumenpath - A Python Path Tracing Renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  lumenpath --scene materials --output render.png
  lumenpath --width 800 --aspect-ratio 3:2 --samples 500 --scene random
  lumenpath --scene-file scenes/showcase.yaml --output showcase.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--aspect-ratio', type=str, default='16:9',
                        help='Aspect ratio as W:H (default: 16:9)')
    parser.add_argument('--samples', type=int, default=100, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--seed', type=int, default=0, help='Base random seed (default: 0)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--output', type=str, default='render.png', help='Output filename')
    parser.add_argument('--scene', type=str, default='materials', choices=sorted(SCENES),
                        help='Built-in scene to render (default: materials)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene file; its render section replaces the size options')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log render details')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    try:
        if args.scene_file:
            world, camera, params = load_scene(args.scene_file)
        else:
            params = RenderParams(
                image_width=args.width,
                aspect_ratio=parse_aspect_ratio(args.aspect_ratio),
                samples_per_pixel=args.samples,
                max_depth=args.depth,
                seed=args.seed,
                num_threads=args.threads
            )
            world, camera_builder = SCENES[args.scene](seed=args.seed)
            camera_builder.aspect_ratio = params.aspect_ratio
            camera = camera_builder.build()
            if camera is None:
                parser.error(f"camera is missing: {', '.join(camera_builder.missing())}")
    except (AspectRatioError, SceneParseError, ValueError) as e:
        parser.error(str(e))

    print("=" * 60)
    print("lumenpath path tracer")
    print("=" * 60)
    print(f"  Resolution: {params.image_width}x{params.image_height}")
    print(f"  Samples: {params.samples_per_pixel}")
    print(f"  Max Depth: {params.max_depth}")
    print(f"  Threads: {params.worker_count}")
    print(f"  Objects in scene: {len(world)}")

    renderer = Renderer(params)
    start_time = time.time()
    image = renderer.render(world, camera, TqdmProgress())
    elapsed = time.time() - start_time

    rays = params.image_width * params.image_height * params.samples_per_pixel
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Camera rays per second: {rays / max(elapsed, 1e-9):.0f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    print(f"Saving to: {output_path}")
    save_image(image, str(output_path))
    return 0


if __name__ == '__main__':
    sys.exit(main())
