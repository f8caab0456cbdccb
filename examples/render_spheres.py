#!/usr/bin/env python3
"""Render a sphere scene to a PPM or PNG image.

This script renders either a built-in scene or a JSON scene file. Render
settings come from the scene file when one is given (or from the defaults
otherwise) and can be overridden on the command line.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene {random,three-spheres}  Built-in scene (default: random)
    --scene-file PATH               Load a JSON scene file instead
    --width WIDTH                   Image width in pixels (default: 400)
    --samples SAMPLES               Samples per pixel (default: 20)
    --depth DEPTH                   Maximum bounces per path (default: 5)
    --seed SEED                     Render and scene layout seed (default: 0)
    --output OUTPUT                 Output file, .ppm or .png (default: image.ppm)
    --batch-size SIZE               Samples per progress update (default: 5)
    --quiet                         Suppress progress output
    --arch {cpu,gpu}                Taichi backend (default: cpu)

Example:
    python examples/render_spheres.py --width 1200 --samples 500 --depth 50 --output final.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with a path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--scene",
        choices=("random", "three-spheres"),
        default=None,
        help="Built-in scene to render (default: random)",
    )
    source.add_argument(
        "--scene-file",
        type=Path,
        default=None,
        help="JSON scene file to render",
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels (default: 400)")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel (default: 20)")
    parser.add_argument("--depth", type=int, default=None, help="Maximum bounces per path (default: 5)")
    parser.add_argument("--seed", type=int, default=None, help="Render seed (default: 0)")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("image.ppm"),
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=5,
        help="Samples per progress update (default: 5)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    return parser.parse_args(argv)


def _merge_settings(base, args: argparse.Namespace):
    """Apply command-line overrides on top of the base render settings."""
    from spheretracer.settings import RenderSettings

    data = base.to_dict()
    overrides = {
        "image_width": args.width,
        "samples_per_pixel": args.samples,
        "max_depth": args.depth,
        "seed": args.seed,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    return RenderSettings.from_dict(data)


def render_spheres(args: argparse.Namespace) -> Path:
    """Build the scene, render it and save the image.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so that Taichi is initialized before fields are declared
    from spheretracer.camera.thin_lens import setup_camera
    from spheretracer.core.renderer import Renderer
    from spheretracer.scene.loader import load_scene_file
    from spheretracer.scene.presets import (
        create_random_spheres_scene,
        create_three_spheres_scene,
    )
    from spheretracer.settings import RenderSettings

    quiet = args.quiet

    if args.scene_file is not None:
        scene, camera, file_settings = load_scene_file(args.scene_file)
        settings = _merge_settings(file_settings, args)
        scene_name = str(args.scene_file)
    else:
        settings = _merge_settings(RenderSettings(), args)
        scene_name = args.scene or "random"
        if scene_name == "random":
            scene, camera = create_random_spheres_scene(
                seed=settings.seed, aspect_ratio=settings.aspect_ratio
            )
        else:
            scene, camera = create_three_spheres_scene(aspect_ratio=settings.aspect_ratio)

    width, height = settings.image_width, settings.image_height
    if not quiet:
        print(
            f"Rendering {scene_name} ({width}x{height}, "
            f"{scene.get_sphere_count()} spheres)..."
        )

    setup_camera(camera)
    renderer = Renderer(width, height, max_depth=settings.max_depth, seed=settings.seed)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=args.batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()

    output_file = args.output
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    try:
        render_spheres(args)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        logger.debug("Render failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
