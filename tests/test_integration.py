"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete rendering pipeline from scene creation through
final image output, including the command-line script. Tests are designed to
be fast (low resolution, few samples) while still exercising the full
pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import json

import numpy as np
import pytest
from PIL import Image


def _read_ppm(path):
    lines = path.read_text().splitlines()
    width, height = (int(x) for x in lines[1].split())
    pixels = np.array([[int(v) for v in line.split()] for line in lines[3:]], dtype=np.uint8)
    return lines[0], lines[2], pixels.reshape(height, width, 3)


class TestRandomSpheresIntegration:
    def test_end_to_end(self) -> None:
        from spheretracer.camera.thin_lens import setup_camera
        from spheretracer.core.renderer import Renderer
        from spheretracer.scene.presets import create_random_spheres_scene

        scene, camera = create_random_spheres_scene(seed=0)
        setup_camera(camera)

        renderer = Renderer(30, 20, max_depth=5)
        renderer.render(num_samples=2)

        image = renderer.get_image_numpy()
        assert renderer.sample_count == 2
        assert image.shape == (20, 30, 3)
        assert np.isfinite(image).all()
        assert 0.0 < image.mean() < 1.0

    def test_horizon_splits_sky_and_ground(self) -> None:
        """The top rows see sky; the bottom rows see the darker gray ground."""
        from spheretracer.camera.thin_lens import setup_camera
        from spheretracer.core.renderer import Renderer
        from spheretracer.scene.presets import create_random_spheres_scene

        _, camera = create_random_spheres_scene(seed=0)
        setup_camera(camera)

        renderer = Renderer(30, 20, max_depth=5)
        renderer.render(num_samples=4)
        image = renderer.get_image_numpy()

        # Sky has a full blue channel, the gray ground at most half of it
        assert image[0, :, 2].mean() > image[-1, :, 2].mean()


class TestCommandLine:
    def test_renders_builtin_scene_to_ppm(self, tmp_path) -> None:
        from examples.render_spheres import parse_args, render_spheres

        output = tmp_path / "three.ppm"
        args = parse_args(
            [
                "--scene", "three-spheres",
                "--width", "24",
                "--samples", "2",
                "--depth", "3",
                "--output", str(output),
                "--quiet",
            ]
        )
        assert render_spheres(args) == output

        magic, max_value, pixels = _read_ppm(output)
        assert magic == "P3"
        assert max_value == "255"
        assert pixels.shape == (16, 24, 3)

    def test_renders_scene_file_to_png(self, tmp_path) -> None:
        from examples.render_spheres import parse_args, render_spheres

        scene_file = tmp_path / "scene.json"
        scene_file.write_text(
            json.dumps(
                {
                    "render": {"image_width": 16, "aspect_ratio": 2.0, "samples_per_pixel": 1},
                    "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                    "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
                }
            ),
            encoding="utf-8",
        )
        output = tmp_path / "file.png"
        args = parse_args(["--scene-file", str(scene_file), "--output", str(output), "--quiet"])
        render_spheres(args)

        with Image.open(output) as png:
            assert png.size == (16, 8)

    def test_command_line_overrides_scene_file(self, tmp_path) -> None:
        from examples.render_spheres import _merge_settings, parse_args
        from spheretracer.settings import RenderSettings

        args = parse_args(["--width", "50", "--seed", "3"])
        settings = _merge_settings(RenderSettings(image_width=10, max_depth=9), args)

        assert settings.image_width == 50
        assert settings.seed == 3
        assert settings.max_depth == 9

    @pytest.mark.parametrize("scene", ["random", "three-spheres"])
    def test_scene_options_are_exclusive(self, scene) -> None:
        from examples.render_spheres import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--scene", scene, "--scene-file", "scene.json"])

    def test_scene_defaults_to_random(self, tmp_path) -> None:
        from examples.render_spheres import parse_args, render_spheres

        args = parse_args(["--width", "12", "--samples", "1", "--output", str(tmp_path / "r.ppm"), "--quiet"])
        assert args.scene is None
        assert args.scene_file is None

        _, _, pixels = _read_ppm(render_spheres(args))
        assert pixels.shape == (8, 12, 3)
