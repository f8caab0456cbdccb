"""Tests for the path tracing integrator.

Tests cover:
- Sky gradient for missed rays
- Depth limit semantics
- Material dispatch through metal, lambertian and dielectric spheres
- Render target setup, accumulation and readout
- Determinism for a fixed seed
"""

import numpy as np
import pytest
import taichi as ti


class TestBackground:
    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 1.0, 0.0), (0.5, 0.7, 1.0)),
            ((0.0, -1.0, 0.0), (1.0, 1.0, 1.0)),
            ((0.0, 0.0, -1.0), (0.75, 0.85, 1.0)),
            ((0.0, 3.0, 0.0), (0.5, 0.7, 1.0)),
        ],
    )
    def test_background_color(self, direction, expected):
        from spheretracer.core.integrator import background_color

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(d: ti.math.vec3):
            result[None] = background_color(d)

        test_kernel(ti.math.vec3(*direction))
        assert tuple(result[None]) == pytest.approx(expected, abs=1e-5)

    def test_empty_scene_returns_sky(self):
        from spheretracer.core.integrator import trace_single_ray

        color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=50)
        assert color == pytest.approx((0.75, 0.85, 1.0), abs=1e-5)


class TestDepthLimit:
    def test_depth_zero_is_black(self):
        from spheretracer.core.integrator import trace_single_ray

        assert trace_single_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_mirror_needs_two_bounces(self):
        """A head-on fuzz-0 mirror reflects the sky behind the camera."""
        from spheretracer.core.integrator import trace_single_ray
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.0)

        one = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1)
        two = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=2)

        assert one == (0.0, 0.0, 0.0)
        assert two == pytest.approx((0.8 * 0.75, 0.6 * 0.85, 0.2 * 1.0), abs=1e-4)

    def test_enclosed_camera_goes_black(self):
        """Inside a closed diffuse shell no path escapes to the sky."""
        from spheretracer.core.integrator import trace_single_ray
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 10.0, albedo=(0.9, 0.9, 0.9))

        for seed in range(4):
            color = trace_single_ray((0.0, 0.0, 0.0), (0.3, 0.2, -1.0), max_depth=8, seed=seed)
            assert color == (0.0, 0.0, 0.0)


class TestMaterialDispatch:
    def test_diffuse_ground_attenuates_sky(self):
        """Light bounced off a diffuse floor is dimmer than the sky, never brighter."""
        from spheretracer.core.integrator import trace_single_ray
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, albedo=(0.5, 0.5, 0.5))

        colors = np.array(
            [
                trace_single_ray((0.0, 0.0, 0.0), (0.0, -1.0, -0.2), max_depth=50, seed=seed)
                for seed in range(32)
            ]
        )
        assert (colors <= 0.5 + 1e-5).all()
        assert colors.mean() > 0.0

    def test_glass_attenuation_is_white(self):
        """A path through a glass sphere only ever sees sky colors."""
        from spheretracer.core.integrator import trace_single_ray
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -2.0), 0.5, ior=1.5)

        for seed in range(16):
            r, g, b = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), seed=seed)
            # Sky colors satisfy b == 1 and r <= g
            assert b == pytest.approx(1.0, abs=1e-4)
            assert r <= g + 1e-5

    def test_invalid_args_rejected(self):
        from spheretracer.core.integrator import trace_single_ray

        with pytest.raises(ValueError):
            trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=-1)
        with pytest.raises(ValueError):
            trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), seed=-1)


class TestRenderTarget:
    def test_requires_setup(self):
        from spheretracer.core.integrator import get_total_samples, render_image, render_sample

        with pytest.raises(RuntimeError):
            render_image()
        with pytest.raises(RuntimeError):
            render_sample(0, 0)
        with pytest.raises(RuntimeError):
            get_total_samples()

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, size):
        from spheretracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_accumulates_samples(self, front_camera):
        from spheretracer.core.integrator import (
            get_averaged_image_numpy,
            get_total_samples,
            render_image,
            setup_render_target,
        )

        setup_render_target(8, 6)
        render_image(num_samples=3, max_depth=5)
        render_image(num_samples=2, max_depth=5)

        assert get_total_samples() == 5
        image = get_averaged_image_numpy()
        assert image.shape == (6, 8, 3)
        assert image.dtype == np.float32

    def test_zero_samples_rejected(self, front_camera):
        from spheretracer.core.integrator import render_image, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(ValueError):
            render_image(num_samples=0)

    def test_empty_scene_gradient_is_top_first(self, front_camera):
        """Row 0 of the readout is the top of the image, the bluest part of the sky."""
        from spheretracer.core.integrator import (
            get_averaged_image_numpy,
            render_image,
            setup_render_target,
        )

        setup_render_target(16, 16)
        render_image(num_samples=4, max_depth=5)
        image = get_averaged_image_numpy()

        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        np.testing.assert_allclose(image[:, :, 2], 1.0, atol=1e-4)

    def test_batches_match_single_call(self, front_camera):
        from spheretracer.core.integrator import (
            clear_render_target,
            get_averaged_image_numpy,
            render_image,
            setup_render_target,
        )
        from spheretracer.scene.presets import create_three_spheres_scene

        create_three_spheres_scene()
        setup_render_target(12, 8)

        render_image(num_samples=4, max_depth=5, seed=3)
        single = get_averaged_image_numpy()

        clear_render_target()
        render_image(num_samples=1, max_depth=5, seed=3)
        render_image(num_samples=3, max_depth=5, seed=3)
        batched = get_averaged_image_numpy()

        np.testing.assert_allclose(single, batched, rtol=1e-5, atol=1e-6)

    def test_render_sample_is_deterministic(self, front_camera):
        from spheretracer.core.integrator import render_sample, setup_render_target
        from spheretracer.scene.presets import create_three_spheres_scene

        create_three_spheres_scene()
        setup_render_target(10, 10)

        first = render_sample(5, 5, sample_index=2, max_depth=10, seed=1)
        second = render_sample(5, 5, sample_index=2, max_depth=10, seed=1)
        assert first == second
