"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Reflection and refraction
- Schlick reflectance
- Degenerate vector detection
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """ray_at returns the origin when t=0."""
        from spheretracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((1.0, 2.0, 3.0))

    def test_ray_at_uses_unnormalized_direction(self):
        """ray_at scales the direction as given, without normalizing it."""
        from spheretracer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, 2.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((1.0, 1.0, 4.0))


class TestReflectRefract:
    def test_reflect_flips_normal_component(self):
        from spheretracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert tuple(result[None]) == pytest.approx((1.0, 1.0, 0.0))

    def test_refract_ratio_one_passes_straight_through(self):
        """With equal indices the ray is not bent."""
        from spheretracer.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        s = 1.0 / math.sqrt(2.0)

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(s, -s, 0.0), vec3(0.0, 1.0, 0.0), 1.0)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((s, -s, 0.0), abs=1e-5)

    def test_refract_obeys_snell(self):
        """sin(theta_t) = ratio * sin(theta_i) and the result is unit length."""
        from spheretracer.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        theta = math.radians(30.0)
        ratio = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            incident = vec3(ti.sin(theta), -ti.cos(theta), 0.0)
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), ratio)

        test_kernel()
        r = result[None]
        assert math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2) == pytest.approx(1.0, abs=1e-5)
        assert r[0] == pytest.approx(ratio * math.sin(theta), abs=1e-5)
        assert r[1] < 0.0


class TestSchlick:
    def test_normal_incidence_equals_r0(self):
        """At cos = 1 the approximation is exactly r0."""
        from spheretracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=())
        ratio = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(1.0, ratio)

        test_kernel()
        r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
        assert result[None] == pytest.approx(r0, abs=1e-6)

    def test_grazing_incidence_reflects_everything(self):
        from spheretracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert result[None] == pytest.approx(1.0, abs=1e-6)


class TestNearZero:
    @pytest.mark.parametrize(
        "vector, expected",
        [
            ((0.0, 0.0, 0.0), 1),
            ((1e-9, -1e-9, 1e-9), 1),
            ((1e-9, 0.0, 1e-3), 0),
            ((1.0, 0.0, 0.0), 0),
        ],
    )
    def test_near_zero(self, vector, expected):
        from spheretracer.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
            result[None] = near_zero(vec3(x, y, z))

        test_kernel(*vector)
        assert result[None] == expected
