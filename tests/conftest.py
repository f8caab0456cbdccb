"""Pytest configuration for spheretracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field declared by the package modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and render target state around each test."""
    # Imported here so Taichi is initialized before fields are declared
    from spheretracer.core.integrator import clear_render_target, release_render_target
    from spheretracer.materials.dielectric import clear_dielectric_materials
    from spheretracer.materials.lambertian import clear_lambertian_materials
    from spheretracer.materials.metal import clear_metal_materials
    from spheretracer.scene.manager import _clear_material_tracking
    from spheretracer.scene.world import clear_scene

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_render_target()
        release_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def front_camera():
    """Camera at the origin looking down -z with a 90 degree field of view."""
    from spheretracer.camera.thin_lens import ThinLensCamera, setup_camera

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
    setup_camera(camera)
    return camera
