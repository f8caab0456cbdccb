"""Tests for the built-in demo scenes."""

import pytest


class TestRandomSpheresScene:
    def test_layout_is_reproducible(self):
        from spheretracer.scene.presets import create_random_spheres_scene

        first, _ = create_random_spheres_scene(seed=7)
        first_dict = first.to_dict()
        second, _ = create_random_spheres_scene(seed=7)

        assert second.to_dict() == first_dict

    def test_different_seeds_differ(self):
        from spheretracer.scene.presets import create_random_spheres_scene

        first, _ = create_random_spheres_scene(seed=1)
        first_dict = first.to_dict()
        second, _ = create_random_spheres_scene(seed=2)

        assert second.to_dict() != first_dict

    def test_structure(self):
        from spheretracer.scene.manager import MaterialType
        from spheretracer.scene.presets import (
            GRID_EXTENT,
            SMALL_SPHERE_RADIUS,
            create_random_spheres_scene,
        )

        scene, _ = create_random_spheres_scene(seed=0)
        cells = (2 * GRID_EXTENT) ** 2

        # Ground, one sphere per grid cell, three large spheres
        assert scene.get_sphere_count() == 1 + cells + 3

        ground = scene.spheres[0]
        assert ground.center == (0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0

        for sphere in scene.spheres[1 : 1 + cells]:
            assert sphere.radius == SMALL_SPHERE_RADIUS
            assert sphere.center[1] == SMALL_SPHERE_RADIUS

        glass, brown, metal = scene.spheres[-3:]
        assert glass.center == (0.0, 1.0, 0.0)
        assert brown.center == (-4.0, 1.0, 0.0)
        assert metal.center == (4.0, 1.0, 0.0)
        assert scene.get_material_type_python(glass.material_id) == MaterialType.DIELECTRIC
        assert scene.get_material_type_python(brown.material_id) == MaterialType.LAMBERTIAN
        assert scene.get_material_type_python(metal.material_id) == MaterialType.METAL
        assert scene.get_material_info(metal.material_id).params["fuzz"] == 0.0

    def test_small_sphere_parameters_in_range(self):
        from spheretracer.scene.manager import MaterialType
        from spheretracer.scene.presets import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=3)
        kinds = set()
        for sphere in scene.spheres[1:-3]:
            info = scene.get_material_info(sphere.material_id)
            kinds.add(info.material_type)
            if info.material_type == MaterialType.LAMBERTIAN:
                assert all(0.0 <= c < 1.0 for c in info.params["albedo"])
            elif info.material_type == MaterialType.METAL:
                assert all(0.5 <= c < 1.0 for c in info.params["albedo"])
                assert 0.0 <= info.params["fuzz"] < 0.5
            else:
                assert info.params["ior"] == 1.5

        assert kinds == {MaterialType.LAMBERTIAN, MaterialType.METAL, MaterialType.DIELECTRIC}

    def test_small_spheres_stay_in_their_cells(self):
        from spheretracer.scene.presets import GRID_EXTENT, create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=5)
        small = scene.spheres[1 : 1 + (2 * GRID_EXTENT) ** 2]
        cells = [(a, b) for a in range(-GRID_EXTENT, GRID_EXTENT) for b in range(-GRID_EXTENT, GRID_EXTENT)]

        for (a, b), sphere in zip(cells, small):
            assert a <= sphere.center[0] < a + 0.9
            assert b <= sphere.center[2] < b + 0.9

    def test_camera(self):
        from spheretracer.scene.presets import create_random_spheres_scene

        _, camera = create_random_spheres_scene(seed=0, aspect_ratio=2.0)
        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0
        assert camera.aspect_ratio == 2.0


class TestThreeSpheresScene:
    def test_contents(self):
        from spheretracer.scene.manager import MaterialType
        from spheretracer.scene.presets import create_three_spheres_scene

        scene, camera = create_three_spheres_scene()

        assert scene.get_material_count() == 4
        assert scene.get_sphere_count() == 5
        assert [s.radius for s in scene.spheres] == [100.0, 0.5, 0.5, -0.4, 0.5]

        # The hollow glass pair shares one material
        outer, inner = scene.spheres[2], scene.spheres[3]
        assert outer.material_id == inner.material_id
        assert scene.get_material_type_python(outer.material_id) == MaterialType.DIELECTRIC

        assert camera.vfov == 90.0
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)
