"""Ready-made demo scenes.

Each factory clears the global scene storage, fills it with spheres and
materials, and returns the SceneManager together with a matching camera.

Scenes:
    random_spheres: A large ground sphere covered with a grid of small
        randomly placed spheres of random materials, plus three large
        spheres (glass, diffuse brown, polished metal).
    three_spheres: A diffuse sphere between a hollow glass sphere and a
        fuzzy metal sphere, on a large ground sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.presets import create_random_spheres_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
"""

import logging

import numpy as np

from spheretracer.camera.thin_lens import ThinLensCamera
from spheretracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Random Spheres Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on a grid of cells a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2
SMALL_SPHERE_JITTER = 0.9

# Material choice thresholds: below 0.8 diffuse, below 0.95 metal, else glass
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15

GLASS_IOR = 1.5
MAX_RANDOM_FUZZ = 0.5

LARGE_SPHERE_RADIUS = 1.0
BROWN_ALBEDO = (0.4, 0.2, 0.1)
POLISHED_METAL_ALBEDO = (0.7, 0.6, 0.5)


def random_spheres_camera(aspect_ratio: float = 3.0 / 2.0) -> ThinLensCamera:
    """Camera framing the random spheres scene with shallow depth of field."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


def create_random_spheres_scene(
    seed: int | None = None,
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres scene.

    Each grid cell (a, b) gets one sphere of radius 0.2 resting on the
    ground at (a + U[0, 0.9), 0.2, b + U[0, 0.9)). Its material is diffuse
    with probability 0.8 (albedo is the product of two uniform random
    colors), metal with probability 0.15 (albedo uniform in [0.5, 1), fuzz
    uniform in [0, 0.5)), and glass otherwise.

    Args:
        seed: Seed for scene layout. None draws a fresh layout.
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        Tuple of (SceneManager, ThinLensCamera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    # One shared material for all small glass spheres
    glass = None

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose = rng.random()
            center = (
                a + SMALL_SPHERE_JITTER * rng.random(),
                SMALL_SPHERE_RADIUS,
                b + SMALL_SPHERE_JITTER * rng.random(),
            )

            if choose < DIFFUSE_PROBABILITY:
                albedo = tuple((rng.random(3) * rng.random(3)).tolist())
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, albedo)
            elif choose < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = tuple(rng.uniform(0.5, 1.0, 3).tolist())
                fuzz = float(rng.uniform(0.0, MAX_RANDOM_FUZZ))
                scene.add_metal_sphere(center, SMALL_SPHERE_RADIUS, albedo, fuzz)
            else:
                if glass is None:
                    glass = scene.add_dielectric_material(GLASS_IOR)
                scene.add_sphere(center, SMALL_SPHERE_RADIUS, glass)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, BROWN_ALBEDO)
    scene.add_metal_sphere((4.0, 1.0, 0.0), LARGE_SPHERE_RADIUS, POLISHED_METAL_ALBEDO, 0.0)

    logger.info(
        "Built random spheres scene: %d spheres, %d materials",
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    return scene, random_spheres_camera(aspect_ratio)


def create_three_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a small scene with one sphere of each material.

    The glass sphere on the left is hollow: a second glass sphere with a
    negative radius sits inside it, flipping its normals so the pair acts
    as a thin shell.

    Returns:
        Tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material((0.8, 0.8, 0.0))
    center = scene.add_lambertian_material((0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(GLASS_IOR)
    gold = scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera

