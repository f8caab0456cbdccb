"""Scene module for scene storage, materials bookkeeping and scene sources.

Components:
    world: Sphere storage and the nearest-hit raycast
    manager: SceneManager coordinating spheres and materials
    presets: Built-in demo scenes
    loader: JSON scene files

Scene data is kept in Taichi fields in a Structure-of-Arrays layout and is
only written from Python between render passes.
"""

from .loader import load_scene_file, parse_scene, save_scene_file
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    create_random_spheres_scene,
    create_three_spheres_scene,
    random_spheres_camera,
)
from .world import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    raycast,
)

__all__ = [
    # World
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "raycast",
    "MAX_SPHERES",
    # Manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "create_random_spheres_scene",
    "create_three_spheres_scene",
    "random_spheres_camera",
    # Scene files
    "load_scene_file",
    "parse_scene",
    "save_scene_file",
]
