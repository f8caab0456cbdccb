"""JSON scene files.

A scene file is a JSON object with four optional sections:

    {
        "render": {"image_width": 400, "samples_per_pixel": 20, ...},
        "camera": {"lookfrom": [13, 2, 3], "lookat": [0, 0, 0], ...},
        "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}, ...],
        "spheres": [{"center": [0, -1000, 0], "radius": 1000, "material_id": 0}, ...]
    }

Sphere entries reference materials by their position in the "materials"
list. The camera and render sections share one aspect ratio: a value given
in only one of them applies to both, and differing values are rejected.
"""

import json
import logging
import math
from os import PathLike
from pathlib import Path
from typing import Any

from spheretracer.camera.thin_lens import ThinLensCamera
from spheretracer.scene.manager import SceneManager
from spheretracer.settings import RenderSettings

logger = logging.getLogger(__name__)


def parse_scene(
    data: dict[str, Any],
) -> tuple[SceneManager, ThinLensCamera, RenderSettings]:
    """Build the scene, camera and render settings described by a mapping.

    Raises:
        ValueError: If a section is malformed or holds invalid values.
    """
    if not isinstance(data, dict):
        raise ValueError("Scene file must contain a JSON object")

    render_data = dict(data.get("render", {}))
    camera_data = dict(data.get("camera", {}))
    if "aspect_ratio" in camera_data and "aspect_ratio" not in render_data:
        render_data["aspect_ratio"] = camera_data["aspect_ratio"]

    settings = RenderSettings.from_dict(render_data)

    camera_data.setdefault("aspect_ratio", settings.aspect_ratio)
    if not math.isclose(float(camera_data["aspect_ratio"]), settings.aspect_ratio):
        raise ValueError(
            f"Camera aspect_ratio {camera_data['aspect_ratio']} does not match "
            f"render aspect_ratio {settings.aspect_ratio}"
        )
    camera = ThinLensCamera.from_dict(camera_data)

    scene = SceneManager()
    scene.from_dict(data)

    return scene, camera, settings


def load_scene_file(
    path: str | PathLike[str],
) -> tuple[SceneManager, ThinLensCamera, RenderSettings]:
    """Load a JSON scene file.

    Args:
        path: Path to the scene file.

    Returns:
        Tuple of (SceneManager, ThinLensCamera, RenderSettings).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scene file {path}: {e}") from e

    scene, camera, settings = parse_scene(data)
    logger.info(
        "Loaded scene %s: %d spheres, %d materials",
        path,
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    return scene, camera, settings


def scene_to_dict(
    scene: SceneManager,
    camera: ThinLensCamera,
    settings: RenderSettings,
) -> dict[str, Any]:
    return {
        "render": settings.to_dict(),
        "camera": camera.to_dict(),
        **scene.to_dict(),
    }


def save_scene_file(
    path: str | PathLike[str],
    scene: SceneManager,
    camera: ThinLensCamera,
    settings: RenderSettings,
) -> None:
    """Write a scene file that load_scene_file() reads back."""
    Path(path).write_text(
        json.dumps(scene_to_dict(scene, camera, settings), indent=2) + "\n",
        encoding="utf-8",
    )
