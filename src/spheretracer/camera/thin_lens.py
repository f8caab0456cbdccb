"""Thin-lens camera model with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Defocus blur through a circular aperture focused at a given distance
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at focus_dist in front of the lens. Ray origins are
spread over a disk of radius aperture / 2 around the camera position, so
only points on the focus plane are rendered sharply. An aperture of zero
gives a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray, state = get_ray(0.5, 0.5, state)  # Ray through image center
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, make_ray, vec3
from spheretracer.core.sampler import random_f32, random_in_unit_disk

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective, depth of field) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables defocus blur.
        focus_dist: Distance from the camera to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        self.lookfrom = tuple(float(x) for x in self.lookfrom)
        self.lookat = tuple(float(x) for x in self.lookat)
        self.vup = tuple(float(x) for x in self.vup)
        self.validate()

    def validate(self) -> None:
        """Check that the configuration defines a usable camera.

        Raises:
            ValueError: On a degenerate view direction or up vector, or a
                field of view, aspect ratio, aperture or focus distance out
                of range.
        """
        for name in ("lookfrom", "lookat", "vup"):
            if len(getattr(self, name)) != 3:
                raise ValueError(f"{name} must have 3 components")

        view = np.subtract(self.lookfrom, self.lookat)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be zero or parallel to the view direction")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive")

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for name in ("lookfrom", "lookat", "vup"):
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThinLensCamera":
        """Build a camera from a mapping such as the "camera" entry of a scene file.

        Missing keys fall back to a camera at the origin looking down -z
        with a 90 degree field of view.
        """
        return cls(
            lookfrom=tuple(data.get("lookfrom", (0.0, 0.0, 0.0))),
            lookat=tuple(data.get("lookat", (0.0, 0.0, -1.0))),
            vup=tuple(data.get("vup", (0.0, 1.0, 0.0))),
            vfov=float(data.get("vfov", 90.0)),
            aspect_ratio=float(data.get("aspect_ratio", 16.0 / 9.0)),
            aperture=float(data.get("aperture", 0.0)),
            focus_dist=float(data.get("focus_dist", 1.0)),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Focus-plane vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis (u, v, w) and the focus-plane geometry
    from the camera parameters. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If the configuration is degenerate.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, state: ti.u32):
    """Generate a ray through normalized image coordinates (s, t).

    The coordinates are normalized:
    - s = 0: left edge of image, s = 1: right edge
    - t = 0: bottom edge of image, t = 1: top edge

    The origin is displaced across the lens disk; the direction aims at
    the corresponding point on the focus plane and is not normalized.

    Args:
        s: Horizontal coordinate (left to right).
        t: Vertical coordinate (bottom to top).
        state: The generator state of the current task.

    Returns:
        A tuple (ray, new_state).
    """
    disk, new_state = random_in_unit_disk(state)
    rd = _lens_radius[None] * disk
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - _camera_origin[None]
        - offset
    )

    return make_ray(origin, direction), new_state


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    state: ti.u32,
):
    """Generate a jittered ray for anti-aliasing.

    Adds a uniform sub-pixel offset in [0, 1) to the pixel coordinates and
    maps them so that pixel 0 lands on the left/bottom edge and pixel
    width-1 / height-1 on the right/top edge.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The generator state of the current task.

    Returns:
        A tuple (ray, new_state).
    """
    jitter_s, s1 = random_f32(state)
    jitter_t, s2 = random_f32(s1)

    s = (ti.cast(pixel_i, ti.f32) + jitter_s) / ti.cast(ti.max(width - 1, 1), ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + jitter_t) / ti.cast(ti.max(height - 1, 1), ti.f32)

    return get_ray(s, t, s2)


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vec) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for inspection from Python.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """
    return {
        "origin": _as_tuple(_camera_origin[None]),
        "u": _as_tuple(_camera_u[None]),
        "v": _as_tuple(_camera_v[None]),
        "w": _as_tuple(_camera_w[None]),
        "horizontal": _as_tuple(_viewport_horizontal[None]),
        "vertical": _as_tuple(_viewport_vertical[None]),
        "lower_left": _as_tuple(_lower_left_corner[None]),
        "lens_radius": float(_lens_radius[None]),
    }
