"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the render kernel.

A camera ray bounces through the scene until it escapes to the sky, is
absorbed by a material, or runs out of bounces. Each bounce multiplies the
material's attenuation into the path throughput; an escaped ray returns
throughput * sky color, every other outcome returns black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Fixed maximum path depth
    - Sample accumulation across several render calls
    - Per (seed, pixel, sample) generator states for reproducible images

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.integrator import render_image, setup_render_target
    >>> from spheretracer.scene.presets import create_three_spheres_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50, seed=0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretracer.camera.thin_lens import get_ray_jittered
from spheretracer.core.sampler import seed_state
from spheretracer.materials.dielectric import scatter_dielectric_by_id
from spheretracer.materials.lambertian import scatter_lambertian_by_id
from spheretracer.materials.metal import scatter_metal_by_id
from spheretracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from spheretracer.scene.world import raycast
from spheretracer.settings import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# Hits closer than T_MIN are ignored so bounced rays do not re-hit their origin
T_MIN = 0.001
T_MAX = float("inf")

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all samples per pixel, indexed [column, row from the bottom]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Scratch fields for single-ray and single-sample queries
_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def release_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the accumulated color sums.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Sky and Material Dispatch
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a ray that hits nothing.

    Blends linearly from white at unit_direction.y == -1 to light blue
    at unit_direction.y == 1.
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material id.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if hit front face, 0 if back face.
        state: The generator state of the current task.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        Unknown material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, s = scatter_lambertian_by_id(type_index, normal, s)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, s = scatter_metal_by_id(
            type_index, incident_direction, normal, s
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter, s = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, s
        )

    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions. A path that is
            still bouncing after max_depth hits contributes black.
        state: The generator state of the current task.

    Returns:
        A tuple (color, new_state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    s = state

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = raycast(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, s = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face, s
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color, s


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_index: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Render one jittered sample of a pixel.

    The generator state is derived from (seed, pixel, sample_index), so the
    same sample of the same pixel always traces the same path.
    """
    state = seed_state(seed, pixel_j * width + pixel_i, sample_index)
    ray, state = get_ray_jittered(pixel_i, pixel_j, width, height, state)
    color, state = trace_ray(ray.origin, ray.direction, max_depth, state)

    # Replace NaN/Inf from degenerate geometry with zero
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_batch(
    width: ti.i32,
    height: ti.i32,
    sample_offset: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    """Add num_samples samples to every pixel of the active region.

    Samples are numbered from sample_offset, so splitting a render into
    several batches draws the same random streams as one large batch.
    """
    for i, j in ti.ndrange(width, height):
        total = vec3(0.0, 0.0, 0.0)
        for k in range(num_samples):
            total += render_sample_impl(
                i, j, width, height, sample_offset + k, max_depth, seed
            )
        _color_buffer[i, j] += total
        _sample_count[i, j] += num_samples


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_index: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
):
    ti.loop_config(serialize=True)
    for _ in range(1):
        _probe_color[None] = render_sample_impl(
            pixel_i, pixel_j, width, height, sample_index, max_depth, seed
        )


@ti.kernel
def _trace_probe_ray(max_depth: ti.i32, seed: ti.i32):
    ti.loop_config(serialize=True)
    for _ in range(1):
        state = seed_state(seed, 0, 0)
        color, state = trace_ray(_probe_origin[None], _probe_direction[None], max_depth, state)
        _probe_color[None] = color


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_render_args(max_depth: int, seed: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must be non-negative")
    if seed < 0:
        raise ValueError(f"seed = {seed} must be non-negative")


def _probe_color_tuple() -> tuple[float, float, float]:
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray from Python.

    Useful for testing the integrator without a camera or render target.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    _check_render_args(max_depth, seed)
    _probe_origin[None] = [origin[0], origin[1], origin[2]]
    _probe_direction[None] = [direction[0], direction[1], direction[2]]
    _trace_probe_ray(max_depth, seed)
    return _probe_color_tuple()


def render_sample(
    pixel_i: int,
    pixel_j: int,
    sample_index: int = 0,
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel. The result is
    not accumulated into the render target.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        sample_index: Which sample of the pixel to draw.
        max_depth: Maximum path depth.
        seed: Render seed.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _check_render_args(max_depth, seed)

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, sample_index, max_depth, seed)
    return _probe_color_tuple()


def render_image(
    num_samples: int = 1,
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
    sample_offset: int | None = None,
) -> None:
    """Accumulate num_samples more samples into every pixel.

    Can be called repeatedly; by default the sample numbering continues
    from the samples already accumulated.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum path depth.
        seed: Render seed.
        sample_offset: Index of the first sample. Defaults to the current
            sample count.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples < 1, max_depth < 0 or seed < 0.
    """
    _check_render_target_initialized()
    _check_render_args(max_depth, seed)
    if num_samples < 1:
        raise ValueError(f"num_samples = {num_samples} must be at least 1")

    if sample_offset is None:
        sample_offset = get_total_samples()

    width, height = get_image_dimensions()
    _render_batch(width, height, sample_offset, num_samples, max_depth, seed)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Returns the sample count of pixel (0, 0), which is the same for all
    pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_averaged_image_numpy() -> np.ndarray:
    """Get the rendered image as linear colors.

    Each pixel is its sample sum divided by its sample count (pixels
    without samples are black). The first row is the top of the image.

    Returns:
        NumPy float32 array of shape (height, width, 3).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    sums = _color_buffer.to_numpy()[:width, :height, :]
    counts = _sample_count.to_numpy()[:width, :height]

    image = sums / np.maximum(counts, 1)[:, :, np.newaxis]

    # (width, height, 3) -> (height, width, 3), with row 0 at the top
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
