"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    sampler: Explicit per-task random number generation and sampling
    integrator: Fixed-depth path tracing and the render kernel
    renderer: Batched render loop with progress reporting and output

The core module implements Monte Carlo path tracing with fixed-depth
truncation: camera rays bounce off surfaces according to their materials
until they escape to the background, get absorbed, or run out of bounces.

Every random number is drawn from a generator state owned by a single
(pixel, sample) task, which makes renders reproducible for a given seed.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    pcg_hash,
    random_f32,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    seed_state,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretracer.core.integrator or spheretracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "pcg_hash",
    "seed_state",
    "random_f32",
    "random_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
