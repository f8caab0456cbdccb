"""Explicit per-task random number generation for Monte Carlo sampling.

Every (pixel, sample) task of a render pass owns a private 32-bit generator
state. The state is derived by hashing the render seed, the pixel index and
the sample index, and is then threaded through every function that draws
random numbers: each sampler takes the current state and returns the
advanced state alongside its result.

Because no generator is shared between parallel tasks, the image produced
for a given seed does not depend on how the backend schedules pixels.

The generator is the PCG hash (Jarzynski and Olano, "Hash Functions for GPU
Rendering", JCGT 2020) applied repeatedly to its own output.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_state(1234, 0, 0)
    ...     value, state = random_f32(state)
    ...     return value
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# PCG hash multipliers and increment
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 1013904223
_PCG_OUTPUT_MULTIPLIER = 277803737

# Odd constants used to decorrelate the seed, sample and pixel streams
_SEED_MIX = 1597334677
_SAMPLE_MIX = 1103515245

# 2^-24: maps the top 24 bits of a state onto [0, 1)
_INV_2_POW_24 = 1.0 / 16777216.0

# Upper bound on rejection sampling iterations
MAX_REJECTION_TRIES = 64


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation.

    Args:
        value: The input value.

    Returns:
        A well-mixed 32-bit hash of the input.
    """
    state = value * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        _PCG_OUTPUT_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_state(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the private generator state of one (pixel, sample) task.

    Args:
        seed: The render seed.
        pixel_index: Flat index of the pixel.
        sample_index: Index of the sample within the pixel.

    Returns:
        The initial generator state.
    """
    h = pcg_hash(ti.cast(seed, ti.u32) * ti.u32(_SEED_MIX))
    h = pcg_hash(h ^ (ti.cast(sample_index, ti.u32) * ti.u32(_SAMPLE_MIX)))
    return pcg_hash(h ^ ti.cast(pixel_index, ti.u32))


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * _INV_2_POW_24
    return value, new_state


@ti.func
def random_range(lo: ti.f32, hi: ti.f32, state: ti.u32):
    """Draw a uniform float in [lo, hi).

    Returns:
        A tuple (value, new_state).
    """
    r, new_state = random_f32(state)
    return lo + (hi - lo) * r, new_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit ball.

    Args:
        state: The current generator state.

    Returns:
        A tuple (point, new_state) with |point| < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            x, s = random_range(-1.0, 1.0, s)
            y, s = random_range(-1.0, 1.0, s)
            z, s = random_range(-1.0, 1.0, s)
            candidate = vec3(x, y, z)
            if tm.dot(candidate, candidate) < 1.0:
                p = candidate
                found = True
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples z uniformly in [-1, 1] and the azimuth uniformly in [0, 2*pi),
    which is area-preserving and needs no rejection.

    Args:
        state: The current generator state.

    Returns:
        A tuple (direction, new_state) with |direction| == 1.
    """
    r1, s = random_f32(state)
    r2, s = random_f32(s)
    z = 1.0 - 2.0 * r1
    phi = 2.0 * tm.pi * r2
    r = ti.sqrt(tm.max(0.0, 1.0 - z * z))
    return vec3(r * ti.cos(phi), r * ti.sin(phi), z), s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used to jitter the ray origin across the camera lens.

    Args:
        state: The current generator state.

    Returns:
        A tuple (point, new_state) where point is (x, y, 0) with x^2 + y^2 < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            x, s = random_range(-1.0, 1.0, s)
            y, s = random_range(-1.0, 1.0, s)
            if x * x + y * y < 1.0:
                p = vec3(x, y, 0.0)
                found = True
    return p, s
