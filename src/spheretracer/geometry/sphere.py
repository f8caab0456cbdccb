"""Sphere primitive with closed-form ray-sphere intersection.

This module provides a Sphere dataclass, the HitRecord produced by a
successful intersection test, and the intersection function itself.

The intersection solves |origin + t * direction - center|^2 = radius^2 as a
quadratic in t using the half-b formulation. A negative radius is allowed:
the outward normal (point - center) / radius then points into the sphere,
which turns the sphere into a hollow shell when nested inside a larger one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values flip the outward
            normal, which is used for hollow glass shells. Must not be zero.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, always
            oriented against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray approached from the outward side of the
            surface (negative dot product with the outward normal), else 0.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The ray-sphere intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    With oc = origin - center this is the quadratic a*t^2 + 2*h*t + c = 0:
        a = dot(direction, direction)
        h = dot(oc, direction)  (half of the traditional b)
        c = dot(oc, oc) - radius^2

    The smaller root is preferred when it lies strictly inside
    (t_min, t_max); otherwise the larger root is tried. A tangent ray
    (zero discriminant) yields a single root, which counts as a hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray. Need not be
            normalized but must not be zero.
        sphere: The sphere to test intersection against.
        t_min: Lower bound (exclusive) on accepted t, rejects self-hits.
        t_max: Upper bound (exclusive) on accepted t.

    Returns:
        A HitRecord containing intersection information. Check the hit
        field to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            # Divides by the signed radius: inward for hollow spheres
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                # Ray is leaving the surface, hitting the back face
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
