"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection algorithm:

Components:
    sphere: Sphere primitive with closed-form ray-sphere intersection

The intersection routine is implemented as a Taichi function (@ti.func)
so it can be called from the parallel render kernel. Scenes are scanned
linearly; there is no spatial acceleration structure.

Ray-object intersection follows the pattern:
    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
