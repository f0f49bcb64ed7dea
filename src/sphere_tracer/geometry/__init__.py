"""Geometry module: the sphere primitive and ray-sphere intersection.

Intersection routines are Taichi functions (@ti.func) called from the
scene-level nearest-hit query.
"""

from .sphere import HIT_EPSILON, HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "HIT_EPSILON",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
