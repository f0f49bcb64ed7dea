"""Scene module: sphere storage, nearest-hit queries and authoring.

Components:
    intersection: Sphere fields and the nearest-hit query
    manager: SceneManager and SphereInfo records
    demo: Small fixed scene for examples and tests

Sphere data is stored in Taichi fields with a Structure-of-Arrays layout and
is read-only while a frame renders.
"""

from .demo import DEMO_SPHERES, create_demo_scene
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import SceneManager, SphereInfo, make_sphere_info, upload_spheres

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "make_sphere_info",
    "upload_spheres",
    # Demo scene
    "DEMO_SPHERES",
    "create_demo_scene",
]
