"""Scene-level sphere storage and nearest-hit queries.

Spheres are stored in Taichi fields (Structure of Arrays) and read-only during
a frame. intersect_scene() tests a ray against every stored sphere and keeps
the closest hit.

Only slots 0 <= i < num_spheres are ever read. Slots past the count may still
hold spheres from an earlier, larger upload; they are not part of the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_tracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 0.0), 1.0, (1.0, 0.0, 0.0, 1.0))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from sphere_tracer.core.ray import F32_MAX, Ray, vec3, vec4
from sphere_tracer.geometry.sphere import HitRecord, Sphere, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        intersected: 1 if the ray hit any sphere, 0 on a miss.
        distance: Ray parameter t of the nearest hit.
        normal: Outward unit normal at the hit.
        position: The hit point.
        sphere_index: Index of the struck sphere, -1 on a miss.
        color: Color of the struck sphere.
    """

    intersected: ti.i32
    distance: ti.f32
    normal: vec3
    position: vec3
    sphere_index: ti.i32
    color: vec4


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is not cleared but is
    never read past the count.
    """
    num_spheres[None] = 0


def add_sphere(
    position: tuple[float, float, float],
    radius: float,
    color: tuple[float, float, float, float],
) -> int:
    """Add a sphere to the scene.

    Args:
        position: The center of the sphere.
        radius: The radius. Non-positive radii are stored but never hit.
        color: RGBA color of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_positions[idx] = [position[0], position[1], position[2]]
    sphere_radii[idx] = radius
    sphere_colors[idx] = [color[0], color[1], color[2], color[3]]
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Read sphere i from the scene fields."""
    return Sphere(position=sphere_positions[i], radius=sphere_radii[i], color=sphere_colors[i])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        intersected=0,
        distance=0.0,
        normal=vec3(0.0, 0.0, 0.0),
        position=vec3(0.0, 0.0, 0.0),
        sphere_index=-1,
        color=vec4(0.0, 0.0, 0.0, 0.0),
    )


@ti.func
def _to_scene_hit_record(rec: HitRecord, sphere_index: ti.i32, color: vec4) -> SceneHitRecord:
    return SceneHitRecord(
        intersected=rec.intersected,
        distance=rec.distance,
        normal=rec.normal,
        position=rec.position,
        sphere_index=sphere_index,
        color=color,
    )


@ti.func
def intersect_scene(ray: Ray) -> SceneHitRecord:
    """Find the nearest sphere hit by a ray.

    Tests every sphere in index order and keeps a hit only if its distance is
    strictly smaller than the best so far, so the first sphere wins ties.

    Args:
        ray: The ray to test.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest = F32_MAX
    result = _make_miss_record()

    n = num_spheres[None]
    for i in range(n):
        sphere = get_sphere(i)
        rec = hit_sphere(ray, sphere)
        if rec.intersected == 1 and rec.distance < closest:
            closest = rec.distance
            result = _to_scene_hit_record(rec, i, sphere.color)

    return result
