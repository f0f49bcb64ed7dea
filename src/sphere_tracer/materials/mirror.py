"""Mirror reflection with constant attenuation.

Every surface also acts as a perfect mirror: after shading, the ray continues
from the hit point in the reflected direction

    R = I - 2(I . N)N

and the weight of everything seen further along the path is multiplied by a
constant attenuation factor. Tracing stops once that weight drops below a
floor. The new ray starts exactly on the surface; the intersector's distance
epsilon keeps it from hitting the surface it leaves.

Example:
    >>> # Inside a Taichi kernel:
    >>> # ray = scatter_mirror(ray, hit.position, hit.normal)
    >>> # attenuation = attenuate(attenuation, factor)
"""

import taichi as ti

from sphere_tracer.core.ray import Ray, make_ray, reflect, vec3

# Default weight multiplier per bounce
DEFAULT_ATTENUATION_FACTOR = 0.5

# Default weight below which tracing stops
DEFAULT_ATTENUATION_FLOOR = 0.01


@ti.func
def scatter_mirror(ray: Ray, hit_position: vec3, normal: vec3) -> Ray:
    """Reflect a ray about the surface normal at a hit point.

    Args:
        ray: The incoming ray.
        hit_position: Where the ray struck the surface.
        normal: The unit surface normal at that point.

    Returns:
        The reflected ray starting at hit_position.
    """
    return make_ray(hit_position, reflect(ray.direction, normal))


@ti.func
def attenuate(attenuation: ti.f32, factor: ti.f32) -> ti.f32:
    return attenuation * factor


@ti.func
def is_extinguished(attenuation: ti.f32, floor: ti.f32) -> ti.i32:
    """1 if the path weight fell below the floor, 0 otherwise."""
    return attenuation < floor
