"""Sphere primitive with closed-form ray-sphere intersection.

Substituting the ray p = origin + t * direction into the implicit sphere
|p - position|^2 = radius^2 gives the quadratic

    e*t^2 + f*t + g = 0

    a = origin - position
    e = dot(direction, direction)
    f = 2 * dot(a, direction)
    g = dot(a, a) - radius^2

with discriminant d = f^2 - 4*e*g. Only the near root (-f - sqrt(d)) / (2e)
is used: the kernel needs the first surface a ray meets, and the far root is
discarded.

A hit is reported only for t > HIT_EPSILON. Intersections behind the origin
are misses, which also keeps a reflected ray from hitting the surface it
starts on. A ray starting inside a sphere therefore does not see that sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_tracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(
    ...     position=ti.math.vec3(0, 0, 0), radius=1.0, color=ti.math.vec4(1, 0, 0, 1)
    ... )
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from sphere_tracer.core.ray import Ray, ray_at, vec3, vec4

# Smallest distance accepted as a hit
HIT_EPSILON = 1e-4


@ti.dataclass
class Sphere:
    """A colored sphere.

    Attributes:
        position: The center point of the sphere (vec3).
        radius: The radius. Zero or negative radii never intersect.
        color: The RGBA diffuse color (vec4).
    """

    position: vec3
    radius: ti.f32
    color: vec4


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        intersected: 1 if the ray hit the sphere, 0 on a miss.
        distance: Ray parameter t of the hit. Only valid if intersected == 1.
        normal: Unit surface normal at the hit, pointing away from the
            sphere center. Only valid if intersected == 1.
        position: The hit point. Only valid if intersected == 1.
    """

    intersected: ti.i32
    distance: ti.f32
    normal: vec3
    position: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord for a miss, with every field zeroed."""
    return HitRecord(
        intersected=0,
        distance=0.0,
        normal=vec3(0.0, 0.0, 0.0),
        position=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> HitRecord:
    """Test a ray against one sphere.

    Args:
        ray: The ray to test. The direction must be non-zero.
        sphere: The sphere to test against.

    Returns:
        A HitRecord for the near root. Check the intersected field before
        using the others.
    """
    result = make_miss_record()

    if sphere.radius > 0.0:
        a = ray.origin - sphere.position
        e = tm.dot(ray.direction, ray.direction)
        f = 2.0 * tm.dot(a, ray.direction)
        g = tm.dot(a, a) - sphere.radius * sphere.radius
        discriminant = f * f - 4.0 * e * g

        if discriminant >= 0.0:
            t = (-f - ti.sqrt(discriminant)) / (2.0 * e)

            if t > HIT_EPSILON:
                hit_position = ray_at(ray, t)
                result = HitRecord(
                    intersected=1,
                    distance=t,
                    normal=tm.normalize(hit_position - sphere.position),
                    position=hit_position,
                )

    return result


@ti.func
def make_sphere(position: vec3, radius: ti.f32, color: vec4) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(position=position, radius=radius, color=color)
