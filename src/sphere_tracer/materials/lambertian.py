"""Lambertian (ideal diffuse) shading under a single directional light.

The scene is lit by one fixed directional light. The diffuse term at a surface
point is the clamped cosine between the surface normal and the direction
toward the light:

    light = clamp(dot(normal, normalize(LIGHT_DIRECTION)), 0, 1)

No shadow rays are traced, so every surface facing the light is lit.

Example:
    >>> # Inside a Taichi kernel:
    >>> # contribution = shade_lambertian(color, normal, attenuation)
"""

import taichi as ti
import taichi.math as tm

from sphere_tracer.core.ray import rgb_of, vec3, vec4

# Direction toward the light (unnormalized)
LIGHT_X = 1.0
LIGHT_Y = 1.0
LIGHT_Z = -1.0
LIGHT_DIRECTION = (LIGHT_X, LIGHT_Y, LIGHT_Z)


@ti.func
def light_direction() -> vec3:
    """Unit vector pointing toward the light."""
    return tm.normalize(vec3(LIGHT_X, LIGHT_Y, LIGHT_Z))


@ti.func
def diffuse_light(normal: vec3) -> ti.f32:
    """Clamped cosine term for a unit surface normal.

    Args:
        normal: The surface normal (should be normalized).

    Returns:
        The light intensity in [0, 1].
    """
    return tm.clamp(tm.dot(normal, light_direction()), 0.0, 1.0)


@ti.func
def shade_lambertian(color: vec4, normal: vec3, attenuation: ti.f32) -> vec4:
    """Light contribution of a diffuse surface, weighted by the path attenuation.

    Args:
        color: The RGBA surface color. Alpha is dropped.
        normal: The surface normal (should be normalized).
        attenuation: Weight of the current bounce.

    Returns:
        The contribution to add to the accumulated color, with alpha 0.
    """
    return rgb_of(color) * diffuse_light(normal) * attenuation
