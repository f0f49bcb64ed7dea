"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    jitter: Time-seeded hash jitter and the frame seed upload
    settings: Render settings (sample count, bounce cap, attenuation)
    integrator: Bounce loop, render target and render kernels
    frame: Frame renderer driving per-frame uploads

All per-pixel work runs in Taichi kernels.
"""

from .ray import (
    F32_MAX,
    Ray,
    dot,
    length_squared,
    make_ray,
    normalize,
    ray_at,
    reflect,
    rgb_of,
    vec2,
    vec3,
    vec4,
)

# Note: integrator and frame are NOT imported here to avoid circular imports.
# Import directly from sphere_tracer.core.integrator or sphere_tracer.core.frame.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "vec4",
    "F32_MAX",
    "length_squared",
    "normalize",
    "dot",
    "reflect",
    "rgb_of",
]
