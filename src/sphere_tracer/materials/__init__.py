"""Materials module.

Every sphere combines two behaviours:

Components:
    lambertian: Diffuse shading under one fixed directional light
    mirror: Perfect reflection with constant attenuation per bounce
"""

from .lambertian import LIGHT_DIRECTION, diffuse_light, light_direction, shade_lambertian
from .mirror import (
    DEFAULT_ATTENUATION_FACTOR,
    DEFAULT_ATTENUATION_FLOOR,
    attenuate,
    is_extinguished,
    scatter_mirror,
)

__all__ = [
    "LIGHT_DIRECTION",
    "light_direction",
    "diffuse_light",
    "shade_lambertian",
    "DEFAULT_ATTENUATION_FACTOR",
    "DEFAULT_ATTENUATION_FLOOR",
    "attenuate",
    "is_extinguished",
    "scatter_mirror",
]
