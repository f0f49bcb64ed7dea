"""Camera module for primary ray generation.

Components:
    screen: Fixed-position camera mapping screen coordinates to rays

Ray generation uses normalized screen coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .screen import (
    ScreenCamera,
    generate_ray,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    screen_to_view_plane,
    setup_camera,
    view_plane_ray,
)

__all__ = [
    "ScreenCamera",
    "setup_camera",
    "generate_ray",
    "screen_to_view_plane",
    "view_plane_ray",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
