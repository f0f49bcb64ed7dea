"""Screen camera model for primary ray generation.

The camera sits at a fixed position, (0, 0, -2), looking down +z at a view
plane through z = 0. Normalized screen coordinates are mapped onto that plane:

    coord = (uv - 0.5) * 2 * (aspect_ratio * VIEWPORT_HALF_HEIGHT,
                              VIEWPORT_HALF_HEIGHT)

so the plane spans [-aspect, aspect] x [-1, 1]. Rays go from the camera
origin through (coord.x, coord.y, 0), which gives a perspective projection.

Only the output size is configurable; it determines the aspect ratio. The
size is uploaded once per frame (or whenever the window changes) with
setup_camera().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_tracer.camera.screen import ScreenCamera, setup_camera, get_ray
    >>>
    >>> setup_camera(ScreenCamera(width=640, height=480))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(ti.math.vec2(0.5, 0.5))  # Ray through screen center
"""

import logging
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sphere_tracer.core.jitter import jitter
from sphere_tracer.core.ray import Ray, make_ray, vec2, vec3

logger = logging.getLogger(__name__)

# Fixed camera position (looking down +z)
CAMERA_X = 0.0
CAMERA_Y = 0.0
CAMERA_Z = -2.0
CAMERA_ORIGIN = (CAMERA_X, CAMERA_Y, CAMERA_Z)

# Half of the view plane's vertical extent
VIEWPORT_HALF_HEIGHT = 1.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ScreenCamera:
    """Output size of the camera, in pixels.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels. Must be positive, as it divides the
            width to form the aspect ratio.
    """

    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_width = ti.field(dtype=ti.i32, shape=())
_camera_height = ti.field(dtype=ti.i32, shape=())
_aspect_ratio = ti.field(dtype=ti.f32, shape=())
_camera_initialized = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: ScreenCamera) -> None:
    """Upload the camera size and its aspect ratio.

    Args:
        camera: Camera with the output size.

    Raises:
        ValueError: If width or height is not positive.
    """
    if camera.height <= 0:
        raise ValueError(f"Camera height must be positive, got {camera.height}")
    if camera.width <= 0:
        raise ValueError(f"Camera width must be positive, got {camera.width}")

    _camera_width[None] = camera.width
    _camera_height[None] = camera.height
    _aspect_ratio[None] = camera.aspect_ratio
    _camera_initialized[None] = 1
    logger.debug(
        "Camera set to %dx%d (aspect %.4f)", camera.width, camera.height, camera.aspect_ratio
    )


def reset_camera() -> None:
    """Forget the uploaded camera; rendering then fails until setup_camera()."""
    _camera_initialized[None] = 0


def is_camera_initialized() -> bool:
    return bool(_camera_initialized[None])


def check_camera_initialized() -> None:
    """Raise if setup_camera() has not been called."""
    if _camera_initialized[None] == 0:
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def screen_to_view_plane(uv: vec2, aspect_ratio: ti.f32) -> vec2:
    """Map a normalized screen coordinate onto the view plane.

    Args:
        uv: Screen coordinate in [0, 1]^2, (0, 0) at the bottom-left.
        aspect_ratio: Width divided by height.

    Returns:
        The view-plane coordinate, centered on (0, 0).
    """
    viewport_scale = vec2(aspect_ratio * VIEWPORT_HALF_HEIGHT, VIEWPORT_HALF_HEIGHT)
    return (uv - 0.5) * 2.0 * viewport_scale


@ti.func
def view_plane_ray(coord: vec2) -> Ray:
    """Build the ray from the camera origin through a view-plane point."""
    origin = vec3(CAMERA_X, CAMERA_Y, CAMERA_Z)
    direction = tm.normalize(vec3(coord.x, coord.y, 0.0) - origin)
    return make_ray(origin, direction)


@ti.func
def generate_ray(uv: vec2, aspect_ratio: ti.f32) -> Ray:
    """Generate the primary ray for a screen coordinate.

    Pure function of its inputs.

    Args:
        uv: Screen coordinate in [0, 1]^2.
        aspect_ratio: Width divided by height.

    Returns:
        A normalized ray starting at the camera origin.
    """
    return view_plane_ray(screen_to_view_plane(uv, aspect_ratio))


@ti.func
def get_ray(uv: vec2) -> Ray:
    """Generate the primary ray for a screen coordinate using the uploaded camera."""
    return generate_ray(uv, _aspect_ratio[None])


@ti.func
def get_ray_jittered(uv: vec2, seed: ti.f32, scale: ti.f32) -> Ray:
    """Generate a jittered primary ray for one sub-sample.

    The view-plane coordinate of the pixel is offset by jitter(coord, seed,
    scale) before building the ray.

    Args:
        uv: Screen coordinate in [0, 1]^2.
        seed: Sub-sample seed.
        scale: Jitter half-width in view-plane units.

    Returns:
        A normalized ray starting at the camera origin.
    """
    coord = screen_to_view_plane(uv, _aspect_ratio[None])
    coord += jitter(coord, seed, scale)
    return view_plane_ray(coord)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, float | tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with width, height, aspect_ratio and origin.
    """
    return {
        "width": int(_camera_width[None]),
        "height": int(_camera_height[None]),
        "aspect_ratio": float(_aspect_ratio[None]),
        "origin": CAMERA_ORIGIN,
    }
