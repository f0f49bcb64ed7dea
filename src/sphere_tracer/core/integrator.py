"""Bounce-loop integrator and per-pixel render kernels.

This module traces rays through the sphere scene and renders whole frames.

For every pixel the kernel traces `samples` jittered primary rays and
averages their colors. Each ray runs a fixed-depth bounce loop:

    accumulated = (0, 0, 0, 1), attenuation = 1
    repeat at most max_bounces + 1 times:
        hit = nearest sphere along the ray
        miss -> stop
        accumulated.rgb += color.rgb * clamp(dot(normal, light), 0, 1) * attenuation
        attenuation *= attenuation_factor
        attenuation < attenuation_floor -> stop
        ray = reflect ray about normal at the hit point

The loop has no recursion and a fixed iteration bound, so every pixel finishes
in time proportional to samples x (max_bounces + 1) x sphere count. Pixels
share no mutable state, and the frame kernel is a parallel loop over the pixel
grid.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_tracer.camera.screen import ScreenCamera, setup_camera
    >>> from sphere_tracer.core.integrator import render_frame, setup_render_target
    >>> from sphere_tracer.scene.demo import create_demo_scene
    >>>
    >>> create_demo_scene()
    >>> setup_camera(ScreenCamera(320, 240))
    >>> setup_render_target(320, 240)
    >>> render_frame(elapsed_ms=16.0)
"""

import logging
import math

import numpy as np
import numpy.typing as npt
import taichi as ti

from sphere_tracer.camera.screen import (
    check_camera_initialized,
    get_ray,
    get_ray_jittered,
)
from sphere_tracer.core.jitter import get_frame_seed, sample_seed, setup_time
from sphere_tracer.core.ray import Ray, make_ray, vec2, vec3, vec4
from sphere_tracer.core.settings import (
    ensure_settings,
    get_attenuation_factor,
    get_attenuation_floor,
    get_jitter_scale,
    get_max_bounces,
    get_samples,
)
from sphere_tracer.materials.lambertian import shade_lambertian
from sphere_tracer.materials.mirror import attenuate, is_extinguished, scatter_mirror
from sphere_tracer.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Color returned for rays that hit nothing; also the start of every accumulation
BACKGROUND_R = 0.0
BACKGROUND_G = 0.0
BACKGROUND_B = 0.0
BACKGROUND_ALPHA = 1.0
BACKGROUND_COLOR = (BACKGROUND_R, BACKGROUND_G, BACKGROUND_B, BACKGROUND_ALPHA)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# RGBA output buffer, indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Scratch results for Python-side single-ray tracing
_trace_color = ti.Vector.field(4, dtype=ti.f32, shape=())
_trace_bounces = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear and deactivate the render target."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the full preallocated color buffer.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Bounce Loop
# =============================================================================


@ti.func
def trace_ray_with_bounces(ray: Ray):
    """Trace a ray through the bounce loop.

    Args:
        ray: The primary ray (normalized direction).

    Returns:
        A tuple of (color, hits) where:
        - color: The accumulated RGBA color, alpha 1.
        - hits: Number of surfaces struck before the loop ended.
    """
    current_ray = ray
    accumulated = vec4(BACKGROUND_R, BACKGROUND_G, BACKGROUND_B, BACKGROUND_ALPHA)
    attenuation = 1.0
    hits = 0

    factor = get_attenuation_factor()
    floor = get_attenuation_floor()

    # Active flag for loop continuation
    active = 1

    for _ in range(get_max_bounces() + 1):
        if active == 1:
            rec = intersect_scene(current_ray)

            if rec.intersected == 0:
                active = 0
            else:
                hits += 1
                accumulated += shade_lambertian(rec.color, rec.normal, attenuation)
                attenuation = attenuate(attenuation, factor)

                if is_extinguished(attenuation, floor):
                    active = 0
                else:
                    current_ray = scatter_mirror(current_ray, rec.position, rec.normal)

    return accumulated, hits


@ti.func
def trace_ray(ray: Ray) -> vec4:
    """Trace a ray and return its RGBA color (alpha 1)."""
    color, _ = trace_ray_with_bounces(ray)
    return color


@ti.func
def shade_pixel(uv: vec2, seed: ti.f32) -> vec4:
    """Average the colors of the jittered sub-samples of one pixel.

    Args:
        uv: Screen coordinate of the pixel center in [0, 1]^2.
        seed: Frame seed; sub-sample k uses seed + k.

    Returns:
        The averaged RGBA color, alpha 1.
    """
    n = get_samples()
    scale = get_jitter_scale()
    total = vec4(0.0, 0.0, 0.0, 0.0)

    for s in range(n):
        ray = get_ray_jittered(uv, sample_seed(seed, s), scale)
        total += trace_ray(ray)

    color = total / ti.cast(n, ti.f32)
    color[3] = 1.0
    return color


@ti.func
def pixel_uv(i: ti.i32, j: ti.i32, width: ti.i32, height: ti.i32) -> vec2:
    """Screen coordinate of the center of pixel (i, j)."""
    return vec2(
        (ti.cast(i, ti.f32) + 0.5) / ti.cast(width, ti.f32),
        (ti.cast(j, ti.f32) + 0.5) / ti.cast(height, ti.f32),
    )


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame_kernel(width: ti.i32, height: ti.i32):
    """Shade every pixel of the active region in parallel."""
    for i, j in ti.ndrange(width, height):
        _color_buffer[i, j] = shade_pixel(pixel_uv(i, j, width, height), get_frame_seed())


# The single-ray kernels wrap their work in a one-iteration loop so that it is
# the parallelized outermost loop; the sample and bounce loops inside must run
# in order.


@ti.kernel
def _render_single_pixel(u: ti.f32, v: ti.f32):
    for _ in range(1):
        _trace_color[None] = shade_pixel(vec2(u, v), get_frame_seed())


@ti.kernel
def _trace_camera_ray(u: ti.f32, v: ti.f32):
    for _ in range(1):
        _trace_color[None] = trace_ray(get_ray(vec2(u, v)))


@ti.kernel
def _trace_single_ray(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        color, hits = trace_ray_with_bounces(ray)
        _trace_color[None] = color
        _trace_bounces[None] = hits


# =============================================================================
# Public Rendering API
# =============================================================================


def _to_tuple(color) -> tuple[float, float, float, float]:
    return (float(color[0]), float(color[1]), float(color[2]), float(color[3]))


def render_frame(elapsed_ms: float | None = None) -> None:
    """Render one frame into the render target.

    Args:
        elapsed_ms: Frame time used to seed the jitter. If None, the seed
            uploaded by the last setup_time() call is reused.

    Raises:
        RuntimeError: If the render target or the camera has not been set up.
    """
    _check_render_target_initialized()
    check_camera_initialized()
    ensure_settings()

    if elapsed_ms is not None:
        setup_time(elapsed_ms)

    width, height = get_image_dimensions()
    _render_frame_kernel(width, height)
    logger.debug("Rendered %dx%d frame", width, height)


def render_pixel(u: float, v: float) -> tuple[float, float, float, float]:
    """Render the supersampled color at one screen coordinate.

    This is a Python-callable helper for testing. For whole images, use
    render_frame() which shades all pixels in parallel.

    Args:
        u: Horizontal screen coordinate in [0, 1] (left to right).
        v: Vertical screen coordinate in [0, 1] (bottom to top).

    Returns:
        Tuple of (R, G, B, A) with A = 1.

    Raises:
        RuntimeError: If the camera has not been set up.
    """
    check_camera_initialized()
    ensure_settings()
    _render_single_pixel(u, v)
    return _to_tuple(_trace_color[None])


def trace_camera_ray(u: float, v: float) -> tuple[float, float, float, float]:
    """Trace the unjittered primary ray through one screen coordinate.

    Raises:
        RuntimeError: If the camera has not been set up.
    """
    check_camera_initialized()
    ensure_settings()
    _trace_camera_ray(u, v)
    return _to_tuple(_trace_color[None])


def trace_with_bounces(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[tuple[float, float, float, float], int]:
    """Trace an arbitrary ray and report how many surfaces it struck.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before tracing.

    Returns:
        Tuple of (color, hits).

    Raises:
        ValueError: If direction is zero or not finite.
    """
    norm = math.sqrt(sum(c * c for c in direction))
    if not math.isfinite(norm) or norm == 0.0:
        raise ValueError(f"Ray direction must be finite and non-zero, got {direction}")
    ensure_settings()

    _trace_single_ray(
        origin[0],
        origin[1],
        origin[2],
        direction[0] / norm,
        direction[1] / norm,
        direction[2] / norm,
    )
    return _to_tuple(_trace_color[None]), int(_trace_bounces[None])


def trace(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float, float]:
    """Trace an arbitrary ray and return its RGBA color."""
    color, _ = trace_with_bounces(origin, direction)
    return color


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered frame as a NumPy array.

    Values are linear and not clamped: a pixel that sees several lit
    reflections can exceed 1.

    Returns:
        NumPy array of shape (height, width, 4), first row at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 4) to (height, width, 4)
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
