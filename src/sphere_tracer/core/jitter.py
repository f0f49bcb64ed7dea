"""Time-seeded jitter sampling for stochastic supersampling.

Each pixel traces several sub-sample rays whose view-plane coordinates are
perturbed by a small offset. The offset comes from a classic sine hash of the
coordinate and a seed, so it is a pure function of its inputs: no random
number generator state is kept between frames or between pixels.

The seed changes with wall-clock time. The host supplies the elapsed time once
per frame and the seed is derived as::

    seed = (floor(elapsed_ms) mod SEED_PERIOD) / SEED_PERIOD

giving SEED_PERIOD distinct seeds that cycle every SEED_PERIOD milliseconds.
Sub-sample k of a pixel uses ``seed + k``.

Example:
    >>> from sphere_tracer.core.jitter import frame_seed, setup_time
    >>> frame_seed(1234.9)
    0.7
    >>> setup_time(1234.9)  # Upload the seed for the next frame
"""

import logging
import math

import taichi as ti
import taichi.math as tm

from sphere_tracer.core.ray import vec2

logger = logging.getLogger(__name__)

# Hash constants
HASH_DOT_X = 50.0
HASH_DOT_Y = 161.0
HASH_SCALE = 43758.5453

# Number of distinct seeds before the sequence repeats (one per millisecond)
SEED_PERIOD = 20

# Default jitter half-width in view-plane units
DEFAULT_JITTER_SCALE = 0.005

# Seed for the current frame (written by setup_time)
_frame_seed = ti.field(dtype=ti.f32, shape=())


def frame_seed(elapsed_ms: float) -> float:
    """Derive the jitter seed for a frame from the elapsed time.

    Args:
        elapsed_ms: Time since the start of rendering in milliseconds.

    Returns:
        A seed in [0, 1) taking one of SEED_PERIOD values.

    Raises:
        ValueError: If elapsed_ms is NaN or infinite.
    """
    if not math.isfinite(elapsed_ms):
        raise ValueError(f"elapsed_ms must be finite, got {elapsed_ms}")
    return (math.floor(elapsed_ms) % SEED_PERIOD) / SEED_PERIOD


def setup_time(elapsed_ms: float) -> float:
    """Upload the jitter seed derived from the elapsed time.

    Args:
        elapsed_ms: Time since the start of rendering in milliseconds.

    Returns:
        The seed that was uploaded.
    """
    seed = frame_seed(elapsed_ms)
    _frame_seed[None] = seed
    logger.debug("Frame time %.3f ms -> jitter seed %.2f", elapsed_ms, seed)
    return seed


def get_frame_seed_value() -> float:
    """Get the currently uploaded seed from Python."""
    return float(_frame_seed[None])


@ti.func
def get_frame_seed() -> ti.f32:
    return _frame_seed[None]


@ti.func
def hash12(p: vec2, seed: ti.f32) -> ti.f32:
    """Hash a 2-D point and a seed to a pseudo-random value in [0, 1).

    Computes fract(sin(dot(p, (50, 161)) + seed * 43758.5453) * 43758.5453).
    Not suitable for anything needing real randomness, but deterministic and
    cheap enough to decorrelate neighbouring pixels.

    Args:
        p: The point to hash.
        seed: Frame or sample seed.

    Returns:
        A value in [0, 1).
    """
    h = ti.sin(tm.dot(p, vec2(HASH_DOT_X, HASH_DOT_Y)) + seed * HASH_SCALE) * HASH_SCALE
    return tm.fract(h)


@ti.func
def jitter(coord: vec2, seed: ti.f32, scale: ti.f32) -> vec2:
    """Compute a small 2-D offset for a view-plane coordinate.

    Two independent hashes of the coordinate shifted by (1, 0) and (0, 1)
    give the x and y components, remapped from [0, 1) to [-scale, scale).

    Args:
        coord: View-plane coordinate of the sample.
        seed: Sample seed (frame seed plus sample index).
        scale: Half-width of the offset in view-plane units.

    Returns:
        The offset to add to coord.
    """
    h = vec2(
        hash12(coord + vec2(1.0, 0.0), seed),
        hash12(coord + vec2(0.0, 1.0), seed),
    )
    return (h - 0.5) * 2.0 * scale


@ti.func
def sample_seed(seed: ti.f32, sample_index: ti.i32) -> ti.f32:
    """Seed for one sub-sample of a pixel."""
    return seed + ti.cast(sample_index, ti.f32)
