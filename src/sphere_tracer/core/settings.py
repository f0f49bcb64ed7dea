"""Render settings shared by every pixel invocation.

The settings are plain Python values held in a dataclass and uploaded to
scalar Taichi fields, so changing them between frames does not recompile the
render kernels. Loops over samples and bounces read their bounds from these
fields at run time.

Example:
    >>> from sphere_tracer.core.settings import RenderSettings, apply_settings
    >>> apply_settings(RenderSettings(samples=4, max_bounces=2))
"""

import logging
import math
from dataclasses import asdict, dataclass

import taichi as ti

from sphere_tracer.core.jitter import DEFAULT_JITTER_SCALE
from sphere_tracer.materials.mirror import DEFAULT_ATTENUATION_FACTOR, DEFAULT_ATTENUATION_FLOOR

logger = logging.getLogger(__name__)

# Hard limits, chosen so a single invocation always finishes quickly
MAX_SAMPLES = 64
MAX_BOUNCE_LIMIT = 16


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for the bounce loop and the supersampling.

    Attributes:
        samples: Jittered sub-samples traced and averaged per pixel.
        max_bounces: Reflections followed after the first hit. The loop runs
            at most max_bounces + 1 times.
        attenuation_factor: Multiplier applied to the contribution weight
            after every hit.
        attenuation_floor: Tracing stops once the weight drops below this.
        jitter_scale: Half-width of the sub-sample offset in view-plane
            units. 0 disables jitter.
    """

    samples: int = 8
    max_bounces: int = 4
    attenuation_factor: float = DEFAULT_ATTENUATION_FACTOR
    attenuation_floor: float = DEFAULT_ATTENUATION_FLOOR
    jitter_scale: float = DEFAULT_JITTER_SCALE

    def validate(self) -> None:
        """Check every value against its allowed range.

        Raises:
            ValueError: If any value has the wrong type, is not finite or is
                out of range.
        """
        for name in ("samples", "max_bounces"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("attenuation_factor", "attenuation_floor", "jitter_scale"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} = {value} is not finite")

        if not 1 <= self.samples <= MAX_SAMPLES:
            raise ValueError(f"samples = {self.samples} is outside [1, {MAX_SAMPLES}]")
        if not 0 <= self.max_bounces <= MAX_BOUNCE_LIMIT:
            raise ValueError(
                f"max_bounces = {self.max_bounces} is outside [0, {MAX_BOUNCE_LIMIT}]"
            )
        if not 0.0 < self.attenuation_factor <= 1.0:
            raise ValueError(
                f"attenuation_factor = {self.attenuation_factor} is outside (0, 1]"
            )
        if not 0.0 <= self.attenuation_floor < 1.0:
            raise ValueError(
                f"attenuation_floor = {self.attenuation_floor} is outside [0, 1)"
            )
        if not self.jitter_scale >= 0.0:
            raise ValueError(f"jitter_scale = {self.jitter_scale} is negative")


# =============================================================================
# Taichi Fields (GPU-accessible)
# =============================================================================

_samples = ti.field(dtype=ti.i32, shape=())
_max_bounces = ti.field(dtype=ti.i32, shape=())
_attenuation_factor = ti.field(dtype=ti.f32, shape=())
_attenuation_floor = ti.field(dtype=ti.f32, shape=())
_jitter_scale = ti.field(dtype=ti.f32, shape=())

_active_settings: RenderSettings | None = None


def apply_settings(settings: RenderSettings | None = None) -> RenderSettings:
    """Validate and upload render settings.

    Args:
        settings: The settings to use. Defaults to RenderSettings().

    Returns:
        The settings now in effect.

    Raises:
        ValueError: If the settings are invalid.
    """
    global _active_settings

    if settings is None:
        settings = RenderSettings()
    settings.validate()

    _samples[None] = settings.samples
    _max_bounces[None] = settings.max_bounces
    _attenuation_factor[None] = settings.attenuation_factor
    _attenuation_floor[None] = settings.attenuation_floor
    _jitter_scale[None] = settings.jitter_scale

    _active_settings = settings
    logger.debug("Render settings applied: %s", asdict(settings))
    return settings


def ensure_settings() -> RenderSettings:
    """Upload the default settings if none were applied yet."""
    if _active_settings is None:
        return apply_settings()
    return _active_settings


def get_settings() -> RenderSettings:
    """Get the settings currently in effect."""
    return ensure_settings()


@ti.func
def get_samples() -> ti.i32:
    return _samples[None]


@ti.func
def get_max_bounces() -> ti.i32:
    return _max_bounces[None]


@ti.func
def get_attenuation_factor() -> ti.f32:
    return _attenuation_factor[None]


@ti.func
def get_attenuation_floor() -> ti.f32:
    return _attenuation_floor[None]


@ti.func
def get_jitter_scale() -> ti.f32:
    return _jitter_scale[None]
