"""Preview module for output of rendered frames.

Components:
    tonemap: Reinhard/exposure tone mapping and gamma correction
    export: PNG export via Pillow

Example:
    >>> from sphere_tracer.preview import save_png
    >>> save_png(renderer, "output.png", tone_map="reinhard", gamma=2.2)
"""

from sphere_tracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)
from sphere_tracer.preview.tonemap import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    tone_map_exposure,
    tone_map_reinhard,
)

__all__ = [
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
