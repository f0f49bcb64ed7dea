"""Image export utilities for rendered frames.

Frames are written as 8-bit PNG files through Pillow, after tone mapping and
gamma correction. RGBA frames are saved as RGB unless the alpha channel is
requested.

Example:
    >>> from sphere_tracer.preview.export import save_png
    >>> from sphere_tracer.core.frame import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(320, 240)
    >>> renderer.render_frame(0.0)
    >>> save_png(renderer, "spheres.png", tone_map="reinhard")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from sphere_tracer.preview.tonemap import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from sphere_tracer.core.frame import FrameRenderer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8.

    Args:
        image: Linear image array of shape (H, W, 3) or (H, W, 4).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        8-bit image array with the same shape, dtype uint8.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    return np.round(processed * 255).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    keep_alpha: bool = False,
) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: Linear image array of shape (H, W, 3) or (H, W, 4).
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).
        keep_alpha: Write an RGBA PNG when the image has an alpha channel.
    """
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)

    if image_uint8.shape[-1] == 4 and not keep_alpha:
        image_uint8 = image_uint8[..., :3]

    PILImage.fromarray(np.ascontiguousarray(image_uint8)).save(filepath)


def save_png(
    renderer: FrameRenderer,
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
    keep_alpha: bool = False,
) -> None:
    """Save the latest rendered frame as a PNG file.

    Args:
        renderer: The FrameRenderer whose latest frame to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).
        keep_alpha: Write an RGBA PNG.
    """
    save_png_from_array(
        renderer.get_linear_image(),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
        keep_alpha=keep_alpha,
    )


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
