"""Tone mapping and gamma correction for rendered frames.

A pixel can see several lit reflections, so linear colors may exceed 1. These
functions compress the RGB channels of an (H, W, 4) RGBA frame (or an
(H, W, 3) RGB image) into [0, 1] for 8-bit output. Alpha passes through
unchanged.

Example:
    >>> from sphere_tracer.preview.tonemap import process_image_for_display
    >>> display = process_image_for_display(image, tone_map="reinhard", gamma=2.2)
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


def _split_alpha(
    image: npt.NDArray[np.float32],
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32] | None]:
    if image.shape[-1] == 4:
        return image[..., :3], image[..., 3:]
    return image, None


def _join_alpha(
    rgb: npt.NDArray[np.float32], alpha: npt.NDArray[np.float32] | None
) -> npt.NDArray[np.float32]:
    if alpha is None:
        return rgb.astype(np.float32)
    return np.concatenate([rgb, alpha], axis=-1).astype(np.float32)


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Linear image array of shape (H, W, 3) or (H, W, 4).

    Returns:
        Tone mapped image with RGB in [0, 1).
    """
    rgb, alpha = _split_alpha(image)
    rgb = np.maximum(rgb, 0.0)
    return _join_alpha(rgb / (1.0 + rgb), alpha)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear image array of shape (H, W, 3) or (H, W, 4).
        exposure: Exposure value (default 1.0). Higher values brighten the image.

    Returns:
        Tone mapped image with RGB in [0, 1).
    """
    rgb, alpha = _split_alpha(image)
    rgb = np.maximum(rgb, 0.0)
    return _join_alpha(1.0 - np.exp(-rgb * exposure), alpha)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction to the RGB channels.

    Args:
        image: Image array of shape (H, W, 3) or (H, W, 4), RGB in [0, 1].
        gamma: Gamma value (default 2.2 for sRGB).

    Returns:
        Gamma corrected image.
    """
    if gamma == 1.0:
        return image

    rgb, alpha = _split_alpha(image)
    # Clamp before gamma to avoid NaN from negative values
    rgb = np.power(np.clip(rgb, 0.0, 1.0), 1.0 / gamma)
    return _join_alpha(rgb, alpha)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Tone map, gamma correct and clamp an image.

    Args:
        image: Linear image array of shape (H, W, 3) or (H, W, 4).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2 for sRGB).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        Processed image in [0, 1] range.

    Raises:
        ValueError: If tone_map is not a known method.
    """
    result = image.copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)

    return np.clip(result, 0.0, 1.0).astype(np.float32)
