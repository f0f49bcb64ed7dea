"""Frame renderer driving the per-frame uploads and kernel launches.

This module provides a convenient wrapper around the integrator that:
- Sizes the shared render target and camera to the same dimensions
- Uploads the frame time before every frame
- Renders frame sequences with progress callbacks or as a generator
- Converts and saves the latest frame

The render target and camera are module-level state, so only one renderer is
active at a time: creating or resizing another FrameRenderer takes them over.
Nothing accumulates across frames: each frame is rendered from scratch with
its own jitter seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from sphere_tracer.core.frame import FrameRenderer
    >>> from sphere_tracer.scene.demo import create_demo_scene
    >>>
    >>> create_demo_scene()
    >>> renderer = FrameRenderer(640, 480)
    >>> renderer.render_frame(elapsed_ms=0.0)
    >>> image = renderer.get_image_numpy()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from sphere_tracer.camera.screen import ScreenCamera, setup_camera
from sphere_tracer.core.integrator import (
    clear_render_target,
    get_image_numpy,
    render_frame,
    setup_render_target,
)
from sphere_tracer.core.settings import RenderSettings, apply_settings, get_settings

logger = logging.getLogger(__name__)

# Callback receives (frames_rendered, target_frames)
FrameCallback = Callable[[int, int], None]

# Default spacing between frame timestamps (60 Hz)
DEFAULT_FRAME_INTERVAL_MS = 1000.0 / 60.0


class FrameRenderer:
    """Renders frames of the current scene at a fixed size.

    The renderer keeps the camera size equal to the render target size, so
    the aspect ratio always matches the image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        frame_count: Number of frames rendered since creation.
        last_elapsed_ms: Frame time of the most recent frame, or None.
    """

    def __init__(self, width: int, height: int, settings: RenderSettings | None = None) -> None:
        """Initialize the render target, camera and settings.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            settings: Render settings. If None, the settings already in
                effect are kept.

        Raises:
            ValueError: If dimensions are invalid or settings are out of range.
        """
        if settings is not None:
            settings.validate()
        self._width = width
        self._height = height
        self.frame_count = 0
        self.last_elapsed_ms: float | None = None
        self._setup_size()
        if settings is not None:
            apply_settings(settings)

    def _setup_size(self) -> None:
        setup_render_target(self._width, self._height)
        setup_camera(ScreenCamera(self._width, self._height))

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def settings(self) -> RenderSettings:
        """Get the render settings in effect."""
        return get_settings()

    def configure(self, settings: RenderSettings) -> None:
        """Apply new render settings for subsequent frames."""
        apply_settings(settings)

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and camera, clearing the image.

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        self._setup_size()
        logger.info("Resized frame renderer to %dx%d", width, height)

    def clear(self) -> None:
        """Clear the image without changing its size."""
        clear_render_target()

    def render_frame(self, elapsed_ms: float) -> None:
        """Render one frame for the given frame time.

        Args:
            elapsed_ms: Time since the start of rendering, in milliseconds.
                Only its jitter seed affects the output.
        """
        start = time.perf_counter()
        render_frame(elapsed_ms)
        self.frame_count += 1
        self.last_elapsed_ms = elapsed_ms
        logger.debug(
            "Frame %d (t=%.1f ms) rendered in %.2f ms",
            self.frame_count,
            elapsed_ms,
            (time.perf_counter() - start) * 1000.0,
        )

    def render_frames(
        self,
        num_frames: int,
        start_ms: float = 0.0,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
        callback: FrameCallback | None = None,
    ) -> None:
        """Render a sequence of frames with evenly spaced timestamps.

        Only the last frame remains in the render target.

        Args:
            num_frames: Number of frames to render.
            start_ms: Timestamp of the first frame.
            frame_interval_ms: Time between consecutive frames.
            callback: Optional callback called after each frame.
                Receives (frames_rendered, num_frames).
        """
        for done, _ in enumerate(self.iter_frames(num_frames, start_ms, frame_interval_ms), 1):
            if callback is not None:
                callback(done, num_frames)
        if num_frames > 0:
            logger.info("Rendered %d frames at %dx%d", num_frames, self._width, self._height)

    def iter_frames(
        self,
        num_frames: int,
        start_ms: float = 0.0,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
    ) -> Generator[float, None, None]:
        """Render frames one at a time, yielding each frame's timestamp.

        The image for the yielded timestamp can be read with
        get_image_numpy() before advancing the generator.

        Args:
            num_frames: Number of frames to render.
            start_ms: Timestamp of the first frame.
            frame_interval_ms: Time between consecutive frames.

        Yields:
            The elapsed time (ms) of the frame just rendered.
        """
        for k in range(max(num_frames, 0)):
            elapsed_ms = start_ms + k * frame_interval_ms
            self.render_frame(elapsed_ms)
            yield elapsed_ms

    def get_linear_image(self) -> npt.NDArray[np.float32]:
        """Get the latest frame unclamped, shape (height, width, 4)."""
        return get_image_numpy()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the latest frame as a NumPy array.

        Values are clamped to [0, 1] and optionally gamma corrected. Alpha is
        left untouched.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 4) with dtype float32.
        """
        image = np.clip(self.get_linear_image(), 0.0, 1.0)

        if gamma != 1.0:
            image[..., :3] = np.power(image[..., :3], 1.0 / gamma)

        return image

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the latest frame as an 8-bit RGBA array.

        Args:
            gamma: Gamma correction value. Default 2.2 for sRGB.

        Returns:
            NumPy array of shape (height, width, 4) with dtype uint8.
        """
        image = self.get_image_numpy(gamma=gamma)
        return np.round(image * 255).astype(np.uint8)

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the latest frame as an RGB image file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 2.2 for sRGB.
        """
        from PIL import Image as PILImage

        image_uint8 = self.get_image_uint8(gamma=gamma)
        PILImage.fromarray(np.ascontiguousarray(image_uint8[..., :3])).save(filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
