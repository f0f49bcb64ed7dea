"""Tests for the FrameRenderer wrapper."""

import numpy as np
import pytest


def _make_renderer(width=24, height=16, **settings_kwargs):
    from sphere_tracer.core.frame import FrameRenderer
    from sphere_tracer.core.settings import RenderSettings
    from sphere_tracer.scene.demo import create_demo_scene

    create_demo_scene()
    settings = RenderSettings(**settings_kwargs) if settings_kwargs else None
    return FrameRenderer(width, height, settings=settings)


class TestFrameRendererSetup:
    """Tests for construction and configuration."""

    def test_dimensions(self):
        """The renderer sets up a matching render target and camera."""
        from sphere_tracer.camera.screen import get_camera_info
        from sphere_tracer.core.integrator import get_image_dimensions

        renderer = _make_renderer(40, 20)

        assert renderer.width == 40
        assert renderer.height == 20
        assert get_image_dimensions() == (40, 20)
        assert get_camera_info()["aspect_ratio"] == pytest.approx(2.0)

    def test_invalid_dimensions(self):
        """Invalid sizes raise ValueError."""
        from sphere_tracer.core.frame import FrameRenderer

        with pytest.raises(ValueError):
            FrameRenderer(0, 10)

    def test_invalid_settings_keep_previous_target(self):
        """A renderer rejected for its settings does not resize the target."""
        from sphere_tracer.core.frame import FrameRenderer
        from sphere_tracer.core.integrator import get_image_dimensions
        from sphere_tracer.core.settings import RenderSettings

        renderer = FrameRenderer(10, 10)
        with pytest.raises(ValueError, match="samples"):
            FrameRenderer(30, 20, settings=RenderSettings(samples=0))

        assert get_image_dimensions() == (10, 10)
        renderer.render_frame(0.0)
        assert renderer.get_image_numpy().shape == (10, 10, 4)

    def test_render_target_is_shared(self):
        """The newest renderer's size applies to every renderer."""
        from sphere_tracer.core.frame import FrameRenderer

        first = FrameRenderer(16, 8)
        FrameRenderer(8, 8)
        first.render_frame(0.0)

        assert first.get_linear_image().shape == (8, 8, 4)

    def test_settings(self):
        """Settings passed in are applied; configure replaces them."""
        from sphere_tracer.core.settings import RenderSettings

        renderer = _make_renderer(samples=2)
        assert renderer.settings.samples == 2

        renderer.configure(RenderSettings(samples=5, max_bounces=1))
        assert renderer.settings.samples == 5
        assert renderer.settings.max_bounces == 1

    def test_resize(self):
        """resize updates the target and camera."""
        from sphere_tracer.camera.screen import get_camera_info

        renderer = _make_renderer(16, 16)
        renderer.resize(30, 10)
        renderer.render_frame(0.0)

        assert renderer.get_image_numpy().shape == (10, 30, 4)
        assert get_camera_info()["aspect_ratio"] == pytest.approx(3.0)

    def test_repr(self):
        """repr shows size and frame count."""
        renderer = _make_renderer(8, 4)
        assert repr(renderer) == "FrameRenderer(width=8, height=4, frames=0)"


class TestFrameRendering:
    """Tests for rendering frames."""

    def test_render_frame_counts(self):
        """render_frame increments the frame counter and records the time."""
        renderer = _make_renderer(samples=1)

        renderer.render_frame(16.0)
        renderer.render_frame(33.0)

        assert renderer.frame_count == 2
        assert renderer.last_elapsed_ms == 33.0

    def test_render_frames_callback(self):
        """render_frames calls back after every frame."""
        renderer = _make_renderer(samples=1)
        calls = []

        renderer.render_frames(3, callback=lambda done, total: calls.append((done, total)))

        assert calls == [(1, 3), (2, 3), (3, 3)]
        assert renderer.frame_count == 3

    def test_iter_frames(self):
        """iter_frames yields evenly spaced timestamps."""
        renderer = _make_renderer(samples=1)

        times = list(renderer.iter_frames(3, start_ms=100.0, frame_interval_ms=10.0))

        assert times == [100.0, 110.0, 120.0]
        assert renderer.last_elapsed_ms == 120.0

    def test_zero_frames(self):
        """Rendering zero frames does nothing."""
        renderer = _make_renderer()
        renderer.render_frames(0)
        assert renderer.frame_count == 0

    def test_uint8_matches_export_rounding(self):
        """get_image_uint8 rounds like the PNG exporter."""
        from sphere_tracer.preview.export import image_to_uint8

        renderer = _make_renderer()
        renderer.render_frame(0.0)

        expected = image_to_uint8(renderer.get_image_numpy(), gamma=2.2)
        np.testing.assert_array_equal(renderer.get_image_uint8(gamma=2.2), expected)

    def test_image_outputs(self):
        """Float and 8-bit outputs are clamped with opaque alpha."""
        renderer = _make_renderer()
        renderer.render_frame(0.0)

        linear = renderer.get_linear_image()
        image = renderer.get_image_numpy()
        image_u8 = renderer.get_image_uint8()

        assert np.isfinite(linear).all()
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert np.allclose(image[..., 3], 1.0)
        assert image_u8.dtype == np.uint8
        assert (image_u8[..., 3] == 255).all()

    def test_gamma_brightens(self):
        """Gamma correction never darkens a pixel."""
        renderer = _make_renderer()
        renderer.render_frame(0.0)

        linear = renderer.get_image_numpy(gamma=1.0)
        corrected = renderer.get_image_numpy(gamma=2.2)

        assert (corrected >= linear - 1e-6).all()

    def test_clear(self):
        """clear zeroes the image."""
        renderer = _make_renderer()
        renderer.render_frame(0.0)
        renderer.clear()

        assert (renderer.get_linear_image() == 0.0).all()

    def test_save_image(self, tmp_path):
        """save_image writes an RGB file of the right size."""
        from PIL import Image

        renderer = _make_renderer(20, 10)
        renderer.render_frame(0.0)
        path = tmp_path / "frame.png"
        renderer.save_image(str(path))

        with Image.open(path) as img:
            assert img.size == (20, 10)
            assert img.mode == "RGB"
