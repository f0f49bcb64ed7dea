"""Tests for the screen camera and primary ray generation."""

import math

import pytest
import taichi as ti


def _camera_ray(u, v):
    """Return (origin, direction) of the unjittered ray for (u, v)."""
    from sphere_tracer.camera.screen import get_ray
    from sphere_tracer.core.ray import vec2

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(u: ti.f32, v: ti.f32):
        ray = get_ray(vec2(u, v))
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(u, v)
    return origin[None], direction[None]


class TestCameraSetup:
    """Tests for uploading the camera."""

    def test_aspect_ratio(self):
        """The aspect ratio is width over height."""
        from sphere_tracer.camera.screen import ScreenCamera, get_camera_info, setup_camera

        camera = ScreenCamera(width=800, height=400)
        setup_camera(camera)

        info = get_camera_info()
        assert camera.aspect_ratio == 2.0
        assert info["aspect_ratio"] == pytest.approx(2.0)
        assert info["width"] == 800
        assert info["height"] == 400
        assert info["origin"] == (0.0, 0.0, -2.0)

    @pytest.mark.parametrize("width,height", [(100, 0), (100, -5), (0, 100)])
    def test_invalid_size_rejected(self, width, height):
        """Non-positive sizes raise ValueError."""
        from sphere_tracer.camera.screen import ScreenCamera, setup_camera

        with pytest.raises(ValueError, match="must be positive"):
            setup_camera(ScreenCamera(width=width, height=height))

    def test_initialization_flag(self):
        """check_camera_initialized raises until a camera is uploaded."""
        from sphere_tracer.camera.screen import (
            ScreenCamera,
            check_camera_initialized,
            is_camera_initialized,
            setup_camera,
        )

        assert not is_camera_initialized()
        with pytest.raises(RuntimeError, match="Camera not set up"):
            check_camera_initialized()

        setup_camera(ScreenCamera(10, 10))
        assert is_camera_initialized()
        check_camera_initialized()


class TestRayGeneration:
    """Tests for get_ray and generate_ray."""

    def test_center_ray(self):
        """The center of the screen looks straight down +z."""
        from sphere_tracer.camera.screen import ScreenCamera, setup_camera

        setup_camera(ScreenCamera(100, 100))
        origin, direction = _camera_ray(0.5, 0.5)

        assert origin[2] == pytest.approx(-2.0)
        assert direction[0] == pytest.approx(0.0, abs=1e-6)
        assert direction[1] == pytest.approx(0.0, abs=1e-6)
        assert direction[2] == pytest.approx(1.0, abs=1e-6)

    def test_corner_ray(self):
        """The top-right corner maps to (aspect, 1) on the view plane."""
        from sphere_tracer.camera.screen import ScreenCamera, setup_camera

        setup_camera(ScreenCamera(200, 100))
        _, direction = _camera_ray(1.0, 1.0)

        expected = (2.0, 1.0, 2.0)
        norm = math.sqrt(sum(c * c for c in expected))
        for i in range(3):
            assert direction[i] == pytest.approx(expected[i] / norm, abs=1e-5)

    def test_bottom_left_ray(self):
        """uv (0, 0) maps to (-aspect, -1)."""
        from sphere_tracer.camera.screen import ScreenCamera, setup_camera

        setup_camera(ScreenCamera(100, 100))
        _, direction = _camera_ray(0.0, 0.0)

        assert direction[0] < 0.0
        assert direction[1] < 0.0
        assert direction[0] == pytest.approx(direction[1], abs=1e-6)

    def test_directions_are_unit_length(self):
        """Primary rays are normalized."""
        from sphere_tracer.camera.screen import ScreenCamera, setup_camera

        setup_camera(ScreenCamera(640, 480))
        for u, v in [(0.1, 0.9), (0.7, 0.2), (0.5, 0.5)]:
            _, d = _camera_ray(u, v)
            assert math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2) == pytest.approx(1.0, abs=1e-5)

    def test_generate_ray_is_pure(self):
        """generate_ray depends only on its arguments."""
        from sphere_tracer.camera.screen import generate_ray
        from sphere_tracer.core.ray import vec2

        result = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = generate_ray(vec2(0.25, 0.75), 1.5).direction
            result[1] = generate_ray(vec2(0.25, 0.75), 1.5).direction

        test_kernel()
        for i in range(3):
            assert result[0][i] == result[1][i]

    def test_jittered_ray_stays_close(self):
        """Jittered rays deviate from the unjittered ray by a small angle."""
        from sphere_tracer.camera.screen import ScreenCamera, get_ray, get_ray_jittered, setup_camera
        from sphere_tracer.core.ray import vec2

        setup_camera(ScreenCamera(100, 100))
        result = ti.field(dtype=ti.f32, shape=8)

        @ti.kernel
        def test_kernel():
            base = get_ray(vec2(0.3, 0.6)).direction
            for k in range(8):
                d = get_ray_jittered(vec2(0.3, 0.6), 0.35 + k, 0.005).direction
                result[k] = ti.math.length(d - base)

        test_kernel()
        for k in range(8):
            # View-plane offset of at most 0.005 * sqrt(2) at distance >= 2
            assert result[k] < 0.005

    def test_zero_jitter_matches_plain_ray(self):
        """A jitter scale of zero gives the unjittered ray."""
        from sphere_tracer.camera.screen import ScreenCamera, get_ray, get_ray_jittered, setup_camera
        from sphere_tracer.core.ray import vec2

        setup_camera(ScreenCamera(100, 100))
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            base = get_ray(vec2(0.8, 0.1)).direction
            d = get_ray_jittered(vec2(0.8, 0.1), 0.45, 0.0).direction
            result[None] = ti.math.length(d - base)

        test_kernel()
        assert result[None] == pytest.approx(0.0, abs=1e-7)
