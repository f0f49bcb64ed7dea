"""Pytest configuration for sphere tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_frame_state():
    """Reset scene, camera, time, settings and render target around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from sphere_tracer.camera.screen import reset_camera
    from sphere_tracer.core.integrator import reset_render_target
    from sphere_tracer.core.jitter import setup_time
    from sphere_tracer.core.settings import apply_settings
    from sphere_tracer.scene.intersection import clear_scene

    def _reset_all():
        clear_scene()
        reset_camera()
        reset_render_target()
        setup_time(0.0)
        apply_settings()

    _reset_all()

    yield

    _reset_all()
