"""Tests for the time-seeded jitter sampler."""

import math

import pytest
import taichi as ti


class TestFrameSeed:
    """Tests for deriving the seed from the elapsed time."""

    @pytest.mark.parametrize(
        "elapsed_ms,expected",
        [
            (0.0, 0.0),
            (1234.9, 0.7),
            (19.99, 0.95),
            (20.0, 0.0),
            (39.99, 0.95),
            (-1.0, 0.95),
        ],
    )
    def test_frame_seed_cycle(self, elapsed_ms, expected):
        """The seed cycles through twenty values, one per millisecond."""
        from sphere_tracer.core.jitter import frame_seed

        assert frame_seed(elapsed_ms) == pytest.approx(expected)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_time_rejected(self, bad):
        """NaN or infinite times raise ValueError."""
        from sphere_tracer.core.jitter import frame_seed

        with pytest.raises(ValueError, match="must be finite"):
            frame_seed(bad)

    def test_setup_time_uploads_seed(self):
        """setup_time writes the seed read by the kernels."""
        from sphere_tracer.core.jitter import get_frame_seed, get_frame_seed_value, setup_time

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_frame_seed()

        assert setup_time(1005.0) == pytest.approx(0.25)
        test_kernel()
        assert result[None] == pytest.approx(0.25)
        assert get_frame_seed_value() == pytest.approx(0.25)


class TestHash:
    """Tests for hash12 and jitter."""

    def test_hash_range_and_determinism(self):
        """hash12 returns values in [0, 1) and repeats for equal inputs."""
        from sphere_tracer.core.jitter import hash12
        from sphere_tracer.core.ray import vec2

        n = 64
        first = ti.field(dtype=ti.f32, shape=n)
        second = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel(seed: ti.f32):
            for i in range(n):
                p = vec2(ti.cast(i % 8, ti.f32) * 0.13 - 0.5, ti.cast(i // 8, ti.f32) * 0.11 - 0.4)
                first[i] = hash12(p, seed)
                second[i] = hash12(p, seed)

        test_kernel(0.35)
        a = first.to_numpy()
        b = second.to_numpy()

        assert (a >= 0.0).all()
        assert (a < 1.0).all()
        assert (a == b).all()
        # Neighbouring points are decorrelated
        assert len(set(a.tolist())) > n // 2

    def test_seed_changes_hash(self):
        """Different seeds give different values for the same point."""
        from sphere_tracer.core.jitter import hash12
        from sphere_tracer.core.ray import vec2

        result = ti.field(dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            for k in range(4):
                result[k] = hash12(vec2(0.2, -0.3), 0.05 + k)

        test_kernel()
        assert len(set(result.to_numpy().tolist())) == 4

    def test_jitter_bounded_by_scale(self):
        """Each jitter component lies within [-scale, scale)."""
        from sphere_tracer.core.jitter import jitter
        from sphere_tracer.core.ray import vec2

        n = 100
        scale = 0.005
        result = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                coord = vec2(ti.cast(i % 10, ti.f32) * 0.2 - 1.0, ti.cast(i // 10, ti.f32) * 0.2 - 1.0)
                result[i] = jitter(coord, 0.6 + ti.cast(i % 3, ti.f32), scale)

        test_kernel()
        offsets = result.to_numpy()
        assert (offsets >= -scale).all()
        assert (offsets <= scale).all()
        # Offsets are spread out, not all the same
        assert offsets[:, 0].std() > scale * 0.1
        assert offsets[:, 1].std() > scale * 0.1

    def test_sample_seed(self):
        """Sub-sample k uses the frame seed plus k."""
        from sphere_tracer.core.jitter import sample_seed

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            for k in range(3):
                result[k] = sample_seed(0.45, k)

        test_kernel()
        assert result[0] == pytest.approx(0.45)
        assert result[2] == pytest.approx(2.45)
