"""Tests for humus.soil.noise — baseline initialisers."""

import numpy as np

from humus.soil.noise import PerlinNoise, perlin_baseline, wave_baseline


class TestWaveBaseline:
    def test_bounded_and_shaped(self) -> None:
        values = wave_baseline(50, low=5.0, high=35.0, centre=20.0, amplitude=10.0)
        assert values.shape == (50, 50)
        assert values.dtype == np.float32
        assert values.min() >= 5.0
        assert values.max() <= 35.0

    def test_clamps_large_amplitude(self) -> None:
        values = wave_baseline(20, low=5.0, high=30.0, centre=15.0, amplitude=100.0)
        assert values.min() == 5.0
        assert values.max() == 30.0

    def test_origin_cell_is_centre(self) -> None:
        values = wave_baseline(10, low=0.0, high=100.0, centre=20.0, amplitude=10.0)
        # Cell (0, 0) lives at row 5, col 5 and sin(0) == 0
        assert values[5, 5] == 20.0

    def test_smooth(self) -> None:
        values = wave_baseline(50, low=5.0, high=35.0, centre=20.0, amplitude=10.0)
        assert np.abs(np.diff(values, axis=1)).max() < 3.0
        assert np.abs(np.diff(values, axis=0)).max() < 3.0


class TestPerlin:
    def test_noise_range(self) -> None:
        noise = PerlinNoise(seed=1)
        xs, ys = np.meshgrid(np.linspace(0, 20, 80), np.linspace(0, 20, 80))
        values = noise.noise(xs, ys)
        assert values.min() >= -1.0
        assert values.max() <= 1.0

    def test_zero_at_lattice_points(self) -> None:
        noise = PerlinNoise(seed=1)
        assert np.allclose(noise.noise(np.array([3.0, 7.0]), np.array([2.0, 5.0])), 0.0)

    def test_seed_changes_field(self) -> None:
        a = perlin_baseline(16, low=5.0, high=35.0, seed=1)
        b = perlin_baseline(16, low=5.0, high=35.0, seed=2)
        assert not np.array_equal(a, b)

    def test_baseline_deterministic_and_bounded(self) -> None:
        a = perlin_baseline(16, low=5.0, high=30.0, seed=9)
        b = perlin_baseline(16, low=5.0, high=30.0, seed=9)
        assert np.array_equal(a, b)
        assert a.min() >= 5.0
        assert a.max() <= 30.0
