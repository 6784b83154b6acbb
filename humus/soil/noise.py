"""Smooth deterministic baselines for freshly created soil fields.

Two initialisers are available: a cheap low-frequency wave pattern and
seeded gradient noise with fractal octaves.  Both are bounded and return
``(N, N)`` arrays in the storage layout of ``GridIndex``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

# Eight unit gradients: axes plus normalised diagonals
_GRADIENTS = np.array(
    [
        (1.0, 0.0),
        (-1.0, 0.0),
        (0.0, 1.0),
        (0.0, -1.0),
        (1.0, 1.0),
        (-1.0, 1.0),
        (1.0, -1.0),
        (-1.0, -1.0),
    ],
)
_GRADIENTS[4:] /= np.sqrt(2.0)


def _cell_coords(grid_size: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Return integer cell coordinates ``(xs, zs)`` as ``(N, N)`` arrays."""
    half = grid_size // 2
    coords = np.arange(grid_size, dtype=np.float64) - half
    zs, xs = np.meshgrid(coords, coords, indexing="ij")
    return xs, zs


def wave_baseline(
    grid_size: int,
    *,
    low: float,
    high: float,
    centre: float,
    amplitude: float,
    frequency: float = 0.2,
    phase: float = 0.0,
) -> NDArray[np.float32]:
    """Return ``centre + sin(x*f + phase) * cos(z*f) * amplitude``, clamped.

    Args:
        grid_size: Cells per axis.
        low: Lower bound of the result.
        high: Upper bound of the result.
        centre: Mean level.
        amplitude: Peak deviation from ``centre``.
        frequency: Spatial frequency in radians per cell.
        phase: Offset on the X wave, to decorrelate fields.
    """
    xs, zs = _cell_coords(grid_size)
    values = centre + np.sin(xs * frequency + phase) * np.cos(zs * frequency) * amplitude
    return np.clip(values, low, high).astype(np.float32)


class PerlinNoise:
    """Seeded 2D gradient noise.

    The permutation table is shuffled with a NumPy generator so the same
    seed always yields the same field.
    """

    def __init__(self, seed: int = 0) -> None:
        rng = np.random.default_rng(seed)
        perm = rng.permutation(256)
        self._perm = np.concatenate([perm, perm])

    @staticmethod
    def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
        return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)

    def _grad(
        self,
        hashed: NDArray[np.int64],
        x: NDArray[np.float64],
        y: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        g = _GRADIENTS[hashed & 7]
        return g[..., 0] * x + g[..., 1] * y

    def noise(self, x: NDArray[np.float64], y: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return noise in roughly ``[-1, 1]`` at each ``(x, y)``."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x0 = np.floor(x)
        y0 = np.floor(y)
        xi = x0.astype(np.int64) & 255
        yi = y0.astype(np.int64) & 255
        xf = x - x0
        yf = y - y0
        u = self._fade(xf)
        v = self._fade(yf)

        p = self._perm
        aa = p[p[xi] + yi]
        ab = p[p[xi] + yi + 1]
        ba = p[p[xi + 1] + yi]
        bb = p[p[xi + 1] + yi + 1]

        lower = self._grad(aa, xf, yf) + u * (
            self._grad(ba, xf - 1.0, yf) - self._grad(aa, xf, yf)
        )
        upper = self._grad(ab, xf, yf - 1.0) + u * (
            self._grad(bb, xf - 1.0, yf - 1.0) - self._grad(ab, xf, yf - 1.0)
        )
        return lower + v * (upper - lower)

    def fbm(
        self,
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        octaves: int = 4,
        lacunarity: float = 2.0,
        persistence: float = 0.5,
    ) -> NDArray[np.float64]:
        """Fractal sum of ``octaves`` noise layers, normalised to ``[-1, 1]``."""
        result = np.zeros(np.shape(x), dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        max_amplitude = 0.0
        for _ in range(octaves):
            result += self.noise(np.asarray(x) * frequency, np.asarray(y) * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= persistence
            frequency *= lacunarity
        return result / max_amplitude


def perlin_baseline(
    grid_size: int,
    *,
    low: float,
    high: float,
    seed: int,
    scale: float = 0.08,
    octaves: int = 3,
) -> NDArray[np.float32]:
    """Return seeded fBm noise mapped into ``[low, high]``.

    Args:
        grid_size: Cells per axis.
        low: Value at noise minimum.
        high: Value at noise maximum.
        seed: Permutation seed.
        scale: Noise-space units per cell; small values give broad patches.
        octaves: Number of fBm layers.
    """
    xs, zs = _cell_coords(grid_size)
    n01 = (PerlinNoise(seed).fbm(xs * scale, zs * scale, octaves=octaves) + 1.0) / 2.0
    values = low + np.clip(n01, 0.0, 1.0) * (high - low)
    return values.astype(np.float32)
