# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides seeded 3D simplex noise sampled on the unit sphere, with
fractal (fBm), billow and ridged modes. The kernels are pure and stateless;
the NoiseField class owns a seeded permutation table.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array of length 512).
    - x, y, z: NumPy arrays of coordinates (any matching shape).
    - frequency, octaves, persistence, lacunarity: Standard noise parameters.
- Outputs:
    - A NumPy array of noise values in the range [-1, 1], same shape as x.
- Side Effects: None.
- Invariants: Given the same seed and parameters, the output is bit-identical.
  A NoiseField must not be shared between concurrent callers; every worker
  process builds its own from the seed.
================================================================================
"""

import enum

import numpy as np
from numba import njit

# The twelve edge midpoints of a cube, used as 3D gradient vectors.
_GRADIENT_VECTORS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

_F3 = 1.0 / 3.0
_G3 = 1.0 / 6.0


class NoiseMode(enum.IntEnum):
    SIMPLEX = 0
    FRACTAL = 1
    BILLOW = 2
    RIDGED = 3


@njit
def _corner(gi, x, y, z):
    """Contribution of a single simplex corner."""
    t = 0.6 - x * x - y * y - z * z
    if t < 0:
        return 0.0
    g = _GRADIENT_VECTORS[gi % 12]
    t *= t
    return t * t * (g[0] * x + g[1] * y + g[2] * z)


@njit
def _simplex_3d(p, x, y, z):
    s = (x + y + z) * _F3
    i = int(np.floor(x + s))
    j = int(np.floor(y + s))
    k = int(np.floor(z + s))
    t = (i + j + k) * _G3
    x0 = x - (i - t)
    y0 = y - (j - t)
    z0 = z - (k - t)

    # Determine which simplex we are in.
    if x0 >= y0:
        if y0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
        elif x0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
    else:
        if y0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
        elif x0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

    x1 = x0 - i1 + _G3
    y1 = y0 - j1 + _G3
    z1 = z0 - k1 + _G3
    x2 = x0 - i2 + 2.0 * _G3
    y2 = y0 - j2 + 2.0 * _G3
    z2 = z0 - k2 + 2.0 * _G3
    x3 = x0 - 1.0 + 3.0 * _G3
    y3 = y0 - 1.0 + 3.0 * _G3
    z3 = z0 - 1.0 + 3.0 * _G3

    ii = i & 255
    jj = j & 255
    kk = k & 255
    # Numba requires scalar indexing
    gi0 = p[ii + p[jj + p[kk]]]
    gi1 = p[ii + i1 + p[jj + j1 + p[kk + k1]]]
    gi2 = p[ii + i2 + p[jj + j2 + p[kk + k2]]]
    gi3 = p[ii + 1 + p[jj + 1 + p[kk + 1]]]

    n = _corner(gi0, x0, y0, z0)
    n += _corner(gi1, x1, y1, z1)
    n += _corner(gi2, x2, y2, z2)
    n += _corner(gi3, x3, y3, z3)
    return 32.0 * n


@njit
def simplex_noise_3d(p, x, y, z, frequency=1.0, octaves=1, persistence=0.5, lacunarity=2.0, mode=0):
    """
    Generate 3D simplex noise using a pre-computed permutation table.
    This function is JIT-compiled with Numba. Inputs are flattened and the
    result is reshaped by the caller.
    """
    count = x.shape[0]
    total_noise = np.zeros(count)

    for n in range(count):
        noise_val = 0.0
        amplitude = 1.0
        amplitude_sum = 0.0
        freq = frequency

        for _ in range(octaves):
            octave_noise = _simplex_3d(p, x[n] * freq, y[n] * freq, z[n] * freq)
            if mode == 2:
                octave_noise = abs(octave_noise) * 2.0 - 1.0
            elif mode == 3:
                octave_noise = 1.0 - abs(octave_noise) * 2.0
            noise_val += octave_noise * amplitude
            amplitude_sum += amplitude
            amplitude *= persistence
            freq *= lacunarity

        value = noise_val / amplitude_sum
        if value > 1.0:
            value = 1.0
        elif value < -1.0:
            value = -1.0
        total_noise[n] = value

    return total_noise


def build_permutation_table(seed: int) -> np.ndarray:
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()


class NoiseField:
    """A deterministic, seeded coherent-noise sampler."""

    def __init__(self, seed: int, mode: NoiseMode = NoiseMode.SIMPLEX, frequency: float = 1.0,
                 octaves: int = 1, persistence: float = 0.5, lacunarity: float = 2.0):
        self.seed = int(seed)
        self.mode = NoiseMode(mode)
        self.frequency = frequency
        self.octaves = octaves if self.mode != NoiseMode.SIMPLEX else 1
        self.persistence = persistence
        self.lacunarity = lacunarity
        self._p = build_permutation_table(self.seed)

    def sample(self, x, y, z) -> np.ndarray:
        """Samples the field at the given unit-sphere coordinates."""
        x = np.asarray(x, dtype=np.float64)
        shape = x.shape
        values = simplex_noise_3d(
            self._p,
            x.ravel(),
            np.asarray(y, dtype=np.float64).ravel(),
            np.asarray(z, dtype=np.float64).ravel(),
            float(self.frequency), int(self.octaves),
            float(self.persistence), float(self.lacunarity), int(self.mode),
        )
        return values.reshape(shape)
