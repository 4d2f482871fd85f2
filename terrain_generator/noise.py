# terrain_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides seeded 2D simplex noise and its fractal (multi-octave)
composition. The kernels are pure functions of a permutation table and are
JIT-compiled with Numba.

Data Contract:
---------------
- Inputs:
    - perm, perm_mod12: the 512-entry permutation tables built from a SeededRNG.
    - x, y: scalar coordinates, or 2D NumPy arrays of coordinates for the
      *_grid kernels.
    - octaves, lacunarity, persistence: standard fractal parameters.
- Outputs:
    - Noise values roughly in [-1, 1]. The simplex normalization is an
      approximation, not a hard bound; terrain heights are clamped afterwards.
- Side Effects: None. Building a permutation table consumes exactly 255 draws
  from the RNG it is given.
- Invariants: the output shape of a grid kernel matches the shape of x and y.
================================================================================
"""
import math

import numpy as np
from numba import njit

from . import config as DEFAULTS

# Skew/unskew factors for 2D simplex space.
_F2 = 0.5 * (math.sqrt(3.0) - 1.0)
_G2 = (3.0 - math.sqrt(3.0)) / 6.0

# The classic 12 gradient directions. Only the x and y components are used in 2D.
_GRAD3 = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

_NORMALIZATION = 70.0


def build_permutation_table(rng) -> tuple[np.ndarray, np.ndarray]:
    """
    Fisher-Yates shuffles 0..255 with the given RNG and returns the doubled
    512-entry table together with its parallel "mod 12" table. Both arrays are
    read-only.
    """
    p = list(range(256))
    for i in range(255, 0, -1):
        j = int(rng.next() * (i + 1))
        p[i], p[j] = p[j], p[i]

    perm = np.array(p + p, dtype=np.uint8)
    perm_mod12 = perm % 12
    perm.flags.writeable = False
    perm_mod12.flags.writeable = False
    return perm, perm_mod12


@njit
def simplex_noise_2d(perm, perm_mod12, xin, yin):
    """Single-octave 2D simplex noise at (xin, yin)."""
    # Skew the input space to find the simplex cell.
    s = (xin + yin) * _F2
    i = int(np.floor(xin + s))
    j = int(np.floor(yin + s))
    t = (i + j) * _G2
    x0 = xin - (i - t)
    y0 = yin - (j - t)

    # Which of the two triangles of the cell are we in?
    if x0 > y0:
        i1 = 1
        j1 = 0
    else:
        i1 = 0
        j1 = 1

    x1 = x0 - i1 + _G2
    y1 = y0 - j1 + _G2
    x2 = x0 - 1.0 + 2.0 * _G2
    y2 = y0 - 1.0 + 2.0 * _G2

    ii = i & 255
    jj = j & 255
    gi0 = perm_mod12[ii + np.int64(perm[jj])]
    gi1 = perm_mod12[ii + i1 + np.int64(perm[jj + j1])]
    gi2 = perm_mod12[ii + 1 + np.int64(perm[jj + 1])]

    n0 = 0.0
    t0 = 0.5 - x0 * x0 - y0 * y0
    if t0 >= 0:
        t0 *= t0
        n0 = t0 * t0 * (_GRAD3[gi0, 0] * x0 + _GRAD3[gi0, 1] * y0)

    n1 = 0.0
    t1 = 0.5 - x1 * x1 - y1 * y1
    if t1 >= 0:
        t1 *= t1
        n1 = t1 * t1 * (_GRAD3[gi1, 0] * x1 + _GRAD3[gi1, 1] * y1)

    n2 = 0.0
    t2 = 0.5 - x2 * x2 - y2 * y2
    if t2 >= 0:
        t2 *= t2
        n2 = t2 * t2 * (_GRAD3[gi2, 0] * x2 + _GRAD3[gi2, 1] * y2)

    return _NORMALIZATION * (n0 + n1 + n2)


@njit
def fractal_noise_2d(perm, perm_mod12, x, y, octaves, lacunarity, persistence):
    """
    Sums octaves of simplex noise, each at lacunarity-times the frequency and
    persistence-times the amplitude of the previous one, and divides by the
    total amplitude used.
    """
    total = 0.0
    frequency = 1.0
    amplitude = 1.0
    max_value = 0.0

    for _ in range(octaves):
        total += simplex_noise_2d(perm, perm_mod12, x * frequency, y * frequency) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return total / max_value


@njit
def terrain_height_2d(perm, perm_mod12, x, y, octaves, lacunarity, persistence,
                      detail_multiplier, detail_weight, height_min, height_max):
    """Fractal height plus one weighted high-frequency detail sample, clamped."""
    height = fractal_noise_2d(perm, perm_mod12, x, y, octaves, lacunarity, persistence)
    height += simplex_noise_2d(perm, perm_mod12, x * detail_multiplier, y * detail_multiplier) * detail_weight
    return max(height_min, min(height_max, height))


@njit
def simplex_noise_grid(perm, perm_mod12, x, y):
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for r in range(rows):
        for c in range(cols):
            out[r, c] = simplex_noise_2d(perm, perm_mod12, x[r, c], y[r, c])
    return out


@njit
def fractal_noise_grid(perm, perm_mod12, x, y, octaves, lacunarity, persistence):
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for r in range(rows):
        for c in range(cols):
            out[r, c] = fractal_noise_2d(perm, perm_mod12, x[r, c], y[r, c], octaves, lacunarity, persistence)
    return out


@njit
def terrain_height_grid(perm, perm_mod12, x, y, octaves, lacunarity, persistence,
                        detail_multiplier, detail_weight, height_min, height_max):
    """
    Generates clamped terrain heights for a grid of (already frequency-scaled)
    coordinates. Uses explicit loops, which Numba compiles to efficient
    machine code.
    """
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for r in range(rows):
        for c in range(cols):
            out[r, c] = terrain_height_2d(
                perm, perm_mod12, x[r, c], y[r, c], octaves, lacunarity, persistence,
                detail_multiplier, detail_weight, height_min, height_max
            )
    return out


class SeededNoise:
    """
    Owns one permutation table built from a SeededRNG and exposes the noise
    kernels bound to it. The table is immutable after construction.
    """
    def __init__(self, rng):
        self.perm, self.perm_mod12 = build_permutation_table(rng)

    def noise2d(self, x: float, y: float) -> float:
        return simplex_noise_2d(self.perm, self.perm_mod12, float(x), float(y))

    def fractal_noise(self, x: float, y: float, octaves: int = 4,
                      lacunarity: float = DEFAULTS.FRACTAL_LACUNARITY,
                      persistence: float = DEFAULTS.FRACTAL_PERSISTENCE) -> float:
        _check_octaves(octaves)
        return fractal_noise_2d(self.perm, self.perm_mod12, float(x), float(y),
                                int(octaves), float(lacunarity), float(persistence))

    def terrain_height(self, x: float, y: float, octaves: int,
                       lacunarity: float = DEFAULTS.FRACTAL_LACUNARITY,
                       persistence: float = DEFAULTS.FRACTAL_PERSISTENCE,
                       detail_multiplier: float = DEFAULTS.DETAIL_NOISE_MULTIPLIER,
                       detail_weight: float = DEFAULTS.DETAIL_NOISE_WEIGHT) -> float:
        _check_octaves(octaves)
        return terrain_height_2d(
            self.perm, self.perm_mod12, float(x), float(y), int(octaves),
            float(lacunarity), float(persistence), float(detail_multiplier),
            float(detail_weight), DEFAULTS.HEIGHT_MIN, DEFAULTS.HEIGHT_MAX
        )

    def noise2d_grid(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x, y = _as_grid(x, y)
        return simplex_noise_grid(self.perm, self.perm_mod12, x, y)

    def fractal_noise_grid(self, x: np.ndarray, y: np.ndarray, octaves: int = 4,
                           lacunarity: float = DEFAULTS.FRACTAL_LACUNARITY,
                           persistence: float = DEFAULTS.FRACTAL_PERSISTENCE) -> np.ndarray:
        _check_octaves(octaves)
        x, y = _as_grid(x, y)
        return fractal_noise_grid(self.perm, self.perm_mod12, x, y,
                                  int(octaves), float(lacunarity), float(persistence))

    def terrain_height_grid(self, x: np.ndarray, y: np.ndarray, octaves: int,
                            lacunarity: float = DEFAULTS.FRACTAL_LACUNARITY,
                            persistence: float = DEFAULTS.FRACTAL_PERSISTENCE,
                            detail_multiplier: float = DEFAULTS.DETAIL_NOISE_MULTIPLIER,
                            detail_weight: float = DEFAULTS.DETAIL_NOISE_WEIGHT) -> np.ndarray:
        _check_octaves(octaves)
        x, y = _as_grid(x, y)
        return terrain_height_grid(
            self.perm, self.perm_mod12, x, y, int(octaves),
            float(lacunarity), float(persistence), float(detail_multiplier),
            float(detail_weight), DEFAULTS.HEIGHT_MIN, DEFAULTS.HEIGHT_MAX
        )


def _check_octaves(octaves):
    if octaves < 1:
        raise ValueError(f"octaves must be >= 1, got {octaves}")


def _as_grid(x, y):
    x = np.ascontiguousarray(x, dtype=np.float64)
    y = np.ascontiguousarray(y, dtype=np.float64)
    if x.shape != y.shape or x.ndim != 2:
        raise ValueError(f"x and y must be 2D arrays of the same shape, got {x.shape} and {y.shape}")
    return x, y
