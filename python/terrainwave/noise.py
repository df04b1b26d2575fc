"""
Seedable 2D simplex noise baked into texture buffers.

Each ``SimplexNoise2D`` owns its permutation table, so any number of fields can
be generated side by side without sharing state. ``NoiseField2D`` samples the
noise on a regular grid and packs it for upload as an RGBA8 texture.

Packing
-------
Noise is evaluated in [-1, 1] and remapped to ``value = (n + 1) / 2`` in
[0, 1). Every sample becomes one RGBA quadruple in row-major order with
``R = G = B = floor(value * 256)`` (clamped to 255) and ``A = 255``.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import _validate as validate

logger = logging.getLogger(__name__)

_F2 = 0.5 * (math.sqrt(3.0) - 1.0)
_G2 = (3.0 - math.sqrt(3.0)) / 6.0

# 2D projections of the 12 edge gradients of a cube
_GRAD2 = np.array([
    [1, 1], [-1, 1], [1, -1], [-1, -1],
    [1, 0], [-1, 0], [1, 0], [-1, 0],
    [0, 1], [0, -1], [0, 1], [0, -1],
], dtype=np.float64)

_TEXTURE_WARN_SIZE = 4096


def _texture_size(width, height):
    w, h = validate.size_wh(width, height)
    if max(w, h) > _TEXTURE_WARN_SIZE:
        warnings.warn(
            f"noise texture {w}x{h} exceeds {_TEXTURE_WARN_SIZE} texels per side; "
            "some backends will refuse the upload",
            RuntimeWarning,
        )
    return w, h


class SimplexNoise2D:
    """2D simplex gradient noise with its own permutation table."""

    def __init__(self, seed: int = 0):
        self.seed = validate.seed(seed)
        rng = np.random.default_rng(self.seed)
        perm = rng.permutation(256).astype(np.int64)
        self._perm = np.concatenate([perm, perm])
        self._perm_mod12 = self._perm % 12

    @property
    def permutation(self) -> np.ndarray:
        return self._perm[:256].copy()

    def _corner(self, x: np.ndarray, y: np.ndarray, gi: np.ndarray) -> np.ndarray:
        t = 0.5 - x * x - y * y
        g = _GRAD2[gi]
        dot = g[..., 0] * x + g[..., 1] * y
        t2 = np.where(t < 0.0, 0.0, t) ** 2
        return t2 * t2 * dot

    def sample(self, x, y) -> np.ndarray:
        """Evaluate noise at ``(x, y)``; arrays broadcast. Result is in [-1, 1]."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x, y = np.broadcast_arrays(x, y)

        s = (x + y) * _F2
        i = np.floor(x + s).astype(np.int64)
        j = np.floor(y + s).astype(np.int64)
        t = (i + j) * _G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Which of the two triangles of the skewed cell we are in
        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1.0 + 2.0 * _G2
        y2 = y0 - 1.0 + 2.0 * _G2

        ii = i & 255
        jj = j & 255
        perm = self._perm
        gi0 = self._perm_mod12[ii + perm[jj]]
        gi1 = self._perm_mod12[ii + i1 + perm[jj + j1]]
        gi2 = self._perm_mod12[ii + 1 + perm[jj + 1]]

        n = self._corner(x0, y0, gi0) + self._corner(x1, y1, gi1) + self._corner(x2, y2, gi2)
        return np.clip(70.0 * n, -1.0, 1.0)

    def __call__(self, x, y) -> np.ndarray:
        return self.sample(x, y)


@dataclass(frozen=True, eq=False)
class NoiseTexture:
    """Packed noise buffer plus the grid it was generated for.

    Attributes
    ----------
    width, height : int
        Texture size in samples.
    values : np.ndarray
        float32 (height, width) field in [0, 1).
    data : bytes
        ``channels * width * height`` bytes, row-major.
    channels : int
        4 for RGBA value textures, 3 for RGB gradient textures.
    """

    width: int
    height: int
    values: np.ndarray
    data: bytes
    channels: int = 4

    @property
    def nbytes(self) -> int:
        return len(self.data)

    def to_array(self) -> np.ndarray:
        """Bytes as a (height, width, channels) uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, self.channels)

    def to_rgba(self) -> np.ndarray:
        arr = self.to_array()
        if self.channels == 4:
            return arr
        alpha = np.full((self.height, self.width, 1), 255, dtype=np.uint8)
        return np.concatenate([arr, alpha], axis=2)


def _to_bytes(values: np.ndarray) -> np.ndarray:
    return np.minimum(np.floor(values * 256.0), 255.0).astype(np.uint8)


def encode_normals(normals: np.ndarray) -> np.ndarray:
    """Map unit vectors from [-1, 1] to [0, 255] (``(n * 0.5 + 0.5) * 255``)."""
    normals = np.asarray(normals, dtype=np.float64)
    return np.clip(np.rint((normals * 0.5 + 0.5) * 255.0), 0, 255).astype(np.uint8)


class NoiseField2D:
    """Samples simplex noise on a regular grid.

    Parameters
    ----------
    seed : int, default 0
        Seed of the permutation table, in ``[0, 2**32)``.
    noise : SimplexNoise2D, optional
        Pre-built generator; overrides ``seed``.
    """

    def __init__(self, seed: int = 0, noise: Optional[SimplexNoise2D] = None):
        self.noise = noise if noise is not None else SimplexNoise2D(seed)

    @property
    def seed(self) -> int:
        return self.noise.seed

    def sample_grid(self, width: int, height: int, scale_x: float, scale_y: float) -> np.ndarray:
        """Noise values in [0, 1) for every ``(row, col)`` of a width x height grid."""
        w, h = _texture_size(width, height)
        sx, sy = validate.scale_xy(scale_x, scale_y)
        cols = np.arange(w, dtype=np.float64) * sx
        rows = np.arange(h, dtype=np.float64) * sy
        X, Y = np.meshgrid(cols, rows, indexing="xy")  # (h, w)
        return self._unit_values(self.noise.sample(X, Y))

    @staticmethod
    def _unit_values(n: np.ndarray) -> np.ndarray:
        values = ((n + 1.0) * 0.5).astype(np.float32)
        return np.clip(values, np.float32(0.0), np.nextafter(np.float32(1.0), np.float32(0.0)))

    def generate(self, width: int, height: int, scale_x: float, scale_y: float) -> NoiseTexture:
        """Bake an RGBA8 noise texture.

        Raises
        ------
        InvalidDimensions
            If ``width`` or ``height`` is not a positive integer, or a scale is
            non-finite.
        """
        values = self.sample_grid(width, height, scale_x, scale_y)
        h, w = values.shape
        rgba = np.empty((h, w, 4), dtype=np.uint8)
        rgba[..., 0:3] = _to_bytes(values.astype(np.float64))[..., None]
        rgba[..., 3] = 255
        logger.debug("generated %dx%d noise texture (seed=%d)", w, h, self.seed)
        return NoiseTexture(width=w, height=h, values=values, data=rgba.tobytes(), channels=4)

    def generate_gradient(
        self,
        width: int,
        height: int,
        scale_x: float,
        scale_y: float,
        strength: float = 1.0,
    ) -> NoiseTexture:
        """Bake an RGB8 texture of the noise heightfield's surface normals.

        Slopes come from central differences half a sample to either side,
        measured per sample, so ``strength`` is the height of the field (in
        sample units) that a value change of 1.0 represents.
        """
        w, h = _texture_size(width, height)
        sx, sy = validate.scale_xy(scale_x, scale_y)
        strength = validate._as_float("strength", strength)

        cols = np.arange(w, dtype=np.float64)
        rows = np.arange(h, dtype=np.float64)
        C, R = np.meshgrid(cols, rows, indexing="xy")
        sample = self.noise.sample
        dx = (sample((C + 0.5) * sx, R * sy) - sample((C - 0.5) * sx, R * sy)) * 0.5
        dy = (sample(C * sx, (R + 0.5) * sy) - sample(C * sx, (R - 0.5) * sy)) * 0.5

        normals = np.stack([-dx * strength, -dy * strength, np.ones_like(dx)], axis=-1)
        normals /= np.linalg.norm(normals, axis=-1, keepdims=True)
        rgb = encode_normals(normals)
        values = self._unit_values(sample(C * sx, R * sy))
        logger.debug("generated %dx%d noise gradient texture (seed=%d)", w, h, self.seed)
        return NoiseTexture(width=w, height=h, values=values, data=rgb.tobytes(), channels=3)


def generate(
    width: int,
    height: int,
    scale_x: float,
    scale_y: float,
    seed: int = 0,
) -> NoiseTexture:
    """One-shot helper: ``NoiseField2D(seed).generate(...)``."""
    return NoiseField2D(seed).generate(width, height, scale_x, scale_y)


__all__ = [
    "SimplexNoise2D",
    "NoiseField2D",
    "NoiseTexture",
    "encode_normals",
    "generate",
]
