"""
Tessellated ground-plane mesh for the terrain surface.

The plane lies in X/Y with Z up and is centred on the origin. Grid point
``(i, j)`` (column ``i`` along X, row ``j`` along Y) sits at::

    (-width/2 + i * width/divisions, -depth/2 + j * depth/divisions, 0)

Every cell emits two triangles without an index buffer. With corners
``a=(i,j)``, ``b=(i+1,j)``, ``c=(i,j+1)``, ``e=(i+1,j+1)`` the triangles are
``(a, b, c)`` and ``(b, e, c)``, counter-clockwise seen from +Z. Cells are
emitted row by row. Normals are faceted: one unit normal per triangle, copied
to its three vertices.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from . import _validate as validate
from .errors import InvalidDimensions

logger = logging.getLogger(__name__)

UP = np.array([0.0, 0.0, 1.0], dtype=np.float32)

# Vertex colors blend from the near corner to the far corner of the grid
COLOR_LOW = np.array([0.16, 0.32, 0.18], dtype=np.float64)
COLOR_HIGH = np.array([0.55, 0.62, 0.38], dtype=np.float64)

VERTICES_PER_CELL = 6


def _grid_axes(width: float, depth: float, divisions: int) -> Tuple[np.ndarray, np.ndarray]:
    steps = np.arange(divisions + 1, dtype=np.float64)
    xs = -width / 2.0 + steps * (width / divisions)
    ys = -depth / 2.0 + steps * (depth / divisions)
    # (rows, cols) indexed [j, i]
    return np.meshgrid(xs, ys, indexing="xy")


def _cells(grid: np.ndarray) -> np.ndarray:
    """Expand a (d+1, d+1, ...) grid attribute to (d, d, 6, ...) triangle-list order."""
    a = grid[:-1, :-1]
    b = grid[:-1, 1:]
    c = grid[1:, :-1]
    e = grid[1:, 1:]
    return np.stack([a, b, c, b, e, c], axis=2)


def _flatten(attr: np.ndarray) -> np.ndarray:
    out = np.ascontiguousarray(attr.reshape(-1), dtype=np.float32)
    out.flags.writeable = False
    return out


def _grid_colors(divisions: int) -> np.ndarray:
    t = np.arange(divisions + 1, dtype=np.float64) / divisions
    U, V = np.meshgrid(t, t, indexing="xy")
    blend = ((U + V) * 0.5)[..., None]
    return COLOR_LOW + (COLOR_HIGH - COLOR_LOW) * blend


def face_normals(positions: np.ndarray) -> np.ndarray:
    """Unit normal of each triangle of a flat triangle list, shape (T, 3).

    Zero-area triangles get the up axis.
    """
    tri = np.asarray(positions, dtype=np.float64).reshape(-1, 3, 3)
    n = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    length = np.linalg.norm(n, axis=1)
    degenerate = length <= 1e-12
    n[degenerate] = UP
    length[degenerate] = 1.0
    return n / length[:, None]


class TerrainMesh:
    """Triangle-list terrain mesh with per-vertex colors and faceted normals.

    Use :meth:`generate` to build one. ``positions``, ``colors`` and
    ``normals`` are read-only flat float32 arrays of (x, y, z) triples, all of
    length ``18 * divisions**2``.
    """

    def __init__(
        self,
        size: Tuple[float, float],
        divisions: int,
        positions: np.ndarray,
        colors: np.ndarray,
        normals: Optional[np.ndarray] = None,
    ):
        self.size = validate.extent(size)
        self.divisions = validate.divisions(divisions)
        expected = 3 * VERTICES_PER_CELL * self.divisions ** 2
        positions = _flatten(np.asarray(positions))
        colors = _flatten(np.asarray(colors))
        if positions.size != expected or colors.size != expected:
            raise ValueError(f"positions and colors must hold {expected} floats")
        self.positions = positions
        self.colors = colors
        if normals is None:
            self.normals = _flatten(np.zeros(expected, dtype=np.float32))
        else:
            normals = _flatten(np.asarray(normals))
            if normals.size != expected:
                raise ValueError(f"normals must hold {expected} floats")
            self.normals = normals

    @classmethod
    def generate(cls, size: Tuple[float, float], divisions: int) -> "TerrainMesh":
        """Build a flat centred grid, then derive its normals.

        Raises
        ------
        InvalidDivisions
            If ``divisions`` is 0.
        InvalidDimensions
            For negative or non-integer ``divisions`` or a non-positive size.
        """
        width, depth = validate.extent(size)
        n = validate.divisions(divisions)
        X, Y = _grid_axes(width, depth, n)
        grid = np.stack([X, Y, np.zeros_like(X)], axis=-1)
        mesh = cls((width, depth), n, _cells(grid), _cells(_grid_colors(n)))
        mesh.generate_normals()
        logger.debug("generated terrain mesh %gx%g with %d divisions (%d vertices)",
                     width, depth, n, mesh.vertex_count)
        return mesh

    def generate_normals(self) -> np.ndarray:
        """Recompute faceted normals from the current positions."""
        n = face_normals(self.positions)
        self.normals = _flatten(np.repeat(n[:, None, :], 3, axis=1))
        return self.normals

    def displaced(
        self,
        height_fn: Callable[[np.ndarray, np.ndarray], np.ndarray],
        amplitude: float = 1.0,
        scale: Tuple[float, float] = (1.0, 1.0),
    ) -> "TerrainMesh":
        """Return a copy with ``z = amplitude * height_fn(x * sx, y * sy)``.

        Heights are evaluated once per grid point, so neighbouring triangles
        share their edge heights exactly. Normals are regenerated.
        """
        amplitude = validate._as_float("amplitude", amplitude)
        sx = validate._as_float("scale x", scale[0])
        sy = validate._as_float("scale y", scale[1])
        width, depth = self.size
        X, Y = _grid_axes(width, depth, self.divisions)
        Z = amplitude * np.asarray(height_fn(X * sx, Y * sy), dtype=np.float64)
        if Z.shape != X.shape:
            raise ValueError(f"height_fn returned shape {Z.shape}, expected {X.shape}")
        if not np.all(np.isfinite(Z)):
            raise InvalidDimensions("displaced heights must be finite")
        grid = np.stack([X, Y, Z], axis=-1)
        mesh = TerrainMesh(self.size, self.divisions, _cells(grid), self.colors)
        mesh.generate_normals()
        return mesh

    @property
    def vertex_count(self) -> int:
        return int(self.positions.size // 3)

    @property
    def triangle_count(self) -> int:
        return self.vertex_count // 3

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """(min_xyz, max_xyz) of the positions."""
        pts = self.positions.reshape(-1, 3)
        return pts.min(axis=0), pts.max(axis=0)

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {"positions": self.positions, "colors": self.colors, "normals": self.normals}

    def __repr__(self) -> str:
        return (f"TerrainMesh(size={self.size}, divisions={self.divisions}, "
                f"triangles={self.triangle_count})")


def generate(size: Tuple[float, float], divisions: int) -> TerrainMesh:
    return TerrainMesh.generate(size, divisions)


__all__ = ["TerrainMesh", "face_normals", "generate", "UP", "VERTICES_PER_CELL"]
