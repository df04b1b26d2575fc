"""
4x4 transform matrices for placing and animating the terrain.

Conventions
-----------
- Column vectors: a point ``p`` is transformed as ``M @ p``.
- Composition post-multiplies: every composing call replaces ``M`` by
  ``M @ Op``. The operation composed last is therefore the first one applied
  to a vertex, matching the OpenGL fixed-function matrix stack.
- ``to_array()`` exports the 16 elements column-major, the layout expected by
  ``uniformMatrix4fv(location, false, data)``.
- Angles are radians.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import InvalidProjection


def _rotation(axis: str, theta: float) -> np.ndarray:
    c, s = math.cos(theta), math.sin(theta)
    if axis == "x":
        return np.array([
            [1, 0, 0, 0],
            [0, c, -s, 0],
            [0, s, c, 0],
            [0, 0, 0, 1],
        ], dtype=np.float64)
    if axis == "y":
        return np.array([
            [c, 0, s, 0],
            [0, 1, 0, 0],
            [-s, 0, c, 0],
            [0, 0, 0, 1],
        ], dtype=np.float64)
    return np.array([
        [c, -s, 0, 0],
        [s, c, 0, 0],
        [0, 0, 1, 0],
        [0, 0, 0, 1],
    ], dtype=np.float64)


def _perspective(fov_y: float, aspect: float, near: float, far: float) -> np.ndarray:
    values = (fov_y, aspect, near, far)
    if not all(math.isfinite(float(v)) for v in values):
        raise InvalidProjection("fov_y/aspect/near/far must be finite")
    if not 0.0 < fov_y < math.pi:
        raise InvalidProjection("fov_y must be in (0, pi)")
    if aspect <= 0.0:
        raise InvalidProjection("aspect must be > 0")
    if near <= 0.0 or far <= 0.0:
        raise InvalidProjection("near and far must be > 0")
    if near >= far:
        raise InvalidProjection("near must be < far")
    f = 1.0 / math.tan(fov_y / 2.0)
    range_inv = 1.0 / (near - far)
    m = np.zeros((4, 4), dtype=np.float64)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (near + far) * range_inv
    m[2, 3] = 2.0 * near * far * range_inv
    m[3, 2] = -1.0
    return m


class Matrix4:
    """Mutable 4x4 transform owned by its caller.

    Composing methods return ``self`` so calls can be chained::

        model = Matrix4().rotation_x(math.pi / 2).translate(0.0, 0.0, -0.5)
    """

    __slots__ = ("_m",)

    def __init__(self, values: Iterable[float] | None = None):
        if values is None:
            self._m = np.eye(4, dtype=np.float64)
        else:
            self._m = _from_column_major(values)

    # -- construction -------------------------------------------------

    @classmethod
    def from_array(cls, values: Iterable[float]) -> "Matrix4":
        """Build from 16 column-major elements."""
        return cls(values)

    @classmethod
    def from_numpy(cls, matrix: np.ndarray) -> "Matrix4":
        """Build from a (4, 4) row/column indexed array (``m[row, col]``)."""
        arr = np.asarray(matrix, dtype=np.float64)
        if arr.shape != (4, 4):
            raise ValueError(f"expected shape (4, 4), got {arr.shape}")
        out = cls()
        out._m = arr.copy()
        return out

    def copy(self) -> "Matrix4":
        return Matrix4.from_numpy(self._m)

    # -- composition --------------------------------------------------

    def identity(self) -> "Matrix4":
        """Reset to the identity matrix."""
        self._m = np.eye(4, dtype=np.float64)
        return self

    set_identity = identity

    def compose(self, other: "Matrix4 | np.ndarray") -> "Matrix4":
        """Post-multiply by ``other`` in place."""
        rhs = other._m if isinstance(other, Matrix4) else np.asarray(other, dtype=np.float64)
        self._m = self._m @ rhs
        return self

    def rotation_x(self, theta: float) -> "Matrix4":
        return self.compose(_rotation("x", float(theta)))

    def rotation_y(self, theta: float) -> "Matrix4":
        return self.compose(_rotation("y", float(theta)))

    def rotation_z(self, theta: float) -> "Matrix4":
        return self.compose(_rotation("z", float(theta)))

    def translate(self, dx: float, dy: float, dz: float) -> "Matrix4":
        t = np.eye(4, dtype=np.float64)
        t[0:3, 3] = (float(dx), float(dy), float(dz))
        return self.compose(t)

    def perspective(self, fov_y: float, aspect: float, near: float, far: float) -> "Matrix4":
        """Compose an OpenGL-style perspective projection (clip z in [-1, 1]).

        Raises
        ------
        InvalidProjection
            If ``near``/``far`` are not strictly positive with ``near < far``,
            ``aspect`` is not positive, or ``fov_y`` is outside ``(0, pi)``.
        """
        return self.compose(_perspective(float(fov_y), float(aspect), float(near), float(far)))

    def __matmul__(self, other: "Matrix4") -> "Matrix4":
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4.from_numpy(self._m @ other._m)

    # -- application --------------------------------------------------

    def transform(self, v: Sequence[float]) -> np.ndarray:
        """Multiply a homogeneous 4-vector."""
        vec = np.asarray(v, dtype=np.float64)
        if vec.shape != (4,):
            raise ValueError("expected a homogeneous 4-vector")
        return self._m @ vec

    def transform_point(self, p: Sequence[float]) -> np.ndarray:
        """Transform a 3D point (w=1), dividing by w when it is not 1."""
        x, y, z = (float(c) for c in p)
        out = self._m @ np.array([x, y, z, 1.0])
        w = out[3]
        if w != 0.0 and w != 1.0:
            return out[:3] / w
        return out[:3]

    def transform_vector(self, v: Sequence[float]) -> np.ndarray:
        """Transform a direction (w=0); translation is ignored."""
        x, y, z = (float(c) for c in v)
        return (self._m @ np.array([x, y, z, 0.0]))[:3]

    def normal_matrix(self) -> "Matrix4":
        """Inverse-transpose of the upper 3x3, for transforming normals."""
        upper = self._m[0:3, 0:3]
        out = np.eye(4, dtype=np.float64)
        out[0:3, 0:3] = np.linalg.inv(upper).T
        return Matrix4.from_numpy(out)

    # -- export -------------------------------------------------------

    def to_array(self) -> np.ndarray:
        """16 float32 elements, column-major."""
        return np.ascontiguousarray(self._m.flatten(order="F"), dtype=np.float32)

    def to_numpy(self) -> np.ndarray:
        """Copy as a (4, 4) float64 array indexed ``m[row, col]``."""
        return self._m.copy()

    def tolist(self) -> list:
        return self.to_array().tolist()

    def __getitem__(self, index: int) -> float:
        # Flat column-major indexing, as the backend sees the uniform.
        return float(self._m.flatten(order="F")[index])

    def allclose(self, other: "Matrix4", atol: float = 1e-6) -> bool:
        return bool(np.allclose(self._m, other._m, atol=atol, rtol=0.0))

    def __repr__(self) -> str:
        rows = ", ".join("[" + ", ".join(f"{v:.4g}" for v in row) + "]" for row in self._m)
        return f"Matrix4([{rows}])"


def _from_column_major(values: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.shape != (16,):
        raise ValueError(f"expected 16 elements, got {arr.size}")
    return arr.reshape((4, 4), order="F")


def perspective(fov_y: float, aspect: float, near: float, far: float) -> Matrix4:
    """Return a new perspective projection matrix."""
    return Matrix4().perspective(fov_y, aspect, near, far)


def camera_matrix(
    fov_y: float,
    aspect: float,
    near: float,
    far: float,
    yaw: float = math.pi,
    offset: Tuple[float, float, float] = (0.0, 0.0, 7.0),
) -> Matrix4:
    """Projection composed with the fixed camera placement.

    The terrain is pushed ``offset`` along its own axes, turned by ``yaw``
    about Y and then projected: ``perspective @ Ry(yaw) @ T(offset)``.
    """
    return perspective(fov_y, aspect, near, far).rotation_y(yaw).translate(*offset)


def camera_xy(camera: Matrix4) -> Tuple[float, float]:
    """X/Y of the camera's translation column (flat elements 12 and 13)."""
    return camera[12], camera[13]


__all__ = ["Matrix4", "perspective", "camera_matrix", "camera_xy"]
