# python/terrainwave/_validate.py
# Parameter coercion and guardrails shared by the mesh, noise and matrix modules
# Exists so every public entry point rejects bad sizes with the same error types and messages
# RELEVANT FILES:python/terrainwave/errors.py,python/terrainwave/mesh.py,python/terrainwave/noise.py
from __future__ import annotations

import math
from numbers import Integral, Real
from typing import Any, Tuple

from .errors import InvalidDimensions, InvalidDivisions, InvalidSeed

_MAX_DIM = 8192  # conservative guardrail for texture sides
_MAX_DIVISIONS = 4096
_SEED_LIMIT = 2 ** 32


def _as_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, Integral):
        raise InvalidDimensions(f"{name} must be an integer, got {type(v).__name__}")
    return int(v)


def _as_float(name: str, v: Any) -> float:
    if isinstance(v, bool) or not isinstance(v, Real):
        raise InvalidDimensions(f"{name} must be a number, got {type(v).__name__}")
    f = float(v)
    if not math.isfinite(f):
        raise InvalidDimensions(f"{name} must be finite")
    return f


def size_wh(width: Any, height: Any) -> Tuple[int, int]:
    w = _as_int("width", width)
    h = _as_int("height", height)
    if w <= 0 or h <= 0:
        raise InvalidDimensions("width and height must be > 0")
    if w > _MAX_DIM or h > _MAX_DIM:
        raise InvalidDimensions(f"width/height must be <= {_MAX_DIM}")
    return w, h


def extent(size: Any) -> Tuple[float, float]:
    """Physical (width, depth) of a mesh."""
    try:
        w, d = size
    except (TypeError, ValueError) as e:
        raise InvalidDimensions("size must be a (width, depth) pair") from e
    w = _as_float("size width", w)
    d = _as_float("size depth", d)
    if w <= 0.0 or d <= 0.0:
        raise InvalidDimensions("size width and depth must be > 0")
    return w, d


def divisions(n: Any) -> int:
    g = _as_int("divisions", n)
    if g == 0:
        raise InvalidDivisions("divisions must be >= 1")
    if g < 0:
        raise InvalidDimensions("divisions must be >= 1")
    if g > _MAX_DIVISIONS:
        raise InvalidDimensions(f"divisions must be <= {_MAX_DIVISIONS}")
    return g


def scale_xy(scale_x: Any, scale_y: Any) -> Tuple[float, float]:
    sx = _as_float("scale_x", scale_x)
    sy = _as_float("scale_y", scale_y)
    return sx, sy


def seed(value: Any) -> int:
    if value is None:
        raise InvalidSeed("seed is required")
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidSeed(f"seed must be an integer, got {type(value).__name__}")
    s = int(value)
    if not 0 <= s < _SEED_LIMIT:
        raise InvalidSeed(f"seed must be within [0, {_SEED_LIMIT})")
    return s
