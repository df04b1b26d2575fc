# python/terrainwave/io.py
# PNG export/import for baked noise textures and Wavefront OBJ export for terrain meshes
# Exists so generated buffers can be inspected outside a renderer
# RELEVANT FILES: python/terrainwave/noise.py, python/terrainwave/mesh.py, tests/test_io.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .mesh import TerrainMesh
from .noise import NoiseTexture

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def save_texture_png(texture: NoiseTexture, path: PathLike) -> None:
    """Write a noise texture as an RGB or RGBA PNG."""
    path_str = str(path)
    if not path_str.lower().endswith(".png"):
        raise ValueError(f"File must have .png extension, got {path_str}")

    array = np.ascontiguousarray(texture.to_array())
    if texture.channels not in (3, 4):
        raise ValueError(f"unsupported channel count: {texture.channels}")
    # (H, W, 3) uint8 maps to RGB, (H, W, 4) to RGBA
    img = Image.fromarray(array)
    img.save(path_str)
    logger.debug("wrote %dx%d texture to %s", texture.width, texture.height, path_str)


def load_texture_png(path: PathLike) -> NoiseTexture:
    """Load a PNG written by :func:`save_texture_png`.

    The red channel is taken as the noise value byte; ``values`` holds the
    byte centre, ``(byte + 0.5) / 256``.
    """
    img = Image.open(str(path))
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")
    array = np.array(img, dtype=np.uint8)
    height, width, channels = array.shape
    values = ((array[..., 0].astype(np.float32) + 0.5) / 256.0).astype(np.float32)
    return NoiseTexture(
        width=width,
        height=height,
        values=values,
        data=np.ascontiguousarray(array).tobytes(),
        channels=channels,
    )


def save_obj(mesh: TerrainMesh, path: PathLike) -> None:
    """Save a terrain mesh as a Wavefront OBJ triangle list.

    Writes one ``v`` per vertex (with its RGB color appended, as most viewers
    accept), one ``vn`` per triangle and one ``f v//vn`` per triangle. The
    file stays non-indexed like the in-memory buffers.
    """
    positions = mesh.positions.reshape(-1, 3)
    colors = mesh.colors.reshape(-1, 3)
    normals = mesh.normals.reshape(-1, 3, 3)[:, 0, :]

    lines = [f"# terrainwave mesh {mesh.size[0]:g}x{mesh.size[1]:g}, {mesh.divisions} divisions"]
    for p, c in zip(positions, colors):
        lines.append(f"v {p[0]:.6f} {p[1]:.6f} {p[2]:.6f} {c[0]:.4f} {c[1]:.4f} {c[2]:.4f}")
    for n in normals:
        lines.append(f"vn {n[0]:.6f} {n[1]:.6f} {n[2]:.6f}")
    for t in range(mesh.triangle_count):
        a = 3 * t + 1
        lines.append(f"f {a}//{t + 1} {a + 1}//{t + 1} {a + 2}//{t + 1}")

    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug("wrote %d triangles to %s", mesh.triangle_count, path)
