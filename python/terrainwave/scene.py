"""
Terrain scene assembly.

``TerrainScene`` produces everything a rendering backend needs to draw the
animated terrain: static vertex attributes, the static noise texture and the
per-frame uniform values. It makes no graphics calls itself.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .config import ConfigSource, RotationConfig, SceneConfig, load_scene_config, split_scene_overrides
from .matrix import Matrix4, camera_matrix, camera_xy
from .mesh import TerrainMesh
from .noise import NoiseField2D, NoiseTexture

logger = logging.getLogger(__name__)

# Initial tilt of the model before the first UI rotation arrives
INITIAL_TILT_X = math.pi * (3.0 / 8.0)
INITIAL_TURN_Z = -math.pi * (5.0 / 4.0)

NOISE_TEXTURE_UNIT = 0


class TerrainScene:
    """Static buffers and per-frame uniforms for one terrain view.

    Parameters
    ----------
    config : SceneConfig, mapping, path or None
        Scene configuration; see :func:`terrainwave.config.load_scene_config`.
    **overrides
        Flat overrides such as ``divisions=64`` or ``seed=7``.
    """

    def __init__(self, config: ConfigSource = None, **overrides: Any):
        overrides, remaining = split_scene_overrides(dict(overrides))
        if remaining:
            raise TypeError(f"unexpected scene options: {sorted(remaining)}")
        self.config: SceneConfig = load_scene_config(config, overrides)
        self._start = time.monotonic()

        mesh_cfg = self.config.mesh
        self.mesh = TerrainMesh.generate(mesh_cfg.size, mesh_cfg.divisions)

        noise_cfg = self.config.noise
        self.noise_field = NoiseField2D(noise_cfg.seed)
        self.noise_texture: NoiseTexture = self.noise_field.generate(
            noise_cfg.width, noise_cfg.height, noise_cfg.scale_x, noise_cfg.scale_y
        )

        self.model = Matrix4().rotation_x(INITIAL_TILT_X).rotation_z(INITIAL_TURN_Z)
        self.camera = self._build_camera()
        logger.debug(
            "scene ready: %d vertices, %dx%d noise texture",
            self.mesh.vertex_count, self.noise_texture.width, self.noise_texture.height,
        )

    def _build_camera(self) -> Matrix4:
        cam = self.config.camera
        return camera_matrix(cam.fov_y, cam.aspect_ratio, cam.near, cam.far, cam.yaw, cam.offset)

    @property
    def vertex_count(self) -> int:
        return self.mesh.vertex_count

    def set_aspect_ratio(self, aspect_ratio: float) -> Matrix4:
        """Rebuild the camera for a new viewport shape."""
        previous = self.config.camera.aspect_ratio
        self.config.camera.aspect_ratio = float(aspect_ratio)
        try:
            self.camera = self._build_camera()
        except ValueError:
            self.config.camera.aspect_ratio = previous
            raise
        return self.camera

    def set_resolution(self, width: int, height: int) -> Matrix4:
        if height <= 0 or width <= 0:
            raise ValueError("width and height must be > 0")
        return self.set_aspect_ratio(width / height)

    def update_rotation(self, x: float, y: float, z: float) -> Matrix4:
        """Replace the model transform from UI angles in degrees.

        Resets to identity, composes X, Y and Z rotations in that order and
        finishes with the fixed model offset.
        """
        rot = self.config.rotation
        RotationConfig(float(x), float(y), float(z), rot.offset).validate()
        rot.x, rot.y, rot.z = float(x), float(y), float(z)
        self.model.set_identity()
        self.model.rotation_x(math.radians(rot.x))
        self.model.rotation_y(math.radians(rot.y))
        self.model.rotation_z(math.radians(rot.z))
        self.model.translate(*rot.offset)
        return self.model

    def apply_configured_rotation(self) -> Matrix4:
        rot = self.config.rotation
        return self.update_rotation(rot.x, rot.y, rot.z)

    def elapsed(self) -> float:
        """Seconds since the scene was created."""
        return time.monotonic() - self._start

    def vertex_buffers(self) -> Dict[str, np.ndarray]:
        return {
            "aPosition": self.mesh.positions,
            "aColor": self.mesh.colors,
            "aNormal": self.mesh.normals,
        }

    def uniforms(self, resolution: Tuple[int, int], time_s: Optional[float] = None) -> Dict[str, Any]:
        """Uniform values for one frame.

        ``uMatrix`` and ``uCamera`` are 16-element column-major float32
        arrays; ``uNoise`` is the texture unit holding the noise texture.
        """
        width, height = resolution
        return {
            "uTime": float(self.elapsed() if time_s is None else time_s),
            "uResolution": (float(width), float(height)),
            "uMatrix": self.model.to_array(),
            "uCamera": self.camera.to_array(),
            "uCamXY": camera_xy(self.camera),
            "uNoise": NOISE_TEXTURE_UNIT,
        }


__all__ = ["TerrainScene", "INITIAL_TILT_X", "INITIAL_TURN_Z", "NOISE_TEXTURE_UNIT"]
