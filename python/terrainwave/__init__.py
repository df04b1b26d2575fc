"""
terrainwave: procedural data for an animated terrain surface.

- :mod:`terrainwave.matrix` 4x4 transforms and camera composition
- :mod:`terrainwave.noise` seedable simplex noise baked into textures
- :mod:`terrainwave.mesh` tessellated ground-plane mesh with faceted normals
- :mod:`terrainwave.scene` buffers and uniforms for a rendering backend
"""

import logging

from .errors import (
    TerrainwaveError,
    InvalidDimensions,
    InvalidDivisions,
    InvalidProjection,
    InvalidSeed,
)
from .matrix import Matrix4, perspective, camera_matrix, camera_xy
from .noise import SimplexNoise2D, NoiseField2D, NoiseTexture
from .mesh import TerrainMesh
from .config import (
    SceneConfig,
    MeshConfig,
    NoiseConfig,
    CameraConfig,
    RotationConfig,
    load_scene_config,
)
from .scene import TerrainScene
from .io import save_texture_png, load_texture_png, save_obj

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TerrainwaveError",
    "InvalidDimensions",
    "InvalidDivisions",
    "InvalidProjection",
    "InvalidSeed",
    "Matrix4",
    "perspective",
    "camera_matrix",
    "camera_xy",
    "SimplexNoise2D",
    "NoiseField2D",
    "NoiseTexture",
    "TerrainMesh",
    "SceneConfig",
    "MeshConfig",
    "NoiseConfig",
    "CameraConfig",
    "RotationConfig",
    "load_scene_config",
    "TerrainScene",
    "save_texture_png",
    "load_texture_png",
    "save_obj",
    "__version__",
]
