# python/terrainwave/config.py
# Scene configuration parsing for mesh, noise, camera and rotation settings
# Exists so callers can describe a terrain scene as a mapping or JSON file and get validated, typed sections
# RELEVANT FILES: python/terrainwave/scene.py, python/terrainwave/_validate.py, tests/test_config.py
from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple, Union

from . import _validate as validate
from .errors import InvalidProjection

ConfigSource = Union["SceneConfig", Mapping[str, Any], str, Path, None]


def _to_float3(value: Any, label: str) -> Tuple[float, float, float]:
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    raise ValueError(f"{label} must be a sequence of three numeric values")


def _section(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, Mapping):
        raise TypeError(f"{key} must be a mapping")
    return value


@dataclass
class MeshConfig:
    width: float = 20.0
    depth: float = 20.0
    divisions: int = 500

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.depth)

    def to_dict(self) -> dict:
        return {"width": self.width, "depth": self.depth, "divisions": self.divisions}

    def validate(self) -> None:
        validate.extent(self.size)
        validate.divisions(self.divisions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["MeshConfig"] = None) -> "MeshConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "width" in data:
            base.width = float(data["width"])
        if "depth" in data:
            base.depth = float(data["depth"])
        if "size" in data:
            size = data["size"]
            if not (isinstance(size, (list, tuple)) and len(size) == 2):
                raise ValueError("mesh.size must be a (width, depth) pair")
            base.width, base.depth = float(size[0]), float(size[1])
        if "divisions" in data:
            base.divisions = data["divisions"]
        return base


@dataclass
class NoiseConfig:
    width: int = 1500
    height: int = 1500
    scale_x: float = 1.0 / 150.0
    scale_y: float = 1.0 / 150.0
    seed: int = 0

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
            "seed": self.seed,
        }

    def validate(self) -> None:
        validate.size_wh(self.width, self.height)
        validate.scale_xy(self.scale_x, self.scale_y)
        validate.seed(self.seed)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["NoiseConfig"] = None) -> "NoiseConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "width" in data:
            base.width = data["width"]
        if "height" in data:
            base.height = data["height"]
        if "size" in data:
            base.width = base.height = data["size"]
        if "scale" in data:
            base.scale_x = base.scale_y = float(data["scale"])
        if "scale_x" in data:
            base.scale_x = float(data["scale_x"])
        if "scale_y" in data:
            base.scale_y = float(data["scale_y"])
        if "seed" in data:
            base.seed = data["seed"]
        return base


@dataclass
class CameraConfig:
    fov_y: float = math.pi / 4.0
    aspect_ratio: float = 1.0
    near: float = 0.1
    far: float = 15.0
    yaw: float = math.pi
    offset: Tuple[float, float, float] = (0.0, 0.0, 7.0)

    def to_dict(self) -> dict:
        return {
            "fov_y": self.fov_y,
            "aspect_ratio": self.aspect_ratio,
            "near": self.near,
            "far": self.far,
            "yaw": self.yaw,
            "offset": list(self.offset),
        }

    def validate(self) -> None:
        values = (self.fov_y, self.aspect_ratio, self.near, self.far)
        if not all(math.isfinite(v) for v in values):
            raise InvalidProjection("camera.fov_y/aspect_ratio/near/far must be finite")
        if not 0.0 < self.fov_y < math.pi:
            raise InvalidProjection("camera.fov_y must be in (0, pi)")
        if self.aspect_ratio <= 0.0:
            raise InvalidProjection("camera.aspect_ratio must be > 0")
        if self.near <= 0.0 or self.far <= 0.0:
            raise InvalidProjection("camera.near and camera.far must be > 0")
        if self.near >= self.far:
            raise InvalidProjection("camera.near must be < camera.far")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["CameraConfig"] = None) -> "CameraConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "fov_y" in data:
            base.fov_y = float(data["fov_y"])
        if "fov_y_deg" in data:
            base.fov_y = math.radians(float(data["fov_y_deg"]))
        if "aspect_ratio" in data:
            base.aspect_ratio = float(data["aspect_ratio"])
        if "aspect" in data:
            base.aspect_ratio = float(data["aspect"])
        if "near" in data:
            base.near = float(data["near"])
        if "far" in data:
            base.far = float(data["far"])
        if "yaw" in data:
            base.yaw = float(data["yaw"])
        if "offset" in data:
            base.offset = _to_float3(data["offset"], "camera.offset")
        return base


@dataclass
class RotationConfig:
    """UI rotation in degrees, applied X then Y then Z, then ``offset``."""

    x: float = 120.0
    y: float = 0.0
    z: float = -30.0
    offset: Tuple[float, float, float] = (0.0, 0.0, -0.5)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z, "offset": list(self.offset)}

    def validate(self) -> None:
        if not all(math.isfinite(v) for v in (self.x, self.y, self.z, *self.offset)):
            raise ValueError("rotation angles and offset must be finite")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["RotationConfig"] = None) -> "RotationConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        for axis in ("x", "y", "z"):
            if axis in data:
                setattr(base, axis, float(data[axis]))
        if "offset" in data:
            base.offset = _to_float3(data["offset"], "rotation.offset")
        return base


@dataclass
class SceneConfig:
    mesh: MeshConfig = field(default_factory=MeshConfig)
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)

    def to_dict(self) -> dict:
        return {
            "mesh": self.mesh.to_dict(),
            "noise": self.noise.to_dict(),
            "camera": self.camera.to_dict(),
            "rotation": self.rotation.to_dict(),
        }

    def copy(self) -> "SceneConfig":
        return copy.deepcopy(self)

    def validate(self) -> None:
        self.mesh.validate()
        self.noise.validate()
        self.camera.validate()
        self.rotation.validate()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["SceneConfig"] = None) -> "SceneConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        section = _section(data, "mesh")
        if section is not None:
            base.mesh = MeshConfig.from_mapping(section, base.mesh)
        section = _section(data, "noise")
        if section is not None:
            base.noise = NoiseConfig.from_mapping(section, base.noise)
        section = _section(data, "camera")
        if section is not None:
            base.camera = CameraConfig.from_mapping(section, base.camera)
        section = _section(data, "rotation")
        if section is not None:
            base.rotation = RotationConfig.from_mapping(section, base.rotation)
        return base


def _load_from_path(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in {".json", ""}:
        return json.loads(text)
    raise ValueError(f"Unsupported scene config file format: {path}")


_OVERRIDE_KEYS: Dict[str, Tuple[str, str]] = {
    "mesh_width": ("mesh", "width"),
    "mesh_depth": ("mesh", "depth"),
    "mesh_size": ("mesh", "size"),
    "divisions": ("mesh", "divisions"),
    "noise_size": ("noise", "size"),
    "noise_width": ("noise", "width"),
    "noise_height": ("noise", "height"),
    "noise_scale": ("noise", "scale"),
    "scale_x": ("noise", "scale_x"),
    "scale_y": ("noise", "scale_y"),
    "seed": ("noise", "seed"),
    "fov_y": ("camera", "fov_y"),
    "fov_y_deg": ("camera", "fov_y_deg"),
    "aspect_ratio": ("camera", "aspect_ratio"),
    "aspect": ("camera", "aspect_ratio"),
    "near": ("camera", "near"),
    "far": ("camera", "far"),
    "rotation_x": ("rotation", "x"),
    "rotation_y": ("rotation", "y"),
    "rotation_z": ("rotation", "z"),
}


def _build_override_mapping(overrides: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    for key, value in overrides.items():
        target = _OVERRIDE_KEYS.get(key)
        if target is None:
            # Unknown keys are handled by caller.
            continue
        section, name = target
        out.setdefault(section, {})[name] = value
    return out


def load_scene_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> SceneConfig:
    if isinstance(config, SceneConfig):
        cfg = config.copy()
    elif isinstance(config, Mapping):
        cfg = SceneConfig.from_mapping(config)
    elif isinstance(config, (str, Path)):
        cfg = SceneConfig.from_mapping(_load_from_path(Path(config)))
    elif config is None:
        cfg = SceneConfig()
    else:
        raise TypeError("config must be SceneConfig, mapping, path, or None")

    if overrides:
        merged = _build_override_mapping(overrides)
        if merged:
            cfg = SceneConfig.from_mapping(merged, cfg)
    cfg.validate()
    return cfg


def split_scene_overrides(kwargs: MutableMapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    overrides: Dict[str, Any] = {}
    remaining: Dict[str, Any] = {}
    for key, value in list(kwargs.items()):
        if key in _OVERRIDE_KEYS:
            overrides[key] = kwargs.pop(key)
        else:
            remaining[key] = value
    return overrides, remaining
