# Ensure `import terrainwave` works from a fresh clone without a prior install:
# put repo/python on sys.path before the test modules are collected.
import sys
from pathlib import Path

import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    pkg_dir = _repo_root() / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slow tests")


@pytest.fixture
def small_scene_config():
    """Scene settings small enough to build in a few milliseconds."""
    return {
        "mesh": {"width": 20.0, "depth": 20.0, "divisions": 4},
        "noise": {"width": 16, "height": 8, "scale_x": 1.0 / 150.0, "scale_y": 1.0 / 150.0, "seed": 42},
        "camera": {"aspect_ratio": 1.5},
    }
