# tests/test_scene.py
# Tests for terrain scene assembly: buffers, model rotation, camera and per-frame uniforms
# RELEVANT FILES: python/terrainwave/scene.py, python/terrainwave/matrix.py

import math

import numpy as np
import pytest

from terrainwave import InvalidProjection, Matrix4, TerrainScene, camera_matrix
from terrainwave.scene import INITIAL_TILT_X, INITIAL_TURN_Z, NOISE_TEXTURE_UNIT


@pytest.fixture
def scene(small_scene_config):
    return TerrainScene(small_scene_config)


def test_vertex_count(scene):
    assert scene.vertex_count == 6 * 4 * 4
    assert scene.mesh.triangle_count == 32


def test_vertex_buffers(scene):
    buffers = scene.vertex_buffers()
    assert set(buffers) == {"aPosition", "aColor", "aNormal"}
    for arr in buffers.values():
        assert arr.dtype == np.float32
        assert arr.size == 3 * scene.vertex_count


def test_noise_texture_built_from_config(scene):
    tex = scene.noise_texture
    assert (tex.width, tex.height) == (16, 8)
    assert len(tex.data) == 16 * 8 * 4
    assert scene.noise_field.seed == 42


def test_initial_model_transform(scene):
    expected = Matrix4().rotation_x(INITIAL_TILT_X).rotation_z(INITIAL_TURN_Z)
    assert scene.model.allclose(expected)


def test_uniforms(scene):
    u = scene.uniforms((800, 600), time_s=2.5)
    assert set(u) == {"uTime", "uResolution", "uMatrix", "uCamera", "uCamXY", "uNoise"}
    assert u["uTime"] == pytest.approx(2.5)
    assert u["uResolution"] == (800.0, 600.0)
    assert u["uMatrix"].shape == (16,)
    assert u["uCamera"].dtype == np.float32
    assert u["uNoise"] == NOISE_TEXTURE_UNIT
    cam = u["uCamera"]
    assert u["uCamXY"] == pytest.approx((float(cam[12]), float(cam[13])))


def test_uniform_time_defaults_to_elapsed(scene):
    u = scene.uniforms((10, 10))
    assert u["uTime"] >= 0.0
    assert scene.elapsed() >= u["uTime"]


def test_camera_uses_configured_aspect(scene):
    expected = camera_matrix(math.pi / 4, 1.5, 0.1, 15.0)
    assert scene.camera.allclose(expected)


def test_update_rotation_zero_keeps_offset(scene):
    model = scene.update_rotation(0, 0, 0)
    arr = model.to_array()
    np.testing.assert_allclose(arr[12:15], [0.0, 0.0, -0.5], atol=1e-6)
    np.testing.assert_allclose(arr[[0, 5, 10, 15]], 1.0, atol=1e-6)


def test_update_rotation_applies_offset_first(scene):
    scene.update_rotation(90, 0, 0)
    np.testing.assert_allclose(scene.model.transform_point((0.0, 1.0, 0.5)), (0.0, 0.0, 1.0), atol=1e-6)


def test_update_rotation_order(scene):
    scene.update_rotation(30, 45, -60)
    expected = (
        Matrix4()
        .rotation_x(math.radians(30))
        .rotation_y(math.radians(45))
        .rotation_z(math.radians(-60))
        .translate(0.0, 0.0, -0.5)
    )
    assert scene.model.allclose(expected)
    assert (scene.config.rotation.x, scene.config.rotation.y, scene.config.rotation.z) == (30.0, 45.0, -60.0)


def test_update_rotation_replaces_previous(scene):
    first = scene.update_rotation(10, 20, 30).copy()
    scene.update_rotation(50, 0, 0)
    scene.update_rotation(10, 20, 30)
    assert scene.model.allclose(first)


def test_apply_configured_rotation(scene):
    model = scene.apply_configured_rotation()
    expected = (
        Matrix4()
        .rotation_x(math.radians(120))
        .rotation_z(math.radians(-30))
        .translate(0.0, 0.0, -0.5)
    )
    assert model.allclose(expected)


def test_set_resolution_rebuilds_camera(scene):
    scene.set_resolution(800, 600)
    assert scene.config.camera.aspect_ratio == pytest.approx(800 / 600)
    assert scene.camera.allclose(camera_matrix(math.pi / 4, 800 / 600, 0.1, 15.0))
    with pytest.raises(ValueError):
        scene.set_resolution(800, 0)


def test_invalid_aspect_restores_previous(scene):
    before = scene.camera.copy()
    with pytest.raises(InvalidProjection):
        scene.set_aspect_ratio(0.0)
    assert scene.config.camera.aspect_ratio == pytest.approx(1.5)
    assert scene.camera.allclose(before)


def test_keyword_overrides(small_scene_config):
    scene = TerrainScene(small_scene_config, divisions=2, seed=9)
    assert scene.vertex_count == 24
    assert scene.noise_field.seed == 9


def test_unknown_keyword_rejected(small_scene_config):
    with pytest.raises(TypeError, match="divsions"):
        TerrainScene(small_scene_config, divsions=2)


def test_non_finite_rotation_rejected(scene):
    before = scene.update_rotation(10, 20, 30).copy()
    with pytest.raises(ValueError):
        scene.update_rotation(float("nan"), 0, 0)
    assert scene.model.allclose(before)
    assert scene.config.rotation.x == pytest.approx(10.0)
    scene.config.validate()
