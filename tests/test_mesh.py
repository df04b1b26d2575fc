"""
Tests for terrain mesh generation and faceted normals.
"""

import numpy as np
import pytest

from terrainwave import InvalidDimensions, InvalidDivisions, SimplexNoise2D, TerrainMesh
from terrainwave import mesh as mesh_mod


@pytest.mark.parametrize("divisions", [1, 2, 3, 7, 16])
def test_buffer_lengths(divisions):
    m = TerrainMesh.generate((20.0, 20.0), divisions)
    expected = 18 * divisions ** 2
    assert m.positions.size == expected
    assert m.colors.size == expected
    assert m.normals.size == expected
    assert m.vertex_count == 6 * divisions ** 2
    assert m.triangle_count == 2 * divisions ** 2
    for arr in (m.positions, m.colors, m.normals):
        assert arr.dtype == np.float32
        assert arr.ndim == 1


def test_two_by_two_grid_covers_extent():
    m = TerrainMesh.generate((20, 20), 2)
    assert m.triangle_count == 8
    assert m.vertex_count == 24
    assert m.positions.size == 72
    lo, hi = m.bounds()
    np.testing.assert_allclose(lo, (-10.0, -10.0, 0.0))
    np.testing.assert_allclose(hi, (10.0, 10.0, 0.0))


def test_first_cell_vertex_order():
    m = TerrainMesh.generate((20.0, 20.0), 2)
    first_cell = m.positions.reshape(-1, 3)[:6]
    a, b, c, e = (-10.0, -10.0, 0.0), (0.0, -10.0, 0.0), (-10.0, 0.0, 0.0), (0.0, 0.0, 0.0)
    np.testing.assert_allclose(first_cell, [a, b, c, b, e, c])


def test_cells_emitted_row_by_row():
    m = TerrainMesh.generate((4.0, 2.0), 2)
    pts = m.positions.reshape(-1, 6, 3)
    # Second cell continues along X, third starts the next row along Y
    np.testing.assert_allclose(pts[1, 0], (0.0, -1.0, 0.0))
    np.testing.assert_allclose(pts[2, 0], (-2.0, 0.0, 0.0))


def test_rectangular_extent():
    m = TerrainMesh.generate((8.0, 2.0), 4)
    lo, hi = m.bounds()
    np.testing.assert_allclose(lo, (-4.0, -1.0, 0.0))
    np.testing.assert_allclose(hi, (4.0, 1.0, 0.0))


def test_flat_grid_normals_point_up():
    m = TerrainMesh.generate((20.0, 20.0), 5)
    normals = m.normals.reshape(-1, 3)
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (normals.shape[0], 1)), atol=1e-6)


def test_generate_normals_is_idempotent():
    m = TerrainMesh.generate((20.0, 20.0), 6).displaced(SimplexNoise2D(3), amplitude=2.0, scale=(0.2, 0.2))
    first = m.normals.copy()
    second = m.generate_normals()
    np.testing.assert_array_equal(first, second)
    np.testing.assert_array_equal(m.normals, first)


def test_normals_unit_length_on_displaced_surface():
    m = TerrainMesh.generate((10.0, 10.0), 12).displaced(SimplexNoise2D(1), amplitude=3.0, scale=(0.3, 0.3))
    lengths = np.linalg.norm(m.normals.reshape(-1, 3), axis=1)
    np.testing.assert_allclose(lengths, 1.0, atol=1e-5)


def test_normals_are_faceted():
    m = TerrainMesh.generate((10.0, 10.0), 4).displaced(SimplexNoise2D(2), amplitude=1.5, scale=(0.4, 0.4))
    per_vertex = m.normals.reshape(-1, 3, 3)
    np.testing.assert_array_equal(per_vertex[:, 0], per_vertex[:, 1])
    np.testing.assert_array_equal(per_vertex[:, 0], per_vertex[:, 2])


def test_tilted_plane_normal():
    m = TerrainMesh.generate((6.0, 6.0), 3).displaced(lambda x, y: x)
    expected = np.array([-1.0, 0.0, 1.0]) / np.sqrt(2.0)
    normals = m.normals.reshape(-1, 3)
    np.testing.assert_allclose(normals, np.tile(expected, (normals.shape[0], 1)), atol=1e-6)


def test_displacement_keeps_shared_points_welded():
    m = TerrainMesh.generate((10.0, 10.0), 3).displaced(SimplexNoise2D(9), amplitude=2.0, scale=(0.5, 0.5))
    pts = m.positions.reshape(-1, 3)
    # Corner b of cell 0 is corner a of cell 1
    np.testing.assert_array_equal(pts[1], pts[6])
    # Corner c of cell 0 is corner a of the first cell in the next row
    np.testing.assert_array_equal(pts[2], pts[3 * 6])
    assert np.ptp(pts[:, 2]) > 0.0


def test_displaced_returns_new_mesh():
    flat = TerrainMesh.generate((10.0, 10.0), 3)
    bumpy = flat.displaced(lambda x, y: np.ones_like(x), amplitude=4.0)
    assert bumpy is not flat
    assert np.all(flat.positions.reshape(-1, 3)[:, 2] == 0.0)
    assert np.all(bumpy.positions.reshape(-1, 3)[:, 2] == 4.0)
    np.testing.assert_array_equal(bumpy.colors, flat.colors)


def test_displacement_shape_checked():
    flat = TerrainMesh.generate((10.0, 10.0), 3)
    with pytest.raises(ValueError):
        flat.displaced(lambda x, y: np.zeros(3))


def test_colors_are_deterministic_and_bounded():
    a = TerrainMesh.generate((20.0, 20.0), 5)
    b = TerrainMesh.generate((20.0, 20.0), 5)
    np.testing.assert_array_equal(a.colors, b.colors)
    assert a.colors.min() >= 0.0 and a.colors.max() <= 1.0
    rgb = a.colors.reshape(-1, 3)
    np.testing.assert_allclose(rgb[0], mesh_mod.COLOR_LOW, atol=1e-6)
    np.testing.assert_allclose(rgb.max(axis=0), mesh_mod.COLOR_HIGH, atol=1e-6)


def test_colors_depend_only_on_grid_point():
    # Same grid divisions with a different physical size gives the same colors
    a = TerrainMesh.generate((20.0, 20.0), 4)
    b = TerrainMesh.generate((3.0, 7.0), 4)
    np.testing.assert_array_equal(a.colors, b.colors)


def test_buffers_are_read_only():
    m = TerrainMesh.generate((2.0, 2.0), 1)
    with pytest.raises(ValueError):
        m.positions[0] = 5.0


def test_zero_divisions_rejected():
    with pytest.raises(InvalidDivisions):
        TerrainMesh.generate((20.0, 20.0), 0)
    with pytest.raises(InvalidDimensions):
        TerrainMesh.generate((20.0, 20.0), 0)


@pytest.mark.parametrize("divisions", [-1, 2.5, "4", None])
def test_bad_divisions_rejected(divisions):
    with pytest.raises(InvalidDimensions):
        TerrainMesh.generate((20.0, 20.0), divisions)


@pytest.mark.parametrize("size", [(0.0, 10.0), (10.0, -1.0), (float("inf"), 1.0), (1.0,), 5.0])
def test_bad_size_rejected(size):
    with pytest.raises(InvalidDimensions):
        TerrainMesh.generate(size, 2)


def test_face_normals_degenerate_triangle():
    tri = np.zeros(9, dtype=np.float32)
    np.testing.assert_allclose(mesh_mod.face_normals(tri), [[0.0, 0.0, 1.0]])


def test_as_dict_keys():
    m = mesh_mod.generate((2.0, 2.0), 1)
    data = m.as_dict()
    assert set(data) == {"positions", "colors", "normals"}
    assert data["positions"] is m.positions


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scale": (float("nan"), 1.0)},
        {"scale": (1.0, float("inf"))},
        {"amplitude": float("nan")},
    ],
)
def test_displacement_rejects_non_finite_parameters(kwargs):
    flat = TerrainMesh.generate((4.0, 4.0), 2)
    with pytest.raises(InvalidDimensions):
        flat.displaced(lambda x, y: x, **kwargs)


def test_displacement_rejects_non_finite_heights():
    flat = TerrainMesh.generate((4.0, 4.0), 2)
    with pytest.raises(InvalidDimensions, match="finite"):
        flat.displaced(lambda x, y: np.where(x > 0.0, np.inf, 0.0))
