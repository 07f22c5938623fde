import numpy as np
import pytest

from densitymesh import Mesh
from densitymesh.geometry import signed_areas
from densitymesh.mesh import Triangulator, triangulate
from densitymesh.mesh.triangulation import is_degenerate


def test_single_triangle():
    mesh = triangulate([(0, 0), (1, 0), (0, 1)])
    assert mesh.n_points == 3
    assert mesh.n_triangles == 1
    assert signed_areas(mesh.points, mesh.triangles)[0] == pytest.approx(0.5)


def test_square_gives_two_ccw_triangles():
    points = [(0, 0), (4, 0), (0, 4), (4, 4)]
    mesh = Triangulator().triangulate(points)
    assert mesh.n_triangles == 2
    assert np.all(mesh.areas() > 0)
    assert mesh.areas().sum() == pytest.approx(16.0)
    # Vertices keep the caller's order
    np.testing.assert_array_equal(mesh.points, points)


@pytest.mark.parametrize(
    "points",
    [
        [],
        [(0, 0)],
        [(0, 0), (1, 1)],
        [(0, 0), (0, 0), (0, 0)],
        [(0, 0), (1, 1), (2, 2), (3, 3)],
    ],
)
def test_degenerate_input_yields_no_triangles(points):
    assert is_degenerate(np.array(points, dtype=float).reshape(-1, 2))
    mesh = triangulate(points)
    assert mesh.is_empty
    assert mesh.n_points == len(points)


def test_triangulation_is_deterministic():
    # Co-circular grid points have several valid Delaunay triangulations
    xs, ys = np.meshgrid(np.arange(4.0), np.arange(4.0))
    points = np.column_stack([xs.ravel(), ys.ravel()])
    first = triangulate(points)
    second = triangulate(points.copy())
    assert first == second
    assert first.areas().sum() == pytest.approx(9.0)


def test_duplicate_points_are_ignored():
    mesh = triangulate([(0, 0), (2, 0), (0, 2), (2, 0)])
    assert mesh.n_triangles == 1
    assert mesh.n_points == 4


def test_mesh_validates_indices():
    with pytest.raises(ValueError):
        Mesh([(0, 0), (1, 0)], [(0, 1, 2)])


def test_mesh_compact_and_info():
    mesh = Mesh([(0, 0), (5, 5), (1, 0), (0, 1)], [(0, 2, 3)])
    compact = mesh.compact()
    assert compact.n_points == 3
    np.testing.assert_array_equal(compact.triangles, [[0, 1, 2]])
    assert compact.info() == {
        "n_points": 3,
        "n_triangles": 1,
        "bounds": (0.0, 0.0, 1.0, 1.0),
    }
    # Vertex-only meshes are left alone
    assert Mesh([(0, 0)]).compact().n_points == 1
