"""Triangle geometry helpers."""

from __future__ import annotations

import numpy as np
import shapely
from shapely.geometry import Polygon as ShapelyPolygon

EPS_AREA = 1e-9


def signed_areas(points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Signed area of each triangle (positive for counter-clockwise).

    Args:
        points: Vertex coordinates, shape (n, 2).
        triangles: Vertex indices, shape (m, 3).

    Returns:
        Array of shape (m,).
    """
    points = np.asarray(points, dtype=float)
    triangles = np.asarray(triangles, dtype=int).reshape(-1, 3)
    a = points[triangles[:, 0]]
    b = points[triangles[:, 1]]
    c = points[triangles[:, 2]]
    ab = b - a
    ac = c - a
    return 0.5 * (ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0])


def orient_counter_clockwise(points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Return triangles reordered so every signed area is non-negative."""
    triangles = np.array(triangles, dtype=int).reshape(-1, 3)
    flip = signed_areas(points, triangles) < 0
    triangles[flip] = triangles[flip][:, [0, 2, 1]]
    return triangles


def triangle_polygon(a, b, c) -> ShapelyPolygon:
    """Shapely polygon for the triangle with corners a, b, c."""
    return ShapelyPolygon([tuple(a), tuple(b), tuple(c)])


def lattice_points_in_triangle(a, b, c) -> np.ndarray:
    """Integer lattice points covered by a triangle, boundary included.

    Args:
        a, b, c: Triangle corners as (x, y).

    Returns:
        Array of shape (k, 2); empty when the triangle covers no lattice point.
    """
    corners = np.array([a, b, c], dtype=float)
    lo = np.ceil(corners.min(axis=0) - EPS_AREA).astype(int)
    hi = np.floor(corners.max(axis=0) + EPS_AREA).astype(int)
    if np.any(hi < lo):
        return np.empty((0, 2))

    xs, ys = np.meshgrid(
        np.arange(lo[0], hi[0] + 1), np.arange(lo[1], hi[1] + 1)
    )
    xs = xs.ravel().astype(float)
    ys = ys.ravel().astype(float)

    polygon = triangle_polygon(a, b, c)
    shapely.prepare(polygon)
    inside = shapely.intersects_xy(polygon, xs, ys)
    return np.column_stack([xs[inside], ys[inside]])


def centroid(a, b, c) -> np.ndarray:
    return (np.asarray(a, dtype=float) + np.asarray(b) + np.asarray(c)) / 3.0
