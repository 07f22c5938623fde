"""Delaunay triangulation of point clouds using scipy."""

from __future__ import annotations

from typing import Iterable

import numpy as np
from scipy.spatial import Delaunay, QhullError

from densitymesh.geometry.triangle import (
    EPS_AREA,
    orient_counter_clockwise,
    signed_areas,
)
from densitymesh.logging_utils import get_logger
from densitymesh.mesh.base import Mesh

logger = get_logger(__name__)


def is_degenerate(points: np.ndarray) -> bool:
    """Return True if the points cannot span a single triangle.

    That is the case for fewer than three distinct points or when all
    points are collinear.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(np.unique(points, axis=0)) < 3:
        return True
    centered = points - points.mean(axis=0)
    return np.linalg.matrix_rank(centered) < 2


class Triangulator:
    """Planar Delaunay triangulator.

    Wraps ``scipy.spatial.Delaunay`` (Qhull). Points are fed to Qhull in
    lexicographic (x, then y) order, which fixes the tie-break for
    co-circular points, and the resulting indices are mapped back to the
    caller's order. Triangles with area at or below ``min_area`` are
    dropped and the rest are oriented counter-clockwise.

    Degenerate input (fewer than three distinct points, or all collinear)
    is not an error: the returned mesh keeps the points as vertices and has
    no triangles. Duplicate points stay unreferenced.

    Args:
        min_area: Area below which a triangle counts as degenerate.

    Example:
        >>> mesh = Triangulator().triangulate([(0, 0), (1, 0), (0, 1)])
        >>> mesh.n_triangles
        1
    """

    def __init__(self, min_area: float = EPS_AREA):
        self._min_area = min_area

    def triangulate(self, points: Iterable[Iterable[float]] | np.ndarray) -> Mesh:
        """Return the triangulated mesh of ``points``."""
        if not isinstance(points, np.ndarray):
            points = list(points)
        points = np.array(points, dtype=float).reshape(-1, 2)

        if is_degenerate(points):
            logger.debug("Degenerate point set (%d points), no triangles", len(points))
            return Mesh(points, np.empty((0, 3), dtype=np.int64))

        order = np.lexsort((points[:, 1], points[:, 0]))
        try:
            delaunay = Delaunay(points[order])
        except QhullError as e:
            logger.warning("Qhull rejected %d points: %s", len(points), e)
            return Mesh(points, np.empty((0, 3), dtype=np.int64))

        triangles = order[delaunay.simplices]
        triangles = orient_counter_clockwise(points, triangles)
        keep = signed_areas(points, triangles) > self._min_area
        triangles = triangles[keep]

        # Stable triangle order independent of Qhull's internal ordering.
        triangles = triangles[np.lexsort(triangles.T[::-1])]

        logger.debug(
            "Triangulated %d points into %d triangles", len(points), len(triangles)
        )
        return Mesh(points, triangles)


def triangulate(points: Iterable[Iterable[float]] | np.ndarray) -> Mesh:
    """Convenience function to triangulate a point cloud."""
    return Triangulator().triangulate(points)
