"""Planar triangle mesh container."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from densitymesh.geometry.triangle import signed_areas


class Mesh:
    """Vertices plus triangles given as vertex index triples.

    Args:
        points: Vertex coordinates, shape (n, 2).
        triangles: Vertex indices, shape (m, 3).

    Raises:
        ValueError: If arrays have the wrong shape or an index is out of range.
    """

    def __init__(
        self,
        points: np.ndarray | Iterable[Iterable[float]],
        triangles: np.ndarray | Iterable[Iterable[int]] = (),
    ):
        self._points = np.asarray(points, dtype=float).reshape(-1, 2)
        self._triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

        if len(self._triangles) and (
            self._triangles.min() < 0
            or self._triangles.max() >= len(self._points)
        ):
            raise ValueError(
                f"Triangle indices must lie in [0, {len(self._points)})"
            )

    @classmethod
    def empty(cls) -> Mesh:
        return cls(np.empty((0, 2)), np.empty((0, 3), dtype=np.int64))

    @property
    def points(self) -> np.ndarray:
        """Vertex coordinates, shape (n, 2)."""
        return self._points

    @property
    def triangles(self) -> np.ndarray:
        """Vertex indices, shape (m, 3)."""
        return self._triangles

    @property
    def n_points(self) -> int:
        return len(self._points)

    @property
    def n_triangles(self) -> int:
        return len(self._triangles)

    @property
    def is_empty(self) -> bool:
        """Return True if the mesh has no triangles."""
        return len(self._triangles) == 0

    @property
    def bounds(self) -> tuple[float, float, float, float] | None:
        """Return (minx, miny, maxx, maxy), or None without vertices."""
        if not len(self._points):
            return None
        lo = self._points.min(axis=0)
        hi = self._points.max(axis=0)
        return (float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))

    def areas(self) -> np.ndarray:
        """Signed area of every triangle."""
        return signed_areas(self._points, self._triangles)

    def edges(self) -> np.ndarray:
        """Directed edges (a->b, b->c, c->a) of all triangles, shape (3m, 2)."""
        t = self._triangles
        return np.concatenate([t[:, [0, 1]], t[:, [1, 2]], t[:, [2, 0]]])

    def compact(self) -> Mesh:
        """Drop vertices no triangle references and renumber indices.

        A mesh without triangles is returned unchanged.
        """
        if self.is_empty:
            return self
        used = np.unique(self._triangles)
        if len(used) == len(self._points):
            return self
        remap = np.full(len(self._points), -1, dtype=np.int64)
        remap[used] = np.arange(len(used))
        return Mesh(self._points[used], remap[self._triangles])

    def copy(self) -> Mesh:
        return Mesh(self._points.copy(), self._triangles.copy())

    def info(self) -> dict:
        """Return mesh statistics."""
        return {
            "n_points": self.n_points,
            "n_triangles": self.n_triangles,
            "bounds": self.bounds,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mesh):
            return NotImplemented
        return np.array_equal(self._points, other._points) and np.array_equal(
            self._triangles, other._triangles
        )

    def __repr__(self) -> str:
        return f"Mesh(n_points={self.n_points}, n_triangles={self.n_triangles})"
