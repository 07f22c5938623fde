"""Border skirt extrusion for density meshes."""

from __future__ import annotations

from collections import Counter, defaultdict

import numpy as np

from densitymesh.exceptions import ConfigurationError
from densitymesh.logging_utils import get_logger
from densitymesh.mesh.base import Mesh

logger = get_logger(__name__)


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def _unit(vector: np.ndarray) -> np.ndarray | None:
    length = float(np.hypot(vector[0], vector[1]))
    if length <= 1e-12:
        return None
    return vector / length


class MeshExtruder:
    """Adds a skirt of quads around the mesh boundary.

    A boundary edge is an edge used by exactly one triangle. Every boundary
    edge ``a -> b`` (in its triangle's counter-clockwise winding) receives
    two new vertices ``a'`` and ``b'``, offset outward by ``size`` along the
    miter normal at ``a`` and ``b``, and two triangles ``[b, a, a']`` and
    ``[a', b', b]``. Interior topology is left untouched.

    Args:
        size: Skirt size. ``None`` or 0 makes extrusion the identity.

    Raises:
        ConfigurationError: If size is negative.

    Example:
        >>> skirted = MeshExtruder(2.0).extrude(mesh)
        >>> skirted.n_triangles == mesh.n_triangles + 2 * len(boundary_edges(mesh))
        True
    """

    def __init__(self, size: float | None):
        if size is not None and size < 0:
            raise ConfigurationError("Extrude size must be >= 0")
        self._size = float(size) if size else 0.0

    @property
    def size(self) -> float:
        return self._size

    @property
    def is_identity(self) -> bool:
        return self._size == 0.0

    def extrude(self, mesh: Mesh) -> Mesh:
        """Return ``mesh`` with a border skirt appended."""
        if self.is_identity or mesh.is_empty:
            return mesh

        points = mesh.points
        boundary = boundary_edges(mesh)

        outgoing = defaultdict(list)
        incoming = defaultdict(list)
        for a, b in boundary:
            outgoing[a].append(b)
            incoming[b].append(a)

        def normal(a: int, b: int) -> np.ndarray:
            dx, dy = points[b] - points[a]
            n = _unit(np.array([dy, -dx]))
            return n if n is not None else np.zeros(2)

        def miter(edge_normal, neighbours, neighbour_normal):
            if len(neighbours) != 1:
                return edge_normal
            joined = _unit(edge_normal + neighbour_normal(neighbours[0]))
            return joined if joined is not None else edge_normal

        new_points = []
        new_triangles = []
        base = len(points)
        for a, b in boundary:
            n_edge = normal(a, b)
            n_a = miter(n_edge, incoming[a], lambda p: normal(p, a))
            n_b = miter(n_edge, outgoing[b], lambda q: normal(b, q))
            ea = base + len(new_points)
            eb = ea + 1
            new_points.append(points[a] + n_a * self._size)
            new_points.append(points[b] + n_b * self._size)
            new_triangles.append([b, a, ea])
            new_triangles.append([ea, eb, b])

        logger.debug(
            "Extruded %d boundary edges by %.3f", len(boundary), self._size
        )
        return Mesh(
            np.vstack([points, np.asarray(new_points).reshape(-1, 2)]),
            np.vstack(
                [
                    mesh.triangles,
                    np.asarray(new_triangles, dtype=np.int64).reshape(-1, 3),
                ]
            ),
        )


def boundary_edges(mesh: Mesh) -> list[tuple[int, int]]:
    """Directed edges used by exactly one triangle.

    The edge -> triangle-count map is rebuilt on every call.
    """
    edges = [(int(a), int(b)) for a, b in mesh.edges()]
    counts = Counter(_edge_key(a, b) for a, b in edges)
    return [(a, b) for a, b in edges if counts[_edge_key(a, b)] == 1]


def extrude(mesh: Mesh, extrude_size: float | None) -> Mesh:
    """Convenience function for one-shot extrusion."""
    return MeshExtruder(extrude_size).extrude(mesh)
