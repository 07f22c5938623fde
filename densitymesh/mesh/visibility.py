"""Visibility-based triangle pruning."""

from __future__ import annotations

import numpy as np

from densitymesh.fields.density import DensityField
from densitymesh.geometry.triangle import centroid, lattice_points_in_triangle
from densitymesh.logging_utils import get_logger
from densitymesh.mesh.base import Mesh
from densitymesh.settings import GenerationSettings

logger = get_logger(__name__)


def coverage_score(a, b, c, field: DensityField) -> float:
    """Mean normalized density under a triangle.

    Samples the field at every integer field-space position the triangle
    covers (boundary included); a triangle covering none is sampled at its
    centroid.
    """
    samples = lattice_points_in_triangle(a, b, c)
    if len(samples) == 0:
        samples = centroid(a, b, c).reshape(1, 2)
    return float(field.values_at_points(samples).mean())


class VisibilityPruner:
    """Removes triangles covering too little density.

    Each triangle is scored with :func:`coverage_score`; triangles scoring
    below ``visibility_threshold`` are dropped, then vertices no longer
    referenced are removed and indices renumbered. Pruning is local: the
    result may be disconnected. When every triangle is pruned the vertices
    are kept with an empty triangle list.

    With ``keep_invisible_triangles`` set the mesh is returned unchanged.
    """

    def scores(self, mesh: Mesh, field: DensityField) -> np.ndarray:
        """Coverage score of every triangle, shape (m,)."""
        points = mesh.points
        return np.array(
            [
                coverage_score(points[a], points[b], points[c], field)
                for a, b, c in mesh.triangles
            ],
            dtype=float,
        )

    def prune(
        self, mesh: Mesh, field: DensityField, settings: GenerationSettings
    ) -> Mesh:
        """Return ``mesh`` without its invisible triangles."""
        if settings.keep_invisible_triangles or mesh.is_empty:
            return mesh

        keep = self.scores(mesh, field) >= settings.visibility_threshold
        removed = int(np.count_nonzero(~keep))
        logger.debug(
            "Pruned %d of %d triangles (threshold %.4f)",
            removed,
            mesh.n_triangles,
            settings.visibility_threshold,
        )
        return Mesh(mesh.points, mesh.triangles[keep]).compact()


def prune_invisible(
    mesh: Mesh, field: DensityField, settings: GenerationSettings
) -> Mesh:
    """Convenience function for one-shot pruning."""
    return VisibilityPruner().prune(mesh, field, settings)
