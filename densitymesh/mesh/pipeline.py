"""One-shot density mesh generation pipeline."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from densitymesh.exceptions import DegenerateGeometryError
from densitymesh.fields.density import DensityField
from densitymesh.fields.steepness import SteepnessAnalyzer
from densitymesh.logging_utils import get_logger
from densitymesh.mesh.base import Mesh
from densitymesh.mesh.extrusion import MeshExtruder
from densitymesh.mesh.sampling import PointSampler, ProgressCallback
from densitymesh.mesh.triangulation import Triangulator
from densitymesh.mesh.visibility import VisibilityPruner
from densitymesh.settings import GenerationSettings

logger = get_logger(__name__)


class MeshGenerationPipeline:
    """Turns a density field into a triangle mesh.

    Runs the stages in a fixed order:
    1. Analyze steepness of the density field
    2. Sample a point cloud (seed points, field corners, steep cells)
    3. Triangulate the point cloud
    4. Prune invisible triangles (unless ``keep_invisible_triangles``)
    5. Extrude a border skirt (if ``extrude_size`` is set)

    Args:
        settings: Generation settings. Defaults to ``GenerationSettings()``.
        allow_empty: If True, a point cloud that cannot be triangulated
            yields a vertex-only mesh instead of raising.
        progress: Optional sampling progress callback
            ``(current, limit, fraction)``.

    Example:
        >>> from densitymesh import DensityField, MeshGenerationPipeline
        >>> field = DensityField.filled(64, 64, 0)
        >>> field.change(20, 20, 8, 8, [255] * 64)
        >>> mesh = MeshGenerationPipeline().generate(field)
    """

    def __init__(
        self,
        settings: GenerationSettings | None = None,
        allow_empty: bool = False,
        progress: ProgressCallback | None = None,
    ):
        self._settings = settings or GenerationSettings()
        self._allow_empty = allow_empty
        self._analyzer = SteepnessAnalyzer()
        self._sampler = PointSampler(progress=progress)
        self._triangulator = Triangulator()
        self._pruner = VisibilityPruner()

    @property
    def settings(self) -> GenerationSettings:
        """Return the generation settings."""
        return self._settings

    def generate(
        self,
        field: DensityField,
        seed_points: Iterable[Iterable[float]] | np.ndarray = (),
        settings: GenerationSettings | None = None,
    ) -> Mesh:
        """Generate the mesh of ``field``.

        Args:
            field: Density field to mesh. Not modified.
            seed_points: Extra points that must appear in the point cloud.
            settings: Settings for this run only. Defaults to the
                pipeline settings.

        Returns:
            The finished mesh.

        Raises:
            DegenerateGeometryError: If fewer than three usable points exist
                after sampling and ``allow_empty`` is False.
        """
        settings = settings or self._settings

        steepness = self._analyzer.analyze(field)
        points = self._sampler.sample(field, steepness, seed_points, settings)

        mesh = self._triangulator.triangulate(points)
        if mesh.is_empty:
            message = (
                f"Cannot triangulate {len(points)} points sampled from {field!r}"
            )
            if not self._allow_empty:
                raise DegenerateGeometryError(message)
            logger.warning(message)
            return mesh

        mesh = self._pruner.prune(mesh, field, settings)
        mesh = MeshExtruder(settings.extrude_size).extrude(mesh)

        logger.debug(
            "Generated mesh with %d points and %d triangles",
            mesh.n_points,
            mesh.n_triangles,
        )
        return mesh


def generate_mesh(
    field: DensityField,
    seed_points: Iterable[Iterable[float]] | np.ndarray = (),
    settings: GenerationSettings | None = None,
    allow_empty: bool = False,
) -> Mesh:
    """Convenience function to generate a density mesh.

    Args:
        field: Density field to mesh.
        seed_points: Extra points that must appear in the point cloud.
        settings: Generation settings. Defaults to ``GenerationSettings()``.
        allow_empty: Return a vertex-only mesh instead of raising
            DegenerateGeometryError.

    Returns:
        The finished mesh.
    """
    pipeline = MeshGenerationPipeline(settings, allow_empty=allow_empty)
    return pipeline.generate(field, seed_points)
