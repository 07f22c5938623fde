"""Mesh generation utilities."""

from densitymesh.mesh.base import Mesh
from densitymesh.mesh.extrusion import MeshExtruder, boundary_edges, extrude
from densitymesh.mesh.generator import (
    DensityMeshGenerator,
    GeneratorState,
    ProcessStatus,
)
from densitymesh.mesh.pipeline import MeshGenerationPipeline, generate_mesh
from densitymesh.mesh.sampling import PointSampler, sample_points
from densitymesh.mesh.triangulation import Triangulator, triangulate
from densitymesh.mesh.visibility import VisibilityPruner, prune_invisible

__all__ = [
    "Mesh",
    "MeshExtruder",
    "boundary_edges",
    "extrude",
    "DensityMeshGenerator",
    "GeneratorState",
    "ProcessStatus",
    "MeshGenerationPipeline",
    "generate_mesh",
    "PointSampler",
    "sample_points",
    "Triangulator",
    "triangulate",
    "VisibilityPruner",
    "prune_invisible",
]
