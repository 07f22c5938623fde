"""densitymesh - triangle meshes whose density follows a scalar field.

Converts a 2D density (height) field, typically taken from an image
channel, into a planar triangle mesh: flat regions get few large
triangles, steep regions many small ones.

Example:
    >>> from densitymesh import DensityField, GenerationSettings, generate_mesh
    >>> field = DensityField.filled(64, 64, 0)
    >>> field.change(24, 24, 16, 16, [255] * 256)
    >>> mesh = generate_mesh(field, settings=GenerationSettings(points_separation=4))
    >>> from densitymesh.io import save_mesh
    >>> save_mesh(mesh, "mesh.obj", fmt="obj")
"""

import logging

from densitymesh.exceptions import (
    ConfigurationError,
    DataLoadError,
    DegenerateGeometryError,
    DensityMeshError,
    InvalidRegionError,
)
from densitymesh.fields import DensityField, SteepnessAnalyzer
from densitymesh.logging_utils import configure_logging, get_logger
from densitymesh.mesh import (
    DensityMeshGenerator,
    Mesh,
    MeshGenerationPipeline,
    ProcessStatus,
    generate_mesh,
)
from densitymesh.settings import DensitySource, GenerationSettings, PointsSeparation

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Main API
    "DensityField",
    "DensityMeshGenerator",
    "GenerationSettings",
    "Mesh",
    "MeshGenerationPipeline",
    "PointsSeparation",
    "DensitySource",
    "ProcessStatus",
    "SteepnessAnalyzer",
    "generate_mesh",
    "configure_logging",
    "get_logger",
    # Exceptions
    "DensityMeshError",
    "InvalidRegionError",
    "DegenerateGeometryError",
    "ConfigurationError",
    "DataLoadError",
]
