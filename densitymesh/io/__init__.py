"""I/O utilities for reading density fields and writing meshes."""

from densitymesh.io.readers import (
    CSVReader,
    ImageReader,
    image_to_samples,
    read_csv,
    read_image,
)
from densitymesh.io.writers import (
    density_image,
    load_mesh,
    mesh_from_dict,
    mesh_to_dict,
    mesh_to_obj,
    render_mesh_image,
    save_density_image,
    save_mesh,
)

__all__ = [
    "CSVReader",
    "ImageReader",
    "image_to_samples",
    "read_csv",
    "read_image",
    "density_image",
    "load_mesh",
    "mesh_from_dict",
    "mesh_to_dict",
    "mesh_to_obj",
    "render_mesh_image",
    "save_density_image",
    "save_mesh",
]
