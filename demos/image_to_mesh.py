"""
Image to Density Mesh Demo

This script demonstrates using densitymesh to turn an image into a
triangle mesh whose density follows the image brightness.

Usage:
    python image_to_mesh.py [IMAGE]

Without IMAGE a synthetic field with two bright blobs is used.

The script will:
1. Read the density field (image luma * alpha, or the synthetic field)
2. Generate the mesh with a steepness-driven point separation
3. Edit a region of the field and regenerate through the live generator
4. Save the mesh as JSON, OBJ and a PNG visualization
"""

import sys
from pathlib import Path

import numpy as np

from densitymesh import (
    DensityField,
    DensityMeshGenerator,
    GenerationSettings,
    configure_logging,
)
from densitymesh.io import read_image, save_density_image, save_mesh

OUTPUT_DIR = Path(__file__).parent / "output"


def synthetic_field(width=128, height=96):
    """Two Gaussian blobs on a dark background."""
    ys, xs = np.mgrid[0:height, 0:width]
    blob_a = np.exp(-((xs - 40) ** 2 + (ys - 40) ** 2) / (2 * 12.0**2))
    blob_b = np.exp(-((xs - 90) ** 2 + (ys - 60) ** 2) / (2 * 8.0**2))
    return DensityField.from_array(255.0 * np.clip(blob_a + blob_b, 0.0, 1.0))


def main():
    configure_logging("INFO")

    if len(sys.argv) > 1:
        field = read_image(sys.argv[1], source="luma-alpha", scale=2)
    else:
        field = synthetic_field()

    settings = GenerationSettings(
        points_separation="2..12",
        visibility_threshold=0.01,
        steepness_threshold=0.01,
        extrude_size=2.0,
    )

    print("Building density mesh...")
    print(f"  Field: {field.width} x {field.height} (scale {field.scale})")
    print(f"  Points separation: {settings.points_separation}")

    with DensityMeshGenerator([], field, settings) as generator:
        mesh = generator.process_wait()
        print(f"\nInitial mesh: {mesh.n_points} points, {mesh.n_triangles} triangles")

        # Paint a bright square and regenerate
        generator.change_map(8, 8, 16, 16, [255] * 256)
        mesh = generator.process_wait()
        print(f"Edited mesh:  {mesh.n_points} points, {mesh.n_triangles} triangles")
        field = generator.map()

    info = mesh.info()
    print(f"  Bounds: {info['bounds']}")

    save_mesh(mesh, OUTPUT_DIR / "mesh.json", fmt="json-pretty")
    save_mesh(mesh, OUTPUT_DIR / "mesh.obj", fmt="obj", field=field)
    save_mesh(mesh, OUTPUT_DIR / "mesh.png", fmt="png", field=field)
    save_density_image(field, OUTPUT_DIR / "steepness.png", steepness=True)
    print(f"\nMesh saved to: {OUTPUT_DIR}")

    return mesh


if __name__ == "__main__":
    main()
