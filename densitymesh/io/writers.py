"""Mesh and density field export utilities."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from densitymesh.fields.density import DensityField
from densitymesh.mesh.base import Mesh

MESH_FORMATS = ("json", "json-pretty", "obj", "png")


def mesh_to_dict(mesh: Mesh) -> dict:
    """Return a JSON-compatible dictionary of the mesh.

    Points are ``{"x", "y"}`` objects and triangles ``{"a", "b", "c"}``
    vertex index objects.
    """
    return {
        "points": [{"x": float(x), "y": float(y)} for x, y in mesh.points],
        "triangles": [
            {"a": int(a), "b": int(b), "c": int(c)} for a, b, c in mesh.triangles
        ],
    }


def mesh_from_dict(data: dict) -> Mesh:
    """Inverse of :func:`mesh_to_dict`."""
    points = [(p["x"], p["y"]) for p in data.get("points", [])]
    triangles = [(t["a"], t["b"], t["c"]) for t in data.get("triangles", [])]
    return Mesh(points, triangles)


def mesh_to_obj(mesh: Mesh, width: float, height: float) -> str:
    """Serialize the mesh as Wavefront OBJ text.

    Vertices lie in the z=0 plane, texture coordinates are the positions
    divided by the field size and every face uses a single +z normal.

    Args:
        mesh: Mesh to serialize.
        width: Field-space width used to normalize texture coordinates.
        height: Field-space height used to normalize texture coordinates.
    """
    width = width or 1.0
    height = height or 1.0
    lines = ["o mesh"]
    lines.extend(f"v {x:.6f} {y:.6f} 0.000000" for x, y in mesh.points)
    lines.extend(
        f"vt {x / width:.6f} {y / height:.6f} 0.000000" for x, y in mesh.points
    )
    lines.append("vn 0.000000 0.000000 1.000000")
    for tri in mesh.triangles + 1:
        lines.append("f " + " ".join(f"{i}/{i}/1" for i in tri))
    return "\n".join(lines) + "\n"


def render_mesh_image(mesh: Mesh, background: Image.Image) -> Image.Image:
    """Draw triangle edges, centroids and vertices over an image.

    Edges are green, triangle centroids blue and vertices red.
    """
    image = background.convert("RGBA")
    draw = ImageDraw.Draw(image)
    points = mesh.points
    for tri in mesh.triangles:
        corners = [tuple(points[i]) for i in tri]
        draw.polygon(corners, outline=(0, 255, 0, 255))
        cx, cy = np.mean(points[tri], axis=0)
        draw.point((cx, cy), fill=(0, 0, 255, 255))
    for x, y in points:
        draw.point((x, y), fill=(255, 0, 0, 255))
    return image


def density_image(field: DensityField, steepness: bool = False) -> Image.Image:
    """Grayscale image of the field samples or of their steepness."""
    values = field.steepness if steepness else field.values
    data = (np.clip(values, 0.0, 1.0) * 255.0).astype(np.uint8)
    return Image.fromarray(data)


def save_mesh(
    mesh: Mesh,
    path: str | Path,
    fmt: str = "json",
    field: DensityField | None = None,
    background: Image.Image | None = None,
) -> None:
    """Save mesh to file.

    Args:
        mesh: Mesh to save.
        path: Output file path.
        fmt: One of 'json', 'json-pretty', 'obj' or 'png'.
        field: Density field the mesh was generated from. Required for
            'obj' (texture coordinate size) and for 'png' without
            ``background``.
        background: Image to draw the mesh over for 'png'. Defaults to the
            density image of ``field`` scaled to field space.

    Example:
        >>> save_mesh(mesh, "output/mesh.json", fmt="json-pretty")
    """
    if fmt not in MESH_FORMATS:
        raise ValueError(
            f"Unknown mesh format: {fmt}. Supported: {', '.join(MESH_FORMATS)}"
        )
    if fmt in ("obj", "png") and field is None and background is None:
        raise ValueError(f"Format {fmt!r} requires the density field")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        path.write_text(json.dumps(mesh_to_dict(mesh)), encoding="utf-8")
    elif fmt == "json-pretty":
        path.write_text(json.dumps(mesh_to_dict(mesh), indent=2), encoding="utf-8")
    elif fmt == "obj":
        if field is not None:
            width, height = field.scaled_width, field.scaled_height
        else:
            width, height = background.size
        path.write_text(mesh_to_obj(mesh, width, height), encoding="utf-8")
    else:
        if background is None:
            background = density_image(field).resize(
                (field.scaled_width, field.scaled_height), Image.Resampling.NEAREST
            )
        render_mesh_image(mesh, background).save(path)


def load_mesh(path: str | Path) -> Mesh:
    """Load mesh from a JSON file written by :func:`save_mesh`."""
    with open(path, "r", encoding="utf-8") as f:
        return mesh_from_dict(json.load(f))


def save_density_image(
    field: DensityField, path: str | Path, steepness: bool = False
) -> None:
    """Save the density (or steepness) grid as a grayscale image.

    Args:
        field: Density field.
        path: Output image path; the format follows the extension.
        steepness: Save steepness instead of density.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    density_image(field, steepness=steepness).save(path)
