"""Planar geometry helpers."""

from densitymesh.geometry.triangle import (
    EPS_AREA,
    lattice_points_in_triangle,
    orient_counter_clockwise,
    signed_areas,
    triangle_polygon,
)

__all__ = [
    "EPS_AREA",
    "lattice_points_in_triangle",
    "orient_counter_clockwise",
    "signed_areas",
    "triangle_polygon",
]
