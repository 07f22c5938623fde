"""Density and steepness fields."""

from densitymesh.fields.density import DensityField
from densitymesh.fields.steepness import SteepnessAnalyzer, compute_steepness

__all__ = ["DensityField", "SteepnessAnalyzer", "compute_steepness"]
