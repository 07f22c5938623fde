"""Steepness (local gradient magnitude) of density fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from densitymesh.fields.density import DensityField


def compute_steepness(values: np.ndarray) -> np.ndarray:
    """Compute per-cell steepness of a 2D sample grid.

    Every 2x2 block of samples ``a b / d c`` scores the mean of its six
    pairwise absolute differences divided by two:

        (|a-b| + |c-d| + |a-c| + |b-d| + |a-d| + |b-c|) / 12

    and a cell's steepness is the sum of the four blocks touching it.
    Samples beyond the grid repeat the nearest edge sample, so border cells
    only see one-sided differences and a constant grid scores zero.

    Args:
        values: Sample grid, shape (height, width).

    Returns:
        Non-negative steepness grid with the same shape.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 2:
        raise ValueError("values must be a 2D array")
    if values.size == 0:
        return np.zeros(values.shape)

    padded = np.pad(values, 1, mode="edge")
    a = padded[:-1, :-1]
    b = padded[:-1, 1:]
    c = padded[1:, 1:]
    d = padded[1:, :-1]
    blocks = (
        np.abs(a - b)
        + np.abs(c - d)
        + np.abs(a - c)
        + np.abs(b - d)
        + np.abs(a - d)
        + np.abs(b - c)
    ) / 12.0

    return blocks[:-1, :-1] + blocks[:-1, 1:] + blocks[1:, :-1] + blocks[1:, 1:]


class SteepnessAnalyzer:
    """Derives steepness fields from density fields.

    Example:
        >>> steepness = SteepnessAnalyzer().analyze(field)
        >>> steepness.shape == field.shape
        True
    """

    def analyze(self, field: DensityField) -> np.ndarray:
        """Return the steepness grid of ``field``, shape (height, width)."""
        return compute_steepness(field.values)
