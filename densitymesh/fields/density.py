"""Density field container."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from densitymesh.exceptions import ConfigurationError, InvalidRegionError
from densitymesh.fields.steepness import compute_steepness

MAX_SAMPLE = 255.0


class DensityField:
    """2D grid of density samples with their steepness.

    Raw samples are given row-major in the 0..255 range and stored
    normalized to [0, 1]. Grid cell ``(col, row)`` is located at point
    ``(col * scale, row * scale)`` in field space.

    Args:
        width: Number of columns.
        height: Number of rows.
        data: Raw samples, ``width * height`` values in 0..255.
        scale: Size of one grid cell in field-space units.

    Raises:
        InvalidRegionError: If the sample count does not match the grid.

    Example:
        >>> field = DensityField(2, 2, [0, 255, 255, 0])
        >>> field.value_at(1, 0)
        1.0
    """

    def __init__(
        self,
        width: int,
        height: int,
        data: Sequence[float] | np.ndarray,
        scale: int = 1,
    ):
        if width < 0 or height < 0:
            raise ConfigurationError("Field dimensions must not be negative")
        if scale < 1:
            raise ConfigurationError("Scale must be >= 1")

        raw = np.asarray(data, dtype=float).ravel()
        if raw.size != width * height:
            raise InvalidRegionError(
                f"Data length ({raw.size}) does not match "
                f"{width}x{height} field ({width * height})"
            )

        self._width = int(width)
        self._height = int(height)
        self._scale = int(scale)
        self._values = np.clip(raw / MAX_SAMPLE, 0.0, 1.0).reshape(
            self._height, self._width
        )
        self._steepness = compute_steepness(self._values)

    @classmethod
    def from_array(cls, values: np.ndarray, scale: int = 1) -> DensityField:
        """Create a field from a 2D array of raw 0..255 samples."""
        values = np.asarray(values, dtype=float)
        if values.ndim != 2:
            raise ConfigurationError("values must be a 2D array")
        height, width = values.shape
        return cls(width, height, values, scale=scale)

    @classmethod
    def filled(
        cls, width: int, height: int, value: float = 0.0, scale: int = 1
    ) -> DensityField:
        """Create a field with every raw sample set to ``value``."""
        return cls(width, height, np.full(width * height, value), scale=scale)

    @property
    def width(self) -> int:
        """Number of grid columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of grid rows."""
        return self._height

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def shape(self) -> tuple[int, int]:
        """Grid shape as (height, width)."""
        return (self._height, self._width)

    @property
    def scaled_width(self) -> int:
        """Field-space width."""
        return self._width * self._scale

    @property
    def scaled_height(self) -> int:
        """Field-space height."""
        return self._height * self._scale

    @property
    def is_empty(self) -> bool:
        return self._width == 0 or self._height == 0

    @property
    def values(self) -> np.ndarray:
        """Normalized samples, shape (height, width). Read-only view."""
        view = self._values.view()
        view.flags.writeable = False
        return view

    @property
    def steepness(self) -> np.ndarray:
        """Steepness per cell, shape (height, width). Read-only view."""
        view = self._steepness.view()
        view.flags.writeable = False
        return view

    def contains(self, col: int, row: int) -> bool:
        """Return True if (col, row) is a valid grid index."""
        return 0 <= col < self._width and 0 <= row < self._height

    def value_at(self, col: int, row: int) -> float:
        """Normalized sample at a grid index.

        Raises:
            InvalidRegionError: If the index lies outside the grid.
        """
        if not self.contains(col, row):
            raise InvalidRegionError(
                f"Cell ({col}, {row}) outside {self._width}x{self._height} field"
            )
        return float(self._values[row, col])

    def steepness_at(self, col: int, row: int) -> float:
        """Steepness at a grid index.

        Raises:
            InvalidRegionError: If the index lies outside the grid.
        """
        if not self.contains(col, row):
            raise InvalidRegionError(
                f"Cell ({col}, {row}) outside {self._width}x{self._height} field"
            )
        return float(self._steepness[row, col])

    def value_at_point(self, x: float, y: float) -> float:
        """Normalized sample under a field-space point, 0 outside the grid."""
        col = int(np.floor(x / self._scale))
        row = int(np.floor(y / self._scale))
        if self.contains(col, row):
            return float(self._values[row, col])
        return 0.0

    def values_at_points(self, points: np.ndarray) -> np.ndarray:
        """Vectorized :meth:`value_at_point` for an (n, 2) array."""
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        cols = np.floor(points[:, 0] / self._scale).astype(int)
        rows = np.floor(points[:, 1] / self._scale).astype(int)
        inside = (
            (cols >= 0) & (cols < self._width) & (rows >= 0) & (rows < self._height)
        )
        result = np.zeros(len(points))
        result[inside] = self._values[rows[inside], cols[inside]]
        return result

    def steepness_at_point(self, x: float, y: float) -> float:
        """Steepness under a field-space point, 0 outside the grid."""
        col = int(np.floor(x / self._scale))
        row = int(np.floor(y / self._scale))
        if self.contains(col, row):
            return float(self._steepness[row, col])
        return 0.0

    def validate_region(self, col: int, row: int, width: int, height: int) -> None:
        """Raise InvalidRegionError unless the rectangle lies inside the grid."""
        if width < 0 or height < 0:
            raise InvalidRegionError(
                f"Region size must not be negative, got {width}x{height}"
            )
        if (
            col < 0
            or row < 0
            or col + width > self._width
            or row + height > self._height
        ):
            raise InvalidRegionError(
                f"Region ({col}, {row}, {width}x{height}) exceeds "
                f"{self._width}x{self._height} field"
            )

    def change(
        self,
        col: int,
        row: int,
        width: int,
        height: int,
        data: Sequence[float] | np.ndarray,
    ) -> None:
        """Overwrite a sub-rectangle with raw 0..255 samples.

        The field is left untouched when the region or data are invalid.

        Raises:
            InvalidRegionError: If the rectangle exceeds the grid or the
                sample count differs from ``width * height``.
        """
        self.validate_region(col, row, width, height)
        raw = np.asarray(data, dtype=float).ravel()
        if raw.size != width * height:
            raise InvalidRegionError(
                f"Data length ({raw.size}) does not match "
                f"{width}x{height} region ({width * height})"
            )
        if width == 0 or height == 0:
            return

        block = np.clip(raw / MAX_SAMPLE, 0.0, 1.0).reshape(height, width)
        self._values[row : row + height, col : col + width] = block

        # Steepness of a cell depends on its 8 neighbours only.
        fy = max(row - 1, 0)
        fx = max(col - 1, 0)
        ty = min(row + height + 1, self._height)
        tx = min(col + width + 1, self._width)
        py = max(fy - 1, 0)
        px = max(fx - 1, 0)
        window = compute_steepness(
            self._values[py : min(ty + 1, self._height), px : min(tx + 1, self._width)]
        )
        self._steepness[fy:ty, fx:tx] = window[fy - py : ty - py, fx - px : tx - px]

    def crop(self, col: int, row: int, width: int, height: int) -> DensityField:
        """Return a new field holding the rectangle clipped to the grid."""
        fx = min(max(col, 0), self._width)
        fy = min(max(row, 0), self._height)
        tx = min(max(col + width, fx), self._width)
        ty = min(max(row + height, fy), self._height)
        raw = self._values[fy:ty, fx:tx] * MAX_SAMPLE
        return DensityField(tx - fx, ty - fy, raw, scale=self._scale)

    def copy(self) -> DensityField:
        """Return an independent copy of this field."""
        clone = object.__new__(DensityField)
        clone._width = self._width
        clone._height = self._height
        clone._scale = self._scale
        clone._values = self._values.copy()
        clone._steepness = self._steepness.copy()
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DensityField):
            return NotImplemented
        return (
            self.shape == other.shape
            and self._scale == other._scale
            and np.array_equal(self._values, other._values)
        )

    def __repr__(self) -> str:
        return (
            f"DensityField(width={self._width}, height={self._height}, "
            f"scale={self._scale})"
        )
