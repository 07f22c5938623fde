"""Readers producing density fields from images and CSV files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from densitymesh.exceptions import DataLoadError
from densitymesh.fields.density import DensityField
from densitymesh.settings import DensitySource


def image_to_samples(image: Image.Image, source: DensitySource) -> np.ndarray:
    """Extract raw 0..255 density samples from one image channel.

    Args:
        image: Pillow image in any mode.
        source: Channel to use. ``LUMA_ALPHA`` multiplies luminosity by
            alpha.

    Returns:
        Array of shape (height, width).
    """
    source = DensitySource(source)
    if source is DensitySource.LUMA:
        return np.asarray(image.convert("L"), dtype=float)
    if source is DensitySource.LUMA_ALPHA:
        la = np.asarray(image.convert("LA"), dtype=float)
        return np.floor(la[..., 0] * la[..., 1] / 255.0)

    rgba = np.asarray(image.convert("RGBA"), dtype=float)
    channel = {
        DensitySource.RED: 0,
        DensitySource.GREEN: 1,
        DensitySource.BLUE: 2,
        DensitySource.ALPHA: 3,
    }[source]
    return rgba[..., channel]


class ImageReader:
    """Reader turning an image channel into a density field.

    Args:
        source: Image channel used as density. Default: luma * alpha.
        scale: Integer downscale factor. The image is resized to
            ``size // scale`` with Lanczos resampling and the field keeps
            ``scale`` so mesh coordinates match the original image.
    """

    def __init__(
        self,
        source: DensitySource | str = DensitySource.LUMA_ALPHA,
        scale: int = 1,
    ):
        self.source = DensitySource(source)
        self.scale = max(int(scale), 1)

    def read(self, path: str | Path) -> DensityField:
        """Read a density field from an image file.

        Raises:
            DataLoadError: If the file is missing or not a readable image.
        """
        path = Path(path)

        if not path.exists():
            raise DataLoadError(f"File not found: {path}")

        try:
            with Image.open(path) as image:
                image.load()
                return self.from_image(image)
        except (UnidentifiedImageError, OSError) as e:
            raise DataLoadError(f"Failed to read image {path}: {e}") from e

    def from_image(self, image: Image.Image) -> DensityField:
        """Build a density field from an in-memory image."""
        if self.scale > 1:
            size = (
                max(image.width // self.scale, 1),
                max(image.height // self.scale, 1),
            )
            image = image.resize(size, Image.Resampling.LANCZOS)
        samples = image_to_samples(image, self.source)
        return DensityField.from_array(samples, scale=self.scale)


class CSVReader:
    """Reader for CSV files holding a density grid.

    Expected format: CSV with integer cell columns and a raw 0..255 value
    column. Default column names are 'x', 'y', 'value'. Cells missing from
    the file are set to ``fill``.

    Args:
        x_col: Name of column index column. Default: 'x'.
        y_col: Name of row index column. Default: 'y'.
        value_col: Name of value column. Default: 'value'.
        delimiter: CSV delimiter. Default: ','.
        fill: Raw value of missing cells. Default: 0.
    """

    def __init__(
        self,
        x_col: str = "x",
        y_col: str = "y",
        value_col: str = "value",
        delimiter: str = ",",
        fill: float = 0.0,
    ):
        self.x_col = x_col
        self.y_col = y_col
        self.value_col = value_col
        self.delimiter = delimiter
        self.fill = fill

    def _columns(self, path: Path) -> list[int]:
        """Indices of the cell and value columns in the header row."""
        with open(path, "r", encoding="utf-8-sig") as f:
            names = [name.strip() for name in f.readline().split(self.delimiter)]
        wanted = (self.x_col, self.y_col, self.value_col)
        missing = [name for name in wanted if name not in names]
        if missing:
            raise DataLoadError(
                f"Missing column(s) {missing} in {path.name}, header is {names}"
            )
        return [names.index(name) for name in wanted]

    def read(self, path: str | Path, scale: int = 1) -> DensityField:
        """Read a density field from CSV file.

        Args:
            path: Path to CSV file.
            scale: Field scale.

        Returns:
            DensityField spanning the largest listed cell.

        Raises:
            DataLoadError: If file cannot be read or is malformed.
        """
        path = Path(path)

        if not path.exists():
            raise DataLoadError(f"File not found: {path}")

        try:
            columns = self._columns(path)
            data = np.loadtxt(
                path, delimiter=self.delimiter, skiprows=1, usecols=columns, ndmin=2
            )

            if len(data) == 0:
                raise DataLoadError(f"No samples in CSV file {path}")

            cols = data[:, 0].astype(int)
            rows = data[:, 1].astype(int)
            if np.any(cols < 0) or np.any(rows < 0):
                raise DataLoadError(f"Negative cell index in CSV file {path}")

            grid = np.full((rows.max() + 1, cols.max() + 1), float(self.fill))
            grid[rows, cols] = data[:, 2]
            return DensityField.from_array(grid, scale=scale)

        except (OSError, ValueError, IndexError) as e:
            raise DataLoadError(f"Cannot parse grid CSV {path}: {e}") from e


def read_image(
    path: str | Path,
    source: DensitySource | str = DensitySource.LUMA_ALPHA,
    scale: int = 1,
) -> DensityField:
    """Convenience function to read a density field from an image.

    Args:
        path: Path to image file.
        source: Image channel used as density.
        scale: Integer downscale factor.

    Returns:
        DensityField with normalized samples.
    """
    return ImageReader(source=source, scale=scale).read(path)


def read_csv(
    path: str | Path,
    x_col: str = "x",
    y_col: str = "y",
    value_col: str = "value",
    scale: int = 1,
) -> DensityField:
    """Convenience function to read a density grid from CSV.

    Args:
        path: Path to CSV file.
        x_col: Name of column index column. Default: 'x'.
        y_col: Name of row index column. Default: 'y'.
        value_col: Name of value column. Default: 'value'.
        scale: Field scale.

    Returns:
        DensityField with normalized samples.
    """
    reader = CSVReader(x_col=x_col, y_col=y_col, value_col=value_col)
    return reader.read(path, scale=scale)
