"""Steepness-driven point cloud construction."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Callable, Iterable

import numpy as np

from densitymesh.fields.density import DensityField
from densitymesh.logging_utils import get_logger
from densitymesh.settings import GenerationSettings, PointsSeparation

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, float], None]


def spiral_offsets(count: int) -> list[tuple[int, int]]:
    """First ``count`` grid offsets of a square spiral starting at (0, 0)."""
    offsets = []
    x = y = 0
    dx, dy = 1, 0
    leg_length, leg_done = 1, 0
    for _ in range(count):
        offsets.append((x, y))
        x += dx
        y += dy
        leg_done += 1
        if leg_done == leg_length:
            leg_done = 0
            dx, dy = -dy, dx
            if dy == 0:
                leg_length += 1
    return offsets


def field_corners(field: DensityField) -> np.ndarray:
    """Field-space positions of the four corner cells, shape (4, 2)."""
    if field.is_empty:
        return np.empty((0, 2))
    right = (field.width - 1) * field.scale
    bottom = (field.height - 1) * field.scale
    return np.array(
        [[0.0, 0.0], [right, 0.0], [0.0, bottom], [right, bottom]], dtype=float
    )


def separation_cap(field: DensityField) -> float:
    """Largest separation that still leaves room between the corner points."""
    if field.is_empty:
        return 0.0
    extent = min(field.width - 1, field.height - 1) * field.scale
    return 0.5 * extent


def unique_points(points: np.ndarray) -> np.ndarray:
    """Drop exact duplicate points, keeping first occurrences in order."""
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(points) < 2:
        return points.copy()
    _, first = np.unique(points, axis=0, return_index=True)
    return points[np.sort(first)]


class _PointIndex:
    """Uniform bucket grid answering "is anything closer than r?" queries.

    Query radii must not exceed the bucket size.
    """

    def __init__(self, bucket_size: float):
        self._size = bucket_size if bucket_size > 0 else 1.0
        self._buckets: dict[tuple[int, int], list[tuple[float, float]]] = (
            defaultdict(list)
        )

    def _key(self, x: float, y: float) -> tuple[int, int]:
        return (math.floor(x / self._size), math.floor(y / self._size))

    def add(self, x: float, y: float) -> None:
        self._buckets[self._key(x, y)].append((x, y))

    def is_clear(self, x: float, y: float, radius: float) -> bool:
        """True if no stored point is closer than ``radius`` or coincident."""
        kx, ky = self._key(x, y)
        radius_sq = radius * radius
        for bx in (kx - 1, kx, kx + 1):
            for by in (ky - 1, ky, ky + 1):
                for px, py in self._buckets.get((bx, by), ()):
                    dist_sq = (px - x) ** 2 + (py - y) ** 2
                    if dist_sq < radius_sq or dist_sq == 0.0:
                        return False
        return True


class PointSampler:
    """Builds the point cloud handed to triangulation.

    The cloud starts with the caller's seed points and the four field
    corners. Cells steeper than ``steepness_threshold`` are then visited in
    descending steepness order; each target gets up to ``max_iterations``
    placement attempts on a square spiral of neighbouring cells, and a
    position is accepted when it is steep enough and keeps the required
    separation from every cloud point. Passes repeat over the targets that
    still placed a point until a pass accepts nothing or ``max_points`` new
    points were accepted.

    Args:
        max_points: Hard cap on accepted points. Defaults to the number of
            grid cells.
        progress: Optional callback ``(current, limit, fraction)`` invoked
            after each visited target.
    """

    def __init__(
        self,
        max_points: int | None = None,
        progress: ProgressCallback | None = None,
    ):
        if max_points is not None and max_points < 0:
            raise ValueError("max_points must not be negative")
        self._max_points = max_points
        self._progress = progress

    def candidates(
        self, steepness: np.ndarray, settings: GenerationSettings
    ) -> np.ndarray:
        """Grid cells (col, row) steep enough to receive a point, steepest first."""
        steepness = np.asarray(steepness, dtype=float)
        flat = steepness.ravel()
        indices = np.flatnonzero(flat > settings.steepness_threshold)
        order = np.argsort(-flat[indices], kind="stable")
        rows, cols = np.unravel_index(indices[order], steepness.shape)
        return np.column_stack([cols, rows])

    def sample(
        self,
        field: DensityField,
        steepness: np.ndarray,
        seed_points: Iterable[Iterable[float]] | np.ndarray,
        settings: GenerationSettings,
    ) -> np.ndarray:
        """Return the augmented point cloud, shape (n, 2).

        Inputs are never mutated. A flat field yields the seed and corner
        points only.
        """
        if not isinstance(seed_points, np.ndarray):
            seed_points = list(seed_points)
        seeds = np.array(seed_points, dtype=float).reshape(-1, 2)
        cloud = [
            (float(x), float(y))
            for x, y in unique_points(np.vstack([seeds, field_corners(field)]))
        ]
        if field.is_empty:
            return np.asarray(cloud, dtype=float).reshape(-1, 2)

        steepness = np.asarray(steepness, dtype=float)
        if steepness.shape != field.shape:
            raise ValueError(
                f"steepness shape {steepness.shape} does not match "
                f"field shape {field.shape}"
            )

        cap = separation_cap(field)
        separation = settings.points_separation
        threshold = settings.steepness_threshold
        offsets = spiral_offsets(settings.max_iterations)
        limit = (
            self._max_points
            if self._max_points is not None
            else field.width * field.height
        )

        index = _PointIndex(min(separation.maximum, cap))
        for x, y in cloud:
            index.add(x, y)

        active = [
            (int(col), int(row))
            for col, row in self.candidates(steepness, settings)
        ]
        total = len(active)
        accepted = 0
        passes = 0
        logger.debug(
            "Sampling %d candidate cells (separation=%s, cap=%.3f)",
            total,
            separation,
            cap,
        )

        while active and accepted < limit:
            passes += 1
            placed_targets = []
            for visited, (col, row) in enumerate(active, start=1):
                if accepted >= limit:
                    break
                if self._place(
                    col, row, offsets, field, steepness, threshold,
                    separation, cap, index, cloud,
                ):
                    accepted += 1
                    placed_targets.append((col, row))
                if self._progress is not None and passes == 1:
                    self._progress(visited, total, visited / total)
            active = placed_targets

        logger.debug(
            "Accepted %d points in %d passes (cloud size %d)",
            accepted,
            passes,
            len(cloud),
        )
        return np.asarray(cloud, dtype=float).reshape(-1, 2)

    @staticmethod
    def _place(
        col: int,
        row: int,
        offsets: list[tuple[int, int]],
        field: DensityField,
        steepness: np.ndarray,
        threshold: float,
        separation: PointsSeparation,
        cap: float,
        index: _PointIndex,
        cloud: list[tuple[float, float]],
    ) -> bool:
        """Try up to len(offsets) positions around one target cell."""
        for dx, dy in offsets:
            c = col + dx
            r = row + dy
            if not field.contains(c, r):
                continue
            local = steepness[r, c]
            if local <= threshold:
                continue
            x = float(c * field.scale)
            y = float(r * field.scale)
            required = min(separation.at(local), cap)
            if index.is_clear(x, y, required):
                index.add(x, y)
                cloud.append((x, y))
                return True
        return False


def sample_points(
    field: DensityField,
    steepness: np.ndarray,
    seed_points: Iterable[Iterable[float]] | np.ndarray,
    settings: GenerationSettings,
) -> np.ndarray:
    """Convenience function for one-shot point sampling."""
    return PointSampler().sample(field, steepness, seed_points, settings)
