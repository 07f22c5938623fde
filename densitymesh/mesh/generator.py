"""Stateful density mesh generator for live map editing."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Iterable, Sequence

import numpy as np

from densitymesh.fields.density import DensityField
from densitymesh.logging_utils import get_logger
from densitymesh.mesh.base import Mesh
from densitymesh.mesh.pipeline import MeshGenerationPipeline
from densitymesh.mesh.sampling import ProgressCallback
from densitymesh.settings import GenerationSettings

logger = get_logger(__name__)


class GeneratorState(Enum):
    """Whether the committed mesh reflects the current field."""

    IDLE = "idle"
    DIRTY = "dirty"


class ProcessStatus(Enum):
    """Result of :meth:`DensityMeshGenerator.process`."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"


class DensityMeshGenerator:
    """Keeps a density field and its mesh in sync across region edits.

    Edits go to the owned field through :meth:`change_map`. Processing always
    regenerates the whole mesh from a snapshot of the field on a private
    background worker, so at most one generation runs at a time. Edits made
    while a run is in flight are kept in the field and picked up by the next
    :meth:`process` or :meth:`process_wait`.

    Callers must serialize their own calls into one instance. Separate
    instances share nothing and may run in parallel.

    Args:
        points: Initial seed points used by every generation.
        field: Density field. Owned by the generator from now on.
        settings: Settings for the first generation.

    Example:
        >>> generator = DensityMeshGenerator([], field, GenerationSettings())
        >>> mesh = generator.process_wait()
        >>> generator.change_map(0, 0, 2, 2, [255] * 4, GenerationSettings())
        >>> mesh = generator.process_wait()
    """

    def __init__(
        self,
        points: Iterable[Iterable[float]] | np.ndarray,
        field: DensityField,
        settings: GenerationSettings | None = None,
    ):
        if not isinstance(points, np.ndarray):
            points = list(points)
        self._points = np.array(points, dtype=float).reshape(-1, 2)
        self._field = field
        self._settings = settings or GenerationSettings()

        self._mesh: Mesh | None = None
        self._state = GeneratorState.DIRTY
        self._revision = 0
        self._error: BaseException | None = None
        self._progress: tuple[int, int, float] = (0, 0, 0.0)
        self._observer: ProgressCallback | None = None

        self._lock = threading.Lock()
        self._future: Future | None = None
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="densitymesh"
        )

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def settings(self) -> GenerationSettings:
        """Settings used by the next generation."""
        return self._settings

    @property
    def in_progress(self) -> bool:
        """Return True while a generation run is executing."""
        with self._lock:
            return self._future is not None and not self._future.done()

    @property
    def last_error(self) -> BaseException | None:
        """Failure of the last finished run, if it failed."""
        with self._lock:
            future = self._future
            if future is not None and future.done():
                return future.exception()
            return self._error

    def progress(self) -> tuple[int, int, float]:
        """Sampling progress of the current or last run.

        Returns:
            ``(current, limit, fraction)`` over the candidate targets of the
            first sampling pass. ``(0, 0, 0.0)`` before any run.
        """
        with self._lock:
            return self._progress

    def map(self) -> DensityField:
        """Return the current density field (do not mutate it directly)."""
        return self._field

    def mesh(self) -> Mesh | None:
        """Return the last committed mesh, or None if none was generated."""
        return self._mesh

    def change_map(
        self,
        col: int,
        row: int,
        width: int,
        height: int,
        data: Sequence[float] | np.ndarray,
        settings: GenerationSettings | None = None,
    ) -> None:
        """Overwrite a region of the field and mark the mesh out of date.

        Args:
            col: Destination column.
            row: Destination row.
            width: Region width in cells.
            height: Region height in cells.
            data: Raw 0..255 samples, ``width * height`` values, row-major.
            settings: Settings for the next generation. Keeps the current
                ones when omitted.

        Raises:
            InvalidRegionError: If the region exceeds the field or the sample
                count mismatches. Field, settings and state are unchanged.
        """
        with self._lock:
            self._field.change(col, row, width, height, data)
            if settings is not None:
                self._settings = settings
            self._revision += 1
            self._state = GeneratorState.DIRTY
            self._error = None
            if self._future is not None and self._future.done():
                self._future = None
        logger.debug(
            "Changed region (%d, %d, %dx%d), revision %d",
            col,
            row,
            width,
            height,
            self._revision,
        )

    def process(self) -> ProcessStatus:
        """Start regenerating the mesh if the field changed.

        Does not block. A call while a run is in flight is satisfied by that
        run. The outcome of a failed run is reported by the next
        :meth:`process_wait` or :attr:`last_error`.

        Returns:
            ``IN_PROGRESS`` if a run is executing, ``IDLE`` if the mesh is
            up to date or the last run failed.
        """
        with self._lock:
            if self._future is not None:
                if not self._future.done():
                    return ProcessStatus.IN_PROGRESS
                self._error = self._future.exception()
                self._future = None
            if self._error is not None or self._state is GeneratorState.IDLE:
                return ProcessStatus.IDLE
            self._future = self._launch()
            return ProcessStatus.IN_PROGRESS

    def process_wait(self, progress: ProgressCallback | None = None) -> Mesh | None:
        """Like :meth:`process`, but block until the run finishes.

        Waits for the in-flight run if there is one, otherwise starts a run
        when the field changed. No timeout is applied.

        Args:
            progress: Optional callback ``(current, limit, fraction)``
                invoked from the worker thread while this call waits.

        Returns:
            The committed mesh.

        Raises:
            DegenerateGeometryError: If the run could not triangulate.
        """
        with self._lock:
            future = self._future
            if future is None:
                if self._error is not None:
                    error, self._error = self._error, None
                    raise error
                if self._state is GeneratorState.IDLE:
                    return self._mesh
                future = self._future = self._launch()
            self._observer = progress

        try:
            future.result()
        finally:
            with self._lock:
                self._observer = None
                if self._future is future:
                    self._future = None
        return self._mesh

    def _launch(self) -> Future:
        """Submit a run over a snapshot of the field. Caller holds the lock."""
        self._error = None
        self._progress = (0, 0, 0.0)
        snapshot = self._field.copy()
        revision = self._revision
        settings = self._settings
        logger.info(
            "Generating mesh for %r (revision %d)", snapshot, revision
        )
        return self._executor.submit(self._run, snapshot, revision, settings)

    def _run(
        self, field: DensityField, revision: int, settings: GenerationSettings
    ) -> Mesh:
        try:
            pipeline = MeshGenerationPipeline(settings, progress=self._track)
            mesh = pipeline.generate(field, self._points)
        except Exception as e:
            logger.warning("Mesh generation failed: %s", e)
            raise
        with self._lock:
            self._mesh = mesh
            if self._revision == revision:
                self._state = GeneratorState.IDLE
        logger.info(
            "Committed mesh with %d points and %d triangles",
            mesh.n_points,
            mesh.n_triangles,
        )
        return mesh

    def _track(self, current: int, limit: int, fraction: float) -> None:
        with self._lock:
            self._progress = (current, limit, fraction)
            observer = self._observer
        if observer is not None:
            observer(current, limit, fraction)

    def shutdown(self, wait: bool = True) -> None:
        """Release the background worker."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> DensityMeshGenerator:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return (
            f"DensityMeshGenerator(field={self._field!r}, "
            f"state={self._state.value})"
        )
