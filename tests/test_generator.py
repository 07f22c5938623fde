import threading
import time

import numpy as np
import pytest

from densitymesh import (
    DegenerateGeometryError,
    DensityField,
    DensityMeshGenerator,
    GenerationSettings,
    InvalidRegionError,
    ProcessStatus,
)
from densitymesh.mesh import GeneratorState, MeshGenerationPipeline


@pytest.fixture
def generator(zero_field):
    with DensityMeshGenerator([], zero_field, GenerationSettings()) as gen:
        yield gen


def test_starts_dirty_without_mesh(generator):
    assert generator.state is GeneratorState.DIRTY
    assert generator.mesh() is None
    assert not generator.in_progress


def test_process_wait_generates_and_goes_idle(generator):
    mesh = generator.process_wait()
    assert mesh is generator.mesh()
    assert mesh.n_points == 4
    assert generator.state is GeneratorState.IDLE
    # Nothing changed, the committed mesh is returned again
    assert generator.process_wait() is mesh
    assert generator.process() is ProcessStatus.IDLE


def test_change_map_then_regenerate(generator):
    first = generator.process_wait()
    generator.change_map(3, 3, 2, 2, [255] * 4)
    assert generator.state is GeneratorState.DIRTY
    assert generator.map().value_at(3, 3) == 1.0

    mesh = generator.process_wait()
    assert mesh.n_points > first.n_points
    interior = [(x, y) for x, y in mesh.points if 0 < x < 7 and 0 < y < 7]
    assert interior
    assert generator.state is GeneratorState.IDLE


def test_change_map_replaces_settings(generator):
    settings = GenerationSettings(keep_invisible_triangles=True)
    generator.change_map(0, 0, 1, 1, [0], settings)
    assert generator.settings is settings
    mesh = generator.process_wait()
    assert mesh.n_triangles == 2


def test_invalid_change_leaves_state(generator):
    generator.process_wait()
    before = generator.map().copy()
    with pytest.raises(InvalidRegionError):
        generator.change_map(7, 7, 2, 2, [255] * 4)
    assert generator.map() == before
    assert generator.state is GeneratorState.IDLE


def test_process_is_non_blocking(generator):
    status = generator.process()
    assert status in (ProcessStatus.IN_PROGRESS, ProcessStatus.IDLE)
    mesh = generator.process_wait()
    assert mesh is not None
    assert generator.state is GeneratorState.IDLE
    assert generator.process() is ProcessStatus.IDLE


def test_seed_points_are_used(zero_field):
    with DensityMeshGenerator(np.array([[3.5, 3.5]]), zero_field) as gen:
        gen.change_map(0, 0, 8, 8, [255] * 64)
        mesh = gen.process_wait()
    assert any(np.allclose(p, (3.5, 3.5)) for p in mesh.points)


def test_failed_run_is_reported():
    field = DensityField.filled(1, 1, 0)
    with DensityMeshGenerator([], field) as gen:
        with pytest.raises(DegenerateGeometryError):
            gen.process_wait()
        assert gen.mesh() is None
        assert gen.state is GeneratorState.DIRTY


def test_failed_background_run_surfaces_on_wait():
    field = DensityField.filled(1, 1, 0)
    with DensityMeshGenerator([], field) as gen:
        gen.process()
        with pytest.raises(DegenerateGeometryError):
            gen.process_wait()


def test_independent_generators(zero_field):
    other = DensityField.filled(8, 8, 255)
    with DensityMeshGenerator([], zero_field) as a, DensityMeshGenerator(
        [], other
    ) as b:
        a.process()
        b.process()
        assert a.process_wait().n_triangles == 0
        assert b.process_wait().n_triangles == 2


@pytest.fixture
def gated_pipeline(monkeypatch):
    """Hold every pipeline run until ``release`` is set."""
    original = MeshGenerationPipeline.generate
    gate = {
        "started": threading.Event(),
        "release": threading.Event(),
        "fields": [],
    }

    def generate(self, field, seed_points=(), settings=None):
        gate["fields"].append(field.copy())
        gate["started"].set()
        assert gate["release"].wait(timeout=10)
        return original(self, field, seed_points, settings)

    monkeypatch.setattr(MeshGenerationPipeline, "generate", generate)
    return gate


def _wait_until_done(gen, timeout=10.0):
    deadline = time.monotonic() + timeout
    while gen.in_progress:
        assert time.monotonic() < deadline
        time.sleep(0.01)


def test_edit_during_run_is_picked_up_by_next_run(zero_field, gated_pipeline):
    with DensityMeshGenerator([], zero_field) as gen:
        assert gen.process() is ProcessStatus.IN_PROGRESS
        assert gated_pipeline["started"].wait(timeout=10)

        gen.change_map(3, 3, 2, 2, [255] * 4)
        # A second request is satisfied by the run in flight
        assert gen.process() is ProcessStatus.IN_PROGRESS
        assert len(gated_pipeline["fields"]) == 1
        assert gated_pipeline["fields"][0].value_at(3, 3) == 0.0

        gated_pipeline["release"].set()
        first = gen.process_wait()
        assert first.n_points == 4
        assert gen.state is GeneratorState.DIRTY

        second = gen.process_wait()
        assert second.n_points > 4
        assert gen.state is GeneratorState.IDLE
        assert len(gated_pipeline["fields"]) == 2


def test_progress_is_tracked(blob_field):
    seen = []
    with DensityMeshGenerator([], blob_field) as gen:
        assert gen.progress() == (0, 0, 0.0)
        gen.process_wait(progress=lambda *args: seen.append(args))
        assert seen
        current, limit, fraction = seen[-1]
        assert current == limit > 0
        assert fraction == 1.0
        assert gen.progress() == seen[-1]
        assert [c for c, _, _ in seen] == list(range(1, limit + 1))


def test_edit_clears_finished_failure(zero_field, monkeypatch):
    original = MeshGenerationPipeline.generate
    calls = []

    def fail_once(self, field, seed_points=(), settings=None):
        calls.append(field)
        if len(calls) == 1:
            raise DegenerateGeometryError("first run fails")
        return original(self, field, seed_points, settings)

    monkeypatch.setattr(MeshGenerationPipeline, "generate", fail_once)
    with DensityMeshGenerator([], zero_field) as gen:
        gen.process()
        _wait_until_done(gen)
        assert isinstance(gen.last_error, DegenerateGeometryError)

        gen.change_map(3, 3, 2, 2, [255] * 4)
        assert gen.last_error is None
        mesh = gen.process_wait()
        assert mesh.n_points > 4
        assert len(calls) == 2
