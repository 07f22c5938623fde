import numpy as np
import pytest

from densitymesh import (
    ConfigurationError,
    DensityField,
    InvalidRegionError,
    SteepnessAnalyzer,
)
from densitymesh.fields import compute_steepness


def test_samples_are_normalized():
    field = DensityField(2, 2, [0, 255, 51, 0])
    assert field.shape == (2, 2)
    assert field.value_at(1, 0) == 1.0
    assert field.value_at(0, 1) == pytest.approx(0.2)
    assert field.values.max() == 1.0


def test_data_length_mismatch():
    with pytest.raises(InvalidRegionError):
        DensityField(2, 2, [0, 1, 2])


def test_invalid_dimensions():
    with pytest.raises(ConfigurationError):
        DensityField(-1, 2, [])
    with pytest.raises(ConfigurationError):
        DensityField(1, 1, [0], scale=0)


def test_value_at_out_of_range():
    field = DensityField.filled(3, 3, 10)
    with pytest.raises(InvalidRegionError):
        field.value_at(3, 0)
    with pytest.raises(InvalidRegionError):
        field.steepness_at(0, -1)


def test_value_at_point_uses_scale():
    data = np.zeros((2, 2))
    data[1, 1] = 255
    field = DensityField.from_array(data, scale=4)
    assert field.scaled_width == 8
    assert field.value_at_point(5.5, 7.9) == 1.0
    assert field.value_at_point(3.9, 3.9) == 0.0
    assert field.value_at_point(100, 0) == 0.0
    np.testing.assert_array_equal(
        field.values_at_points([(5, 5), (0, 0), (-1, 2)]), [1.0, 0.0, 0.0]
    )


def test_values_are_read_only():
    field = DensityField.filled(2, 2, 0)
    with pytest.raises(ValueError):
        field.values[0, 0] = 1.0


def test_constant_field_has_zero_steepness():
    field = DensityField.filled(5, 4, 128)
    assert np.all(field.steepness == 0.0)
    assert np.all(SteepnessAnalyzer().analyze(field) == 0.0)


def test_steepness_of_single_step():
    values = np.zeros((4, 4))
    values[:, 2:] = 1.0
    steepness = compute_steepness(values)
    assert steepness.shape == (4, 4)
    assert np.all(steepness >= 0.0)
    # Cells next to the step are steep, far cells are flat
    assert steepness[1, 1] > 0.0
    assert steepness[1, 2] > 0.0
    assert steepness[1, 1] == pytest.approx(steepness[1, 2])
    assert steepness[0, 0] == 0.0
    assert steepness[3, 3] == 0.0


def test_steepness_of_empty_grid():
    assert compute_steepness(np.zeros((0, 3))).shape == (0, 3)


def test_change_updates_values_and_steepness():
    field = DensityField.filled(8, 8, 0)
    field.change(3, 3, 2, 2, [255] * 4)
    assert field.value_at(3, 3) == 1.0
    assert field.value_at(2, 2) == 0.0
    expected = compute_steepness(field.values)
    np.testing.assert_allclose(field.steepness, expected)
    assert field.steepness_at(2, 3) > 0.01
    assert field.steepness_at(0, 0) == 0.0


def test_change_whole_field_replaces_it():
    field = DensityField.filled(2, 2, 0)
    field.change(0, 0, 2, 2, [255, 255, 255, 255])
    assert field == DensityField.filled(2, 2, 255)


@pytest.mark.parametrize(
    "region, size",
    [((7, 7, 2, 2), 4), ((-1, 0, 1, 1), 1), ((0, 0, 2, 2), 3)],
)
def test_invalid_change_leaves_field_untouched(region, size):
    field = DensityField.filled(8, 8, 0)
    before = field.copy()
    with pytest.raises(InvalidRegionError):
        field.change(*region, [255] * size)
    assert field == before
    np.testing.assert_array_equal(field.steepness, before.steepness)


def test_copy_is_independent():
    field = DensityField.filled(4, 4, 0)
    clone = field.copy()
    field.change(0, 0, 1, 1, [255])
    assert clone.value_at(0, 0) == 0.0
    assert clone != field


def test_crop_is_clipped_to_grid():
    field = DensityField.from_array(np.arange(16).reshape(4, 4) * 10)
    cropped = field.crop(2, 2, 5, 5)
    assert cropped.shape == (2, 2)
    assert cropped.value_at(0, 0) == pytest.approx(100 / 255)
