import numpy as np
import pytest

from densitymesh import DensityField


@pytest.fixture
def zero_field():
    return DensityField.filled(8, 8, 0)


@pytest.fixture
def blob_field():
    """16x16 field with a bright 4x4 square in the middle."""
    data = np.zeros((16, 16))
    data[6:10, 6:10] = 255
    return DensityField.from_array(data)
