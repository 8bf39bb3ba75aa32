import os

# force the NumPy backend before convnet is imported
os.environ["CONVNET_USE_GPU"] = "0"
os.environ.setdefault("CONVNET_EXECUTOR", "sequential")

import numpy as np
import pytest

from convnet import ConvLayer, Volume
from convnet.helpers.Backend import backend


@pytest.fixture(autouse=True)
def seeded():
    backend.seed(1234)


def set_filter(layer, i, value):
    layer.filters[i].weights[...] = value


@pytest.fixture
def ones_5x5():
    return Volume(5, 5, 1, 1.0)


@pytest.fixture
def conv3x3():
    """One 3x3 filter of ones, zero bias, stride 1, no padding, on a 5x5x1 input."""
    layer = ConvLayer(3, 3, 1, stride=1, pad=0)
    layer.init(5, 5, 1)
    set_filter(layer, 0, 1.0)
    return layer


def random_volume(width, height, depth):
    return Volume.from_array(np.random.randn(height, width, depth))
