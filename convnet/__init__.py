from .Volume import Volume
from .ParametersAndGradients import ParametersAndGradients
from .layers import Layer, ConvLayer
from .optimizer import SGDOptimizer
from .errors import (
    ConvNetError,
    ShapeMismatchError,
    LayerNotInitializedError,
    BackwardWithoutForwardError,
    VolumeIndexError,
    ConfigError,
)

__version__ = "0.1.0"

__all__ = [
    "Volume",
    "ParametersAndGradients",
    "Layer",
    "ConvLayer",
    "SGDOptimizer",
    "ConvNetError",
    "ShapeMismatchError",
    "LayerNotInitializedError",
    "BackwardWithoutForwardError",
    "VolumeIndexError",
    "ConfigError",
]
