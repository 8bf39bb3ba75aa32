class ConvNetError(Exception):
    """Base class for every error raised by convnet."""


class ShapeMismatchError(ConvNetError, ValueError):
    def __init__(self, what, dimension, expected, actual):
        self.what = what
        self.dimension = dimension
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what}: {dimension} mismatch (expected {expected}, got {actual})"
        )


class LayerNotInitializedError(ConvNetError, RuntimeError):
    def __init__(self, layer, operation):
        super().__init__(
            f"{type(layer).__name__}.{operation}() called before init()"
        )


class BackwardWithoutForwardError(ConvNetError, RuntimeError):
    pass


class VolumeIndexError(ConvNetError, IndexError):
    def __init__(self, axis, value, size):
        self.axis = axis
        self.value = value
        self.size = size
        super().__init__(f"volume index {axis}={value} out of range [0, {size})")


class ConfigError(ConvNetError, ValueError):
    pass
