import math

from .errors import ConfigError, VolumeIndexError
from .helpers.Backend import backend


class Volume:
    """
    Dense width x height x depth array with a parallel gradient buffer.

    Values live in a flat buffer indexed by ((width * y) + x) * depth + d,
    so to_array() exposes them as a (height, width, depth) view.
    """

    def __init__(self, width, height, depth, value=None):
        self.width = int(width)
        self.height = int(height)
        self.depth = int(depth)
        if min(self.width, self.height, self.depth) <= 0:
            raise ConfigError(f"volume dimensions must be positive, got {self.shape}")
        n = self.width * self.height * self.depth

        if value is None:
            # default weight init: gaussian scaled by fan-in
            scale = math.sqrt(1.0 / n)
            self.weights = backend.randn(n) * scale
        else:
            self.weights = backend.full((n,), value)

        # allocated on demand
        self.weight_gradients = None

    @classmethod
    def from_array(cls, array):
        """Build a volume from a (height, width, depth) array (copied)."""
        array = backend.ensure_array(array, dtype=backend.default_float)
        if array.ndim == 2:
            array = array[:, :, None]
        height, width, depth = array.shape
        vol = cls(width, height, depth, 0.0)
        vol.weights[...] = array.reshape(-1)
        return vol

    @property
    def shape(self):
        return (self.width, self.height, self.depth)

    def __len__(self):
        return self.weights.shape[0]

    def __repr__(self):
        return f"Volume(width={self.width}, height={self.height}, depth={self.depth})"

    # ----- element access -----
    def _index(self, x, y, d):
        if not 0 <= x < self.width:
            raise VolumeIndexError("x", x, self.width)
        if not 0 <= y < self.height:
            raise VolumeIndexError("y", y, self.height)
        if not 0 <= d < self.depth:
            raise VolumeIndexError("d", d, self.depth)
        return ((self.width * y) + x) * self.depth + d

    def get(self, x, y, d):
        return float(self.weights[self._index(x, y, d)])

    def set(self, x, y, d, value):
        self.weights[self._index(x, y, d)] = value

    def get_gradient(self, x, y, d):
        ix = self._index(x, y, d)
        if self.weight_gradients is None:
            return 0.0
        return float(self.weight_gradients[ix])

    def set_gradient(self, x, y, d, value):
        ix = self._index(x, y, d)
        self.zero_gradients(keep=True)
        self.weight_gradients[ix] = value

    def add_gradient(self, x, y, d, delta):
        # accumulate, several output positions can route into one cell
        ix = self._index(x, y, d)
        self.zero_gradients(keep=True)
        self.weight_gradients[ix] += delta

    # ----- buffers -----
    def zero_gradients(self, keep=False):
        """
        Make sure the gradient buffer exists and (unless keep) holds zeros.

        An existing buffer is cleared in place so that handles returned to an
        optimizer keep pointing at the live gradients.
        """
        if self.weight_gradients is None:
            self.weight_gradients = backend.zeros(self.weights.shape)
        elif not keep:
            self.weight_gradients[...] = 0.0
        return self.weight_gradients

    def to_array(self):
        return self.weights.reshape(self.height, self.width, self.depth)

    def gradients_to_array(self):
        if self.weight_gradients is None:
            return None
        return self.weight_gradients.reshape(self.height, self.width, self.depth)

    def clone(self):
        vol = Volume(self.width, self.height, self.depth, 0.0)
        vol.weights[...] = self.weights
        return vol
