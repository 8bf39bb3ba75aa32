from ..errors import LayerNotInitializedError, ShapeMismatchError


class Layer:
    """
    Lifecycle shared by every layer kind:

        init(w, h, d)  -> fixes input/output shapes, allocates parameters
        forward(vol, is_training) -> output volume
        backward()     -> fills input gradients and parameter gradients
        get_parameters_and_gradients() -> buffers for an optimizer

    Subclasses override forward/backward and extend init.
    """

    def __init__(self):
        self.input_width = None
        self.input_height = None
        self.input_depth = None
        self.output_width = None
        self.output_height = None
        self.output_depth = None

        # cached by forward for backward
        self.input_activation = None
        self.output_activation = None

    @property
    def initialized(self):
        return self.input_depth is not None

    def init(self, input_width, input_height, input_depth):
        self.input_width = int(input_width)
        self.input_height = int(input_height)
        self.input_depth = int(input_depth)
        # a re-init discards state tied to the old parameters
        self.input_activation = None
        self.output_activation = None

    def forward(self, volume, is_training=False):
        raise NotImplementedError

    def backward(self):
        raise NotImplementedError

    def get_parameters_and_gradients(self):
        # Layers without learnable buffers expose nothing
        self._require_init("get_parameters_and_gradients")
        return []

    # ----- helpers -----
    def _require_init(self, operation):
        if not self.initialized:
            raise LayerNotInitializedError(self, operation)

    def _check_input(self, volume):
        name = f"{type(self).__name__} input"
        expected = (self.input_width, self.input_height, self.input_depth)
        for dimension, want, got in zip(("width", "height", "depth"), expected, volume.shape):
            if want != got:
                raise ShapeMismatchError(name, dimension, want, got)
