import logging

from .Layer import Layer
from ..Volume import Volume
from ..ParametersAndGradients import ParametersAndGradients
from ..errors import BackwardWithoutForwardError, ConfigError, ShapeMismatchError
from ..helpers.Backend import backend
from ..helpers.Executor import default_executor

logger = logging.getLogger(__name__)

# option name -> constructor argument
_CONFIG_KEYS = {
    "filter_width": "filter_width",
    "filterWidth": "filter_width",
    "filter_height": "filter_height",
    "filterHeight": "filter_height",
    "filter_count": "filter_count",
    "filterCount": "filter_count",
    "stride": "stride",
    "pad": "pad",
    "l1_decay_mul": "l1_decay_mul",
    "l1DecayMul": "l1_decay_mul",
    "l2_decay_mul": "l2_decay_mul",
    "l2DecayMul": "l2_decay_mul",
    "bias_pref": "bias_pref",
    "biasPref": "bias_pref",
}


def _whole(value):
    # 2 and 2.0 are whole numbers; 2.5, "x", None and bools are not
    if isinstance(value, bool):
        return None
    try:
        as_int = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return as_int if as_int == value else None


def _option(name, value, minimum):
    as_int = _whole(value)
    if as_int is None:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if as_int < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value!r}")
    return as_int


def _input_dimension(dimension, value):
    as_int = _whole(value)
    if as_int is None:
        raise ShapeMismatchError("ConvLayer input", dimension, "an integer", value)
    if as_int < 1:
        raise ShapeMismatchError("ConvLayer input", dimension, ">= 1", value)
    return as_int


class ConvLayer(Layer):
    def __init__(
        self,
        filter_width,
        filter_height,
        filter_count,
        stride=1,
        pad=0,
        l1_decay_mul=0.0,
        l2_decay_mul=1.0,
        bias_pref=0.0,
        executor=None,
    ):
        # filter_width/height: spatial size of every filter
        # filter_count -> number of filters, i.e. output channels
        # filter depth is taken from the input at init()
        super().__init__()
        self.filter_width = _option("filter_width", filter_width, 1)
        self.filter_height = _option("filter_height", filter_height, 1)
        self.filter_count = _option("filter_count", filter_count, 1)

        # mutable until init()
        self.stride = stride
        self.pad = pad
        self.l1_decay_mul = l1_decay_mul
        self.l2_decay_mul = l2_decay_mul
        self.bias_pref = bias_pref

        self.executor = executor if executor is not None else default_executor

        # allocated by init()
        self.filters = None
        self.bias = None

        self._training_pass = False

    @classmethod
    def from_config(cls, config, executor=None):
        """
        Build a layer from a dict of options, e.g.
        {"filterWidth": 3, "filterHeight": 3, "filterCount": 8, "stride": 1, "pad": 1}
        """
        kwargs = {}
        for key, value in config.items():
            if key not in _CONFIG_KEYS:
                raise ConfigError(f"unknown ConvLayer option {key!r}")
            kwargs[_CONFIG_KEYS[key]] = value
        for required in ("filter_width", "filter_height", "filter_count"):
            if required not in kwargs:
                raise ConfigError(f"missing ConvLayer option {required!r}")
        return cls(executor=executor, **kwargs)

    # ----- lifecycle -----
    def init(self, input_width, input_height, input_depth):
        self.stride = _option("stride", self.stride, 1)
        self.pad = _option("pad", self.pad, 0)
        input_width = _input_dimension("width", input_width)
        input_height = _input_dimension("height", input_height)
        input_depth = _input_dimension("depth", input_depth)

        # floor: a final window that doesn't fit in the padded input is dropped
        output_width = (input_width + self.pad * 2 - self.filter_width) // self.stride + 1
        output_height = (input_height + self.pad * 2 - self.filter_height) // self.stride + 1
        if output_width < 1:
            raise ShapeMismatchError("ConvLayer output", "width", ">= 1", output_width)
        if output_height < 1:
            raise ShapeMismatchError("ConvLayer output", "height", ">= 1", output_height)

        if self.filters is not None:
            logger.debug("ConvLayer re-init: discarding existing filters and bias")
        super().init(input_width, input_height, input_depth)

        # required
        self.output_depth = self.filter_count
        self.output_width = output_width
        self.output_height = output_height

        # initializations
        self.filters = []
        for _ in range(self.output_depth):
            f = Volume(self.filter_width, self.filter_height, self.input_depth)
            f.zero_gradients()
            self.filters.append(f)

        self.bias = Volume(1, 1, self.output_depth, self.bias_pref)
        self.bias.zero_gradients()

        self._training_pass = False
        logger.debug(
            "ConvLayer init: %dx%dx%d -> %dx%dx%d (filter %dx%d, stride %d, pad %d)",
            self.input_width, self.input_height, self.input_depth,
            self.output_width, self.output_height, self.output_depth,
            self.filter_width, self.filter_height, self.stride, self.pad,
        )

    # ----- helpers -----
    def _padded(self, arr):
        # arr: (H, W, D) -> (H + 2p, W + 2p, D) with a zero border
        if self.pad == 0:
            return arr
        p = self.pad
        return backend.pad(arr, ((p, p), (p, p), (0, 0)), mode="constant")

    def forward(self, volume, is_training=False):
        # volume: (input_width, input_height, input_depth)
        # return: (output_width, output_height, filter_count)
        self._require_init("forward")
        self._check_input(volume)

        out = Volume(self.output_width, self.output_height, self.output_depth, 0.0)
        out_arr = out.to_array()  # (H_out, W_out, O) view over out.weights

        xp = self._padded(volume.to_array())
        s = self.stride
        # (H_out, W_out, D, fh, fw): one window per output position
        windows = backend.sliding_window_view(
            xp, (self.filter_height, self.filter_width), axis=(0, 1)
        )[::s, ::s][: self.output_height, : self.output_width]

        biases = self.bias.weights

        def convolve(depth):
            # padded taps are zero, so they add nothing to the dot product
            filt = self.filters[depth].to_array()  # (fh, fw, D)
            out_arr[:, :, depth] = backend.einsum("yxdhw,hwd->yx", windows, filt) + biases[depth]

        # channels write disjoint slices of out_arr
        self.executor.map_channels(convolve, self.output_depth)

        if is_training:
            self.input_activation = volume
            self.output_activation = out
        else:
            self.input_activation = None
            self.output_activation = None
        self._training_pass = bool(is_training)
        return out

    def backward(self):
        """
        Propagate output_activation's gradient into the input volume and
        the filter/bias gradients.

        The input gradient is reset on every call. Filter and bias gradients
        accumulate across calls until an optimizer consumes and clears them.
        """
        self._require_init("backward")
        if not self._training_pass or self.input_activation is None:
            raise BackwardWithoutForwardError(
                "ConvLayer.backward() requires a preceding forward(..., is_training=True)"
            )
        chain = self.output_activation.gradients_to_array()  # (H_out, W_out, O)
        if chain is None:
            raise BackwardWithoutForwardError(
                "ConvLayer.backward(): output_activation has no gradient; "
                "the downstream layer or loss must set it first"
            )

        volume = self.input_activation
        volume.zero_gradients()  # we're about to fill it

        p, s = self.pad, self.stride
        H_out, W_out = self.output_height, self.output_width
        xp = self._padded(volume.to_array())
        grad_xp = backend.zeros(xp.shape)

        # Sequential over channels: all of them add into grad_xp
        for depth in range(self.output_depth):
            filt = self.filters[depth].to_array()
            filt_grad = self.filters[depth].gradients_to_array()
            g = chain[:, :, depth]  # (H_out, W_out)

            # one strided slice per filter tap covers every output position
            for fy in range(self.filter_height):
                rows = slice(fy, fy + s * (H_out - 1) + 1, s)
                for fx in range(self.filter_width):
                    cols = slice(fx, fx + s * (W_out - 1) + 1, s)
                    filt_grad[fy, fx, :] += backend.einsum("yx,yxd->d", g, xp[rows, cols, :])
                    grad_xp[rows, cols, :] += g[:, :, None] * filt[fy, fx, :]

            self.bias.weight_gradients[depth] += backend.sum(g)

        # drop the padding border
        grad_in = volume.gradients_to_array()
        grad_in += grad_xp[p : p + self.input_height, p : p + self.input_width, :]

    # expose params / grads for the optimizer
    def get_parameters_and_gradients(self):
        self._require_init("get_parameters_and_gradients")
        response = []
        for f in self.filters:
            response.append(
                ParametersAndGradients(
                    f.weights,
                    f.weight_gradients,
                    l1_decay_mul=self.l1_decay_mul,
                    l2_decay_mul=self.l2_decay_mul,
                )
            )

        # bias is never regularized
        response.append(
            ParametersAndGradients(self.bias.weights, self.bias.weight_gradients, 0.0, 0.0)
        )
        return response
