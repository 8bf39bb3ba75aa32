class ParametersAndGradients:
    """
    Hands one learnable buffer to an optimizer.

    parameters and gradients are the layer's own flat arrays (not copies):
    an optimizer updates them in place and must never reallocate or resize them.
    """

    def __init__(self, parameters, gradients, l1_decay_mul=0.0, l2_decay_mul=0.0):
        self.parameters = parameters
        self.gradients = gradients
        self.l1_decay_mul = l1_decay_mul
        self.l2_decay_mul = l2_decay_mul

    def __iter__(self):
        # allows `for p, g in params` like a plain [p, g] pair
        yield self.parameters
        yield self.gradients

    def __repr__(self):
        return (
            f"ParametersAndGradients(size={self.parameters.shape[0]}, "
            f"l1_decay_mul={self.l1_decay_mul}, l2_decay_mul={self.l2_decay_mul})"
        )
