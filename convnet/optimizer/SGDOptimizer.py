from ..helpers.Backend import backend


class SGDOptimizer:
    def __init__(self, params, lr=1e-2, l1_decay=0.0, l2_decay=0.0, momentum=0.0, batch_size=1):
        self.params = list(params)  # list of ParametersAndGradients
        self.lr = lr
        self.l1_decay = l1_decay
        self.l2_decay = l2_decay
        self.momentum = momentum
        self.batch_size = batch_size
        # velocity per buffer, same order as params
        self._v = [None] * len(self.params)

    def step(self):
        for i, pg in enumerate(self.params):
            p, g = pg.parameters, pg.gradients
            l1 = self.l1_decay * pg.l1_decay_mul
            l2 = self.l2_decay * pg.l2_decay_mul

            grad = g
            if l2 != 0.0:
                grad = grad + l2 * p
            if l1 != 0.0:
                grad = grad + l1 * backend.sign(p)
            grad = grad / self.batch_size

            if self.momentum > 0.0:
                if self._v[i] is None:
                    self._v[i] = backend.zeros(p.shape)
                v = self._v[i]
                v[...] = self.momentum * v - self.lr * grad
                p += v
            else:
                p -= self.lr * grad

            # gradients were consumed
            g[...] = 0.0

    def zero_grad(self):
        for _, g in self.params:
            g[...] = 0.0
