"""Plain stochastic gradient descent."""

from __future__ import annotations

from .base import BaseStepper, as_delta, as_vector


class SGD(BaseStepper):
    """``d = lr * grad``. Stateless."""

    name = "SGD"

    def step(self, grad, lr, params, state):
        return as_delta(lr * as_vector(grad))
