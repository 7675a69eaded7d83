"""Heavy-ball momentum."""

from __future__ import annotations

from .base import BaseStepper, as_delta, as_vector


class Momentum(BaseStepper):
    """Accumulate a velocity and step along it.

    Update rule::

        v = momentum * v + lr * grad
        d = v
    """

    name = "Momentum"

    def step(self, grad, lr, params, state):
        g = as_vector(grad)
        state.velocity[:] = params.momentum * state.velocity + lr * g
        return as_delta(state.velocity)
