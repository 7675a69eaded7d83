"""RMSProp with ``beta2`` as the decay rate of the squared-gradient average."""

from __future__ import annotations

import numpy as np

from .base import BaseStepper, as_delta, as_vector


class RMSProp(BaseStepper):
    """Scale the step per axis by a running RMS of the gradient.

    Update rule::

        E = beta2 * E + (1 - beta2) * grad**2
        d = lr / sqrt(E + epsilon) * grad
    """

    name = "RMSProp"

    def step(self, grad, lr, params, state):
        g = as_vector(grad)
        state.squared_grad[:] = (
            params.beta2 * state.squared_grad + (1.0 - params.beta2) * g * g
        )
        return as_delta(lr / np.sqrt(state.squared_grad + params.epsilon) * g)
