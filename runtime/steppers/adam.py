"""Adam optimizer with bias-corrected moment estimates."""

from __future__ import annotations

import numpy as np

from .base import BaseStepper, as_delta, as_vector


class Adam(BaseStepper):
    """Adam using the shared ``momentum`` tunable as beta1.

    Update rules::

        t = t + 1
        m = b1 * m + (1 - b1) * grad          (first moment)
        v = b2 * v + (1 - b2) * grad**2       (second moment)
        m_hat = m / (1 - b1**t)               (bias correction)
        v_hat = v / (1 - b2**t)
        d = lr * m_hat / (sqrt(v_hat) + epsilon)

    ``t`` starts at 1 on the first step, so ``1 - b**t`` is non-zero for any
    decay in ``[0, 1)``.
    """

    name = "Adam"

    def step(self, grad, lr, params, state):
        g = as_vector(grad)
        beta1 = params.momentum
        beta2 = params.beta2

        state.t += 1
        t = state.t

        state.m[:] = beta1 * state.m + (1.0 - beta1) * g
        state.v[:] = beta2 * state.v + (1.0 - beta2) * g * g

        m_hat = state.m / (1.0 - beta1**t)
        v_hat = state.v / (1.0 - beta2**t)

        return as_delta(lr * m_hat / (np.sqrt(v_hat) + params.epsilon))
