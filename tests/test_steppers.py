import math
import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import UnknownOptimizerError
from runtime import steppers
from runtime.steppers import (
    GRADIENT_HISTORY_SIZE,
    OptimizerParams,
    OptimizerRunState,
    normalize_kind,
)


def test_sgd_step_from_start_point():
    state = OptimizerRunState()
    dx, dy = steppers.step("SGD", (3.0, 3.0), 0.1, OptimizerParams(), state)
    assert (dx, dy) == pytest.approx((0.3, 0.3))
    x, y = 1.5 - dx, 1.5 - dy
    assert (x, y) == pytest.approx((1.2, 1.2))
    assert x * x + y * y == pytest.approx(2.88)
    assert state.is_zero()


def test_momentum_accumulates_velocity():
    state = OptimizerRunState()
    params = OptimizerParams(momentum=0.9)
    first = steppers.step("Momentum", (1.0, -2.0), 0.1, params, state)
    assert first == pytest.approx((0.1, -0.2))
    second = steppers.step("Momentum", (1.0, -2.0), 0.1, params, state)
    assert second == pytest.approx((0.19, -0.38))
    np.testing.assert_allclose(state.velocity, [0.19, -0.38])


def test_rmsprop_scales_per_axis():
    state = OptimizerRunState()
    params = OptimizerParams(beta2=0.9, epsilon=1e-8)
    dx, dy = steppers.step("RMSProp", (2.0, 0.5), 0.01, params, state)
    np.testing.assert_allclose(state.squared_grad, [0.4, 0.025])
    assert dx == pytest.approx(0.01 / math.sqrt(0.4 + 1e-8) * 2.0)
    assert dy == pytest.approx(0.01 / math.sqrt(0.025 + 1e-8) * 0.5)


def test_adam_first_step_is_lr_times_sign():
    state = OptimizerRunState()
    params = OptimizerParams(momentum=0.9, beta2=0.999, epsilon=1e-8)
    dx, dy = steppers.step("Adam", (4.0, -0.01), 0.1, params, state)
    assert state.t == 1
    assert dx == pytest.approx(0.1, rel=1e-6)
    assert dy == pytest.approx(-0.1, rel=1e-4)


def test_adam_time_step_increments_and_only_adam_touches_it():
    state = OptimizerRunState()
    params = OptimizerParams()
    for expected in (1, 2, 3):
        steppers.step("Adam", (1.0, 1.0), 0.1, params, state)
        assert state.t == expected
    steppers.step("SGD", (1.0, 1.0), 0.1, params, state)
    steppers.step("Momentum", (1.0, 1.0), 0.1, params, state)
    assert state.t == 3


def test_run_state_reset_zeroes_everything_in_place():
    state = OptimizerRunState()
    velocity = state.velocity
    steppers.step("Adam", (1.0, 2.0), 0.1, OptimizerParams(), state)
    steppers.step("Momentum", (1.0, 2.0), 0.1, OptimizerParams(), state)
    steppers.step("RMSProp", (1.0, 2.0), 0.1, OptimizerParams(), state)
    state.record_gradient(1.0)
    assert not state.is_zero()

    state.reset()
    assert state.is_zero()
    assert state.velocity is velocity


def test_gradient_history_keeps_last_ten():
    state = OptimizerRunState()
    for i in range(15):
        state.record_gradient(float(i))
    assert GRADIENT_HISTORY_SIZE == 10
    assert list(state.gradient_history) == [float(i) for i in range(5, 15)]


def test_normalize_kind_is_case_insensitive():
    assert normalize_kind("adam") == "Adam"
    assert normalize_kind("RMSPROP") == "RMSProp"
    assert normalize_kind(" sgd ") == "SGD"
    assert steppers.OPTIMIZER_KINDS == ("SGD", "Momentum", "RMSProp", "Adam")


def test_unknown_optimizer_raises():
    with pytest.raises(UnknownOptimizerError) as excinfo:
        normalize_kind("lbfgs")
    assert "lbfgs" in str(excinfo.value)
