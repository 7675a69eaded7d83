import math
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from modules.functions import BUILTIN_FUNCTIONS
from parameters.global_parameters import GlobalParameters
from runtime.scheduler import ManualScheduler
from runtime.simulation import SimulationLoop, SimulationStatus
from runtime.steppers import OPTIMIZER_KINDS
from runtime.stopping import StoppingReason


def run_loop(max_ticks=200, **overrides):
    loop = SimulationLoop(GlobalParameters(overrides), scheduler=ManualScheduler())
    loop.start()
    loop.scheduler.run(max_calls=max_ticks)
    return loop


@pytest.mark.parametrize("optimizer", OPTIMIZER_KINDS)
@pytest.mark.parametrize("function", sorted(BUILTIN_FUNCTIONS))
def test_every_combination_stays_finite(function, optimizer):
    loop = run_loop(function=function, optimizer=optimizer, learning_rate=0.01)
    for p in loop.trajectory:
        assert math.isfinite(p.x) and math.isfinite(p.y) and math.isfinite(p.z)
    if loop.status is SimulationStatus.STOPPED:
        assert loop.stopping_reason is not StoppingReason.NONE
    else:
        assert loop.stopping_reason is StoppingReason.NONE


def test_himmelblau_sgd_finds_the_nearest_minimum():
    loop = run_loop(max_ticks=2000, function="himmelblau", learning_rate=0.01)
    assert loop.stopping_reason is StoppingReason.CONVERGED
    assert loop.point.x == pytest.approx(3.0, abs=1e-3)
    assert loop.point.y == pytest.approx(2.0, abs=1e-3)


def test_every_optimizer_descends_the_bowl():
    for optimizer in OPTIMIZER_KINDS:
        loop = run_loop(max_ticks=20, optimizer=optimizer, learning_rate=0.01)
        assert loop.point.z < 4.5, optimizer


def test_custom_expression_runs_on_symbolic_gradient():
    loop = run_loop(
        max_ticks=500,
        function="custom",
        custom_expression="(x - 1)^2 + (y + 0.5)^2",
    )
    assert loop.stopping_reason is StoppingReason.CONVERGED
    assert loop.point.x == pytest.approx(1.0, abs=1e-3)
    assert loop.point.y == pytest.approx(-0.5, abs=1e-3)
