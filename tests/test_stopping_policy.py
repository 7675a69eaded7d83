import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from parameters.global_parameters import GlobalParameters
from runtime.stopping import StoppingPolicy, StoppingReason


@pytest.fixture
def policy():
    return StoppingPolicy()


def test_converged_below_tolerance(policy):
    assert policy.evaluate(0.1, 0.1, 5e-4, [5e-4], 2.0) is StoppingReason.CONVERGED


def test_convergence_takes_precedence_over_bounds(policy):
    assert policy.evaluate(10.0, 0.0, 1e-6, [1e-6], 2.0) is StoppingReason.CONVERGED


def test_out_of_bounds_past_twice_the_domain(policy):
    assert policy.evaluate(4.01, 0.0, 1.0, [1.0], 2.0) is StoppingReason.BOUNDS
    assert policy.evaluate(0.0, -4.01, 1.0, [1.0], 2.0) is StoppingReason.BOUNDS
    assert policy.evaluate(4.0, 4.0, 1.0, [1.0], 2.0) is StoppingReason.NONE


def test_steadily_growing_gradient_diverges(policy):
    history = [1.0, 1.1, 1.25, 1.45, 1.6]
    assert policy.evaluate(0.0, 0.0, 1.6, history, 2.0) is StoppingReason.DIVERGED


def test_dip_in_history_is_not_divergence(policy):
    history = [1.0, 0.5, 1.1, 1.2, 1.3]
    assert policy.evaluate(0.0, 0.0, 1.3, history, 2.0) is StoppingReason.NONE


def test_divergence_needs_a_full_window(policy):
    history = [1.0, 2.0, 4.0, 8.0]
    assert policy.evaluate(0.0, 0.0, 8.0, history, 2.0) is StoppingReason.NONE


def test_small_growth_is_not_divergence(policy):
    history = [1.0, 1.05, 1.1, 1.15, 1.2]
    assert not policy.is_diverging(1.2, history)


def test_only_the_last_window_counts(policy):
    history = [5.0, 0.1, 1.0, 1.1, 1.25, 1.45, 1.6]
    assert policy.is_diverging(1.6, history)


def test_bounds_checked_before_divergence(policy):
    history = [1.0, 1.1, 1.25, 1.45, 1.6]
    assert policy.evaluate(9.0, 0.0, 1.6, history, 2.0) is StoppingReason.BOUNDS


def test_policy_from_parameters():
    params = GlobalParameters({"convergence_tol": 0.5, "bounds_factor": 1.0})
    policy = StoppingPolicy.from_params(params)
    assert policy.convergence_tol == 0.5
    assert policy.evaluate(2.5, 0.0, 1.0, [1.0], 2.0) is StoppingReason.BOUNDS
    assert policy.evaluate(0.0, 0.0, 0.4, [0.4], 2.0) is StoppingReason.CONVERGED


def test_reason_string_values():
    assert str(StoppingReason.NONE) == "none"
    assert [r.value for r in StoppingReason] == ["none", "converged", "diverged", "bounds"]


def test_window_must_hold_two_samples():
    with pytest.raises(ValueError):
        StoppingPolicy(window=1)
