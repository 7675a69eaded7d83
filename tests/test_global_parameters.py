import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from parameters.global_parameters import GlobalParameters


def test_defaults():
    params = GlobalParameters()
    assert params.function == "quadratic"
    assert params.custom_expression == "x^2 + y^2"
    assert params.learning_rate == 0.1
    assert params.optimizer == "SGD"
    assert params.momentum == 0.9
    assert params.beta2 == 0.999
    assert params.epsilon == 1e-8
    assert params.tick_interval_ms == 100
    assert params.start_point == [1.5, 1.5]


def test_attribute_and_dict_access_are_consistent():
    params = GlobalParameters()

    params.set("learning_rate", 0.25)
    assert params.get("learning_rate") == 0.25
    assert params.learning_rate == 0.25

    params.learning_rate = 0.05
    assert params.learning_rate == 0.05
    assert params.get("learning_rate") == 0.05


def test_initial_params_and_unknown_keys():
    params = GlobalParameters({"optimizer": "Adam", "extra": 3})
    assert params.optimizer == "Adam"
    assert "extra" in params
    assert params.get("missing", "fallback") == "fallback"
    assert params.to_dict()["extra"] == 3


def test_instances_do_not_share_state():
    a = GlobalParameters()
    b = GlobalParameters()
    a.set("function", "beale")
    assert b.function == "quadratic"
