import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from commands.completion import (
    argument_choices,
    command_line_completions,
    command_name_completions,
)
from commands.registry import COMMAND_REGISTRY
from modules.functions import BUILTIN_FUNCTIONS
from runtime.steppers import OPTIMIZER_KINDS

CHOICES = argument_choices(list(BUILTIN_FUNCTIONS) + ["custom"], OPTIMIZER_KINDS)


def test_command_name_completion_uses_last_semicolon_segment():
    candidates = command_name_completions(
        text="s",
        line_buffer="g10; s",
        command_names=COMMAND_REGISTRY.keys(),
        macro_names=["sweep"],
    )
    for name in ("s", "set", "sgd", "speed", "start", "status", "step", "sweep"):
        assert name in candidates


def test_command_name_completion_does_not_complete_args():
    candidates = command_name_completions(
        text="x",
        line_buffer="point 1 x",
        command_names=["point", "pause"],
        macro_names=[],
    )
    assert candidates == []


def test_function_id_completion():
    candidates = command_line_completions(
        text="",
        line_buffer="f ",
        command_names=COMMAND_REGISTRY.keys(),
        arguments=CHOICES,
    )
    assert "rosenbrock" in candidates
    assert "custom" in candidates


def test_function_id_completion_prefix():
    candidates = command_line_completions(
        text="s",
        line_buffer="function s",
        command_names=COMMAND_REGISTRY.keys(),
        arguments=CHOICES,
    )
    assert candidates == ["saddle", "sinusoidal"]


def test_optimizer_completion():
    candidates = command_line_completions(
        text="R",
        line_buffer="opt R",
        command_names=COMMAND_REGISTRY.keys(),
        arguments=CHOICES,
    )
    assert candidates == ["RMSProp"]


def test_commands_without_argument_choices():
    assert (
        command_line_completions(
            text="", line_buffer="lr ", command_names=["lr"], arguments=CHOICES
        )
        == []
    )
