import logging
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from commands.context import CommandContext
from commands.executor import execute_command_line
from commands.meta import HelpCommand, QuitCommand
from commands.registry import COMMAND_REGISTRY, get_command
from commands.simulation import RunCommand, StepCommand
from parameters.global_parameters import GlobalParameters
from runtime.scheduler import ManualScheduler
from runtime.simulation import SimulationLoop, SimulationStatus
from runtime.stopping import StoppingReason


@pytest.fixture
def context():
    loop = SimulationLoop(GlobalParameters(), scheduler=ManualScheduler())
    return CommandContext(loop)


def test_prefixed_command_names():
    cmd, args = get_command("g10")
    assert isinstance(cmd, StepCommand)
    assert args == ["10"]

    cmd, args = get_command("lr0.05")
    assert cmd is COMMAND_REGISTRY["lr"]
    assert args == ["0.05"]

    cmd, args = get_command("RUN")
    assert isinstance(cmd, RunCommand)
    assert args == []

    assert get_command("live_vis")[0] is COMMAND_REGISTRY["live_vis"]
    assert get_command("bogus") == (None, [])


def test_step_runs_ticks_and_leaves_run_paused(context, capsys):
    execute_command_line(context, "g3")
    loop = context.loop
    assert len(loop.trajectory) == 4
    assert loop.status is SimulationStatus.PAUSED
    assert loop.scheduler.pending() == 0
    assert "Step    3" in capsys.readouterr().out
    assert context.history == ["g3"]


def test_step_stops_early_on_convergence(context):
    execute_command_line(context, "step 500")
    loop = context.loop
    assert loop.status is SimulationStatus.STOPPED
    assert loop.stopping_reason is StoppingReason.CONVERGED
    assert len(loop.trajectory) == 39


def test_run_uses_scheduler_until_stopped(context):
    execute_command_line(context, "run")
    assert context.loop.stopping_reason is StoppingReason.CONVERGED


def test_run_with_limit_pauses(context):
    execute_command_line(context, "run 5")
    loop = context.loop
    assert len(loop.trajectory) == 6
    assert loop.status is SimulationStatus.PAUSED


def test_function_optimizer_and_learning_rate_commands(context, capsys):
    execute_command_line(context, "f himmelblau")
    execute_command_line(context, "adam")
    execute_command_line(context, "lr 0.02")
    loop = context.loop
    assert loop.function_id == "himmelblau"
    assert loop.optimizer == "Adam"
    assert loop.learning_rate == 0.02

    execute_command_line(context, "opt rmsprop")
    assert loop.optimizer == "RMSProp"
    execute_command_line(context, "lr9")
    assert loop.learning_rate == 0.5
    assert "Learning rate set to 0.5" in capsys.readouterr().out


def test_errors_are_logged_not_raised(context, caplog):
    caplog.set_level(logging.ERROR, logger="surface_descent")
    assert execute_command_line(context, "f nowhere") is False
    assert execute_command_line(context, "opt newton") is False
    assert execute_command_line(context, "lr fast") is False
    assert "Unknown function id 'nowhere'" in caplog.text
    assert "Unknown optimizer 'newton'" in caplog.text
    assert context.loop.function_id == "quadratic"


def test_unknown_instruction_warns(context, caplog):
    caplog.set_level(logging.WARNING, logger="surface_descent")
    assert execute_command_line(context, "frobnicate") is False
    assert "Unknown instruction: frobnicate" in caplog.text


def test_custom_command_reports_rejection(context, capsys):
    execute_command_line(context, "custom x^2 - y^2")
    assert context.loop.registry.custom_expression == "x^2 - y^2"
    execute_command_line(context, "custom sin(x")
    assert "Expression rejected" in capsys.readouterr().out
    assert context.loop.registry.custom_expression == "x^2 - y^2"


def test_point_and_reset(context):
    execute_command_line(context, "point 0.5 0.25")
    assert (context.loop.point.x, context.loop.point.y) == (0.5, 0.25)
    execute_command_line(context, "reset")
    assert (context.loop.point.x, context.loop.point.y) == (1.5, 1.5)


def test_start_pause_resume_commands(context):
    execute_command_line(context, "start")
    assert context.loop.status is SimulationStatus.RUNNING
    execute_command_line(context, "pause")
    assert context.loop.status is SimulationStatus.PAUSED
    execute_command_line(context, "resume")
    assert context.loop.status is SimulationStatus.RUNNING


def test_speed_command(context):
    execute_command_line(context, "speed 250")
    assert context.loop.tick_interval_ms == 250


def test_set_routes_parameters(context, capsys):
    loop = context.loop
    execute_command_line(context, "set momentum 0.5")
    assert loop.optimizer_params.momentum == 0.5
    execute_command_line(context, "set convergence_tol 10")
    assert loop.policy.convergence_tol == 10.0
    execute_command_line(context, "set start_point 0.1 0.2")
    assert loop.start_point == (0.1, 0.2)
    execute_command_line(context, "set custom_expression x * y")
    assert loop.registry.custom_expression == "x * y"
    assert context.params.get("custom_expression") == "x * y"
    execute_command_line(context, "set optimizer adam")
    assert context.params.get("optimizer") == "Adam"
    assert "Global parameter 'optimizer' set to Adam" in capsys.readouterr().out


def test_status_and_trajectory_output(context, capsys):
    execute_command_line(context, "g2")
    capsys.readouterr()
    execute_command_line(context, "i")
    out = capsys.readouterr().out
    assert "=== Simulation Status ===" in out
    assert "Quadratic Bowl" in out
    execute_command_line(context, "trajectory")
    out = capsys.readouterr().out
    assert "Trajectory (3 points)" in out


def test_functions_listing_marks_selection(context, capsys):
    execute_command_line(context, "functions")
    out = capsys.readouterr().out
    assert " * quadratic" in out
    assert "ackley" in out


def test_history_and_quit(context, capsys):
    execute_command_line(context, "sgd")
    execute_command_line(context, "history")
    assert "1: sgd" in capsys.readouterr().out
    QuitCommand().execute(context, [])
    assert context.should_exit is True


def test_help_lists_commands(capsys):
    HelpCommand().execute(None, [])
    out = capsys.readouterr().out
    assert "Interactive commands:" in out
    assert "custom <expr>" in out


def test_macros_expand(context):
    context.macros["descend"] = ["adam", "g2"]
    assert execute_command_line(context, "descend") is True
    assert context.loop.optimizer == "Adam"
    assert len(context.loop.trajectory) == 3


def test_recursive_macro_is_rejected(context):
    context.macros["loop"] = ["loop"]
    with pytest.raises(RuntimeError):
        execute_command_line(context, "loop")


def test_visualize_writes_png(context, tmp_path):
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    execute_command_line(context, "g3")
    path = tmp_path / "surface.png"
    execute_command_line(context, f"s {path}")
    assert path.exists()
    plt.close("all")


def test_compound_line_runs_each_segment(context):
    assert execute_command_line(context, "rmsprop; g2 ;; lr 0.2") is True
    loop = context.loop
    assert loop.optimizer == "RMSProp"
    assert len(loop.trajectory) == 3
    assert loop.learning_rate == 0.2
    assert context.history == ["rmsprop", "g2", "lr 0.2"]


def test_non_finite_learning_rate_is_logged(context, caplog):
    caplog.set_level(logging.ERROR, logger="surface_descent")
    assert execute_command_line(context, "lr nan") is False
    assert context.loop.learning_rate == 0.1
    assert "finite" in caplog.text
