import argparse
import logging
import sys

import matplotlib.pyplot as plt

from commands.completion import argument_choices, command_line_completions
from commands.context import CommandContext
from commands.executor import execute_command_line
from commands.registry import COMMAND_REGISTRY
from core.exceptions import SurfaceDescentError
from parameters.global_parameters import GlobalParameters
from parameters.session_io import (
    load_data,
    parse_instructions,
    parse_session,
    resolve_session_path,
)
from runtime.logging_config import setup_logging
from runtime.scheduler import BlockingScheduler
from runtime.simulation import SimulationLoop
from runtime.steppers import OPTIMIZER_KINDS
from surface_descent import __version__

logger = logging.getLogger("surface_descent")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gradient descent surface simulator")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("-i", "--input", help="Optional session file (YAML or JSON)")
    parser.add_argument(
        "--instructions", help="Optional instruction file (one command per line)"
    )
    parser.add_argument("-f", "--function", default=None, help="Function id to select")
    parser.add_argument(
        "--expr", default=None, help="Custom expression in x and y (selects 'custom')"
    )
    parser.add_argument(
        "--optimizer",
        default=None,
        help=f"Optimizer to use, any case of: {', '.join(OPTIMIZER_KINDS)}",
    )
    parser.add_argument("--lr", type=float, default=None, help="Learning rate")
    parser.add_argument(
        "--viz",
        action="store_true",
        help="Plot the selected surface and exit (no simulation).",
    )
    parser.add_argument(
        "--viz-save",
        default=None,
        help="Save the visualization image to PATH instead of only showing it.",
    )
    parser.add_argument(
        "--resolution", type=int, default=None, help="Surface grid cells per side"
    )
    parser.add_argument("--log", default=None, help="Optional log file")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress console output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable verbose debug logging"
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Skip interactive mode after executing instructions",
    )
    return parser


def _install_completer(context) -> None:
    try:
        import readline
    except ImportError:  # pragma: no cover - platform without readline
        return

    choices = argument_choices(context.loop.registry.ids(), OPTIMIZER_KINDS)

    def complete(text, state):
        matches = command_line_completions(
            text=text,
            line_buffer=readline.get_line_buffer(),
            command_names=COMMAND_REGISTRY.keys(),
            macro_names=context.macros.keys(),
            arguments=choices,
        )
        return matches[state] if state < len(matches) else None

    readline.set_completer(complete)
    readline.parse_and_bind("tab: complete")


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    global logger
    logger = setup_logging(args.log, quiet=args.quiet, debug=args.debug)

    macros = {}
    if args.input:
        try:
            path = resolve_session_path(args.input)
        except FileNotFoundError as exc:
            print(exc, file=sys.stderr)
            return 1
        data = load_data(path)
        global_params, lines = parse_session(data)
        macros = data.get("macros") or {}
    else:
        global_params, lines = GlobalParameters(), []

    if args.expr:
        global_params.set("custom_expression", args.expr)
        global_params.set("function", "custom")
    if args.function:
        global_params.set("function", args.function.lower())
    if args.optimizer:
        global_params.set("optimizer", args.optimizer)
    if args.lr is not None:
        global_params.set("learning_rate", args.lr)
    if args.resolution is not None:
        global_params.set("mesh_resolution", args.resolution)

    try:
        loop = SimulationLoop(global_params, scheduler=BlockingScheduler())
    except (SurfaceDescentError, ValueError) as exc:
        logger.error(f"Invalid session: {exc}")
        return 2
    context = CommandContext(loop, macros=macros)
    logger.debug(repr(loop))

    if args.viz or args.viz_save:
        from visualization.plotting import plot_simulation

        plot_simulation(loop, show=args.viz_save is None)
        if args.viz_save:
            fig = plt.gcf()
            fig.savefig(args.viz_save, bbox_inches="tight")
            logger.info("Saved visualization to %s", args.viz_save)
        return 0

    if args.instructions:
        with open(args.instructions, "r") as f:
            lines = parse_instructions(f.readlines())

    logger.debug(f"Executing {len(lines)} initial instructions.")
    for line in lines:
        execute_command_line(context, line)
        if context.should_exit:
            break

    if not args.non_interactive and not context.should_exit:
        _install_completer(context)
        while not context.should_exit:
            try:
                line = input("> ").strip()
            except EOFError:
                break
            if not line:
                continue
            try:
                execute_command_line(context, line)
            except Exception as e:
                logger.error(f"Error executing command '{line.split()[0]}': {e}")

    p = loop.point
    logger.info(
        "Session complete: %s at (%.6g, %.6g), f = %.6g, status %s (%s).",
        loop.function_id,
        p.x,
        p.y,
        p.z,
        loop.status,
        loop.stopping_reason,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
