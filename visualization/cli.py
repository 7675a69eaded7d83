import argparse
import logging
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from geometry.surface_mesh import generate_mesh
from modules.functions import CUSTOM_ID
from parameters.global_parameters import GlobalParameters
from runtime.function_registry import FunctionRegistry
from runtime.logging_config import setup_logging
from runtime.simulation import Point3
from visualization.plotting import plot_surface

logger = logging.getLogger("surface_descent")


def create_parser() -> argparse.ArgumentParser:
    """Arguments of the ``surface-view`` command."""
    parser = argparse.ArgumentParser(
        description="Plot a built-in or custom function surface."
    )
    parser.add_argument(
        "function",
        nargs="?",
        default="quadratic",
        help="Function id to plot (default: quadratic).",
    )
    parser.add_argument(
        "--expr", help="Custom expression in x and y; plots the 'custom' function."
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=GlobalParameters().mesh_resolution,
        help="Grid cells per side.",
    )
    parser.add_argument(
        "--point",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        help="Mark (X, Y) on the surface with its descent direction.",
    )
    parser.add_argument("--wireframe", action="store_true", help="Draw mesh edges.")
    parser.add_argument(
        "--transparent", action="store_true", help="Semi-transparent faces."
    )
    parser.add_argument("--no-axes", action="store_true", help="Hide the axes.")
    parser.add_argument(
        "--save", metavar="PATH", help="Write the figure to PATH instead of showing it."
    )
    return parser


def _selected_function(args):
    registry = FunctionRegistry()
    if args.expr:
        registry.compile_custom(args.expr)
        return registry.get(CUSTOM_ID)
    return registry.get(args.function.lower())


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(None)

    fdef = _selected_function(args)
    mesh_data = generate_mesh(fdef.f, fdef.range, args.resolution)

    marks = ()
    if args.point:
        x, y = args.point
        marks = (Point3(x, y, float(fdef.f(x, y))),)

    plot_surface(
        mesh_data,
        marks,
        fdef=fdef,
        title=fdef.name,
        show_wireframe=args.wireframe,
        show_gradient_arrow=bool(marks),
        transparent=args.transparent,
        no_axes=args.no_axes,
        show=args.save is None,
    )

    if args.save:
        plt.gcf().savefig(args.save, bbox_inches="tight")
        logger.info("Saved visualization to %s", args.save)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
