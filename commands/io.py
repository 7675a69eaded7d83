import logging

from commands.base import Command

logger = logging.getLogger("surface_descent")


class VisualizeCommand(Command):
    """Plot the surface of the selected function with the trajectory."""

    def execute(self, context, args):
        from visualization.plotting import plot_simulation

        save_path = args[0] if args else None
        plot_simulation(context.loop, show=save_path is None)
        if save_path:
            import matplotlib.pyplot as plt

            plt.gcf().savefig(save_path, bbox_inches="tight")
            logger.info("Saved visualization to %s", save_path)
