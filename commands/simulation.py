import logging

from commands.base import Command
from runtime.simulation import SimulationStatus
from runtime.steppers import OPTIMIZER_KINDS

logger = logging.getLogger("surface_descent")


def _parse_float(token, label):
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"{label} must be a number, got '{token}'.") from None


def _report(loop):
    p = loop.point
    m = loop.metrics
    print(
        f"Step {len(loop.trajectory) - 1:4d}: x = {p.x: .6f}, y = {p.y: .6f}, "
        f"f = {m.value:.6g}, |grad| = {m.gradient_magnitude:.3e}, "
        f"status = {loop.status}"
        + (f" ({loop.stopping_reason})" if loop.status is SimulationStatus.STOPPED else "")
    )


class SelectFunctionCommand(Command):
    """Select the active function (e.g. f rosenbrock)."""

    def execute(self, context, args):
        if not args:
            print(f"Usage: f <id>   (one of: {', '.join(context.loop.registry.ids())})")
            return
        context.loop.select_function(args[0].lower())
        _report(context.loop)


class ListFunctionsCommand(Command):
    def execute(self, context, args):
        registry = context.loop.registry
        for fid in registry.ids():
            fdef = registry.get(fid)
            marker = "*" if fid == context.loop.function_id else " "
            extra = f"  [{fdef.expression}]" if fdef.expression else ""
            print(
                f" {marker} {fid:<11} {fdef.name:<26} "
                f"[{fdef.range[0]:g}, {fdef.range[1]:g}] v{registry.version(fid)}{extra}"
            )


class CustomExpressionCommand(Command):
    """Recompile the custom function (e.g. custom sin(x)*cos(y))."""

    def execute(self, context, args):
        if not args:
            print("Usage: custom <expression in x and y>")
            return
        expression = " ".join(args)
        loop = context.loop
        before = loop.registry.version("custom")
        loop.set_custom_expression(expression)
        if loop.registry.version("custom") == before:
            print("Expression rejected; keeping the previous custom function.")


class LearningRateCommand(Command):
    """Set the learning rate (e.g. lr 0.05 or lr0.05)."""

    def execute(self, context, args):
        if not args:
            print(f"Learning rate: {context.loop.learning_rate:g}")
            return
        context.loop.set_learning_rate(_parse_float(args[0], "Learning rate"))
        print(f"Learning rate set to {context.loop.learning_rate:g}")


class SetOptimizerCommand(Command):
    """Switch the optimizer; built with a fixed kind for the shorthands."""

    def __init__(self, kind=None):
        self.kind = kind

    def execute(self, context, args):
        kind = self.kind
        if kind is None:
            if not args:
                print(f"Usage: opt <{'|'.join(OPTIMIZER_KINDS)}>")
                return
            kind = args[0]
        context.loop.set_optimizer(kind)
        logger.info("Optimizer: %s", context.loop.optimizer)


class SpeedCommand(Command):
    """Set the tick interval in milliseconds."""

    def execute(self, context, args):
        if not args:
            print(f"Tick interval: {context.loop.tick_interval_ms:g} ms")
            return
        context.loop.set_tick_interval(_parse_float(args[0], "Tick interval"))
        print(f"Tick interval set to {context.loop.tick_interval_ms:g} ms")


class StartCommand(Command):
    def execute(self, context, args):
        context.loop.start()


class PauseCommand(Command):
    def execute(self, context, args):
        context.loop.pause()


class ResumeCommand(Command):
    def execute(self, context, args):
        context.loop.resume()


class ResetCommand(Command):
    def execute(self, context, args):
        context.loop.reset()
        _report(context.loop)


class PointCommand(Command):
    """Place the point directly (e.g. point 0.5 -1)."""

    def execute(self, context, args):
        if len(args) < 2:
            print("Usage: point <x> <y>")
            return
        x = _parse_float(args[0], "x")
        y = _parse_float(args[1], "y")
        context.loop.set_current_point(x, y)
        _report(context.loop)


class StepCommand(Command):
    """Run N ticks immediately (e.g. step 10, g10).

    Starts the run if needed; a run that was not already going is paused
    again afterwards so no timer is left pending.
    """

    def execute(self, context, args):
        n_steps = 1
        if args and args[0].isdigit():
            n_steps = int(args[0])

        loop = context.loop
        was_running = loop.is_running
        if not was_running:
            loop.start()

        taken = 0
        for _ in range(n_steps):
            if not loop.is_running:
                break
            loop.tick()
            taken += 1

        if not was_running and loop.is_running:
            loop.pause()

        logger.debug("Executed %d of %d requested ticks.", taken, n_steps)
        _report(loop)


class RunCommand(Command):
    """Run on the scheduler clock until the run stops or N ticks elapse."""

    def execute(self, context, args):
        loop = context.loop
        limit = int(context.params.get("max_ticks", 1000))
        if args and args[0].isdigit():
            limit = int(args[0])

        loop.start()
        if not loop.is_running:
            return
        fired = loop.scheduler.run(max_calls=limit)
        if loop.is_running:
            loop.pause()
            logger.info("Tick limit %d reached; run paused.", limit)
        logger.debug("Scheduler fired %d timers.", fired)
        _report(loop)


class LiveVisCommand(Command):
    """Toggle live visualization."""

    def execute(self, context, args):
        context.live_vis = not context.live_vis
        if context.live_vis:
            from visualization.plotting import update_live_vis

            context.live_vis_state = None

            def on_change(snapshot):
                context.live_vis_state = update_live_vis(
                    context.loop, state=context.live_vis_state, title=f"Step {snapshot.tick}"
                )

            context.live_vis_unsubscribe = context.loop.subscribe(on_change)
        else:
            if context.live_vis_unsubscribe is not None:
                context.live_vis_unsubscribe()
            context.live_vis_unsubscribe = None
            state = context.live_vis_state
            if state and "fig" in state:
                import matplotlib.pyplot as plt

                plt.close(state["fig"])
            context.live_vis_state = None
        logger.info(f"Live visualization {'enabled' if context.live_vis else 'disabled'}")
