import logging

from commands.base import Command
from runtime.simulation import trajectory_segment_lengths
from runtime.stopping import StoppingPolicy

logger = logging.getLogger("surface_descent")

OPTIMIZER_PARAM_KEYS = ("momentum", "beta2", "epsilon")
POLICY_KEYS = (
    "convergence_tol",
    "bounds_factor",
    "divergence_window",
    "divergence_dip_tolerance",
    "divergence_growth",
)


class QuitCommand(Command):
    def execute(self, context, args):
        context.should_exit = True
        print("Exiting interactive mode.")


class HelpCommand(Command):
    def execute(self, context, args):
        print("Interactive commands:")
        print("  f / function <id>  Select a function (quadratic, rosenbrock, ...)")
        print("  functions          List available functions")
        print("  custom <expr>      Compile the custom function, e.g. custom x^2 - y^2")
        print("  lr <v> / lrV       Set learning rate (clamped to [0.001, 0.5])")
        print("  opt <kind>         Optimizer: SGD, Momentum, RMSProp, Adam")
        print("  sgd / momentum / rmsprop / adam  Shorthands for opt")
        print("  set <param> <value>  Set a parameter (e.g. set momentum 0.8)")
        print("  speed <ms>         Tick interval in ms (clamped to [10, 500])")
        print("  start / pause / resume / reset  Control the run")
        print("  point <x> <y>      Move the point directly (stops the run)")
        print("  step N / gN        Run N ticks immediately (e.g. g10)")
        print("  run [N]            Run on the tick clock until stopped or N ticks")
        print("  status / i         Print the current state")
        print("  trajectory         Print the visited points")
        print("  visualize / s [png] Plot the surface and trajectory (optionally to a file)")
        print("  live_vis / lv      Turn on/off live visualization")
        print("  history            Show commands entered this session")
        print("  quit / exit / q    Leave interactive mode")


class SetCommand(Command):
    """Set a global parameter, routing simulation inputs to the loop."""

    def execute(self, context, args):
        if len(args) < 2:
            print("Usage: set [param] [value]")
            return

        loop = context.loop
        param = args[0]
        val_str = args[1]

        if param == "start_point":
            if len(args) < 3:
                print("Usage: set start_point <x> <y>")
                return
            point = (float(args[1]), float(args[2]))
            loop.start_point = point
            context.params.set(param, list(point))
            print(f"Global parameter '{param}' set to {list(point)}")
            return

        try:
            val = float(val_str)
        except ValueError:
            val = val_str

        if param == "learning_rate":
            loop.set_learning_rate(float(val))
            val = loop.learning_rate
        elif param == "optimizer":
            loop.set_optimizer(str(val))
            val = loop.optimizer
        elif param == "tick_interval_ms":
            loop.set_tick_interval(float(val))
            val = loop.tick_interval_ms
        elif param == "function":
            loop.select_function(str(val))
        elif param == "custom_expression":
            val = " ".join(args[1:])
            loop.set_custom_expression(val)
        elif param in OPTIMIZER_PARAM_KEYS:
            loop.set_optimizer_params(**{param: float(val)})
        elif param == "divergence_window":
            val = int(val)

        context.params.set(param, val)
        if param in POLICY_KEYS:
            loop.policy = StoppingPolicy.from_params(context.params)
        print(f"Global parameter '{param}' set to {val}")


class StatusCommand(Command):
    def execute(self, context, args):
        loop = context.loop
        p = loop.point
        m = loop.metrics
        fdef = loop.function
        print("=== Simulation Status ===")
        print(f"Function     : {fdef.name} ({loop.function_id}, v{loop.function_version})")
        if fdef.expression:
            print(f"Expression   : {fdef.expression}")
        print(f"Optimizer    : {loop.optimizer}  lr = {loop.learning_rate:g}")
        print(
            f"Params       : momentum = {loop.optimizer_params.momentum:g}, "
            f"beta2 = {loop.optimizer_params.beta2:g}, "
            f"epsilon = {loop.optimizer_params.epsilon:g}"
        )
        print(f"Status       : {loop.status}")
        print(f"Stop reason  : {loop.stopping_reason}")
        print(f"Point        : ({p.x:.6f}, {p.y:.6f}, {p.z:.6f})")
        print(f"Value        : {m.value:.6g}")
        print(f"|grad|       : {m.gradient_magnitude:.6g}")
        print(f"Trajectory   : {len(loop.trajectory)} points")


class TrajectoryCommand(Command):
    """Print the trajectory with per-segment lengths."""

    def execute(self, context, args):
        trajectory = context.loop.trajectory
        lengths = trajectory_segment_lengths(trajectory)
        print(f"Trajectory ({len(trajectory)} points):")
        for i, p in enumerate(trajectory[:20]):
            seg = f"  step = {lengths[i - 1]:.4g}" if i > 0 else ""
            print(f"  [{i}] ({p.x:.6f}, {p.y:.6f}, {p.z:.6f}){seg}")
        if len(trajectory) > 20:
            print("  ... (showing first 20)")


class HistoryCommand(Command):
    def execute(self, context, args):
        history = getattr(context, "history", None) or []
        if not history:
            print("No commands in history.")
            return
        print("Command history:")
        for idx, line in enumerate(history, start=1):
            print(f"  {idx:3d}: {line}")
