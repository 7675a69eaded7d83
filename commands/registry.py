from commands.io import VisualizeCommand
from commands.meta import (
    HelpCommand,
    HistoryCommand,
    QuitCommand,
    SetCommand,
    StatusCommand,
    TrajectoryCommand,
)
from commands.simulation import (
    CustomExpressionCommand,
    LearningRateCommand,
    ListFunctionsCommand,
    LiveVisCommand,
    PauseCommand,
    PointCommand,
    ResetCommand,
    ResumeCommand,
    RunCommand,
    SelectFunctionCommand,
    SetOptimizerCommand,
    SpeedCommand,
    StartCommand,
    StepCommand,
)

COMMAND_REGISTRY = {
    "f": SelectFunctionCommand(),
    "function": SelectFunctionCommand(),
    "functions": ListFunctionsCommand(),
    "custom": CustomExpressionCommand(),
    "lr": LearningRateCommand(),
    "opt": SetOptimizerCommand(),
    "optimizer": SetOptimizerCommand(),
    "sgd": SetOptimizerCommand("SGD"),
    "momentum": SetOptimizerCommand("Momentum"),
    "rmsprop": SetOptimizerCommand("RMSProp"),
    "adam": SetOptimizerCommand("Adam"),
    "speed": SpeedCommand(),
    "start": StartCommand(),
    "pause": PauseCommand(),
    "resume": ResumeCommand(),
    "reset": ResetCommand(),
    "point": PointCommand(),
    "g": StepCommand(),
    "step": StepCommand(),
    "run": RunCommand(),
    "lv": LiveVisCommand(),
    "live_vis": LiveVisCommand(),
    "s": VisualizeCommand(),
    "visualize": VisualizeCommand(),
    "i": StatusCommand(),
    "status": StatusCommand(),
    "trajectory": TrajectoryCommand(),
    "q": QuitCommand(),
    "quit": QuitCommand(),
    "exit": QuitCommand(),
    "help": HelpCommand(),
    "h": HelpCommand(),
    "set": SetCommand(),
    "history": HistoryCommand(),
}


def get_command(name):
    # Handle g10, lr0.05, etc.
    if name.startswith("g") and name[1:].isdigit():
        return COMMAND_REGISTRY["g"], [name[1:]]
    if name.lower().startswith("lr") and len(name) > 2:
        return COMMAND_REGISTRY["lr"], [name[2:]]

    cmd = COMMAND_REGISTRY.get(name.lower())
    return cmd, []
