from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from runtime.simulation import SimulationLoop


@dataclass
class CommandContext:
    """Holds the shared state for an interactive session."""

    loop: SimulationLoop
    should_exit: bool = False
    history: List[str] = field(default_factory=list)
    macros: Dict[str, List[str]] = field(default_factory=dict)
    live_vis: bool = False
    live_vis_state: Optional[Dict[str, Any]] = None
    live_vis_unsubscribe: Optional[Callable[[], None]] = None

    @property
    def params(self):
        return self.loop.global_params
