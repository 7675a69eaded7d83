from abc import ABC, abstractmethod
from typing import List


class Command(ABC):
    """A named action driven from the prompt or an instruction list."""

    @abstractmethod
    def execute(self, context, args: List[str]) -> None:
        """
        Run the command against the session.

        Args:
            context: The CommandContext holding the simulation loop.
            args: Tokens following the command name.
        """
