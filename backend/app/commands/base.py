from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from app.models import RollHistory

class CommandContext:
    def __init__(self,
                 sender_id: str,
                 history: RollHistory,
                 emit: Callable[[str, Dict[str, Any]], Any]):
        self.sender_id = sender_id
        self.history = history
        self.emit = emit

class Command(ABC):
    name: str = "base"
    aliases: List[str] = []
    description: str = "Base command"
    usage: str = "@command"

    @abstractmethod
    def execute(self, ctx: CommandContext, args: List[str]):
        """
        Execute the command logic.
        """
        pass
