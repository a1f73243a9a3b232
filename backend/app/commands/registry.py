import logging
from typing import Dict, List, Optional
from .base import Command, CommandContext

logger = logging.getLogger(__name__)

class CommandRegistry:
    _commands: Dict[str, Command] = {}
    _aliases: Dict[str, str] = {}

    @classmethod
    def register(cls, command: Command):
        """Registers a command instance."""
        cls._commands[command.name.lower()] = command
        for alias in command.aliases:
            cls._aliases[alias.lower()] = command.name.lower()
        logger.info(f"Registered command: @{command.name}")

    @classmethod
    def get_command(cls, name: str) -> Optional[Command]:
        """Retrieves a command by name or alias."""
        name = name.lower()
        if name in cls._commands:
            return cls._commands[name]
        if name in cls._aliases:
            return cls._commands[cls._aliases[name]]
        return None

    @classmethod
    def get_all_commands(cls) -> List[Command]:
        """Returns a list of all unique registered commands."""
        return list(cls._commands.values())

    @classmethod
    def dispatch(cls, input_text: str, ctx: CommandContext) -> bool:
        """
        Parses and executes a command from input text such as "@roll 2d6+3 # damage".
        Returns False when the text is not a known command.
        """
        parts = input_text.strip().split()
        if not parts or not parts[0].startswith("@"):
            return False

        cmd_name = parts[0][1:]
        command = cls.get_command(cmd_name)
        if not command:
            return False

        command.execute(ctx, parts[1:])
        return True
