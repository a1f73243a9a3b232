from .registry import CommandRegistry
from .system import HelpCommand
from .dice import RollCommand

# Register all commands here so they are loaded when `app.commands` is imported

CommandRegistry.register(HelpCommand())
CommandRegistry.register(RollCommand())
