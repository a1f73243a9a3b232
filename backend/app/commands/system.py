from typing import List
from .base import Command, CommandContext
from .registry import CommandRegistry

class HelpCommand(Command):
    name = "help"
    aliases = ["h", "commands"]
    description = "List available commands."
    usage = "@help"

    def execute(self, ctx: CommandContext, args: List[str]):
        commands = CommandRegistry.get_all_commands()
        help_text = "**Available Commands:**\n"
        for cmd in commands:
            help_text += f"- `{cmd.usage}`: {cmd.description}\n"

        ctx.emit('system_message', {'content': help_text})
