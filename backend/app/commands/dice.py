import logging
from typing import List
from .base import Command, CommandContext
from app.config import settings
from game_engine.dice import describe_dice, roll
from game_engine.errors import DiceError

logger = logging.getLogger(__name__)

class RollCommand(Command):
    name = "roll"
    aliases = ["r"]
    description = "Roll dice, e.g. 2d6+3, 4d6k3 or (1d20+5)- for disadvantage."
    usage = "@roll <expression> [# description]"

    def execute(self, ctx: CommandContext, args: List[str]):
        expression, _, description = " ".join(args).partition("#")
        expression = expression.strip()
        description = description.strip()

        if not expression:
            ctx.emit('system_message', {'content': f"Usage: {self.usage}"})
            return

        try:
            result = roll(expression, max_dice=settings.MAX_DICE)
        except DiceError as e:
            # Nothing is recorded for a failed roll
            logger.warning(f"Rejected roll {expression!r} from {ctx.sender_id}: {e}")
            ctx.emit('system_message', {'content': f"Invalid roll '{expression}': {e}"})
            return

        entry = ctx.history.record(result, description, ctx.sender_id)
        logger.info(f"{ctx.sender_id} rolled {expression!r} = {result.result}")
        ctx.emit('roll_result', {
            **entry.model_dump(mode="json"),
            'detail': describe_dice(result.dice),
        })
