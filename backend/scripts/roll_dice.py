import argparse
import json
import os
import random
import sys

# Add parent directory to path to allow imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.logging_config import logger
from app.config import settings
from game_engine.dice import create_roll_function, describe_dice
from game_engine.errors import DiceError

def main(argv=None):
    parser = argparse.ArgumentParser(description="Roll dice expressions such as 2d6+3, 4d6k3 or (1d20)-.")
    parser.add_argument("expressions", nargs="+", help="Dice expressions to roll")
    parser.add_argument("--seed", type=int, help="Seed for reproducible rolls")
    parser.add_argument("--json", action="store_true", help="Print each roll as JSON")
    parser.add_argument("--max-dice", type=int, default=None, help="Maximum dice per expression")

    args = parser.parse_args(argv)

    rng = random.Random(args.seed).random if args.seed is not None else random.random
    roll = create_roll_function(rng, max_dice=args.max_dice or settings.MAX_DICE)

    for expression in args.expressions:
        try:
            result = roll(expression)
        except DiceError as e:
            logger.error(f"Failed to roll {expression!r}: {e}")
            print(f"{expression}: error: {e}", file=sys.stderr)
            return 1

        if args.json:
            print(json.dumps(result.model_dump()))
        else:
            detail = describe_dice(result.dice)
            print(f"{expression} = {result.result}" + (f"  [{detail}]" if detail else ""))

    return 0

if __name__ == "__main__":
    sys.exit(main())
