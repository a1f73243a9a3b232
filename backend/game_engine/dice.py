import logging
import math
import random
from typing import Callable, List, NamedTuple, Optional

from pydantic import BaseModel

from .dice_parser import AstNode, KeepKind, Operator, parse
from .errors import EvaluationError

logger = logging.getLogger(__name__)

# Upper bound on individual dice per evaluation, advantage re-rolls included.
DEFAULT_MAX_DICE = 1000
# Deepest AST accepted; anything the parser produces stays well below it.
MAX_DEPTH = 128

RandomSource = Callable[[], float]


class DieResult(BaseModel):
    sides: int
    value: int


class Roll(BaseModel):
    expression: str
    # One inner list per dice roll (or per attempt of an advantage/disadvantage group)
    dice: List[List[DieResult]]
    result: int


class _Outcome(NamedTuple):
    result: int
    dice: List[List[DieResult]]


class _Evaluator:
    def __init__(self, rng: RandomSource, max_dice: int):
        self.rng = rng
        self.max_dice = max_dice
        self.dice_rolled = 0
        self.depth = 0

    def evaluate(self, node: AstNode) -> _Outcome:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise EvaluationError(f"Expression is nested more than {MAX_DEPTH} levels deep")
        try:
            return self._evaluate(node)
        finally:
            self.depth -= 1

    def _evaluate(self, node: AstNode) -> _Outcome:
        node_type = getattr(node, "type", None)

        if node_type == "number":
            return _Outcome(node.value, [])
        elif node_type == "dice_roll":
            return self._dice_roll(node)
        elif node_type == "binary_op":
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            if node.operator == Operator.ADD:
                result = left.result + right.result
            else:
                result = left.result - right.result
            return _Outcome(result, left.dice + right.dice)
        elif node_type == "group":
            return self._group(node)

        raise EvaluationError(f"Unknown AST node type: {type(node).__name__}")

    def _dice_roll(self, node) -> _Outcome:
        count, sides, modifier = node.count, node.sides, node.modifier

        if count < 1:
            raise EvaluationError(f"Cannot roll {count} dice")
        if sides < 1:
            raise EvaluationError(f"A die needs at least one side, got d{sides}")
        if modifier is not None and not 1 <= modifier.count <= count:
            raise EvaluationError(f"Cannot keep {modifier.count} of {count} dice")
        if self.dice_rolled + count > self.max_dice:
            raise EvaluationError(f"Expression rolls more than {self.max_dice} dice")
        self.dice_rolled += count

        group = [DieResult(sides=sides, value=self._draw(sides)) for _ in range(count)]
        values = [die.value for die in group]

        if modifier:
            values.sort()
            if modifier.kind == KeepKind.HIGHEST:
                values = values[-modifier.count:]
            else:
                values = values[:modifier.count]

        return _Outcome(sum(values), [group])

    def _group(self, node) -> _Outcome:
        if node.group_operator is None:
            return self.evaluate(node.expression)

        first = self.evaluate(node.expression)
        second = self.evaluate(node.expression)
        dice = [_flatten(first.dice), _flatten(second.dice)]

        # Ties go to the first attempt
        if node.group_operator == Operator.SUBTRACT:
            result = first.result if first.result <= second.result else second.result
        else:
            result = first.result if first.result >= second.result else second.result
        return _Outcome(result, dice)

    def _draw(self, sides: int) -> int:
        sample = self.rng()
        if not 0 <= sample < 1:
            raise EvaluationError(f"Random source returned {sample!r}, expected a value in [0, 1)")
        return math.floor(sample * sides) + 1


def _flatten(groups: List[List[DieResult]]) -> List[DieResult]:
    return [die for group in groups for die in group]


def evaluate(ast: AstNode, rng: RandomSource, expression: str = "",
             max_dice: int = DEFAULT_MAX_DICE) -> Roll:
    """
    Walks the AST depth-first, left before right, calling rng() once per die.
    Returns the total together with every die rolled, grouped by the dice roll
    (or advantage/disadvantage attempt) that produced it.
    """
    outcome = _Evaluator(rng, max_dice).evaluate(ast)
    roll_result = Roll(expression=expression, dice=outcome.dice, result=outcome.result)
    logger.debug(f"Evaluated {expression!r}: {roll_result.result} from {len(roll_result.dice)} dice group(s)")
    return roll_result


def create_roll_function(rng: RandomSource, max_dice: int = DEFAULT_MAX_DICE) -> Callable[[str], Roll]:
    def roll_expression(expression: str) -> Roll:
        return evaluate(parse(expression), rng, expression=expression, max_dice=max_dice)
    return roll_expression


def roll(expression: str, rng: Optional[RandomSource] = None, max_dice: int = DEFAULT_MAX_DICE) -> Roll:
    """Parses and rolls an expression, using random.random unless another source is given."""
    return create_roll_function(rng or random.random, max_dice=max_dice)(expression)


def describe_dice(dice: List[List[DieResult]]) -> str:
    """
    Text form of a roll's dice, e.g. "d6(4) + d6(5) + d4(2)".
    Two groups with matching dice are shown as an advantage pair: "d20(3), d20(17)".
    """
    def describe_group(group: List[DieResult]) -> str:
        return " + ".join(f"d{die.sides}({die.value})" for die in group)

    is_pair = (
        len(dice) == 2
        and len(dice[0]) == len(dice[1])
        and all(a.sides == b.sides for a, b in zip(dice[0], dice[1]))
    )
    separator = ", " if is_pair else " + "
    return separator.join(describe_group(group) for group in dice)
