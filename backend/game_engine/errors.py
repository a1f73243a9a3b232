class DiceError(ValueError):
    """Base class for everything that can go wrong with a dice expression."""
    pass


class LexError(DiceError):
    def __init__(self, position: int, character: str):
        self.position = position
        self.character = character
        super().__init__(f"Unexpected character {character!r} at position {position}")


class ParseError(DiceError):
    def __init__(self, position: int, expected: str, found: str):
        self.position = position
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected} at position {position}, found {found}")


class EvaluationError(DiceError):
    pass
