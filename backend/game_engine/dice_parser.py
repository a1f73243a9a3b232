import logging
import re
from enum import Enum
from typing import Annotated, List, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, Field

from .errors import LexError, ParseError

logger = logging.getLogger(__name__)


# --- AST ---

class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"


class KeepKind(str, Enum):
    HIGHEST = "k"
    LOWEST = "kl"


class KeepModifier(BaseModel):
    model_config = {"frozen": True}
    kind: KeepKind
    count: int


class NumberNode(BaseModel):
    model_config = {"frozen": True}
    type: Literal["number"] = "number"
    value: int


class DiceRollNode(BaseModel):
    model_config = {"frozen": True}
    type: Literal["dice_roll"] = "dice_roll"
    count: int = 1
    sides: int
    modifier: Optional[KeepModifier] = None


class BinaryOpNode(BaseModel):
    model_config = {"frozen": True}
    type: Literal["binary_op"] = "binary_op"
    operator: Operator
    left: "AstNode"
    right: "AstNode"


class GroupNode(BaseModel):
    """
    Parenthesized expression. A group_operator of SUBTRACT means disadvantage
    (roll twice, keep the lower total), ADD means advantage.
    """
    model_config = {"frozen": True}
    type: Literal["group"] = "group"
    expression: "AstNode"
    group_operator: Optional[Operator] = None


AstNode = Annotated[
    Union[NumberNode, DiceRollNode, BinaryOpNode, GroupNode],
    Field(discriminator="type"),
]

BinaryOpNode.model_rebuild()
GroupNode.model_rebuild()


# --- Tokenizer ---

class TokenKind(Enum):
    NUMBER = "number"
    D = "d"
    K = "k"
    KL = "kl"
    PLUS = "+"
    MINUS = "-"
    LPAREN = "("
    RPAREN = ")"


class Token(NamedTuple):
    kind: TokenKind
    text: str
    position: int


# Alternation order matters: 'kl' has to be tried before 'k'.
_TOKEN_RE = re.compile(
    r"(?P<NUMBER>\d+)"
    r"|(?P<KL>kl)"
    r"|(?P<K>k)"
    r"|(?P<D>d)"
    r"|(?P<PLUS>\+)"
    r"|(?P<MINUS>-)"
    r"|(?P<LPAREN>\()"
    r"|(?P<RPAREN>\))"
    r"|(?P<SPACE>\s+)",
    re.IGNORECASE,
)


def tokenize(text: str) -> List[Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise LexError(pos, text[pos])
        if match.lastgroup != "SPACE":
            tokens.append(Token(TokenKind[match.lastgroup], match.group(), pos))
        pos = match.end()
    return tokens


# --- Parser ---

_OPERATORS = {
    TokenKind.PLUS: Operator.ADD,
    TokenKind.MINUS: Operator.SUBTRACT,
}

_TERM_START = (TokenKind.NUMBER, TokenKind.D, TokenKind.LPAREN)
_EXPECTED_TERM = "a number, a dice roll or '('"

# Bounds on expression size, checked while parsing.
MAX_TERMS = 100
MAX_NESTING = 16
MAX_DIGITS = 12


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.terms = 0
        self.nesting = 0

    def parse(self) -> AstNode:
        node = self._expr()
        token = self._peek()
        if token is not None:
            self._fail("'+', '-' or end of input", token)
        return node

    # Expr := Term (('+' | '-') Term)*
    def _expr(self) -> AstNode:
        node = self._term()
        while self._at(TokenKind.PLUS, TokenKind.MINUS):
            operator = _OPERATORS[self._advance().kind]
            right = self._term()
            node = BinaryOpNode(operator=operator, left=node, right=right)
        return node

    # Term := Number | DiceRoll | Group
    def _term(self) -> AstNode:
        token = self._peek()
        if token is None or token.kind not in _TERM_START:
            self._fail(_EXPECTED_TERM, token)

        self.terms += 1
        if self.terms > MAX_TERMS:
            raise ParseError(token.position, f"at most {MAX_TERMS} terms", repr(token.text))

        if token.kind is TokenKind.LPAREN:
            return self._group()
        if token.kind is TokenKind.D:
            return self._dice_roll(None)

        self._advance()
        if self._at(TokenKind.D):
            return self._dice_roll(self._number(token))
        return NumberNode(value=self._number(token))

    # DiceRoll := [Number] 'd' Number [('k' | 'kl') Number]
    def _dice_roll(self, count: Optional[int]) -> DiceRollNode:
        self._expect(TokenKind.D, "'d'")
        sides = self._number(self._expect(TokenKind.NUMBER, "the number of sides"))

        modifier = None
        if self._at(TokenKind.K, TokenKind.KL):
            keep = self._advance()
            keep_count = self._number(self._expect(TokenKind.NUMBER, "the number of dice to keep"))
            kind = KeepKind.HIGHEST if keep.kind is TokenKind.K else KeepKind.LOWEST
            modifier = KeepModifier(kind=kind, count=keep_count)

        return DiceRollNode(count=1 if count is None else count, sides=sides, modifier=modifier)

    # Group := '(' Expr ')' [('+' | '-')]
    def _group(self) -> GroupNode:
        opening = self._expect(TokenKind.LPAREN, "'('")
        self.nesting += 1
        if self.nesting > MAX_NESTING:
            raise ParseError(opening.position, f"at most {MAX_NESTING} nested groups", "'('")
        expression = self._expr()
        self.nesting -= 1
        self._expect(TokenKind.RPAREN, "')'")

        # A sign right after ')' belongs to the group unless it opens another term.
        group_operator = None
        if self._at(TokenKind.PLUS, TokenKind.MINUS):
            following = self._peek(1)
            if following is None or following.kind not in _TERM_START:
                group_operator = _OPERATORS[self._advance().kind]

        return GroupNode(expression=expression, group_operator=group_operator)

    def _number(self, token: Token) -> int:
        if len(token.text) > MAX_DIGITS:
            raise ParseError(token.position, f"a number of at most {MAX_DIGITS} digits",
                             f"a {len(token.text)} digit number")
        return int(token.text)

    def _peek(self, offset: int = 0) -> Optional[Token]:
        index = self.index + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def _at(self, *kinds: TokenKind) -> bool:
        token = self._peek()
        return token is not None and token.kind in kinds

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, kind: TokenKind, expected: str) -> Token:
        if not self._at(kind):
            self._fail(expected, self._peek())
        return self._advance()

    def _fail(self, expected: str, token: Optional[Token]):
        if token is None:
            raise ParseError(len(self.text), expected, "end of input")
        raise ParseError(token.position, expected, repr(token.text))


def parse(text: str) -> AstNode:
    """
    Parses a dice expression such as "2d6+3", "4d6k3" or "(1d20+5)-" into an AST.
    Raises LexError for unknown characters and ParseError for grammar violations.
    """
    node = _Parser(text).parse()
    logger.debug("Parsed %r", text)
    return node
