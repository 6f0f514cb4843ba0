"""Precedence levels and the parse rule table that drives the FXL compiler."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict

from fxl.fxl_token import FXLTokenType


class FXLPrecedence(IntEnum):
    """Binding strength, lowest to highest."""
    NONE = 0
    TERM = 1        # + -
    UNARY = 2       # prefix - +
    FACTOR = 3      # * / %
    POWER = 4       # ^
    FACTORIAL = 5   # postfix !
    CALL = 6        # function application, grouping
    PRIMARY = 7

    def next_higher(self) -> 'FXLPrecedence':
        """Return the next stronger level (PRIMARY is its own successor)."""
        if self == FXLPrecedence.PRIMARY:
            return self

        return FXLPrecedence(self + 1)


class FXLParseFn(Enum):
    """Parse actions the compiler can dispatch to."""
    NONE = "none"
    NUMBER = "number"
    VARIABLE = "variable"
    GROUPING = "grouping"
    UNARY = "unary"
    BINARY = "binary"
    FACTORIAL = "factorial"
    FUNCTION_CALL = "function_call"


@dataclass(frozen=True)
class FXLParseRule:
    """How a token behaves at the start of an expression (prefix) and after one (infix)."""
    prefix: FXLParseFn
    infix: FXLParseFn
    precedence: FXLPrecedence

    def next_precedence(self) -> FXLPrecedence:
        """Precedence at which the right operand of an infix operator is parsed."""
        if self.precedence == FXLPrecedence.NONE:
            return FXLPrecedence.TERM

        return self.precedence.next_higher()


_RULE_NONE = FXLParseRule(FXLParseFn.NONE, FXLParseFn.NONE, FXLPrecedence.NONE)

# Every function name token shares one rule; the compiler reads the function id from the token
_RULE_FUNCTION = FXLParseRule(FXLParseFn.FUNCTION_CALL, FXLParseFn.NONE, FXLPrecedence.NONE)

PARSE_RULES: Dict[FXLTokenType, FXLParseRule] = {
    FXLTokenType.NUMBER: FXLParseRule(FXLParseFn.NUMBER, FXLParseFn.NONE, FXLPrecedence.NONE),
    FXLTokenType.IDENTIFIER: FXLParseRule(FXLParseFn.VARIABLE, FXLParseFn.NONE, FXLPrecedence.NONE),
    FXLTokenType.FUNCTION: _RULE_FUNCTION,
    FXLTokenType.LPAREN: FXLParseRule(FXLParseFn.GROUPING, FXLParseFn.NONE, FXLPrecedence.NONE),
    FXLTokenType.PLUS: FXLParseRule(FXLParseFn.UNARY, FXLParseFn.BINARY, FXLPrecedence.TERM),
    FXLTokenType.MINUS: FXLParseRule(FXLParseFn.UNARY, FXLParseFn.BINARY, FXLPrecedence.TERM),
    FXLTokenType.STAR: FXLParseRule(FXLParseFn.NONE, FXLParseFn.BINARY, FXLPrecedence.FACTOR),
    FXLTokenType.SLASH: FXLParseRule(FXLParseFn.NONE, FXLParseFn.BINARY, FXLPrecedence.FACTOR),
    FXLTokenType.PERCENT: FXLParseRule(FXLParseFn.NONE, FXLParseFn.BINARY, FXLPrecedence.FACTOR),
    FXLTokenType.CARET: FXLParseRule(FXLParseFn.NONE, FXLParseFn.BINARY, FXLPrecedence.POWER),
    FXLTokenType.BANG: FXLParseRule(FXLParseFn.NONE, FXLParseFn.FACTORIAL, FXLPrecedence.FACTORIAL),
}


def get_rule(token_type: FXLTokenType) -> FXLParseRule:
    """Return the parse rule for a token type (tokens without one get an all-NONE rule)."""
    return PARSE_RULES.get(token_type, _RULE_NONE)
