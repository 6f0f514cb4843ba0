"""Token types and token representation for FXL formulas."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FXLTokenType(Enum):
    """Token types for FXL formulas."""
    NUMBER = "NUMBER"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    PERCENT = "%"
    BANG = "!"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    IDENTIFIER = "IDENTIFIER"
    FUNCTION = "FUNCTION"
    EOF = "EOF"
    ERROR = "ERROR"


@dataclass
class FXLToken:
    """Represents a single token in an FXL formula."""
    type: FXLTokenType
    lexeme: str
    position: int
    value: Any = None  # float for NUMBER, FXLFunction for FUNCTION, message for ERROR

    def __repr__(self) -> str:
        return f"FXLToken({self.type.name}, {self.lexeme!r}, pos={self.position})"
