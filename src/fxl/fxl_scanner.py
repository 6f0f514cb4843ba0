"""
Scanner for FXL formulas.

Besides the usual numbers, names and operators, the scanner inserts the "*" of implicit
multiplication.  A value followed directly by a letter or "(" is multiplied by it, where a
value is a number, a variable name, one of the constants pi and e, or a closing
parenthesis:

    3x          -> 3 * x
    2pi         -> 2 * pi
    x(x+1)      -> x * (x+1)
    (x+1)(x-1)  -> (x+1) * (x-1)
    sin(x)cos(x) -> sin(x) * cos(x)

Function names never take part ("sin(x)" is a call), digits after a name belong to the
name ("x2" is one variable) and a number is never multiplied by what precedes it
("(x)2" does not compile).
"""

from fxl.fxl_builtins import CONSTANTS, FXLBuiltinRegistry
from fxl.fxl_token import FXLToken, FXLTokenType


# Single character operators and punctuation
_SYMBOLS = {
    '+': FXLTokenType.PLUS,
    '-': FXLTokenType.MINUS,
    '*': FXLTokenType.STAR,
    '/': FXLTokenType.SLASH,
    '^': FXLTokenType.CARET,
    '%': FXLTokenType.PERCENT,
    '!': FXLTokenType.BANG,
    ')': FXLTokenType.RPAREN,
    ',': FXLTokenType.COMMA,
}


class FXLScanner:
    """
    Produces FXL tokens one at a time, on demand.

    The source must already have had its whitespace removed.  Besides the cursor, the
    scanner keeps one piece of state: whether the previous token produced a value that a
    following letter or '(' should be multiplied by.  That is how "3x", "2pi" and
    "(x+1)(x-1)" get their implicit multiplication.
    """

    def __init__(self, source: str, registry: FXLBuiltinRegistry | None = None) -> None:
        """
        Initialize the scanner.

        Args:
            source: Formula text with whitespace already removed
            registry: Builtin registry used to recognise function names
        """
        self.source = source
        self.registry = registry if registry is not None else FXLBuiltinRegistry()
        self._start = 0
        self._current = 0
        self._can_multiply = False

    def scan_token(self) -> FXLToken:
        """
        Scan the next token.

        Returns:
            The next token; EOF tokens are returned indefinitely once input is exhausted
        """
        self._start = self._current

        if self._is_at_end():
            return self._make_token(FXLTokenType.EOF)

        ch = self._advance()

        if self._is_digit(ch):
            self._can_multiply = True
            return self._number()

        if self._is_alpha(ch):
            if self._can_multiply:
                return self._implicit_multiply()

            return self._identifier()

        if ch == '(':
            if self._can_multiply:
                return self._implicit_multiply()

            return self._make_token(FXLTokenType.LPAREN)

        token_type = _SYMBOLS.get(ch)
        if token_type is None:
            self._can_multiply = False
            return FXLToken(FXLTokenType.ERROR, ch, self._start, "Unexpected character")

        # A closing parenthesis ends a value, so "(a)(b)" and "(a)b" multiply
        self._can_multiply = token_type == FXLTokenType.RPAREN
        return self._make_token(token_type)

    def _implicit_multiply(self) -> FXLToken:
        # Leave the letter or parenthesis to be scanned by the next call
        self._can_multiply = False
        self._current = self._start
        return FXLToken(FXLTokenType.STAR, '*', self._start)

    def _number(self) -> FXLToken:
        while self._is_digit(self._peek()):
            self._advance()

        if self._peek() == '.' and self._is_digit(self._peek_next()):
            self._advance()  # consume the '.'
            while self._is_digit(self._peek()):
                self._advance()

        # The lexeme is converted to a value by the compiler
        return self._make_token(FXLTokenType.NUMBER)

    def _identifier(self) -> FXLToken:
        while self._is_alpha(self._peek()) or self._is_digit(self._peek()):
            self._advance()

        lexeme = self.source[self._start:self._current]

        if lexeme in CONSTANTS:
            self._can_multiply = True
            return self._make_token(FXLTokenType.NUMBER, CONSTANTS[lexeme])

        function = self.registry.lookup(lexeme)
        if function is not None:
            # "sin(" must not become "sin*("
            self._can_multiply = False
            return self._make_token(FXLTokenType.FUNCTION, function)

        self._can_multiply = True
        return self._make_token(FXLTokenType.IDENTIFIER)

    def _make_token(self, token_type: FXLTokenType, value: object = None) -> FXLToken:
        return FXLToken(token_type, self.source[self._start:self._current], self._start, value)

    def _advance(self) -> str:
        ch = self._peek()
        self._current += 1
        return ch

    def _peek(self) -> str:
        if self._is_at_end():
            return '\0'

        return self.source[self._current]

    def _peek_next(self) -> str:
        if self._current + 1 >= len(self.source):
            return '\0'

        return self.source[self._current + 1]

    def _is_at_end(self) -> bool:
        return self._current >= len(self.source)

    @staticmethod
    def _is_alpha(ch: str) -> bool:
        return 'a' <= ch <= 'z' or 'A' <= ch <= 'Z' or ch == '_'

    @staticmethod
    def _is_digit(ch: str) -> bool:
        return '0' <= ch <= '9'
