"""
FXL Compiler - turns formula text into bytecode in a single pass.

The compiler is a precedence-climbing (Pratt) parser.  It pulls tokens from the scanner
and appends instructions to its output as soon as each production is recognised, so there
is no intermediate syntax tree.  Problems are collected as diagnostics and parsing carries
on, so one compile reports every mistake it can find.
"""

import logging
from typing import Callable, Dict, List

from fxl.fxl_builtins import FXLBuiltinRegistry, FXLFunction
from fxl.fxl_bytecode import FXLProgram, Instruction, Opcode
from fxl.fxl_error import FXLCompileError, FXLDiagnostic
from fxl.fxl_precedence import FXLParseFn, FXLPrecedence, get_rule
from fxl.fxl_scanner import FXLScanner
from fxl.fxl_token import FXLToken, FXLTokenType


MAX_ARGUMENTS = 255

# Deepest allowed nesting of parentheses, prefix operators and call arguments
MAX_DEPTH = 100

_BINARY_OPCODES: Dict[FXLTokenType, Opcode] = {
    FXLTokenType.PLUS: Opcode.ADD,
    FXLTokenType.MINUS: Opcode.SUBTRACT,
    FXLTokenType.STAR: Opcode.MULTIPLY,
    FXLTokenType.SLASH: Opcode.DIVIDE,
    FXLTokenType.CARET: Opcode.POWER,
    FXLTokenType.PERCENT: Opcode.MODULO,
}


class FXLCompiler:
    """
    Single-pass compiler from formula text to an FXLProgram.

    A compiler instance can be reused; every call to compile() starts from fresh state.

    The parser recurses for every parenthesis, prefix operator and call argument list, so
    nesting of these is limited to max_depth levels.
    A formula nested deeper gets one "too deeply nested" diagnostic and the rest of it is
    skipped.
    """

    def __init__(self, registry: FXLBuiltinRegistry | None = None, max_depth: int = MAX_DEPTH) -> None:
        """
        Initialize the compiler.

        Args:
            registry: Builtin registry used to recognise function names
            max_depth: Maximum nesting depth of sub-expressions
        """
        self.registry = registry if registry is not None else FXLBuiltinRegistry()
        self.max_depth = max_depth
        self._logger = logging.getLogger("FXLCompiler")

        # Jump table from parse action to handler
        self._parse_fns: Dict[FXLParseFn, Callable[[], None]] = {
            FXLParseFn.NONE: self._no_expression,
            FXLParseFn.NUMBER: self._number,
            FXLParseFn.VARIABLE: self._variable,
            FXLParseFn.GROUPING: self._grouping,
            FXLParseFn.UNARY: self._unary,
            FXLParseFn.BINARY: self._binary,
            FXLParseFn.FACTORIAL: self._factorial,
            FXLParseFn.FUNCTION_CALL: self._function_call,
        }

        self._reset("")

    def _reset(self, source: str) -> None:
        self._scanner = FXLScanner(source, self.registry)
        self._instructions: List[Instruction] = []
        self._names: List[str] = []
        self._diagnostics: List[FXLDiagnostic] = []
        self._previous = FXLToken(FXLTokenType.EOF, "", 0)
        self._current = FXLToken(FXLTokenType.EOF, "", 0)
        self._depth = 0
        self._too_deep = False

    def compile(self, source: str) -> FXLProgram:
        """
        Compile formula text to bytecode.

        Args:
            source: Formula text; all whitespace is ignored

        Returns:
            The compiled program

        Raises:
            FXLCompileError: If the formula has any scan or parse errors (all of them are reported)
        """
        self._reset("".join(source.split()))

        # Load the first token
        self._advance()
        self._expression()
        if self._current.type != FXLTokenType.EOF:
            self._error("Expected end of expression")

        if self._diagnostics:
            raise FXLCompileError(self._diagnostics)

        program = FXLProgram(tuple(self._instructions), tuple(self._names))
        self._logger.debug(
            "Compiled %r to %d instructions, variables %s", source, len(program), program.names
        )
        return program

    def _emit(self, instruction: Instruction) -> None:
        self._instructions.append(instruction)

    def _error(self, message: str) -> None:
        if self._too_deep:
            # Nothing after a nesting failure is parsed
            return

        diagnostic = FXLDiagnostic(message, self._current.lexeme, self._current.position)
        self._logger.debug("Compile diagnostic: %s", diagnostic)
        self._diagnostics.append(diagnostic)

    def _advance(self) -> None:
        self._previous = self._current
        while True:
            self._current = self._scanner.scan_token()
            if self._current.type != FXLTokenType.ERROR:
                break

            # Record the bad character and keep scanning for further problems
            self._error(self._current.value)

    def _check(self, token_type: FXLTokenType) -> bool:
        return self._current.type == token_type

    def _match(self, token_type: FXLTokenType) -> bool:
        if not self._check(token_type):
            return False

        self._advance()
        return True

    def _consume(self, token_type: FXLTokenType, message: str) -> None:
        """Consume the current token, recording message if it is not of the expected type."""
        self._advance()
        if self._previous.type != token_type:
            self._error(message)

    def _parse_precedence(self, precedence: FXLPrecedence) -> None:
        self._advance()

        # Anything that can start an expression has a prefix rule
        self._parse_fns[get_rule(self._previous.type).prefix]()

        # Then consume infix operators for as long as they bind at least this tightly
        while precedence <= get_rule(self._current.type).precedence:
            self._advance()
            self._parse_fns[get_rule(self._previous.type).infix]()

    def _nested_expression(self, precedence: FXLPrecedence) -> None:
        """Parse a sub-expression one nesting level below the current one."""
        if self._depth >= self.max_depth:
            self._nesting_error()
            return

        self._depth += 1
        self._parse_precedence(precedence)
        self._depth -= 1

    def _nesting_error(self) -> None:
        """Report excessive nesting and skip the rest of the formula."""
        if self._too_deep:
            return

        self._error(f"Expression too deeply nested (max depth: {self.max_depth})")
        self._too_deep = True
        while self._current.type != FXLTokenType.EOF:
            self._advance()

    def _expression(self) -> None:
        self._parse_precedence(FXLPrecedence.TERM)

    def _no_expression(self) -> None:
        self._error("Expected expression")

    def _number(self) -> None:
        token = self._previous
        if token.value is not None:
            # Named constants arrive with their value already resolved
            self._emit(Instruction(Opcode.CONSTANT, float(token.value)))
            return

        try:
            value = float(token.lexeme)

        except ValueError:
            self._error("Invalid number")
            return

        self._emit(Instruction(Opcode.CONSTANT, value))

    def _variable(self) -> None:
        self._emit(Instruction(Opcode.GET_VAR, self._identifier_slot(self._previous.lexeme)))

    def _identifier_slot(self, name: str) -> int:
        """Return the slot for a variable name, adding it to the symbol table on first use."""
        if name in self._names:
            return self._names.index(name)

        self._names.append(name)
        return len(self._names) - 1

    def _grouping(self) -> None:
        self._nested_expression(FXLPrecedence.TERM)
        self._consume(FXLTokenType.RPAREN, "Expected ')' after expression")

    def _unary(self) -> None:
        operator = self._previous.type
        self._nested_expression(FXLPrecedence.UNARY)
        if operator == FXLTokenType.MINUS:
            self._emit(Instruction(Opcode.NEGATE))

    def _binary(self) -> None:
        operator = self._previous.type
        self._parse_precedence(get_rule(operator).next_precedence())

        opcode = _BINARY_OPCODES.get(operator)
        if opcode is None:
            self._error("Invalid binary operator")
            return

        self._emit(Instruction(opcode))

    def _factorial(self) -> None:
        self._emit(Instruction(Opcode.FACTORIAL))

    def _function_call(self) -> None:
        function: FXLFunction = self._previous.value
        self._consume(FXLTokenType.LPAREN, "Expected '(' after function name")
        arg_count = self._argument_list()
        self._emit(Instruction(Opcode.CALL, int(function), arg_count))

    def _argument_list(self) -> int:
        """Compile comma separated arguments up to and including the closing ')'."""
        arg_count = 0
        if not self._check(FXLTokenType.RPAREN):
            while True:
                self._nested_expression(FXLPrecedence.TERM)
                if arg_count == MAX_ARGUMENTS:
                    self._error(f"Cannot have more than {MAX_ARGUMENTS} arguments")

                arg_count += 1
                if not self._match(FXLTokenType.COMMA):
                    break

        self._consume(FXLTokenType.RPAREN, "Expected ')' after function argument list")
        return arg_count
