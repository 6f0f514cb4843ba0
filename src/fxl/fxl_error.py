"""Exception classes for FXL (Formula eXpression Language) with detailed context."""

from dataclasses import dataclass
from typing import List, Optional


class FXLError(Exception):
    """Base exception for FXL errors with detailed context information."""

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestion: Optional[str] = None,
        example: Optional[str] = None,
        position: Optional[int] = None
    ):
        """
        Initialize detailed error.

        Args:
            message: Core error description
            context: Additional context information
            expected: What was expected
            received: What was actually received
            suggestion: Suggestion for fixing the error
            example: Example of correct usage
            position: Character position where error occurred
        """
        self.message = message
        self.context = context
        self.expected = expected
        self.received = received
        self.suggestion = suggestion
        self.example = example
        self.position = position

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.position is not None:
            parts.append(f"Position: {self.position}")

        if self.received:
            parts.append(f"Received: {self.received}")

        if self.expected:
            parts.append(f"Expected: {self.expected}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")

        if self.example:
            parts.append(f"Example: {self.example}")

        return "\n".join(parts)


@dataclass(frozen=True)
class FXLDiagnostic:
    """A single problem found while compiling a formula."""
    message: str
    lexeme: str
    position: int

    def __str__(self) -> str:
        where = self.lexeme if self.lexeme else "end"
        return f"Error: {self.message} at {where}"


class FXLCompileError(FXLError):
    """
    Compilation failed.

    Scan and parse problems are collected rather than reported one at a time, so a formula
    with several mistakes reports all of them.  The string form has one line per diagnostic.
    """

    def __init__(self, diagnostics: List[FXLDiagnostic]):
        self.diagnostics = list(diagnostics)
        position = self.diagnostics[0].position if self.diagnostics else None
        super().__init__("\n".join(str(d) for d in self.diagnostics), position=position)

    def _format_detailed_message(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)


class FXLOptimizeError(FXLError):
    """The optimizer was given an empty or malformed instruction stream."""


class FXLEvalError(FXLError):
    """Evaluation errors with detailed context."""
