"""Shared fixtures and utilities for FXL tests."""

import pytest
from typing import List, Sequence

from fxl import FXL, FXLCompiler, FXLOptimizer, FXLVM, FXLScanner, FXLToken, FXLTokenType, FXLProgram


@pytest.fixture
def fxl():
    """Create a fresh FXL instance for each test."""
    return FXL()


@pytest.fixture
def fxl_unoptimized():
    """FXL instance that evaluates without constant folding."""
    return FXL(optimize=False)


@pytest.fixture
def compiler():
    """Create a fresh compiler."""
    return FXLCompiler()


@pytest.fixture
def optimizer():
    """Create a fresh optimizer."""
    return FXLOptimizer()


@pytest.fixture
def vm():
    """Create a VM with the default stack size."""
    return FXLVM()


class FXLTestHelpers:
    """Helper utilities for FXL testing."""

    @staticmethod
    def scan_all(source: str) -> List[FXLToken]:
        """Scan a (whitespace free) source up to and including the EOF token."""
        scanner = FXLScanner(source)
        tokens = []
        while True:
            token = scanner.scan_token()
            tokens.append(token)
            if token.type == FXLTokenType.EOF:
                return tokens

            assert len(tokens) < 1000, "Scanner did not reach EOF"

    @staticmethod
    def token_types(source: str) -> List[FXLTokenType]:
        """Scan a source and return just the token types."""
        return [token.type for token in FXLTestHelpers.scan_all(source)]

    @staticmethod
    def listing(program: FXLProgram) -> List[str]:
        """Return the repr of every instruction in a program."""
        return [repr(instr) for instr in program.instructions]

    @staticmethod
    def build_nested_expression(operand: str, depth: int) -> str:
        """Build a right nested sum such as x+(x+(x+x)), which needs depth + 1 stack slots."""
        if depth <= 0:
            return operand

        return f"{operand}+({FXLTestHelpers.build_nested_expression(operand, depth - 1)})"

    @staticmethod
    def run_both(fxl: FXL, source: str, values: Sequence[float]) -> List[float]:
        """Run a formula unoptimized and optimized, returning both results."""
        program = fxl.compile(source)
        return [fxl.run(program, values), fxl.run(fxl.optimize(program), values)]


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return FXLTestHelpers
