"""
Builtin function registry for FXL.

This module is the single source of truth for the builtin math functions: their names,
numeric ids (as encoded in CALL instructions), arities and implementations.  The scanner
uses it to recognise reserved names, the compiler to encode calls and the VM and optimizer
to execute them.
"""

import math
from enum import IntEnum
from typing import Callable, Dict, List, Sequence, Tuple

from fxl import fxl_math
from fxl.fxl_error import FXLEvalError


class FXLFunction(IntEnum):
    """Builtin functions.  The value is the id encoded in CALL instructions; 0 is reserved."""
    SIN = 1
    ASIN = 2
    SINH = 3
    COS = 4
    ACOS = 5
    COSH = 6
    TAN = 7
    ATAN = 8
    TANH = 9
    LN = 10
    LOG = 11
    SQRT = 12
    ABS = 13
    FLOOR = 14
    CEIL = 15
    ROUND = 16
    TRUNC = 17
    EXP = 18

    @property
    def display_name(self) -> str:
        """Name as written in formulas."""
        return self.name.lower()


# Named constants resolved by the scanner as number literals
CONSTANTS: Dict[str, float] = {
    'pi': math.pi,
    'e': math.e,
}


class FXLBuiltinRegistry:
    """
    Central registry for all builtin functions.

    Implementations are held in an array indexed by function id for fast VM access.
    """

    # Maps each builtin to (arity, implementation).  log takes its base first: log(base, x).
    BUILTIN_TABLE: Dict[FXLFunction, Tuple[int, Callable[..., float]]] = {
        FXLFunction.SIN: (1, fxl_math.sin),
        FXLFunction.ASIN: (1, fxl_math.asin),
        FXLFunction.SINH: (1, fxl_math.sinh),
        FXLFunction.COS: (1, fxl_math.cos),
        FXLFunction.ACOS: (1, fxl_math.acos),
        FXLFunction.COSH: (1, fxl_math.cosh),
        FXLFunction.TAN: (1, fxl_math.tan),
        FXLFunction.ATAN: (1, fxl_math.atan),
        FXLFunction.TANH: (1, fxl_math.tanh),
        FXLFunction.LN: (1, fxl_math.ln),
        FXLFunction.LOG: (2, fxl_math.log),
        FXLFunction.SQRT: (1, fxl_math.sqrt),
        FXLFunction.ABS: (1, fxl_math.absolute),
        FXLFunction.FLOOR: (1, fxl_math.floor),
        FXLFunction.CEIL: (1, fxl_math.ceil),
        FXLFunction.ROUND: (1, fxl_math.round_half_away),
        FXLFunction.TRUNC: (1, fxl_math.trunc),
        FXLFunction.EXP: (1, fxl_math.exp),
    }

    def __init__(self) -> None:
        """Initialize the registry and build the id-indexed lookup arrays."""
        size = max(FXLFunction) + 1
        self._arities: List[int] = [0] * size
        self._implementations: List[Callable[..., float] | None] = [None] * size
        self._by_name: Dict[str, FXLFunction] = {}

        for function in FXLFunction:
            if function not in self.BUILTIN_TABLE:
                raise RuntimeError(f"Builtin function '{function.display_name}' has no implementation")

            arity, implementation = self.BUILTIN_TABLE[function]
            self._arities[function] = arity
            self._implementations[function] = implementation
            self._by_name[function.display_name] = function

    def lookup(self, name: str) -> FXLFunction | None:
        """
        Find a builtin by its exact name.

        Args:
            name: Identifier as written in the formula

        Returns:
            The matching builtin, or None if the name is not reserved
        """
        return self._by_name.get(name)

    def names(self) -> List[str]:
        """Return the names of all builtins in id order."""
        return [function.display_name for function in FXLFunction]

    def _resolve(self, function_id: int) -> FXLFunction:
        try:
            return FXLFunction(function_id)

        except ValueError as e:
            raise FXLEvalError(
                message=f"Function with id {function_id} does not exist",
                context="Function ids are assigned by the compiler from the builtin table"
            ) from e

    def name(self, function_id: int) -> str:
        """Return the display name of a function id."""
        return self._resolve(function_id).display_name

    def arity(self, function_id: int) -> int:
        """Return the number of arguments a function id expects."""
        return self._arities[self._resolve(function_id)]

    def execute(self, function_id: int, args: Sequence[float]) -> float:
        """
        Call a builtin function.

        Args:
            function_id: Id of the function (as encoded in a CALL instruction)
            args: Arguments in declaration order

        Returns:
            The function result

        Raises:
            FXLEvalError: If the id is unknown or the argument count is wrong
        """
        function = self._resolve(function_id)
        expected = self._arities[function]
        if len(args) != expected:
            raise FXLEvalError(
                message=f"Function {function.display_name} expects {expected} arguments, but {len(args)} were given",
                expected=f"{expected} argument{'s' if expected != 1 else ''}",
                received=f"{len(args)} argument{'s' if len(args) != 1 else ''}",
                example="log(2, 8)" if function == FXLFunction.LOG else f"{function.display_name}(x)"
            )

        implementation = self._implementations[function]
        assert implementation is not None
        return implementation(*args)
