"""
FXL Optimizer - folds constant sub-expressions in compiled bytecode.

The optimizer makes one linear pass over an instruction list, simulating the VM's stack
with entries that are either a known constant or an opaque fragment of code that depends
on a variable.  Whenever every operand of an instruction is constant the instruction is
evaluated immediately; otherwise the operands' code and the instruction are kept as a new
fragment.

Examples:
    2+3*4           -> CONSTANT 14.0
    x*(2+3)         -> GET_VAR 0, CONSTANT 5.0, MULTIPLY
    sin(pi/2)+x     -> CONSTANT 1.0, GET_VAR 0, ADD
"""

import logging
from dataclasses import dataclass
from typing import List, Union

from fxl.fxl_builtins import FXLBuiltinRegistry
from fxl.fxl_bytecode import FXLProgram, Instruction, Opcode
from fxl.fxl_error import FXLOptimizeError
from fxl.fxl_vm import BINARY_OPERATIONS, UNARY_OPERATIONS


@dataclass
class _Constant:
    """A stack entry whose value is known at compile time."""
    value: float


@dataclass
class _Fragment:
    """A stack entry whose value depends on a variable; holds the code that computes it."""
    instructions: List[Instruction]


_Entry = Union[_Constant, _Fragment]


def _code_for(entry: _Entry) -> List[Instruction]:
    if isinstance(entry, _Constant):
        return [Instruction(Opcode.CONSTANT, entry.value)]

    return entry.instructions


class FXLOptimizer:
    """
    Constant folding pass over compiled FXL programs.

    The pass never changes the symbol table and is idempotent: optimizing an optimized
    program gives the same instruction list back.
    """

    def __init__(self, registry: FXLBuiltinRegistry | None = None) -> None:
        """
        Initialize the optimizer.

        Args:
            registry: Builtin registry used to fold calls with constant arguments
        """
        self.registry = registry if registry is not None else FXLBuiltinRegistry()
        self._logger = logging.getLogger("FXLOptimizer")

    def optimize(self, program: FXLProgram) -> FXLProgram:
        """
        Fold every fully constant sub-expression of a program.

        Args:
            program: Compiled program

        Returns:
            An equivalent program with the same variable names and no more instructions

        Raises:
            FXLOptimizeError: If the program is empty or its instruction stream is malformed
            FXLEvalError: If a call with constant arguments fails (e.g. wrong argument count)
        """
        if not program.instructions:
            raise FXLOptimizeError("No instructions provided")

        stack: List[_Entry] = []
        for instr in program.instructions:
            if instr.opcode == Opcode.CONSTANT:
                stack.append(_Constant(float(instr.arg1)))
                continue

            if instr.opcode == Opcode.GET_VAR:
                # A variable is never constant
                stack.append(_Fragment([instr]))
                continue

            count = instr.operand_count()
            if count > len(stack):
                raise FXLOptimizeError(
                    message="Stack underflow",
                    context=f"{instr!r} needs {count} operand(s) but only {len(stack)} are available"
                )

            operands = stack[len(stack) - count:]
            del stack[len(stack) - count:]

            if all(isinstance(entry, _Constant) for entry in operands):
                args = [entry.value for entry in operands]  # type: ignore[union-attr]
                stack.append(_Constant(self._evaluate(instr, args)))
                continue

            # A fragment is owned by one stack entry, so the first operand's code is extended in place
            code = _code_for(operands[0])
            for entry in operands[1:]:
                code.extend(_code_for(entry))

            code.append(instr)
            stack.append(_Fragment(code))

        instructions: List[Instruction] = []
        for entry in stack:
            instructions.extend(_code_for(entry))

        self._logger.debug(
            "Optimized %d instructions to %d", len(program.instructions), len(instructions)
        )
        return FXLProgram(tuple(instructions), program.names)

    def _evaluate(self, instr: Instruction, args: List[float]) -> float:
        """Evaluate an instruction whose operands are all constant."""
        if instr.opcode in BINARY_OPERATIONS:
            return BINARY_OPERATIONS[instr.opcode](args[0], args[1])

        if instr.opcode in UNARY_OPERATIONS:
            return UNARY_OPERATIONS[instr.opcode](args[0])

        if instr.opcode == Opcode.CALL:
            return self.registry.execute(int(instr.arg1), args)

        raise FXLOptimizeError(f"Invalid instruction: opcode {int(instr.opcode)}")
