"""Bytecode definitions for the FXL virtual machine."""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Tuple

from fxl.fxl_builtins import FXLFunction


class Opcode(IntEnum):
    """Bytecode operation codes."""

    CONSTANT = 1        # CONSTANT value
    GET_VAR = 2         # GET_VAR slot

    # Binary operators: pop right, pop left, push (left OP right)
    ADD = 10
    SUBTRACT = 11
    MULTIPLY = 12
    DIVIDE = 13
    POWER = 14
    MODULO = 15

    # Unary operators
    NEGATE = 20
    FACTORIAL = 21

    CALL = 30           # CALL function_id arity


BINARY_OPCODES = frozenset({
    Opcode.ADD, Opcode.SUBTRACT, Opcode.MULTIPLY, Opcode.DIVIDE, Opcode.POWER, Opcode.MODULO
})

UNARY_OPCODES = frozenset({Opcode.NEGATE, Opcode.FACTORIAL})


@dataclass(frozen=True)
class Instruction:
    """
    Single bytecode instruction.

    arg1 holds the value for CONSTANT, the slot for GET_VAR and the function id for CALL;
    arg2 holds the arity for CALL.  Other opcodes take no arguments.
    """
    opcode: Opcode
    arg1: float | int = 0
    arg2: int = 0

    def operand_count(self) -> int:
        """Return the number of values this instruction pops from the stack."""
        if self.opcode in BINARY_OPCODES:
            return 2

        if self.opcode in UNARY_OPCODES:
            return 1

        if self.opcode == Opcode.CALL:
            return self.arg2

        return 0

    def __repr__(self) -> str:
        """Human-readable representation."""
        if self.opcode == Opcode.CONSTANT:
            return f"CONSTANT {self.arg1!r}"

        if self.opcode == Opcode.GET_VAR:
            return f"GET_VAR {self.arg1}"

        if self.opcode == Opcode.CALL:
            return f"CALL {self.arg1} {self.arg2}"

        return self.opcode.name


@dataclass(frozen=True)
class FXLProgram:
    """
    A compiled formula: its instruction list and its symbol table.

    Programs are immutable, so one program can be run any number of times, from any
    number of threads, with different variable bindings.  The values passed to the VM must
    be ordered to match variable_names().
    """

    # Bytecode instructions
    instructions: Tuple[Instruction, ...]

    # Variable names, indexed by GET_VAR slot
    names: Tuple[str, ...] = ()

    def variable_names(self) -> List[str]:
        """Return the variable names in slot order."""
        return list(self.names)

    def __len__(self) -> int:
        return len(self.instructions)

    def _annotate(self, instr: Instruction) -> str:
        if instr.opcode == Opcode.GET_VAR:
            slot = int(instr.arg1)
            name = self.names[slot] if slot < len(self.names) else "<unknown>"
            return f"  ; Load variable '{name}'"

        if instr.opcode == Opcode.CALL:
            try:
                name = FXLFunction(int(instr.arg1)).display_name

            except ValueError:
                name = f"<unknown-{instr.arg1}>"

            arg_word = "arg" if instr.arg2 == 1 else "args"
            return f"  ; Call '{name}' with {instr.arg2} {arg_word}"

        return ""

    def disassemble(self) -> str:
        """Return a numbered instruction listing for debugging."""
        lines = [f"Program: {len(self.instructions)} instructions"]
        lines.append(f"  Variables: {list(self.names)}")
        lines.append("  Instructions:")
        for i, instr in enumerate(self.instructions):
            lines.append(f"    {i:3d}: {instr!r}{self._annotate(instr)}")

        return "\n".join(lines)
