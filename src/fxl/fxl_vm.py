"""FXL Virtual Machine - executes bytecode."""

from typing import Any, Callable, Dict, List, Sequence

from fxl import fxl_math
from fxl.fxl_builtins import FXLBuiltinRegistry
from fxl.fxl_bytecode import FXLProgram, Instruction, Opcode
from fxl.fxl_error import FXLEvalError
from fxl.fxl_stack import STACK_SIZE, FXLStack


# Binary opcode implementations, shared with the optimizer so folded constants match run-time results
BINARY_OPERATIONS: Dict[Opcode, Callable[[float, float], float]] = {
    Opcode.ADD: fxl_math.add,
    Opcode.SUBTRACT: fxl_math.subtract,
    Opcode.MULTIPLY: fxl_math.multiply,
    Opcode.DIVIDE: fxl_math.divide,
    Opcode.POWER: fxl_math.power,
    Opcode.MODULO: fxl_math.modulo,
}

UNARY_OPERATIONS: Dict[Opcode, Callable[[float], float]] = {
    Opcode.NEGATE: fxl_math.negate,
    Opcode.FACTORIAL: fxl_math.factorial,
}


class FXLVM:
    """
    Virtual machine for executing FXL bytecode.

    The VM keeps no state between runs: every call to run() gets its own value stack, so a
    single VM and a single program can be used to evaluate many sample points, including
    from several threads at once.
    """

    def __init__(self, stack_size: int = STACK_SIZE, registry: FXLBuiltinRegistry | None = None) -> None:
        """
        Initialize the VM.

        Args:
            stack_size: Maximum number of values the stack may hold during a run
            registry: Builtin registry used to execute CALL instructions
        """
        self.stack_size = stack_size
        self.registry = registry if registry is not None else FXLBuiltinRegistry()

        # Build dispatch table for fast opcode execution
        self._dispatch_table = self._build_dispatch_table()

    def _build_dispatch_table(self) -> List[Any]:
        """Build a jump table indexed by opcode."""
        table: List[Any] = [None] * (max(Opcode) + 1)
        table[Opcode.CONSTANT] = self._op_constant
        table[Opcode.GET_VAR] = self._op_get_var
        table[Opcode.CALL] = self._op_call
        for opcode in BINARY_OPERATIONS:
            table[opcode] = self._op_binary

        for opcode in UNARY_OPERATIONS:
            table[opcode] = self._op_unary

        return table

    def run(self, program: FXLProgram, values: Sequence[float]) -> float:
        """
        Execute a program and return its result.

        Args:
            program: Compiled (and optionally optimized) program
            values: Variable values, ordered to match program.variable_names(); extra
                trailing values are ignored

        Returns:
            The value left on top of the stack

        Raises:
            FXLEvalError: If the program is empty, a referenced variable has no value, a
                function call fails or the stack overflows or underflows
        """
        instructions = program.instructions
        if not instructions:
            raise FXLEvalError("No instructions provided")

        stack = FXLStack(self.stack_size)
        dispatch = self._dispatch_table

        table_size = len(dispatch)
        for instr in instructions:
            opcode = instr.opcode
            handler = dispatch[opcode] if 0 <= opcode < table_size else None
            if handler is None:
                raise FXLEvalError(f"Invalid instruction: opcode {int(opcode)}")

            handler(stack, instr, program, values)

        return self._pop(stack)

    def _push(self, stack: FXLStack, value: float) -> None:
        if not stack.push(value):
            raise FXLEvalError(
                message=f"Stack overflow (max: {stack.capacity})",
                suggestion="Simplify the formula or reduce its nesting depth"
            )

    def _pop(self, stack: FXLStack) -> float:
        value = stack.pop()
        if value is None:
            raise FXLEvalError("Stack underflow")

        return value

    def _op_constant(
        self,
        stack: FXLStack,
        instr: Instruction,
        _program: FXLProgram,
        _values: Sequence[float]
    ) -> None:
        """CONSTANT: Push an immediate value."""
        self._push(stack, float(instr.arg1))

    def _op_get_var(
        self,
        stack: FXLStack,
        instr: Instruction,
        program: FXLProgram,
        values: Sequence[float]
    ) -> None:
        """GET_VAR: Push the caller supplied value for a variable slot."""
        slot = int(instr.arg1)
        if slot >= len(values):
            name = program.names[slot] if slot < len(program.names) else f"<slot {slot}>"
            raise FXLEvalError(
                message=f"Undefined variable: {name}",
                context=f"The program uses {len(program.names)} variable(s) but {len(values)} value(s) were provided",
                suggestion=f"Provide values in the order {program.variable_names()}"
            )

        self._push(stack, float(values[slot]))

    def _op_binary(
        self,
        stack: FXLStack,
        instr: Instruction,
        _program: FXLProgram,
        _values: Sequence[float]
    ) -> None:
        """Binary operators: the first pop is the right operand, the second the left."""
        right = self._pop(stack)
        left = self._pop(stack)
        self._push(stack, BINARY_OPERATIONS[instr.opcode](left, right))

    def _op_unary(
        self,
        stack: FXLStack,
        instr: Instruction,
        _program: FXLProgram,
        _values: Sequence[float]
    ) -> None:
        """NEGATE and FACTORIAL."""
        self._push(stack, UNARY_OPERATIONS[instr.opcode](self._pop(stack)))

    def _op_call(
        self,
        stack: FXLStack,
        instr: Instruction,
        _program: FXLProgram,
        _values: Sequence[float]
    ) -> None:
        """CALL: Pop the arguments and call a builtin function."""
        function_id = int(instr.arg1)
        args = stack.pop_n(instr.arg2)
        if args is None:
            raise FXLEvalError(
                f"Not enough arguments provided for function: {self.registry.name(function_id)}"
            )

        self._push(stack, self.registry.execute(function_id, args))
