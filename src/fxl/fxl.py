"""Main FXL (Formula eXpression Language) class."""

from typing import List, Mapping, Sequence

from fxl.fxl_builtins import FXLBuiltinRegistry
from fxl.fxl_bytecode import FXLProgram
from fxl.fxl_compiler import MAX_DEPTH, FXLCompiler
from fxl.fxl_optimizer import FXLOptimizer
from fxl.fxl_stack import STACK_SIZE
from fxl.fxl_vm import FXLVM


class FXL:
    """
    FXL formula toolchain: compile once per edit, then run once per sample point.

    Example:
        fxl = FXL()
        program = fxl.optimized_compile("3x + sin(pi*x^2 / 4)")
        ys = [fxl.run(program, [x]) for x in xs]
    """

    def __init__(self, optimize: bool = True, stack_size: int = STACK_SIZE, max_depth: int = MAX_DEPTH):
        """
        Initialize the toolchain.

        Args:
            optimize: Whether evaluate() folds constants before running
            stack_size: Maximum value stack depth for the VM
            max_depth: Maximum nesting depth the compiler accepts
        """
        self.optimize_enabled = optimize
        self.stack_size = stack_size
        self.max_depth = max_depth

        registry = FXLBuiltinRegistry()
        self.registry = registry
        self.compiler = FXLCompiler(registry, max_depth)
        self.optimizer = FXLOptimizer(registry)
        self.vm = FXLVM(stack_size, registry)

    def compile(self, source: str) -> FXLProgram:
        """
        Compile formula text to bytecode.

        Raises:
            FXLCompileError: With one "Error: ... at ..." line per problem found
        """
        return self.compiler.compile(source)

    def optimize(self, program: FXLProgram) -> FXLProgram:
        """
        Fold constant sub-expressions of a compiled program.

        Raises:
            FXLOptimizeError: If the program is empty or malformed
            FXLEvalError: If a constant function call fails
        """
        return self.optimizer.optimize(program)

    def optimized_compile(self, source: str) -> FXLProgram:
        """Compile formula text and fold its constants."""
        return self.optimize(self.compile(source))

    def run(self, program: FXLProgram, values: Sequence[float]) -> float:
        """
        Evaluate a compiled program.

        Args:
            program: Compiled program
            values: Variable values in the order given by program.variable_names()

        Raises:
            FXLEvalError: If evaluation fails
        """
        return self.vm.run(program, values)

    def bind(self, program: FXLProgram, bindings: Mapping[str, float]) -> List[float]:
        """
        Build a values list for a program from a name to value mapping.

        Names the mapping does not cover end the list, so evaluation reports the first of
        them that the program actually reads as an undefined variable.
        """
        values = []
        for name in program.names:
            if name not in bindings:
                break

            values.append(float(bindings[name]))

        return values

    def evaluate(self, source: str, bindings: Mapping[str, float] | None = None) -> float:
        """
        Compile and evaluate a formula in one step.

        Args:
            source: Formula text
            bindings: Variable values by name

        Returns:
            The formula's value
        """
        program = self.optimized_compile(source) if self.optimize_enabled else self.compile(source)
        return self.run(program, self.bind(program, bindings or {}))
