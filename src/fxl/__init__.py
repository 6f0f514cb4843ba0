"""FXL (Formula eXpression Language) package: compile formulas once, evaluate them many times."""

# Main API
from fxl.fxl import FXL

# Exceptions (for error handling)
from fxl.fxl_error import FXLError, FXLDiagnostic, FXLCompileError, FXLOptimizeError, FXLEvalError

# Bytecode
from fxl.fxl_bytecode import FXLProgram, Instruction, Opcode

# Builtins
from fxl.fxl_builtins import FXLBuiltinRegistry, FXLFunction, CONSTANTS

# Lower-level components (for advanced usage)
from fxl.fxl_token import FXLToken, FXLTokenType
from fxl.fxl_scanner import FXLScanner
from fxl.fxl_compiler import FXLCompiler
from fxl.fxl_optimizer import FXLOptimizer
from fxl.fxl_vm import FXLVM
from fxl.fxl_stack import FXLStack, STACK_SIZE

# Sampling and plot configuration
from fxl.fxl_sampler import FXLSampler, FXLSampleResult, FXLParameterValue
from fxl.fxl_plot_config import FXLPlotConfig, FXLCurveConfig


__all__ = [
    # Main API
    "FXL",

    # Exceptions
    "FXLError", "FXLDiagnostic", "FXLCompileError", "FXLOptimizeError", "FXLEvalError",

    # Bytecode
    "FXLProgram", "Instruction", "Opcode",

    # Builtins
    "FXLBuiltinRegistry", "FXLFunction", "CONSTANTS",

    # Lower-level components
    "FXLToken", "FXLTokenType", "FXLScanner", "FXLCompiler", "FXLOptimizer", "FXLVM", "FXLStack", "STACK_SIZE",

    # Sampling and plot configuration
    "FXLSampler", "FXLSampleResult", "FXLParameterValue", "FXLPlotConfig", "FXLCurveConfig"
]
