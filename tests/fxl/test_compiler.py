"""Tests for the FXL compiler: code generation, precedence and diagnostics."""

import pytest

from fxl import FXLCompileError, FXLCompiler, FXLFunction, Instruction, Opcode


class TestCodeGeneration:
    """Test the instructions emitted for each production."""

    @pytest.mark.parametrize("source,expected", [
        ("2", ["CONSTANT 2.0"]),
        ("1.5", ["CONSTANT 1.5"]),
        ("x", ["GET_VAR 0"]),
        ("(x)", ["GET_VAR 0"]),
        ("((2))", ["CONSTANT 2.0"]),
        ("-x", ["GET_VAR 0", "NEGATE"]),
        ("+x", ["GET_VAR 0"]),
        ("--x", ["GET_VAR 0", "NEGATE", "NEGATE"]),
        ("3!", ["CONSTANT 3.0", "FACTORIAL"]),
        ("2+3*4", ["CONSTANT 2.0", "CONSTANT 3.0", "CONSTANT 4.0", "MULTIPLY", "ADD"]),
        ("(2+3)*4", ["CONSTANT 2.0", "CONSTANT 3.0", "ADD", "CONSTANT 4.0", "MULTIPLY"]),
        ("1-2-3", ["CONSTANT 1.0", "CONSTANT 2.0", "SUBTRACT", "CONSTANT 3.0", "SUBTRACT"]),
        ("8/4/2", ["CONSTANT 8.0", "CONSTANT 4.0", "DIVIDE", "CONSTANT 2.0", "DIVIDE"]),
        ("2^3^2", ["CONSTANT 2.0", "CONSTANT 3.0", "POWER", "CONSTANT 2.0", "POWER"]),
        ("7%4", ["CONSTANT 7.0", "CONSTANT 4.0", "MODULO"]),
        ("-2^2", ["CONSTANT 2.0", "CONSTANT 2.0", "POWER", "NEGATE"]),
        ("2^3!", ["CONSTANT 2.0", "CONSTANT 3.0", "FACTORIAL", "POWER"]),
        ("sin(x)", ["GET_VAR 0", "CALL 1 1"]),
        ("log(2, 8)", ["CONSTANT 2.0", "CONSTANT 8.0", "CALL 11 2"]),
        ("3x", ["CONSTANT 3.0", "GET_VAR 0", "MULTIPLY"]),
    ])
    def test_listing(self, compiler, helpers, source, expected):
        """Test the emitted instruction listing."""
        assert helpers.listing(compiler.compile(source)) == expected

    @pytest.mark.parametrize("implicit,explicit", [
        ("3x", "3*x"),
        ("2pi", "2*pi"),
        ("(x+1)(x-1)", "(x+1)*(x-1)"),
        ("2x^2", "2*x^2"),
        ("x(1+x)", "x*(1+x)"),
        ("sin(x)cos(x)", "sin(x)*cos(x)"),
        ("2 sin(3 x)", "2*sin(3*x)"),
        ("2pi(x)", "2*pi*(x)"),
    ])
    def test_implicit_equals_explicit(self, compiler, implicit, explicit):
        """Implicit multiplication compiles to the same program as an explicit '*'."""
        assert compiler.compile(implicit) == compiler.compile(explicit)

    def test_constants_inline_value(self, compiler):
        """pi and e compile to constants, not variables."""
        program = compiler.compile("pi+e")
        assert program.names == ()
        assert [i.opcode for i in program.instructions] == [Opcode.CONSTANT, Opcode.CONSTANT, Opcode.ADD]

    def test_whitespace_is_ignored(self, compiler):
        """All whitespace is removed before scanning."""
        assert compiler.compile(" 2 +\t3 \n* x ") == compiler.compile("2+3*x")

    def test_call_instruction_arguments(self, compiler):
        """CALL carries the function id and the argument count."""
        program = compiler.compile("log(2, x)")
        assert program.instructions[-1] == Instruction(Opcode.CALL, int(FXLFunction.LOG), 2)

    def test_arity_not_checked_at_compile_time(self, compiler):
        """A call with the wrong number of arguments still compiles."""
        program = compiler.compile("log(2)")
        assert program.instructions[-1] == Instruction(Opcode.CALL, int(FXLFunction.LOG), 1)

    def test_empty_argument_list(self, compiler):
        """A call with no arguments compiles to CALL with arity 0."""
        program = compiler.compile("sin()")
        assert program.instructions == (Instruction(Opcode.CALL, int(FXLFunction.SIN), 0),)

    def test_maximum_arguments(self, compiler):
        """255 arguments are accepted."""
        program = compiler.compile("sin(" + ",".join(["1"] * 255) + ")")
        assert program.instructions[-1].arg2 == 255


class TestSymbolTable:
    """Test variable slot assignment."""

    def test_first_use_order(self, compiler):
        """Slots follow order of first appearance."""
        program = compiler.compile("y + x*y + z")
        assert program.variable_names() == ["y", "x", "z"]
        assert [repr(i) for i in program.instructions if i.opcode == Opcode.GET_VAR] == [
            "GET_VAR 0", "GET_VAR 1", "GET_VAR 0", "GET_VAR 2"
        ]

    def test_multi_character_names(self, compiler):
        """Identifiers are maximal runs of letters, digits and '_'."""
        assert compiler.compile("x2 + x_1 + xy").variable_names() == ["x2", "x_1", "xy"]

    def test_compiler_is_reusable(self):
        """Every compile starts with an empty symbol table."""
        compiler = FXLCompiler()
        assert compiler.compile("a+b").names == ("a", "b")
        assert compiler.compile("b").names == ("b",)
        assert compiler.compile("2").names == ()


class TestDiagnostics:
    """Test accumulated compile errors."""

    def _errors(self, compiler, source):
        with pytest.raises(FXLCompileError) as exc_info:
            compiler.compile(source)

        return exc_info.value

    def test_multiple_errors_reported(self, compiler):
        """'2++*3' reports every problem, one 'Error:' line each."""
        error = self._errors(compiler, "2++*3")
        lines = str(error).split("\n")
        assert len(lines) > 1
        assert all(line.startswith("Error:") for line in lines)
        assert lines == [
            "Error: Expected expression at 3",
            "Error: Expected end of expression at 3",
        ]

    @pytest.mark.parametrize("source,expected", [
        ("", ["Error: Expected expression at end"]),
        ("2+", ["Error: Expected expression at end"]),
        ("(1+2", ["Error: Expected ')' after expression at end"]),
        ("1+2)", ["Error: Expected end of expression at )"]),
        ("*3", ["Error: Expected expression at 3", "Error: Expected end of expression at 3"]),
    ])
    def test_error_lines(self, compiler, source, expected):
        """Test the exact diagnostics for common mistakes."""
        assert str(self._errors(compiler, source)).split("\n") == expected

    def test_unexpected_character_is_skipped(self, compiler):
        """Bad characters are reported and scanning continues."""
        error = self._errors(compiler, "2$+3")
        assert str(error) == "Error: Unexpected character at $"
        assert error.diagnostics[0].position == 1

    def test_function_without_parenthesis(self, compiler):
        """A function name must be followed by '('."""
        error = self._errors(compiler, "sin+2")
        assert "Error: Expected '(' after function name at 2" in str(error).split("\n")

    def test_unclosed_argument_list(self, compiler):
        """A missing ')' after arguments is reported at the end."""
        error = self._errors(compiler, "log(2, 8")
        assert str(error) == "Error: Expected ')' after function argument list at end"

    def test_too_many_arguments(self, compiler):
        """The 256th argument is an error."""
        error = self._errors(compiler, "sin(" + ",".join(["1"] * 256) + ")")
        assert [d.message for d in error.diagnostics] == ["Cannot have more than 255 arguments"]

    def test_diagnostics_attributes(self, compiler):
        """Diagnostics keep message, lexeme and position."""
        error = self._errors(compiler, "2+)")
        diagnostic = error.diagnostics[0]
        assert diagnostic.message == "Expected expression"
        assert diagnostic.lexeme == ""
        assert diagnostic.position == 3
        assert error.position == diagnostic.position


class TestNestingLimit:
    """Test the limit on nested parentheses, prefix operators and calls."""

    @pytest.mark.parametrize("source", [
        "(" * 400 + "x" + ")" * 400,
        "-" * 600 + "x",
        "sin(" * 400 + "x" + ")" * 400,
        "x" + "+(x" * 400 + ")" * 400,
    ])
    def test_deep_nesting_is_a_compile_error(self, compiler, source):
        """Deeply nested formulas fail with a single diagnostic instead of exhausting the Python stack."""
        with pytest.raises(FXLCompileError) as exc_info:
            compiler.compile(source)

        diagnostics = exc_info.value.diagnostics
        assert len(diagnostics) == 1
        assert diagnostics[0].message == "Expression too deeply nested (max depth: 100)"

    def test_default_limit(self, compiler):
        """100 levels compile and 101 do not."""
        program = compiler.compile("(" * 100 + "x" + ")" * 100)
        assert [repr(i) for i in program.instructions] == ["GET_VAR 0"]

        with pytest.raises(FXLCompileError, match="too deeply nested"):
            compiler.compile("(" * 101 + "x" + ")" * 101)

    def test_custom_limit(self):
        """The limit is a constructor argument and the error names it."""
        compiler = FXLCompiler(max_depth=3)
        assert [repr(i) for i in compiler.compile("(((x)))").instructions] == ["GET_VAR 0"]
        assert [repr(i) for i in compiler.compile("-(-x)").instructions] == ["GET_VAR 0", "NEGATE", "NEGATE"]

        with pytest.raises(FXLCompileError) as exc_info:
            compiler.compile("((((x))))")

        assert str(exc_info.value) == "Error: Expression too deeply nested (max depth: 3) at x"

    def test_long_flat_chains_are_not_nesting(self):
        """Chains of binary operators do not count towards the limit."""
        compiler = FXLCompiler(max_depth=1)
        program = compiler.compile("+".join(["x"] * 1000))
        assert len(program) == 1999
        assert compiler.compile("2^3*4-x").names == ("x",)

    def test_errors_before_nesting_error_are_kept(self, compiler):
        """Diagnostics found before the limit is reached are still reported."""
        with pytest.raises(FXLCompileError) as exc_info:
            compiler.compile("2$+" + "(" * 200 + "x" + ")" * 200)

        assert [d.message for d in exc_info.value.diagnostics] == [
            "Unexpected character",
            "Expression too deeply nested (max depth: 100)",
        ]

    def test_compiler_recovers_after_nesting_error(self, compiler):
        """A failed deep compile does not leave state behind."""
        with pytest.raises(FXLCompileError):
            compiler.compile("(" * 300 + "x" + ")" * 300)

        assert compiler.compile("(a)+b").names == ("a", "b")
