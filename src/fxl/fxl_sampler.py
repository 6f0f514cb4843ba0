"""
Sampling of compiled FXL programs over a range.

This is the access pattern FXL is built for: one program, compiled once, evaluated at
hundreds of points to draw a curve, plus numerical derivative and integral curves derived
from those points.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

from fxl.fxl import FXL
from fxl.fxl_bytecode import FXLProgram
from fxl.fxl_error import FXLError


Point = Tuple[float, float]


@dataclass
class FXLSampleResult:
    """Points sampled from one program."""
    points: List[Point] = field(default_factory=list)
    error: str | None = None  # first evaluation error, if any point failed
    elapsed: float = 0.0  # seconds spent evaluating

    def time_per_point(self) -> float:
        """Average evaluation time per point, in seconds."""
        if not self.points:
            return 0.0

        return self.elapsed / len(self.points)


@dataclass
class FXLParameterValue:
    """Result of evaluating one parameter formula."""
    formula: str
    value: float | None = None
    error: str | None = None


class FXLSampler:
    """Evaluates programs over evenly spaced points of one variable."""

    def __init__(self, fxl: FXL | None = None) -> None:
        """
        Initialize the sampler.

        Args:
            fxl: Toolchain used to compile and run formulas
        """
        self.fxl = fxl if fxl is not None else FXL()
        self._logger = logging.getLogger("FXLSampler")

    def evaluate_parameters(self, parameters: Mapping[str, str]) -> Dict[str, FXLParameterValue]:
        """
        Evaluate parameter formulas, which may not reference any variable.

        Args:
            parameters: Parameter name to formula text

        Returns:
            Parameter name to its value or error message
        """
        results: Dict[str, FXLParameterValue] = {}
        for name, formula in parameters.items():
            try:
                program = self.fxl.optimized_compile(formula)
                results[name] = FXLParameterValue(formula, value=self.fxl.run(program, []))

            except FXLError as e:
                self._logger.debug("Parameter %s = %r failed: %s", name, formula, e.message)
                results[name] = FXLParameterValue(formula, error=str(e))

        return results

    def build_values(
        self,
        program: FXLProgram,
        variable: str,
        bindings: Mapping[str, float]
    ) -> Tuple[List[float], int | None]:
        """
        Build the values list for a program.

        Args:
            program: Program to be sampled
            variable: Name of the variable being swept
            bindings: Values for the other variables; unbound names are 0.0

        Returns:
            The values list and the slot of the swept variable (None if the program does
            not use it)
        """
        values = []
        variable_slot = None
        for slot, name in enumerate(program.names):
            if name == variable:
                variable_slot = slot
                values.append(0.0)
                continue

            values.append(float(bindings.get(name, 0.0)))

        return values, variable_slot

    def sample(
        self,
        program: FXLProgram,
        start: float,
        stop: float,
        count: int,
        variable: str = "x",
        bindings: Mapping[str, float] | None = None
    ) -> FXLSampleResult:
        """
        Evaluate a program at count + 1 evenly spaced points from start to stop inclusive.

        A point that fails to evaluate is recorded as nan; the first failure's message is
        kept in the result.

        Args:
            program: Compiled program
            start: First value of the swept variable
            stop: Last value of the swept variable
            count: Number of intervals
            variable: Name of the swept variable
            bindings: Values for the other variables

        Returns:
            The sampled points
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")

        values, slot = self.build_values(program, variable, bindings or {})
        result = FXLSampleResult()
        run = self.fxl.vm.run
        step = (stop - start) / count

        started = time.perf_counter()
        for i in range(count + 1):
            x = start + step * i
            if slot is not None:
                values[slot] = x

            try:
                y = run(program, values)

            except FXLError as e:
                if result.error is None:
                    self._logger.warning("Sampling failed at %s = %s: %s", variable, x, e.message)
                    result.error = e.message

                y = math.nan

            result.points.append((x, y))

        result.elapsed = time.perf_counter() - started
        return result

    @staticmethod
    def derivative(points: List[Point]) -> List[Point]:
        """
        Backward finite difference of a sampled curve.

        Returns:
            One point per interval, at the right hand end of the interval
        """
        derivatives = []
        for (last_x, last_y), (x, y) in zip(points, points[1:]):
            dx = x - last_x
            derivatives.append((x, (y - last_y) / dx if dx != 0.0 else math.nan))

        return derivatives

    @staticmethod
    def integral(points: List[Point], start_value: float = 0.0) -> List[Point]:
        """
        Cumulative trapezoid rule integral of a sampled curve.

        Args:
            points: Sampled curve
            start_value: Value of the integral at the first point

        Returns:
            One point per sample
        """
        if not points:
            return []

        total = start_value
        last_x, last_y = points[0]
        integrals = []
        for x, y in points:
            total += (y + last_y) * (x - last_x) / 2.0
            integrals.append((x, total))
            last_x, last_y = x, y

        return integrals
