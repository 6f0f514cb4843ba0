#!/usr/bin/env python3
"""
FXL Performance Benchmark

Measures, for a set of formulas:
- Compilation time (scan + parse + code generation)
- Optimization time (constant folding)
- Execution time per sample point, for the compiled and the optimized program

Usage:
    python fxl_benchmark.py                     # Run all benchmarks
    python fxl_benchmark.py --points 10000      # Evaluate more points per run
    python fxl_benchmark.py --category trig     # Run only trig benchmarks
    python fxl_benchmark.py --save results.json # Save results
"""

import argparse
import json
import statistics
import sys
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from fxl import FXL  # pylint: disable=wrong-import-position


@dataclass
class BenchmarkResult:
    """Result from a single benchmark run."""
    name: str
    category: str
    expression: str
    iterations: int
    points: int

    compile_mean: float
    optimize_mean: float

    # Per-point execution times
    exec_mean: float
    exec_median: float
    optimized_exec_mean: float
    optimized_exec_median: float

    instructions: int
    optimized_instructions: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class Benchmark:
    """Individual benchmark test."""

    def __init__(self, name: str, category: str, expression: str, iterations: int = 20):
        self.name = name
        self.category = category
        self.expression = expression
        self.iterations = iterations

    def _time_points(self, fxl: FXL, source: str, optimize: bool, points: int) -> List[float]:
        program = fxl.optimized_compile(source) if optimize else fxl.compile(source)
        values = [0.0] * len(program.names)
        run = fxl.vm.run

        times = []
        for _ in range(self.iterations):
            start = time.perf_counter()
            for i in range(points):
                if values:
                    values[0] = float(i)

                run(program, values)

            times.append((time.perf_counter() - start) / points)

        return times

    def run(self, points: int) -> BenchmarkResult:
        """
        Run the benchmark and return results.

        Args:
            points: Number of sample points evaluated per iteration
        """
        fxl = FXL()

        compile_times = []
        optimize_times = []
        for _ in range(self.iterations):
            start = time.perf_counter()
            program = fxl.compile(self.expression)
            compile_times.append(time.perf_counter() - start)

            start = time.perf_counter()
            optimized = fxl.optimize(program)
            optimize_times.append(time.perf_counter() - start)

        exec_times = self._time_points(fxl, self.expression, False, points)
        optimized_exec_times = self._time_points(fxl, self.expression, True, points)

        return BenchmarkResult(
            name=self.name,
            category=self.category,
            expression=self.expression,
            iterations=self.iterations,
            points=points,
            compile_mean=statistics.mean(compile_times),
            optimize_mean=statistics.mean(optimize_times),
            exec_mean=statistics.mean(exec_times),
            exec_median=statistics.median(exec_times),
            optimized_exec_mean=statistics.mean(optimized_exec_times),
            optimized_exec_median=statistics.median(optimized_exec_times),
            instructions=len(program),
            optimized_instructions=len(optimized)
        )


_LONG_FORMULA = "+".join(["3*x+sin(pi*x^2/4)+4*tan(pi*x)+x^2+2*x+1"] * 4)

BENCHMARKS = [
    Benchmark("quadratic", "polynomial", "x^2+2*x+1"),
    Benchmark("implicit quadratic", "polynomial", "3x^2 - 2x + 1"),
    Benchmark("constant heavy", "polynomial", "2+3+3*x+sin(pi*x^2/4)+4*tan(pi*x)+4+3"),
    Benchmark("long formula", "polynomial", _LONG_FORMULA),
    Benchmark("sine wave", "trig", "2*sin(pi/4*x)"),
    Benchmark("gaussian", "trig", "exp(-x^2/2)/sqrt(2pi)"),
    Benchmark("log base", "functions", "log(2, x+1) + ln(x+1)"),
    Benchmark("factorial", "functions", "(x % 10)! / 2^(x % 10)"),
]


def run_benchmarks(benchmarks: List[Benchmark], points: int, verbose: bool = True) -> List[BenchmarkResult]:
    """Run all benchmarks and return results."""
    results = []
    for i, benchmark in enumerate(benchmarks, 1):
        if verbose:
            print(f"[{i}/{len(benchmarks)}] {benchmark.name}...", end=" ", flush=True)

        result = benchmark.run(points)
        results.append(result)

        if verbose:
            print(f"{result.optimized_exec_mean * 1e6:.2f}us/point")

    return results


def print_results(results: List[BenchmarkResult]) -> None:
    """Print formatted results table."""
    print("\n" + "=" * 110)
    print("BENCHMARK RESULTS")
    print("=" * 110)
    print(
        f"{'Benchmark':<22} {'Instrs':<10} {'Compile':<12} {'Optimize':<12} "
        f"{'Exec/pt':<12} {'Opt exec/pt':<12} {'Speedup':<8}"
    )
    print("-" * 110)

    for result in results:
        instrs = f"{result.instructions}->{result.optimized_instructions}"
        speedup = result.exec_mean / result.optimized_exec_mean if result.optimized_exec_mean > 0 else 0.0
        print(
            f"{result.name:<22} {instrs:<10} {result.compile_mean * 1e6:>9.1f}us "
            f"{result.optimize_mean * 1e6:>9.1f}us {result.exec_mean * 1e6:>9.2f}us "
            f"{result.optimized_exec_mean * 1e6:>9.2f}us {speedup:>7.2f}x"
        )


def save_results(results: List[BenchmarkResult], filename: str) -> None:
    """Save results to JSON file."""
    data = {
        'timestamp': datetime.now().isoformat(),
        'python_version': sys.version,
        'results': [r.to_dict() for r in results]
    }

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)

    print(f"\nResults saved to: {filename}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="FXL Performance Benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--points', type=int, default=1000, help='Sample points per iteration (default: 1000)')
    parser.add_argument('--category', metavar='CAT', help='Run only benchmarks in this category')
    parser.add_argument('--save', metavar='FILE', help='Save results to JSON file')
    parser.add_argument('--quiet', action='store_true', help='Minimal output')
    args = parser.parse_args()

    benchmarks = BENCHMARKS
    if args.category:
        benchmarks = [b for b in BENCHMARKS if b.category.lower() == args.category.lower()]
        if not benchmarks:
            cats = sorted(set(b.category for b in BENCHMARKS))
            print(f"No benchmarks found for category: {args.category}")
            print(f"Available categories: {', '.join(cats)}")
            return

    results = run_benchmarks(benchmarks, args.points, verbose=not args.quiet)

    if not args.quiet:
        print_results(results)

    if args.save:
        save_results(results, args.save)


if __name__ == '__main__':
    main()
