"""
Command-line interface for FXL.
"""

import argparse
import csv
import json
import logging
from logging.handlers import RotatingFileHandler
import math
import os
import sys
from typing import Any, Dict, List, Sequence, TextIO

from fxl.fxl import FXL
from fxl.fxl_error import FXLError
from fxl.fxl_plot_config import FXLCurveConfig, FXLPlotConfig
from fxl.fxl_sampler import FXLSampler


def setup_logging(verbose: bool, log_file: str | None = None) -> None:
    """Configure logging to stderr, or to a rotating log file if one is given."""
    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,  # 1MB
            backupCount=4,
            encoding='utf-8'
        ))

    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def parse_bindings(assignments: Sequence[str]) -> Dict[str, float]:
    """Parse name=value assignments given on the command line."""
    bindings = {}
    for assignment in assignments:
        name, sep, value = assignment.partition('=')
        if not sep or not name:
            raise ValueError(f"Invalid variable assignment '{assignment}', expected name=value")

        bindings[name.strip()] = float(value)

    return bindings


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fxl",
        description="Formula expression compiler and evaluator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s eval "3x + sin(pi*x^2 / 4)" --var x=1.5
  %(prog)s disassemble "2*3 + x"
  %(prog)s sample --formula "x^2" --start -1 --stop 1 --count 20
  %(prog)s init --config plot.yaml
  %(prog)s sample --config plot.yaml --format json --output out.json
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose (debug) logging')
    parser.add_argument('--log-file', help='Write logs to this file instead of stderr')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    eval_parser = subparsers.add_parser('eval', help='Evaluate a formula')
    eval_parser.add_argument('formula', help='Formula text')
    eval_parser.add_argument('--var', action='append', default=[], metavar='NAME=VALUE',
                             help='Variable value (repeatable)')
    eval_parser.add_argument('--no-optimize', action='store_true', help='Skip constant folding')

    disassemble_parser = subparsers.add_parser('disassemble', help='Show compiled bytecode')
    disassemble_parser.add_argument('formula', help='Formula text')

    sample_parser = subparsers.add_parser('sample', help='Sample formulas over a range')
    source = sample_parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--formula', help='Formula to sample')
    source.add_argument('--config', '-c', help='YAML plot configuration')
    sample_parser.add_argument('--start', type=float, help='First value of the swept variable')
    sample_parser.add_argument('--stop', type=float, help='Last value of the swept variable')
    sample_parser.add_argument('--count', type=int, help='Number of intervals')
    sample_parser.add_argument('--variable', help='Name of the swept variable')
    sample_parser.add_argument('--var', action='append', default=[], metavar='NAME=VALUE',
                               help='Value of another variable (repeatable)')
    sample_parser.add_argument('--derivative', action='store_true', help='Also output the derivative')
    sample_parser.add_argument('--integral', action='store_true', help='Also output the integral')
    sample_parser.add_argument('--format', '-f', choices=['csv', 'json'], default='csv',
                               help='Output format')
    sample_parser.add_argument('--output', '-o', help='Output file path')

    init_parser = subparsers.add_parser('init', help='Create an example plot configuration')
    init_parser.add_argument('--config', '-c', default='plot.yaml', help='Configuration file path')
    init_parser.add_argument('--force', action='store_true', help='Overwrite existing configuration')

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose, args.log_file)

    handlers = {
        'eval': handle_eval,
        'disassemble': handle_disassemble,
        'sample': handle_sample,
        'init': handle_init,
    }

    try:
        return handlers[args.command](args)

    except FXLError as e:
        print(str(e), file=sys.stderr)
        return 1

    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def handle_eval(args: argparse.Namespace) -> int:
    """Handle the eval command."""
    fxl = FXL(optimize=not args.no_optimize)
    print(repr(fxl.evaluate(args.formula, parse_bindings(args.var))))
    return 0


def handle_disassemble(args: argparse.Namespace) -> int:
    """Handle the disassemble command."""
    fxl = FXL()
    program = fxl.compile(args.formula)
    print("Compiled:")
    print(program.disassemble())
    print()
    print("Optimized:")
    print(fxl.optimize(program).disassemble())
    return 0


def _config_from_args(args: argparse.Namespace) -> FXLPlotConfig:
    if args.config:
        config = FXLPlotConfig.load_from_file(args.config)

    else:
        config = FXLPlotConfig(curves=[
            FXLCurveConfig(formula=args.formula, derivative=args.derivative, integral=args.integral)
        ])

    if args.start is not None:
        config.start = args.start

    if args.stop is not None:
        config.stop = args.stop

    if args.count is not None:
        config.count = args.count

    if args.variable:
        config.variable = args.variable

    return config


def sample_config(config: FXLPlotConfig, bindings: Dict[str, float]) -> List[Dict[str, Any]]:
    """
    Sample every curve of a plot configuration.

    Args:
        config: Plot configuration
        bindings: Variable values that override the configuration's parameters

    Returns:
        One result record per curve
    """
    fxl = FXL()
    sampler = FXLSampler(fxl)

    values: Dict[str, float] = {}
    for name, parameter in sampler.evaluate_parameters(config.parameters).items():
        if parameter.error is not None:
            raise ValueError(f"Parameter '{name}' = '{parameter.formula}' failed:\n{parameter.error}")

        assert parameter.value is not None
        values[name] = parameter.value

    values.update(bindings)

    records = []
    for curve in config.curves:
        record: Dict[str, Any] = {'formula': curve.formula, 'error': None, 'points': []}
        try:
            program = fxl.optimized_compile(curve.formula)

        except FXLError as e:
            record['error'] = str(e)
            records.append(record)
            continue

        result = sampler.sample(program, config.start, config.stop, config.count, config.variable, values)
        record['error'] = result.error
        record['points'] = result.points
        if curve.derivative:
            record['derivative'] = sampler.derivative(result.points)

        if curve.integral:
            record['integral'] = sampler.integral(result.points, curve.integral_start)

        records.append(record)

    return records


def write_csv(records: List[Dict[str, Any]], out: TextIO) -> None:
    """Write sampled records as CSV rows of (curve, series, x, y)."""
    writer = csv.writer(out)
    writer.writerow(['curve', 'series', 'x', 'y'])
    for i, record in enumerate(records, start=1):
        for series in ('points', 'derivative', 'integral'):
            for x, y in record.get(series, []):
                writer.writerow([i, series, repr(x), repr(y)])


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def json_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Convert sampled records to strict JSON data.

    JSON has no nan or infinity, so points with a non-finite coordinate are written with
    null in its place.
    """
    converted = []
    for record in records:
        item = dict(record)
        for series in ('points', 'derivative', 'integral'):
            if series in item:
                item[series] = [[_finite_or_none(x), _finite_or_none(y)] for x, y in item[series]]

        converted.append(item)

    return converted


def handle_sample(args: argparse.Namespace) -> int:
    """Handle the sample command."""
    config = _config_from_args(args)
    config_errors = config.validate()
    if config_errors:
        print("Configuration errors found:", file=sys.stderr)
        for error in config_errors:
            print(f"  - {error}", file=sys.stderr)

        return 1

    records = sample_config(config, parse_bindings(args.var))

    out: TextIO
    if args.output:
        out = open(args.output, 'w', encoding='utf-8', newline='')

    else:
        out = sys.stdout

    try:
        if args.format == 'json':
            json.dump(json_records(records), out, indent=2, allow_nan=False)
            out.write('\n')

        else:
            write_csv(records, out)

    finally:
        if args.output:
            out.close()

    failed = False
    for i, record in enumerate(records, start=1):
        if record['error']:
            failed = True
            print(f"Curve {i} ({record['formula']}): {record['error']}", file=sys.stderr)

    return 1 if failed else 0


def handle_init(args: argparse.Namespace) -> int:
    """Handle the init command."""
    if os.path.exists(args.config) and not args.force:
        print(f"Configuration file already exists: {args.config}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        return 1

    FXLPlotConfig.create_default().save_to_file(args.config)
    print(f"Configuration written to: {args.config}")
    return 0
