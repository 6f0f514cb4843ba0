"""
Plot configuration files.

A plot configuration describes a sampling range, named parameters (each itself a formula)
and the curves to sample.  It is stored as YAML:

    start: -3.0
    stop: 3.0
    count: 600
    variable: x
    parameters:
      a: "2"
      k: "pi/4"
    curves:
      - formula: "a*sin(k*x^2)"
        derivative: true
      - formula: "x^2"
        integral: true
        integral_start: 0.0
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml


@dataclass
class FXLCurveConfig:
    """Configuration for a single curve."""
    formula: str
    derivative: bool = False
    integral: bool = False
    integral_start: float = 0.0


@dataclass
class FXLPlotConfig:
    """Configuration for sampling a set of curves."""

    start: float = 0.0
    stop: float = 1.0
    count: int = 1000
    variable: str = "x"
    parameters: Dict[str, str] = field(default_factory=dict)
    curves: List[FXLCurveConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FXLPlotConfig':
        """Build a configuration from parsed YAML data."""
        curves = []
        for curve_data in data.get('curves', []) or []:
            if isinstance(curve_data, str):
                curves.append(FXLCurveConfig(formula=curve_data))
                continue

            curves.append(FXLCurveConfig(
                formula=str(curve_data.get('formula', '')),
                derivative=bool(curve_data.get('derivative', False)),
                integral=bool(curve_data.get('integral', False)),
                integral_start=float(curve_data.get('integral_start', 0.0))
            ))

        parameters = {str(name): str(formula) for name, formula in (data.get('parameters') or {}).items()}

        return cls(
            start=float(data.get('start', 0.0)),
            stop=float(data.get('stop', 1.0)),
            count=int(data.get('count', 1000)),
            variable=str(data.get('variable', 'x')),
            parameters=parameters,
            curves=curves
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> 'FXLPlotConfig':
        """Load configuration from a YAML file."""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(data)

    @classmethod
    def create_default(cls) -> 'FXLPlotConfig':
        """Create an example configuration."""
        return cls(
            start=-3.0,
            stop=3.0,
            count=600,
            parameters={'a': '2', 'k': 'pi/4'},
            curves=[
                FXLCurveConfig(formula='a*sin(k*x^2)', derivative=True),
                FXLCurveConfig(formula='x^2', integral=True),
            ]
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain data for YAML serialization."""
        return {
            'start': self.start,
            'stop': self.stop,
            'count': self.count,
            'variable': self.variable,
            'parameters': dict(self.parameters),
            'curves': [
                {
                    'formula': curve.formula,
                    'derivative': curve.derivative,
                    'integral': curve.integral,
                    'integral_start': curve.integral_start,
                }
                for curve in self.curves
            ]
        }

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate the configuration and return a list of problems."""
        errors = []

        if self.count < 1:
            errors.append(f"count must be at least 1, got {self.count}")

        if self.stop < self.start:
            errors.append(f"stop ({self.stop}) is before start ({self.start})")

        if not self.variable:
            errors.append("variable name is empty")

        if self.variable in self.parameters:
            errors.append(f"variable '{self.variable}' is also defined as a parameter")

        for i, curve in enumerate(self.curves):
            if not curve.formula.strip():
                errors.append(f"curve {i + 1} has an empty formula")

        return errors
