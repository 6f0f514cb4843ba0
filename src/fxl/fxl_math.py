"""
Numeric primitives shared by the FXL virtual machine and optimizer.

FXL values are IEEE 754 doubles and every operation follows IEEE semantics: division by
zero gives an infinity (or nan for 0/0), results outside a function's domain give nan and
overflow gives an infinity.  Python's math module raises exceptions in these cases, so
every primitive here converts them back into the IEEE result.  The VM and the optimizer
both evaluate through this module, so folded constants match run-time results exactly.
"""

import math
from typing import Callable


def add(left: float, right: float) -> float:
    """Return left + right."""
    return left + right


def subtract(left: float, right: float) -> float:
    """Return left - right."""
    return left - right


def multiply(left: float, right: float) -> float:
    """Return left * right."""
    return left * right


def divide(left: float, right: float) -> float:
    """Return left / right, giving a signed infinity or nan when right is zero."""
    try:
        return left / right

    except ZeroDivisionError:
        if left == 0.0 or math.isnan(left):
            return math.nan

        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def modulo(left: float, right: float) -> float:
    """Return the truncated remainder of left / right (the result takes the sign of left)."""
    try:
        return math.fmod(left, right)

    except ValueError:
        return math.nan


def _is_odd_integer(value: float) -> bool:
    return value.is_integer() and int(value) % 2 == 1


def power(base: float, exponent: float) -> float:
    """Return base raised to exponent."""
    try:
        return math.pow(base, exponent)

    except OverflowError:
        if base < 0.0 and _is_odd_integer(exponent):
            return -math.inf

        return math.inf

    except ValueError:
        # Zero to a negative power is a pole; anything else is outside the real domain
        if base == 0.0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)

            return math.inf

        return math.nan


def negate(value: float) -> float:
    """Return -value."""
    return -value


def factorial(value: float) -> float:
    """
    Generalised factorial, Γ(value + 1).

    Non-integer arguments are accepted.  Poles of the gamma function (negative integers)
    give nan; results too large to represent give inf.
    """
    try:
        return math.gamma(value + 1.0)

    except ValueError:
        return math.nan

    except OverflowError:
        return math.inf


def _guarded(func: Callable[[float], float], value: float, on_overflow: float) -> float:
    try:
        return func(value)

    except ValueError:
        return math.nan

    except OverflowError:
        return on_overflow


def sin(value: float) -> float:
    """Sine of value (radians)."""
    return _guarded(math.sin, value, math.nan)


def cos(value: float) -> float:
    """Cosine of value (radians)."""
    return _guarded(math.cos, value, math.nan)


def tan(value: float) -> float:
    """Tangent of value (radians)."""
    return _guarded(math.tan, value, math.nan)


def asin(value: float) -> float:
    """Arc sine; nan outside [-1, 1]."""
    return _guarded(math.asin, value, math.nan)


def acos(value: float) -> float:
    """Arc cosine; nan outside [-1, 1]."""
    return _guarded(math.acos, value, math.nan)


def atan(value: float) -> float:
    """Arc tangent."""
    return _guarded(math.atan, value, math.nan)


def sinh(value: float) -> float:
    """Hyperbolic sine."""
    return _guarded(math.sinh, value, math.copysign(math.inf, value))


def cosh(value: float) -> float:
    """Hyperbolic cosine."""
    return _guarded(math.cosh, value, math.inf)


def tanh(value: float) -> float:
    """Hyperbolic tangent."""
    return _guarded(math.tanh, value, math.nan)


def ln(value: float) -> float:
    """Natural logarithm; -inf at zero, nan for negative values."""
    if value == 0.0:
        return -math.inf

    return _guarded(math.log, value, math.inf)


def log(base: float, value: float) -> float:
    """Logarithm of value in the given base, computed as ln(value) / ln(base)."""
    return divide(ln(value), ln(base))


def sqrt(value: float) -> float:
    """Square root; nan for negative values."""
    return _guarded(math.sqrt, value, math.inf)


def exp(value: float) -> float:
    """e raised to value."""
    return _guarded(math.exp, value, math.inf)


def absolute(value: float) -> float:
    """Absolute value."""
    return math.fabs(value)


def floor(value: float) -> float:
    """Largest integral value not greater than value."""
    if not math.isfinite(value):
        return value

    return float(math.floor(value))


def ceil(value: float) -> float:
    """Smallest integral value not less than value."""
    if not math.isfinite(value):
        return value

    return float(math.ceil(value))


def trunc(value: float) -> float:
    """Integral part of value, rounding toward zero."""
    if not math.isfinite(value):
        return value

    return math.copysign(float(math.trunc(value)), value)


def round_half_away(value: float) -> float:
    """Round to the nearest integer, with halfway cases rounded away from zero."""
    if not math.isfinite(value):
        return value

    whole = float(math.trunc(value))
    if math.fabs(value - whole) >= 0.5:
        whole += math.copysign(1.0, value)

    return math.copysign(whole, value)
