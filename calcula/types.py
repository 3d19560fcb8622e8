"""Value helpers for Calcula.

Every Calcula expression evaluates to a Python float. The only other value
that can appear is the string produced by a `Format` node, which is meant
for display and never flows back into arithmetic. This module holds the
conversions used when values are shown to the user.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Union
import math

from .errors import CalculaError, ErrorVal

Value = Union[float, str]


def to_bool(value: Any) -> float:
    """Map a truth value onto Calcula's 1/0 convention.

    Used both for comparison results and for the `bool` builtin, where any
    non-zero number (NaN included) counts as true.
    """
    return 1.0 if value else 0.0


def is_truthy(value: Any) -> bool:
    # Any non-zero value, negative included, is true
    return value != 0


def to_string(value: Any) -> str:
    """Render a value for `print`.

    Numbers are shown the way a JavaScript engine prints doubles: integral
    values have no fractional part, and exponent notation is only used for
    magnitudes of at least 1e21 or below 1e-6. Strings are returned as-is.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(int(value))
    value = float(value)
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '-0' if math.copysign(1.0, value) < 0 else '0'
    if value.is_integer() and abs(value) < 2 ** 53:
        return str(int(value))
    sign = '-' if value < 0 else ''
    # repr gives the shortest round-tripping digits
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = ''.join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        return sign + digits + '0' * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + '.' + digits[n:]
    if -6 < n <= 0:
        return sign + '0.' + '0' * (-n) + digits
    e = n - 1
    mantissa = digits[0] if k == 1 else digits[0] + '.' + digits[1:]
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def to_fixed(value: float, decimals: int) -> str:
    """Render `value` with exactly `decimals` digits after the point.

    Rounding is applied to the exact binary value of the double, with ties
    going away from zero.
    """
    value = float(value)
    if math.isnan(decimals):
        decimals = 0
    elif math.isinf(decimals):
        raise CalculaError(ErrorVal('RangeError', f'decimal count must be between 0 and 100, got {to_string(decimals)}'))
    decimals = int(decimals)
    if not 0 <= decimals <= 100:
        raise CalculaError(ErrorVal('RangeError', f'decimal count must be between 0 and 100, got {decimals}'))
    if math.isnan(value) or math.isinf(value) or abs(value) >= 1e21:
        return to_string(value)
    if value == 0:
        value = 0.0
    with localcontext() as ctx:
        ctx.prec = 200
        quantum = Decimal(1).scaleb(-decimals)
        rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
        return f"{rounded:f}"
