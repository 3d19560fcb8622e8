"""Numeric primitives behind the Calcula builtins.

Python's `math` module raises on domain and range errors, while Calcula
values are plain IEEE doubles: out-of-domain inputs give NaN and overflow
gives an infinity. The wrappers here translate between the two.
"""

import math

from calcula.types import to_fixed

NAN = float('nan')
INF = float('inf')


def ieee(fn):
    """Wrap a `math` function so domain errors give NaN and overflow gives inf."""
    def wrapper(*args):
        try:
            return float(fn(*args))
        except ValueError:
            return NAN
        except OverflowError:
            return INF
    wrapper.__name__ = fn.__name__
    return wrapper


def log(x: float) -> float:
    if x == 0:
        return -INF
    if x < 0 or math.isnan(x):
        return NAN
    return math.log(x)


def power(x: float, y: float) -> float:
    if math.isnan(y) or (math.isnan(x) and y != 0):
        return NAN
    try:
        return math.pow(x, y)
    except OverflowError:
        # odd integral exponents keep the sign of the base
        if x < 0 and y.is_integer() and int(y) % 2 == 1:
            return -INF
        return INF
    except ValueError:
        if x == 0:
            if y.is_integer() and int(y) % 2 == 1 and math.copysign(1.0, x) < 0:
                return -INF
            return INF
        return NAN


def floor(x: float) -> float:
    if math.isnan(x) or math.isinf(x):
        return x
    return math.copysign(float(math.floor(x)), x)


def ceil(x: float) -> float:
    if math.isnan(x) or math.isinf(x):
        return x
    # ceil(-0.5) is -0, as in IEEE arithmetic
    return math.copysign(float(math.ceil(x)), x)


def js_round(x: float) -> float:
    """Round to the nearest integer, halves toward positive infinity."""
    if math.isnan(x) or math.isinf(x):
        return x
    r = math.floor(x)
    if x - r >= 0.5:
        r += 1
    return math.copysign(float(r), x)


def round_to(x: float, decimals: float = 0) -> float:
    factor = power(10.0, decimals)
    return js_round(x * factor) / factor


def fixed(x: float, decimals: float) -> float:
    return float(to_fixed(x, decimals))


def minimum(*args: float) -> float:
    if any(math.isnan(a) for a in args):
        return NAN
    return min(args, default=INF)


def maximum(*args: float) -> float:
    if any(math.isnan(a) for a in args):
        return NAN
    return max(args, default=-INF)


def equals(a: float, b: float, epsilon: float = 1e-10) -> float:
    return 1.0 if abs(a - b) < epsilon else 0.0


def negate(value: float) -> float:
    return 1.0 if value == 0 else 0.0
