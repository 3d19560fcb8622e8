import math
from types import MappingProxyType
from typing import Mapping

from calcula.builtin_function import BuiltinFunction
from calcula.types import to_bool
from .basic_math import (
    ieee, log, power, floor, ceil, round_to, fixed, minimum, maximum,
    equals, negate,
)


def populate_math_registry() -> Mapping[str, BuiltinFunction]:
    """Build the read-only table of numeric builtins.

    The table is created once and shared by every environment; user code
    can neither add to it nor redefine its entries.
    """
    entries = [
        BuiltinFunction('sin', 1, 1, ieee(math.sin)),
        BuiltinFunction('cos', 1, 1, ieee(math.cos)),
        BuiltinFunction('tan', 1, 1, ieee(math.tan)),
        BuiltinFunction('asin', 1, 1, ieee(math.asin)),
        BuiltinFunction('acos', 1, 1, ieee(math.acos)),
        BuiltinFunction('atan', 1, 1, ieee(math.atan)),
        BuiltinFunction('sqrt', 1, 1, ieee(math.sqrt)),
        BuiltinFunction('abs', 1, 1, ieee(abs)),
        BuiltinFunction('round', 1, 2, round_to),
        BuiltinFunction('floor', 1, 1, floor),
        BuiltinFunction('ceil', 1, 1, ceil),
        BuiltinFunction('log', 1, 1, log),
        BuiltinFunction('exp', 1, 1, ieee(math.exp)),
        BuiltinFunction('pow', 2, 2, power),
        BuiltinFunction('min', 0, None, minimum),
        BuiltinFunction('max', 0, None, maximum),
        # constants
        BuiltinFunction('pi', 0, 0, lambda: math.pi),
        BuiltinFunction('e', 0, 0, lambda: math.e),
        BuiltinFunction('format', 2, 2, fixed),
        BuiltinFunction('equals', 2, 3, equals),
        BuiltinFunction('bool', 1, 1, to_bool),
        BuiltinFunction('not', 1, 1, negate),
    ]
    return MappingProxyType({entry.name: entry for entry in entries})


BUILTINS = populate_math_registry()
