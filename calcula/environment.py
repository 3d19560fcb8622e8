from typing import Dict, List, Mapping, Optional

from calcula.ast import FunctionDef
from calcula.builtin_function import BuiltinFunction
from calcula.errors import CalculaError, ErrorVal
from calcula.std.math import BUILTINS


class Environment:
    """A scope mapping names to numbers and to function definitions.

    Lookups walk from this scope up to the root and return the nearest
    binding. Writes always land in this scope, never in a parent. The
    builtin registry is shared by reference with every child scope.
    """
    def __init__(self, parent: Optional['Environment'] = None,
                 builtins: Optional[Mapping[str, BuiltinFunction]] = None):
        self.parent = parent
        self.variables: Dict[str, float] = {}
        self.functions: Dict[str, FunctionDef] = {}
        if builtins is None:
            builtins = parent.builtins if parent is not None else BUILTINS
        self.builtins = builtins

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def get_variable(self, name: str) -> float:
        if name in self.variables:
            return self.variables[name]
        if self.parent:
            return self.parent.get_variable(name)
        raise CalculaError(ErrorVal('NameError', f'variable {name} is not defined'))

    def set_variable(self, name: str, value: float):
        self.variables[name] = value

    def define_function(self, name: str, func: FunctionDef):
        self.functions[name] = func

    def get_function(self, name: str) -> FunctionDef:
        if name in self.functions:
            return self.functions[name]
        if self.parent:
            return self.parent.get_function(name)
        raise CalculaError(ErrorVal('NameError', f'function {name} is not defined'))

    def is_builtin(self, name: str) -> bool:
        return name in self.builtins

    def call_builtin(self, name: str, args: List[float]) -> float:
        func = self.builtins.get(name)
        if func is None:
            raise CalculaError(ErrorVal('NameError', f'built-in function {name} not found'))
        return func(args)
