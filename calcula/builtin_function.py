from dataclasses import dataclass
from typing import Any, List, Optional

from calcula.errors import CalculaError, ErrorVal


@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    min_args: int
    max_args: Optional[int]  # None means variadic
    fn: Any

    def __call__(self, args: List[float]) -> float:
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            raise CalculaError(ErrorVal('ArityError', f"built-in function {self.name} expects {self.arity_text()} arguments, got {len(args)}"))
        return self.fn(*args)

    def arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
