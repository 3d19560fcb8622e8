from dataclasses import dataclass


@dataclass
class ErrorVal:
    """Describes a Calcula failure: a category name and a message."""
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


class CalculaError(Exception):
    """Exception type used to propagate every lexing, parsing and runtime error."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err

    @property
    def name(self) -> str:
        return self.err.name

    @property
    def message(self) -> str:
        return self.err.message
