# Calcula language package
# This package provides a lexer, parser and tree-walking interpreter for Calcula.
from .interpreter import interpret, interpret_file, parse_program, Interpreter
from .errors import CalculaError

__all__ = [
    'interpret',
    'interpret_file',
    'parse_program',
    'Interpreter',
    'CalculaError',
]
