"""Abstract Syntax Tree (AST) definitions for the Calcula language.

Each node is a plain dataclass; the interpreter evaluates them by
matching on the node class. Nodes form a strict tree, so every child is
owned by exactly one parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Number(Node):
    value: float


@dataclass
class BinaryOp(Node):
    op: str  # operator lexeme, e.g. '+' or '>='
    left: Node
    right: Node


@dataclass
class If(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None


@dataclass
class For(Node):
    variable: str
    start: Node
    end: Node  # inclusive
    body: Node


@dataclass
class FunctionDef(Node):
    name: str
    params: List[str]
    body: Node


@dataclass
class FunctionCall(Node):
    name: str
    args: List[Node]


@dataclass
class BuiltinCall(Node):
    name: str
    args: List[Node]


@dataclass
class Return(Node):
    value: Node


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class Variable(Node):
    name: str


@dataclass
class Assign(Node):
    name: str
    value: Node


@dataclass
class Print(Node):
    expr: Node


@dataclass
class Format(Node):
    value: Node
    decimals: int
