"""JSON serialization/deserialization for Calcula ASTs.

This module converts between Calcula AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. The CLI uses it to emit
a parsed program and to execute a previously emitted one.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Number,
    BinaryOp,
    If,
    For,
    FunctionDef,
    FunctionCall,
    BuiltinCall,
    Return,
    Block,
    Variable,
    Assign,
    Print,
    Format,
)
from .errors import CalculaError, ErrorVal


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, Number):
        return {"type": "Number", "value": node.value}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, For):
        return {
            "type": "For",
            "variable": node.variable,
            "start": ast_to_obj(node.start),
            "end": ast_to_obj(node.end),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, FunctionDef):
        return {"type": "FunctionDef", "name": node.name, "params": list(node.params), "body": ast_to_obj(node.body)}
    if isinstance(node, FunctionCall):
        return {"type": "FunctionCall", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, BuiltinCall):
        return {"type": "BuiltinCall", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name}
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, Print):
        return {"type": "Print", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Format):
        return {"type": "Format", "value": ast_to_obj(node.value), "decimals": node.decimals}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise CalculaError(ErrorVal('ASTError', f"invalid AST object {obj!r}"))
    t = obj.get("type")
    try:
        return _node_from_obj(t, obj)
    except KeyError as e:
        raise CalculaError(ErrorVal('ASTError', f"{t} node is missing field {e.args[0]}"))


def _node_from_obj(t: Any, obj: Dict[str, Any]) -> Any:
    if t == "Number":
        return Number(value=float(obj["value"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "For":
        return For(
            variable=obj["variable"],
            start=ast_from_obj(obj["start"]),
            end=ast_from_obj(obj["end"]),
            body=ast_from_obj(obj["body"]),
        )
    if t == "FunctionDef":
        return FunctionDef(name=obj["name"], params=list(obj["params"]), body=ast_from_obj(obj["body"]))
    if t == "FunctionCall":
        return FunctionCall(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "BuiltinCall":
        return BuiltinCall(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "Return":
        return Return(value=ast_from_obj(obj["value"]))
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "Variable":
        return Variable(name=obj["name"])
    if t == "Assign":
        return Assign(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "Print":
        return Print(expr=ast_from_obj(obj["expr"]))
    if t == "Format":
        return Format(value=ast_from_obj(obj["value"]), decimals=int(obj["decimals"]))

    raise CalculaError(ErrorVal('ASTError', f"unknown AST node type: {t}"))
