"""Grammar-driven parser for the Calcula language.

This is a second front-end for the same language, built on a Lark LALR
parser instead of the hand-written recursive-descent parser in
`calcula.interpreter`. Both produce identical ASTs, which makes this
module useful for cross-checking the grammar.

The additive level accepts `>` and `<` just like the comparison level.
Lark resolves the resulting shift/reduce conflicts as shifts, so an
additive chain swallows those operators greedily, which is exactly what
the recursive-descent parser does.

`parse_with_grammar` is the public entry point and returns a `Block`.
"""

from __future__ import annotations

from typing import Mapping

from lark import Lark, Transformer
from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedInput, VisitError

from .ast import (
    Node, Number, BinaryOp, If, For, FunctionDef, FunctionCall, BuiltinCall,
    Return, Block, Variable, Assign, Print,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import CalculaError, ErrorVal
from .interpreter import to_number
from .std.math import BUILTINS


CALCULA_GRAMMAR = r"""
    start: statement+

    ?statement: if_stmt
              | for_stmt
              | fn_def
              | return_stmt
              | print_stmt
              | comparison

    if_stmt: "if" comparison "then" statement ["else" statement] "end"
    for_stmt: "for" IDENT "=" expr "to" expr statement "end"
    fn_def: "fn" IDENT "(" [param_list] ")" statement "end"
    param_list: IDENT ("," IDENT)*
    return_stmt: "return" comparison
    print_stmt: "print" comparison

    // Expressions with precedence
    comparison: expr (comp_op expr)*
    expr: term (add_op term)*
    term: factor (mul_op factor)*
    ?factor: NUMBER -> number
           | IDENT "=" expr -> assign
           | IDENT "(" [arg_list] ")" -> call
           | IDENT -> variable
           | "(" expr ")"
    arg_list: expr ("," expr)*

    comp_op: EQ | NE | GT | GE | LT | LE
    add_op: PLUS | MINUS | GT | LT
    mul_op: STAR | SLASH

    EQ: "=="
    NE: "!="
    GE: ">="
    LE: "<="
    GT: ">"
    LT: "<"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"

    // Tokens
    IDENT: /[a-zA-Z_]+/
    NUMBER: /[0-9][0-9.]*([eE][+-]?[0-9]*)?/
    %import common.WS
    %ignore WS
"""


CALCULA_PARSER = Lark(
    CALCULA_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=True,
)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def __init__(self, builtins: Mapping[str, BuiltinFunction]):
        super().__init__()
        self.scope = Environment(builtins=builtins)

    def start(self, items):
        return Block(statements=list(items))

    def if_stmt(self, items):
        condition, then_branch, else_branch = items
        return If(condition, then_branch, else_branch)

    def for_stmt(self, items):
        variable, start, end, body = items
        return For(str(variable), start, end, body)

    def fn_def(self, items):
        name, params, body = items
        return FunctionDef(str(name), params or [], body)

    def param_list(self, items):
        return [str(item) for item in items]

    def return_stmt(self, items):
        return Return(items[0])

    def print_stmt(self, items):
        return Print(items[0])

    def binary_chain(self, items) -> Node:
        # items pattern: operand (op operand)*, folded left-associatively
        left = items[0]
        i = 1
        while i < len(items):
            left = BinaryOp(op=items[i], left=left, right=items[i + 1])
            i += 2
        return left

    def comparison(self, items):
        return self.binary_chain(items)

    def expr(self, items):
        return self.binary_chain(items)

    def term(self, items):
        return self.binary_chain(items)

    def comp_op(self, items):
        return str(items[0])

    def add_op(self, items):
        return str(items[0])

    def mul_op(self, items):
        return str(items[0])

    def number(self, items):
        return Number(to_number(str(items[0])))

    def assign(self, items):
        name, value = items
        return Assign(str(name), value)

    def call(self, items):
        name, args = str(items[0]), items[1] or []
        if self.scope.is_builtin(name):
            return BuiltinCall(name, args)
        return FunctionCall(name, args)

    def variable(self, items):
        return Variable(str(items[0]))

    def arg_list(self, items):
        return list(items)


def syntax_error(e: UnexpectedInput) -> CalculaError:
    if isinstance(e, UnexpectedCharacters):
        return CalculaError(ErrorVal('LexError', f"invalid character {e.char!r} at {e.line}:{e.column}"))
    token = getattr(e, 'token', None)
    got = token.type if token is not None else 'EOF'
    if got in ('$END', '<EOF>'):
        got = 'EOF'
    return CalculaError(ErrorVal('SyntaxError', f"invalid syntax: unexpected {got} at {e.line}:{e.column}"))


def parse_with_grammar(source: str, builtins: Mapping[str, BuiltinFunction] = BUILTINS) -> Block:
    """Parse Calcula source code into a Block AST using the Lark grammar.

    Lark failures are reported as `CalculaError` just like the errors of
    the recursive-descent parser, although the wording differs.
    """
    try:
        tree = CALCULA_PARSER.parse(source)
    except UnexpectedInput as e:
        raise syntax_error(e) from e
    except LarkError as e:
        raise CalculaError(ErrorVal('SyntaxError', str(e))) from e
    try:
        return ASTTransformer(builtins).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, CalculaError):
            raise e.orig_exc from e
        raise
