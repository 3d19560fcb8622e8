"""Interpreter for the Calcula language.

This module implements the complete Calcula pipeline: a lazy tokenizer, a
recursive-descent parser producing an AST, and a tree-walking interpreter
that evaluates the AST against a chain of environments. Every value is a
float; `print` writes to standard output and also yields its operand.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator, List, Mapping, Optional, TextIO

from .ast import (
    Node, Number, BinaryOp, If, For, FunctionDef, FunctionCall, BuiltinCall,
    Return, Block, Variable, Assign, Print, Format,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import CalculaError, ErrorVal
from .std.math import BUILTINS
from .types import Value, to_bool, is_truthy, to_string, to_fixed

###############################################################################
# Tokenizer
###############################################################################


class TokenType(Enum):
    NUMBER = auto()
    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    IDENTIFIER = auto()
    EQUALS = auto()         # assignment =
    EQUAL = auto()          # comparison ==
    NOT_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    END = auto()
    FOR = auto()
    TO = auto()
    FN = auto()
    RETURN = auto()
    PRINT = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    EOF = auto()


KEYWORDS = {
    'if': TokenType.IF,
    'then': TokenType.THEN,
    'else': TokenType.ELSE,
    'end': TokenType.END,
    'for': TokenType.FOR,
    'to': TokenType.TO,
    'fn': TokenType.FN,
    'return': TokenType.RETURN,
    'print': TokenType.PRINT,
}

TWO_CHAR_OPS = {
    '==': TokenType.EQUAL,
    '!=': TokenType.NOT_EQUAL,
    '>=': TokenType.GREATER_EQUAL,
    '<=': TokenType.LESS_EQUAL,
}

SINGLE_CHAR_OPS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '=': TokenType.EQUALS,
    '>': TokenType.GREATER,
    '<': TokenType.LESS,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
}

IDENT_CHARS = set(string.ascii_letters + '_')
DIGITS = set(string.digits)


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any  # float for NUMBER, lexeme otherwise
    line: int
    column: int


def lex_error(message: str) -> CalculaError:
    return CalculaError(ErrorVal('LexError', message))


def to_number(lexeme: str) -> float:
    """Validate a numeric lexeme and convert it to a float.

    Shared by both front-ends so that malformed literals fail with the
    same messages whichever parser is used.
    """
    if lexeme.count('.') > 1:
        raise lex_error('invalid number: multiple decimal points')
    _, marker, exponent = lexeme.lower().partition('e')
    if marker and not exponent.lstrip('+-'):
        raise lex_error('invalid scientific notation: missing exponent digits')
    try:
        return float(lexeme)
    except ValueError:
        raise lex_error(f'invalid number format: {lexeme}')


class Lexer:
    """Produces tokens on demand from source text.

    `next_token` keeps returning an EOF token once the input is exhausted.
    """
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.current_char: Optional[str] = source[0] if source else None

    def advance(self):
        if self.current_char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        self.current_char = self.source[self.pos] if self.pos < len(self.source) else None

    def peek(self) -> Optional[str]:
        peek_pos = self.pos + 1
        return self.source[peek_pos] if peek_pos < len(self.source) else None

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def read_number(self) -> Token:
        line, column = self.line, self.column
        chars: List[str] = []
        has_dot = False
        while self.current_char is not None and (self.current_char in DIGITS or self.current_char == '.'):
            if self.current_char == '.':
                if has_dot:
                    raise lex_error(f'invalid number: multiple decimal points at {self.line}:{self.column}')
                has_dot = True
            chars.append(self.current_char)
            self.advance()
        # scientific notation, e.g. 1.23e-4
        if self.current_char is not None and self.current_char in 'eE':
            chars.append(self.current_char)
            self.advance()
            if self.current_char is not None and self.current_char in '+-':
                chars.append(self.current_char)
                self.advance()
            has_exponent_digits = False
            while self.current_char is not None and self.current_char in DIGITS:
                has_exponent_digits = True
                chars.append(self.current_char)
                self.advance()
            if not has_exponent_digits:
                raise lex_error(f'invalid scientific notation: missing exponent digits at {self.line}:{self.column}')
        return Token(TokenType.NUMBER, to_number(''.join(chars)), line, column)

    def read_identifier(self) -> Token:
        line, column = self.line, self.column
        chars: List[str] = []
        while self.current_char is not None and self.current_char in IDENT_CHARS:
            chars.append(self.current_char)
            self.advance()
        value = ''.join(chars)
        return Token(KEYWORDS.get(value, TokenType.IDENTIFIER), value, line, column)

    def next_token(self) -> Token:
        while self.current_char is not None:
            c = self.current_char
            if c.isspace():
                self.skip_whitespace()
                continue
            if c in DIGITS:
                return self.read_number()
            if c in IDENT_CHARS:
                return self.read_identifier()
            line, column = self.line, self.column
            next_char = self.peek()
            if next_char is not None and c + next_char in TWO_CHAR_OPS:
                pair = c + next_char
                self.advance()
                self.advance()
                return Token(TWO_CHAR_OPS[pair], pair, line, column)
            if c in SINGLE_CHAR_OPS:
                self.advance()
                return Token(SINGLE_CHAR_OPS[c], c, line, column)
            raise lex_error(f'invalid character {c!r} at {line}:{column}')
        return Token(TokenType.EOF, '', self.line, self.column)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return list(Lexer(source))


###############################################################################
# Parser implementation
###############################################################################

COMPARISON_OPS = {
    TokenType.EQUAL, TokenType.NOT_EQUAL,
    TokenType.GREATER, TokenType.GREATER_EQUAL,
    TokenType.LESS, TokenType.LESS_EQUAL,
}
# '>' and '<' are also accepted at the additive level
ADDITIVE_OPS = {TokenType.PLUS, TokenType.MINUS, TokenType.GREATER, TokenType.LESS}
MULTIPLICATIVE_OPS = {TokenType.MULTIPLY, TokenType.DIVIDE}


class Parser:
    """Recursive-descent parser with one token of look-ahead."""
    def __init__(self, lexer: Lexer, builtins: Mapping[str, BuiltinFunction] = BUILTINS):
        self.lexer = lexer
        # only the builtin registry of this scope is consulted while parsing
        self.scope = Environment(builtins=builtins)
        self.current_token = self.lexer.next_token()

    def error(self, message: str) -> CalculaError:
        token = self.current_token
        return CalculaError(ErrorVal('SyntaxError', f"{message} at {token.line}:{token.column}"))

    def eat(self, kind: TokenType) -> Token:
        token = self.current_token
        if token.type is not kind:
            raise self.error(f"expected {kind.name}, got {token.type.name}")
        self.current_token = self.lexer.next_token()
        return token

    def parse(self) -> Block:
        return self.block()

    def block(self) -> Block:
        statements = [self.statement()]
        while self.current_token.type is not TokenType.EOF:
            statements.append(self.statement())
        return Block(statements)

    def statement(self) -> Node:
        kind = self.current_token.type
        if kind is TokenType.IF:
            return self.if_statement()
        if kind is TokenType.FOR:
            return self.for_statement()
        if kind is TokenType.FN:
            return self.function_definition()
        if kind is TokenType.RETURN:
            self.eat(TokenType.RETURN)
            return Return(self.comparison())
        if kind is TokenType.PRINT:
            self.eat(TokenType.PRINT)
            return Print(self.comparison())
        return self.comparison()

    def if_statement(self) -> If:
        self.eat(TokenType.IF)
        condition = self.comparison()
        self.eat(TokenType.THEN)
        then_branch = self.statement()
        else_branch = None
        if self.current_token.type is TokenType.ELSE:
            self.eat(TokenType.ELSE)
            else_branch = self.statement()
        self.eat(TokenType.END)
        return If(condition, then_branch, else_branch)

    def for_statement(self) -> For:
        self.eat(TokenType.FOR)
        variable = self.eat(TokenType.IDENTIFIER).value
        self.eat(TokenType.EQUALS)
        start = self.expr()
        self.eat(TokenType.TO)
        end = self.expr()
        body = self.statement()
        self.eat(TokenType.END)
        return For(variable, start, end, body)

    def function_definition(self) -> FunctionDef:
        self.eat(TokenType.FN)
        name = self.eat(TokenType.IDENTIFIER).value
        self.eat(TokenType.LPAREN)
        params: List[str] = []
        if self.current_token.type is TokenType.IDENTIFIER:
            params.append(self.eat(TokenType.IDENTIFIER).value)
            while self.current_token.type is TokenType.COMMA:
                self.eat(TokenType.COMMA)
                params.append(self.eat(TokenType.IDENTIFIER).value)
        self.eat(TokenType.RPAREN)
        body = self.statement()
        self.eat(TokenType.END)
        return FunctionDef(name, params, body)

    def function_call(self, name: str) -> Node:
        self.eat(TokenType.LPAREN)
        args: List[Node] = []
        if self.current_token.type is not TokenType.RPAREN:
            args.append(self.expr())
            while self.current_token.type is TokenType.COMMA:
                self.eat(TokenType.COMMA)
                args.append(self.expr())
        self.eat(TokenType.RPAREN)
        # resolved once, here; a later user function of the same name is never called
        if self.scope.is_builtin(name):
            return BuiltinCall(name, args)
        return FunctionCall(name, args)

    def comparison(self) -> Node:
        node = self.expr()
        while self.current_token.type in COMPARISON_OPS:
            op_token = self.eat(self.current_token.type)
            node = BinaryOp(op_token.value, node, self.expr())
        return node

    def expr(self) -> Node:
        node = self.term()
        while self.current_token.type in ADDITIVE_OPS:
            op_token = self.eat(self.current_token.type)
            node = BinaryOp(op_token.value, node, self.term())
        return node

    def term(self) -> Node:
        node = self.factor()
        while self.current_token.type in MULTIPLICATIVE_OPS:
            op_token = self.eat(self.current_token.type)
            node = BinaryOp(op_token.value, node, self.factor())
        return node

    def factor(self) -> Node:
        token = self.current_token
        if token.type is TokenType.NUMBER:
            self.eat(TokenType.NUMBER)
            return Number(token.value)
        if token.type is TokenType.IDENTIFIER:
            self.eat(TokenType.IDENTIFIER)
            if self.current_token.type is TokenType.EQUALS:
                self.eat(TokenType.EQUALS)
                return Assign(token.value, self.expr())
            if self.current_token.type is TokenType.LPAREN:
                return self.function_call(token.value)
            return Variable(token.value)
        if token.type is TokenType.LPAREN:
            self.eat(TokenType.LPAREN)
            node = self.expr()
            self.eat(TokenType.RPAREN)
            return node
        raise self.error(f"invalid syntax: unexpected {token.type.name}")


def parse_program(source: str, builtins: Mapping[str, BuiltinFunction] = BUILTINS) -> Block:
    """Parse Calcula source code into a Block AST."""
    return Parser(Lexer(source), builtins).parse()


###############################################################################
# Interpreter
###############################################################################


class Interpreter:
    """Core interpreter that evaluates Calcula ASTs.

    The root environment belongs to the instance, so variables and
    functions survive between `interpret` calls on the same interpreter.
    """
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 out: Optional[TextIO] = None, max_depth: int = 100,
                 builtins: Mapping[str, BuiltinFunction] = BUILTINS):
        self.builtins = builtins
        self.global_env = Environment(builtins=builtins)
        self.out = out
        self.max_depth = max_depth
        self.call_depth = 0
        self.debug_level = debug_level
        # without a debug file, trace lines go to standard output
        self.debug_fp = None
        if debug_level > 0 and debug_file is not None:
            self.debug_fp = open(debug_file, 'w', encoding='utf-8')

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def parse(self, source: str, frontend: str = 'rd') -> Block:
        if self.debug_level >= 4:
            for token in Lexer(source):
                self.debug(f"token {token.type.name} {token.value!r} at {token.line}:{token.column}")
        if frontend == 'lark':
            from .parser import parse_with_grammar as parse_source
        elif frontend == 'rd':
            parse_source = parse_program
        else:
            raise ValueError(f"unknown frontend {frontend!r}")
        try:
            return parse_source(source, self.builtins)
        except RecursionError as e:
            raise CalculaError(ErrorVal('RecursionError', 'maximum nesting depth exceeded while parsing')) from e

    def interpret(self, source: str, frontend: str = 'rd') -> Value:
        if self.debug_level >= 1:
            self.debug(f"interpret {len(source)} characters with {frontend} frontend")
        program = self.parse(source, frontend)
        return self.run(program)

    def run(self, program: Node, env: Optional[Environment] = None) -> Value:
        if env is None:
            env = self.global_env
        try:
            result = self.evaluate(program, env)
        except RecursionError as e:
            raise CalculaError(ErrorVal('RecursionError', 'maximum recursion depth exceeded')) from e
        finally:
            self.call_depth = 0
        if self.debug_level >= 1:
            self.debug(f"result {to_string(result)}")
        return result

    def evaluate(self, node: Node, env: Environment) -> Value:
        if isinstance(node, Number):
            return node.value
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, If):
            cond = self.evaluate(node.condition, env)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {is_truthy(cond)}")
            if is_truthy(cond):
                return self.evaluate(node.then_branch, env)
            if node.else_branch is not None:
                return self.evaluate(node.else_branch, env)
            return 0.0
        if isinstance(node, For):
            start = self.evaluate(node.start, env)
            end = self.evaluate(node.end, env)
            last: Value = 0.0
            # the counter is private to the loop; the body cannot change the iteration
            i = start
            while i <= end:
                if self.debug_level >= 3:
                    self.debug(f"for {node.variable} = {to_string(i)}")
                env.set_variable(node.variable, i)
                last = self.evaluate(node.body, env)
                i += 1
            return last
        if isinstance(node, FunctionDef):
            env.define_function(node.name, node)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return 0.0
        if isinstance(node, FunctionCall):
            return self.call_function(node, env)
        if isinstance(node, BuiltinCall):
            args = [self.evaluate(arg, env) for arg in node.args]
            if self.debug_level >= 3:
                self.debug(f"call builtin {node.name}({', '.join(to_string(a) for a in args)})")
            return env.call_builtin(node.name, args)
        if isinstance(node, Return):
            # no early exit: a return is just the value of its expression
            return self.evaluate(node.value, env)
        if isinstance(node, Block):
            result: Value = 0.0
            for stmt in node.statements:
                result = self.evaluate(stmt, env)
            return result
        if isinstance(node, Variable):
            return env.get_variable(node.name)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            env.set_variable(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {to_string(value)}")
            return value
        if isinstance(node, Print):
            value = self.evaluate(node.expr, env)
            print(to_string(value), file=self.out)
            return value
        if isinstance(node, Format):
            return to_fixed(self.evaluate(node.value, env), node.decimals)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def call_function(self, node: FunctionCall, env: Environment) -> Value:
        func = env.get_function(node.name)
        # the callee scope chains to the caller's scope, not the definition site
        call_env = env.child()
        args = [self.evaluate(arg, env) for arg in node.args]
        # missing arguments leave their parameters unbound; extras are ignored
        for param, value in zip(func.params, args):
            call_env.set_variable(param, value)
        if self.call_depth >= self.max_depth:
            raise CalculaError(ErrorVal('RecursionError', f'maximum call depth {self.max_depth} exceeded in {node.name}'))
        if self.debug_level >= 3:
            self.debug(f"call {node.name}({', '.join(to_string(a) for a in args)}) depth {self.call_depth + 1}")
        self.call_depth += 1
        try:
            return self.evaluate(func.body, call_env)
        finally:
            self.call_depth -= 1

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0:
                raise CalculaError(ErrorVal('ZeroDivisionError', 'division by zero'))
            return a / b
        if op == '==':
            return to_bool(a == b)
        if op == '!=':
            return to_bool(a != b)
        if op == '>':
            return to_bool(a > b)
        if op == '>=':
            return to_bool(a >= b)
        if op == '<':
            return to_bool(a < b)
        if op == '<=':
            return to_bool(a <= b)
        raise CalculaError(ErrorVal('SyntaxError', f'unknown operator {op}'))


def interpret(source: str, **kwargs) -> Value:
    """Convenience function to lex, parse and evaluate a Calcula program."""
    interpreter = Interpreter(**kwargs)
    try:
        return interpreter.interpret(source)
    finally:
        interpreter.close()


def interpret_file(file_path: str, **kwargs) -> Value:
    """Evaluate a Calcula source file and return the value of its last statement."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return interpret(source, **kwargs)
