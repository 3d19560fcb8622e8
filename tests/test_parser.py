import pytest

from calcula.ast import (
    Assign, BinaryOp, Block, BuiltinCall, For, FunctionCall, FunctionDef, If,
    Number, Print, Return, Variable,
)
from calcula.builtin_function import BuiltinFunction
from calcula.errors import CalculaError
from calcula.interpreter import parse_program
from calcula.parser import parse_with_grammar


def single(source):
    block = parse_program(source)
    assert isinstance(block, Block)
    assert len(block.statements) == 1
    return block.statements[0]


def test_single_statement_is_wrapped_in_block():
    assert parse_program('1') == Block([Number(1.0)])


def test_multiplication_binds_tighter():
    assert single('2 + 3 * 4') == BinaryOp('+', Number(2.0), BinaryOp('*', Number(3.0), Number(4.0)))


def test_left_associative_within_level():
    assert single('8 - 3 - 1') == BinaryOp('-', BinaryOp('-', Number(8.0), Number(3.0)), Number(1.0))


def test_greater_and_less_chain_with_addition():
    # '>' and '<' are taken at the additive level, left to right with '+' and '-'
    assert single('1 + 2 > 2 - 1') == BinaryOp(
        '-', BinaryOp('>', BinaryOp('+', Number(1.0), Number(2.0)), Number(2.0)), Number(1.0))
    assert single('1 < 2 + 5') == BinaryOp('+', BinaryOp('<', Number(1.0), Number(2.0)), Number(5.0))


def test_equality_is_below_addition():
    assert single('1 + 1 == 2') == BinaryOp('==', BinaryOp('+', Number(1.0), Number(1.0)), Number(2.0))


def test_if_else():
    assert single('if a then print 1 else print 0 end') == If(
        Variable('a'), Print(Number(1.0)), Print(Number(0.0)))
    assert single('if a then 1 end') == If(Variable('a'), Number(1.0), None)


def test_for_loop():
    assert single('for i = 1 to n print i end') == For('i', Number(1.0), Variable('n'), Print(Variable('i')))


def test_function_definition_and_call():
    block = parse_program('fn add(a, b) return a + b end add(1, 2)')
    assert block.statements == [
        FunctionDef('add', ['a', 'b'], Return(BinaryOp('+', Variable('a'), Variable('b')))),
        FunctionCall('add', [Number(1.0), Number(2.0)]),
    ]
    assert single('fn zero() 0 end') == FunctionDef('zero', [], Number(0.0))


def test_builtin_calls_are_resolved_statically():
    block = parse_program('fn sqrt(x) 0 end sqrt(4) pi()')
    assert block.statements[1] == BuiltinCall('sqrt', [Number(4.0)])
    assert block.statements[2] == BuiltinCall('pi', [])


@pytest.mark.parametrize('parse', [parse_program, parse_with_grammar])
def test_calls_resolve_against_the_given_registry(parse):
    registry = {'twice': BuiltinFunction('twice', 1, 1, lambda x: 2 * x)}
    block = parse('twice(3) sqrt(4)', registry)
    assert block.statements == [
        BuiltinCall('twice', [Number(3.0)]),
        FunctionCall('sqrt', [Number(4.0)]),
    ]


def test_assignment_value_is_an_expression():
    assert single('x = y = 2') == Assign('x', Assign('y', Number(2.0)))


@pytest.mark.parametrize('source, message', [
    ('(1 + 2', 'expected RPAREN, got EOF'),
    ('if 1 print 2 end', 'expected THEN, got PRINT'),
    ('for 1 = 1 to 2 x end', 'expected IDENTIFIER, got NUMBER'),
    ('fn f(a b) a end', 'expected RPAREN, got IDENTIFIER'),
    ('(1 == 2)', 'expected RPAREN, got EQUAL'),
    ('', 'invalid syntax: unexpected EOF'),
    ('print', 'invalid syntax: unexpected EOF'),
    ('1 + )', 'invalid syntax: unexpected RPAREN'),
])
def test_syntax_errors(source, message):
    with pytest.raises(CalculaError) as exc:
        parse_program(source)
    assert exc.value.name == 'SyntaxError'
    assert message in exc.value.message
