from pathlib import Path

import pytest

from calcula import CalculaError, Interpreter
from calcula.interpreter import parse_program
from calcula.parser import parse_with_grammar

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.mark.parametrize('program', sorted(EXAMPLES.glob('program_*.calc')), ids=lambda p: p.stem)
def test_both_frontends_build_the_same_tree(program):
    source = program.read_text(encoding='utf-8')
    assert parse_with_grammar(source) == parse_program(source)


@pytest.mark.parametrize('source', [
    '1 + 2 > 2 - 1',
    '1 < 2 + 5',
    '3 > 2 > 1',
    '1 + 1 == 2',
    'a = b = 2 * (3 - 1) / 4',
    'if x >= 1 then y = 1 end',
    'fn sqrt(x) 0 end sqrt(2) max() foo()',
    'for i = 0.5 to n + 1 print i end',
    'fn iffy(end_) return end_ end',
])
def test_operator_overlap_resolved_like_recursive_descent(source):
    assert parse_with_grammar(source) == parse_program(source)


def test_lark_frontend_runs_programs(capsys):
    interp = Interpreter()
    interp.interpret('fn add(a, b) return a + b end print add(5, 3)', frontend='lark')
    assert capsys.readouterr().out == '8\n'


@pytest.mark.parametrize('source, name, message', [
    ('1.2.3', 'LexError', 'multiple decimal points'),
    ('print 2e', 'LexError', 'missing exponent digits'),
    ('x = 1 $', 'LexError', "invalid character '$'"),
    ('(1 + 2', 'SyntaxError', 'unexpected EOF'),
    ('', 'SyntaxError', 'unexpected EOF'),
    ('if 1 print 2 end', 'SyntaxError', 'unexpected PRINT'),
])
def test_errors_are_reported_as_calcula_errors(source, name, message):
    with pytest.raises(CalculaError) as exc:
        parse_with_grammar(source)
    assert exc.value.name == name
    assert message in exc.value.message
