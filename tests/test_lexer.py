import pytest

from calcula.errors import CalculaError
from calcula.interpreter import Lexer, TokenType, tokenize


def kinds(source):
    return [token.type for token in tokenize(source)]


def test_operators_and_keywords():
    assert kinds('if a >= b then print a else return b end') == [
        TokenType.IF, TokenType.IDENTIFIER, TokenType.GREATER_EQUAL, TokenType.IDENTIFIER,
        TokenType.THEN, TokenType.PRINT, TokenType.IDENTIFIER, TokenType.ELSE,
        TokenType.RETURN, TokenType.IDENTIFIER, TokenType.END, TokenType.EOF,
    ]
    assert kinds('== != <= < > = + - * / ( ) ,') == [
        TokenType.EQUAL, TokenType.NOT_EQUAL, TokenType.LESS_EQUAL, TokenType.LESS,
        TokenType.GREATER, TokenType.EQUALS, TokenType.PLUS, TokenType.MINUS,
        TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.LPAREN, TokenType.RPAREN,
        TokenType.COMMA, TokenType.EOF,
    ]


def test_keyword_prefix_is_identifier():
    tokens = tokenize('ending fnord _to')
    assert [t.type for t in tokens[:-1]] == [TokenType.IDENTIFIER] * 3
    assert [t.value for t in tokens[:-1]] == ['ending', 'fnord', '_to']


def test_digits_end_an_identifier():
    tokens = tokenize('x1')
    assert tokens[0].type is TokenType.IDENTIFIER and tokens[0].value == 'x'
    assert tokens[1].type is TokenType.NUMBER and tokens[1].value == 1.0


@pytest.mark.parametrize('source, expected', [
    ('42', 42.0),
    ('3.25', 3.25),
    ('7.', 7.0),
    ('1e3', 1000.0),
    ('1.5E-2', 0.015),
    ('2e+2', 200.0),
])
def test_numbers(source, expected):
    token = Lexer(source).next_token()
    assert token.type is TokenType.NUMBER
    assert token.value == expected


def test_eof_is_repeated():
    lexer = Lexer('  x  ')
    assert lexer.next_token().type is TokenType.IDENTIFIER
    assert lexer.next_token().type is TokenType.EOF
    assert lexer.next_token().type is TokenType.EOF


def test_positions():
    tokens = tokenize('a =\n  12')
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[1].line, tokens[1].column) == (1, 3)
    assert (tokens[2].line, tokens[2].column) == (2, 3)


def test_iteration_is_lazy():
    tokens = iter(Lexer('a b $'))
    assert next(tokens).value == 'a'
    assert next(tokens).value == 'b'
    with pytest.raises(CalculaError):
        next(tokens)


@pytest.mark.parametrize('source, message', [
    ('1.2.3', 'invalid number: multiple decimal points'),
    ('2e', 'missing exponent digits'),
    ('2e+', 'missing exponent digits'),
    ('x = 3 # note', "invalid character '#'"),
    ('a ! b', "invalid character '!'"),
])
def test_lex_errors(source, message):
    with pytest.raises(CalculaError) as exc:
        tokenize(source)
    assert exc.value.name == 'LexError'
    assert message in str(exc.value)
