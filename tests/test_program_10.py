from pathlib import Path

from calcula.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_10_math_builtins(capsys):
    with open(EXAMPLES / 'program_10.calc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '3\n3.14\n3.1416\n4\n9'
