from pathlib import Path

from calcula.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_12_sum_of_squares(capsys):
    with open(EXAMPLES / 'program_12.calc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '385\n96.25'
