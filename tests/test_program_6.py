from pathlib import Path

from calcula.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_trig_identity(capsys):
    with open(EXAMPLES / 'program_6.calc', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '1'
