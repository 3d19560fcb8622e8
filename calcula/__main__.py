"""CLI entry point for the Calcula interpreter.

Usage:
    python -m calcula [-v|-vv|-vvv|-vvvv] <program_file>
    python -m calcula [-v...] -e "<source>"
    python -m calcula [-v...] --emit-ast <program_file>
    python -m calcula [-v...] --ast <ast_json_file>

Options:
  -v             Increase debug verbosity (can be repeated)
  -e, --eval     Evaluate the given source text instead of a file
  --emit-ast     Parse the given .calc file and emit an AST JSON file
  --ast          Execute a previously emitted AST JSON file
  --frontend     Parser to use: rd (recursive descent, default) or lark
  --max-depth    Maximum nesting of user function calls
  -r, --result   Print the value of the last statement after running
  --decimals N   Show the result with exactly N decimals (implies -r)

Debug information is written to `debug.txt` (or --debug-file) when
verbosity is greater than zero. Use `--debug-file -` to print it instead.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .ast import Block, Format
from .ast_json import ast_to_obj, ast_from_obj
from .errors import CalculaError
from .interpreter import Interpreter
from .types import to_string


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def make_interpreter(args: argparse.Namespace) -> Interpreter:
    return Interpreter(debug_level=args.v, debug_file=None if args.debug_file == '-' else args.debug_file,
                       max_depth=args.max_depth)


def execute(interpreter: Interpreter, program: Block, args: argparse.Namespace):
    node = program
    if args.decimals is not None:
        node = Format(program, args.decimals)
    try:
        result = interpreter.run(node)
    except CalculaError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()
    if args.result or args.decimals is not None:
        print(to_string(result))


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Calcula language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help="file receiving debug output, or '-' for standard output")
    parser.add_argument('--frontend', choices=('rd', 'lark'), default='rd', help='parser front-end')
    parser.add_argument('--max-depth', type=int, default=100, help='maximum nesting of user function calls')
    parser.add_argument('-r', '--result', action='store_true', help='print the value of the last statement')
    parser.add_argument('--decimals', type=int, metavar='N', help='format the result with N decimals')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-e', '--eval', metavar='SOURCE', help='evaluate SOURCE')
    group.add_argument('--emit-ast', metavar='CALC_FILE', help='emit AST JSON for the given .calc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Calcula program file (.calc) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        interpreter = make_interpreter(args)
        try:
            program = interpreter.parse(source, args.frontend)
        except CalculaError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        finally:
            interpreter.close()
        obj = ast_to_obj(program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            program = ast_from_obj(data)
        except CalculaError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        execute(make_interpreter(args), program, args)
        return

    # Default: execute source text or file
    if args.eval is not None:
        source = args.eval
    elif args.program:
        source = read_source(Path(args.program))
    else:
        parser.error('missing program file; or use -e/--emit-ast/--ast')
    interpreter = make_interpreter(args)
    try:
        program = interpreter.parse(source, args.frontend)
    except CalculaError as e:
        interpreter.close()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    execute(interpreter, program, args)


if __name__ == '__main__':
    main()
