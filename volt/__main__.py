"""CLI entry point for the Volt interpreter.

Usage:
    python -m volt [-v|-vv|-vvv] [--implicit-declare] <program_file>
    python -m volt -e 'print 1 + 2;'
    python -m volt --format <program_file>
    python -m volt --emit-ast <program_file>
    python -m volt --ast <ast_json_file>
    python -m volt                      (interactive REPL)

Options:
  -v                  Increase debug verbosity (can be repeated)
  --implicit-declare  Assignment to an unknown name declares it instead of failing
  --max-depth N       Maximum nesting of Volt function calls
  -e, --eval SOURCE   Execute SOURCE instead of a file
  --format            Print the program back as normalised Volt source
  --emit-ast          Parse the given .volt file and emit an AST JSON file
  --ast               Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .ast import Stmt
from .ast_json import ast_to_obj, ast_from_obj
from .errors import VoltError
from .interpreter import Interpreter
from .lexer import tokenize
from .parser import parse_expression, parse_program
from .printer import to_source
from .types import to_string

EXIT_COMMANDS = ('exit', 'quit')


def configure_logging(verbosity: int, path: str = 'debug.txt') -> None:
    if verbosity <= 0:
        return
    logger = logging.getLogger('volt')
    handler = logging.FileHandler(path, mode='w', encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(name)s: %(message)s'))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def brace_depth(source: str) -> int:
    """Net count of unclosed ``{`` in ``source``, ignoring braces in strings."""
    depth = 0
    for tok in tokenize(source):
        if tok.type == '{':
            depth += 1
        elif tok.type == '}':
            depth -= 1
    return depth


def run_repl_source(interpreter: Interpreter, source: str) -> None:
    """Run one REPL entry. A lone expression has its value echoed."""
    tokens = tokenize(source)
    expr, errors = parse_expression(tokens)
    try:
        if expr is not None and not errors:
            value = interpreter.evaluate(expr)
            print(to_string(value), file=interpreter.stdout)
            return
        statements, errors = parse_program(tokens)
        if errors:
            for diagnostic in errors:
                print(diagnostic, file=sys.stderr)
            return
        interpreter.execute(statements)
    except VoltError as e:
        print(f"Runtime error: {e}", file=sys.stderr)


def start_repl(interpreter: Optional[Interpreter] = None) -> None:
    print("Volt REPL. Type 'exit' or 'quit' to leave.")
    interpreter = interpreter or Interpreter()
    while True:
        try:
            src_lines: List[str] = []
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if line.strip() in EXIT_COMMANDS and not src_lines:
                    print("Exiting Volt REPL.")
                    return
                src_lines.append(line)
                if brace_depth('\n'.join(src_lines)) <= 0:
                    break
            src = '\n'.join(src_lines).strip()
            if not src:
                continue
            run_repl_source(interpreter, src)
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            print("\nKeyboardInterrupt")


def _read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _parse_or_exit(source: str) -> List[Stmt]:
    statements, errors = parse_program(tokenize(source))
    if errors:
        for diagnostic in errors:
            print(diagnostic, file=sys.stderr)
        sys.exit(1)
    return statements


def _execute_or_exit(interpreter: Interpreter, statements: List[Stmt]) -> None:
    try:
        interpreter.execute(statements)
    except VoltError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Volt language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--implicit-declare', action='store_true',
                        help='assignment to an undeclared name declares it in the current scope')
    parser.add_argument('--max-depth', type=int, default=1000, metavar='N',
                        help='maximum depth of nested Volt function calls')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-e', '--eval', metavar='SOURCE', help='execute Volt source given on the command line')
    group.add_argument('--format', metavar='VOLT_FILE', help='print the program as normalised Volt source')
    group.add_argument('--emit-ast', metavar='VOLT_FILE', help='emit AST JSON for the given .volt file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Volt program file (.volt) to execute')
    args = parser.parse_args(argv)

    configure_logging(args.v)

    def make_interpreter() -> Interpreter:
        return Interpreter(debug_level=args.v, implicit_declare=args.implicit_declare,
                           max_depth=args.max_depth)

    if args.format:
        statements = _parse_or_exit(_read_source(Path(args.format)))
        print(to_source(statements))
        return

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        statements = _parse_or_exit(_read_source(program_file))
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(statements), out, ensure_ascii=False, indent=2)
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
        _execute_or_exit(make_interpreter(), ast_from_obj(data))
        return

    if args.eval is not None:
        _execute_or_exit(make_interpreter(), _parse_or_exit(args.eval))
        return

    if not args.program:
        start_repl(make_interpreter())
        return

    statements = _parse_or_exit(_read_source(Path(args.program)))
    _execute_or_exit(make_interpreter(), statements)


if __name__ == '__main__':
    main()
