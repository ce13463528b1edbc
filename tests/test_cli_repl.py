import builtins
import json
import logging

import pytest

from volt.__main__ import brace_depth, main, run_repl_source, start_repl
from volt.interpreter import Interpreter


def feed(monkeypatch, lines):
    it = iter(lines)
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        return next(it)

    monkeypatch.setattr(builtins, 'input', fake_input)
    return prompts


def test_run_file(tmp_path, capsys):
    program = tmp_path / 'hello.volt'
    program.write_text('print "hi from file";', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out == 'hi from file\n'


def test_missing_file_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.volt')])
    assert exc.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_eval_option(capsys):
    main(['-e', 'print 6 * 7;'])
    assert capsys.readouterr().out == '42\n'


def test_parse_errors_exit_with_diagnostics(capsys):
    with pytest.raises(SystemExit) as exc:
        main(['-e', 'print 1'])
    assert exc.value.code == 1
    assert "Error at end: Expected ';' after value" in capsys.readouterr().err


def test_runtime_errors_exit(capsys):
    with pytest.raises(SystemExit) as exc:
        main(['-e', 'print 1 / 0;'])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert err.strip() == 'Runtime error: [Line 1, Col 9] ZeroDivisionError: Division by zero'


def test_implicit_declare_flag(capsys):
    main(['--implicit-declare', '-e', 'x = 3; print x;'])
    assert capsys.readouterr().out == '3\n'


def test_format_option(tmp_path, capsys):
    program = tmp_path / 'messy.volt'
    program.write_text('let x=1;while(x<3){x++;}', encoding='utf-8')
    main(['--format', str(program)])
    assert capsys.readouterr().out == 'let x = 1;\nwhile (x < 3) {\n    x++;\n}\n'


def test_emit_and_run_ast(tmp_path, capsys):
    program = tmp_path / 'prog.volt'
    program.write_text('let a = [1, 2, 3];\nprint a.reduce(fn (s, x) { return s + x; }, 0);', encoding='utf-8')
    main(['--emit-ast', str(program)])
    out_path = tmp_path / 'prog.volt.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    data = json.loads(out_path.read_text(encoding='utf-8'))
    assert data[0]['type'] == 'LetStmt'
    main(['--ast', str(out_path)])
    assert capsys.readouterr().out == '6\n'


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-v', '-e', 'fn f() { } f();'])
    logger = logging.getLogger('volt')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    text = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'define function f/0' in text


def test_brace_depth_ignores_strings():
    assert brace_depth('fn f() {') == 1
    assert brace_depth('print "{";') == 0
    assert brace_depth('}') == -1


def test_repl_quit(monkeypatch, capsys):
    feed(monkeypatch, ['quit'])
    start_repl()
    assert 'Exiting Volt REPL' in capsys.readouterr().out


def test_repl_eof_leaves(monkeypatch, capsys):
    def eof(prompt=''):
        raise EOFError
    monkeypatch.setattr(builtins, 'input', eof)
    start_repl()
    assert 'Volt REPL' in capsys.readouterr().out


def test_repl_echoes_expressions_and_keeps_bindings(monkeypatch, capsys):
    feed(monkeypatch, ['let x = 4;', 'x * 2', '', 'exit'])
    start_repl()
    out = capsys.readouterr().out.split('\n')
    assert '8' in out


def test_repl_continues_open_braces(monkeypatch, capsys):
    prompts = feed(monkeypatch, ['fn sq(n) {', 'return n * n;', '}', 'sq(9)', 'quit'])
    start_repl()
    assert prompts == ['>>> ', '... ', '... ', '>>> ', '>>> ']
    assert '81' in capsys.readouterr().out.split('\n')


def test_repl_reports_errors_and_continues(monkeypatch, capsys):
    feed(monkeypatch, ['let a = [1];', 'a[5]', 'print 1', 'print a.length;', 'quit'])
    start_repl()
    captured = capsys.readouterr()
    assert 'IndexError: Array index out of bounds: 5' in captured.err
    assert "Expected ';' after value" in captured.err
    assert '1' in captured.out.split('\n')


def test_run_repl_source_statements(capsys):
    interp = Interpreter()
    run_repl_source(interp, 'let greeting = "hey";')
    run_repl_source(interp, 'greeting + "!"')
    assert capsys.readouterr().out == 'hey!\n'
