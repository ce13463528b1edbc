import io
import logging

import pytest

from volt.ast import BreakStmt, PrintStmt, Literal
from volt.errors import ProgramError, VoltError
from volt.interpreter import Interpreter, run_program
from volt.lexer import Token, tokenize
from volt.parser import parse_expression, parse_program


def output(capsys, source, **options):
    run_program(source, **options)
    return capsys.readouterr().out.strip().split('\n')


def runtime_error(source, **options):
    with pytest.raises(VoltError) as exc:
        run_program(source, **options)
    return exc.value


def test_arithmetic_follows_doubles(capsys):
    assert output(capsys, '''
        print 1 + 2 * 3;
        print (1 + 2) * 3;
        print 10 % 3;
        print -7 % 3;
        print 7.5 % 2;
        print 1 / 4;
        print 0.1 + 0.2;
    ''') == ['7', '9', '1', '-1', '1.5', '0.25', '0.3']


def test_string_concatenation_and_coercion(capsys):
    assert output(capsys, '''
        print "Count: " + 42;
        print 42 + " items";
        print "a" + "b";
        print "pi ~ " + 3.14159;
    ''') == ['Count: 42', '42 items', 'ab', 'pi ~ 3.14159']


def test_division_by_zero_is_an_error():
    err = runtime_error('print 1 / 0;')
    assert err.name == 'ZeroDivisionError'
    assert err.message == 'Division by zero'
    assert (err.line, err.column) == (1, 9)


def test_modulo_by_zero_is_an_error():
    err = runtime_error('print 5 % 0;')
    assert err.name == 'ZeroDivisionError'


@pytest.mark.parametrize('source, message', [
    ('print "a" + true;', 'Operands must be two numbers or two strings'),
    ('print "a" - "b";', 'Operands must be numbers'),
    ('print "a" < "b";', 'Operands must be numbers'),
    ('print -"a";', 'Operand must be a number'),
    ('let s = "x"; s++;', 'Operand must be a number for increment/decrement'),
])
def test_type_errors(source, message):
    err = runtime_error(source)
    assert err.name == 'TypeError'
    assert err.message == message


def test_equality_semantics(capsys):
    assert output(capsys, '''
        print 1 == "1";
        print nil == nil;
        print nil == false;
        print [1] == [1];
        let a = [1];
        let b = a;
        print a == b;
        print 2 != 3;
    ''') == ['false', 'true', 'false', 'false', 'true', 'true']


def test_logical_operators_short_circuit(capsys):
    assert output(capsys, '''
        let called = false;
        fn side() { called = true; return true; }
        print false && side();
        print called;
        print true || side();
        print called;
        print nil || 0;
        print 1 && 2;
        print "" || "fallback";
    ''') == ['false', 'false', 'true', 'false', '0', '2', 'fallback']


def test_update_and_compound_assignment(capsys):
    assert output(capsys, '''
        let i = 5;
        print i++;
        print i;
        print ++i;
        print --i;
        let s = "a";
        s += 1;
        print s;
        let n = 10;
        n -= 4;
        n *= 2;
        n /= 3;
        print n;
        let a = [1, 2];
        a[1] += 5;
        print a;
        let m = {"hits": 1};
        m["hits"] *= 10;
        print m["hits"];
    ''') == ['5', '6', '7', '6', 'a1', '4', '[1, 7]', '10']


def test_compound_index_target_evaluated_once(capsys):
    assert output(capsys, '''
        let calls = 0;
        let a = [0, 0];
        fn idx() { calls++; return 1; }
        a[idx()] += 3;
        print a;
        print calls;
    ''') == ['[0, 3]', '1']


def test_ternary(capsys):
    assert output(capsys, '''
        let x = 3;
        print x > 2 ? "big" : "small";
        print x > 5 ? "huge" : x > 2 ? "big" : "small";
    ''') == ['big', 'big']


def test_undefined_variable():
    err = runtime_error('print nope;')
    assert err.name == 'NameError'
    assert err.message == "Undefined variable 'nope'"


def test_assignment_to_undeclared_name_is_an_error():
    err = runtime_error('y = 1;')
    assert err.name == 'NameError'


def test_implicit_declare_option(capsys):
    assert output(capsys, '''
        fn f() { z = 3; return z; }
        print f();
        y = 1;
        print y;
    ''', implicit_declare=True) == ['3', '1']


def test_implicit_declare_targets_current_scope():
    err = runtime_error('{ y = 1; } print y;', implicit_declare=True)
    assert err.name == 'NameError'


def test_arity_mismatch():
    err = runtime_error('fn f(a, b) { return a; } f(1);')
    assert err.name == 'ArityError'
    assert err.message == 'f() expected 2 arguments but got 1'
    err = runtime_error('len();')
    assert err.message == 'len() expected 1 arguments but got 0'


def test_calling_a_non_function():
    err = runtime_error('let x = 1; x();')
    assert err.name == 'TypeError'
    assert err.message == 'Can only call functions, not number'


def test_native_errors_get_call_location():
    err = runtime_error('\n   len(5);')
    assert err.name == 'TypeError'
    assert (err.line, err.column) == (2, 7)


def test_runaway_recursion_is_reported():
    err = runtime_error('fn f(n) { return f(n + 1); } f(0);', max_depth=50)
    assert err.name == 'RecursionError'
    assert err.message == 'Stack overflow'


def test_default_depth_allows_deep_recursion(capsys):
    assert output(capsys, '''
        fn sum(n) { if (n == 0) return 0; return n + sum(n - 1); }
        print sum(900);
    ''') == ['405450']


def test_functions_return_nil_by_default(capsys):
    assert output(capsys, '''
        fn nothing() { }
        fn bare() { return; }
        print nothing();
        print bare();
    ''') == ['nil', 'nil']


def test_callables_render(capsys):
    assert output(capsys, '''
        fn named() { }
        print named;
        print fn () { };
        print clock;
    ''') == ['<fn named>', '<fn>', '<native fn clock>']


def test_parse_errors_raise_program_error():
    with pytest.raises(ProgramError) as exc:
        run_program('let = 1;\nprint ;')
    assert len(exc.value.diagnostics) == 2


def test_evaluate_single_expression():
    interp = Interpreter()
    expr, errors = parse_expression(tokenize('1 + 2 * 3'))
    assert errors == []
    assert interp.evaluate(expr) == 7.0


def test_define_registers_natives():
    interp = Interpreter()
    interp.define('double', 1, lambda args: args[0] * 2)
    expr, _ = parse_expression(tokenize('double(21)'))
    assert interp.evaluate(expr) == 42.0


def test_stdout_option_redirects_print(capsys):
    out = io.StringIO()
    run_program('print "to the buffer";', stdout=out)
    assert out.getvalue() == 'to the buffer\n'
    assert capsys.readouterr().out == ''


def test_reset_drops_user_bindings():
    interp = run_program('let x = 1; fn f() { }')
    assert interp.globals.contains('x')
    interp.reset()
    assert not interp.globals.contains('x')
    assert not interp.globals.contains('f')
    assert interp.globals.contains('len')
    assert interp.environment is interp.globals


def test_environment_restored_after_error():
    interp = Interpreter()
    before = interp.environment
    with pytest.raises(VoltError):
        interp.execute(run_program_statements('{ let a = 1; print 1 / 0; }'))
    assert interp.environment is before
    assert interp.call_depth == 0


def test_stray_signal_in_hand_built_tree_is_ignored(capsys):
    tok = Token('break', 'break', 1, 1)
    interp = Interpreter()
    interp.execute([BreakStmt(tok), PrintStmt(tok, Literal(tok, 'after'))])
    assert capsys.readouterr().out == 'after\n'


def test_debug_logging_follows_level(caplog):
    caplog.set_level(logging.DEBUG, logger='volt')
    run_program('fn f(x) { return x; } f(1); let y = 2;', debug_level=1)
    assert 'define function f/1' in caplog.text
    assert 'call <fn f> with 1 args' in caplog.text
    assert 'declare y' not in caplog.text
    caplog.clear()
    run_program('let y = 2;', debug_level=2)
    assert 'declare y: number = 2' in caplog.text
    caplog.clear()
    run_program('fn f() { } f();')
    assert caplog.text == ''


def run_program_statements(source):
    statements, errors = parse_program(tokenize(source))
    assert errors == []
    return statements


def test_deep_expression_is_a_runtime_error():
    interp = Interpreter()
    chain = ' + '.join(['1'] * 30000)
    statements, errors = parse_program(tokenize('{ print ' + chain + '; }'))
    assert errors == []
    with pytest.raises(VoltError) as exc:
        interp.execute(statements)
    assert exc.value.name == 'RecursionError'
    assert exc.value.message == 'Expression nested too deeply'
    assert interp.environment is interp.globals


def test_deep_expression_through_evaluate():
    expr, errors = parse_expression(tokenize(' + '.join(['1'] * 30000)))
    assert errors == []
    with pytest.raises(VoltError) as exc:
        Interpreter().evaluate(expr)
    assert exc.value.name == 'RecursionError'
