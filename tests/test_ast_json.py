import json

from volt.ast_json import ast_from_obj, ast_to_obj
from volt.interpreter import Interpreter
from volt.lexer import tokenize
from volt.parser import parse_program
from volt.printer import to_source

SOURCE = '''
let m = {"k": [1, 2.5]};
m["k"] += [3] == nil ? 0 : 1;
fn f(x) { return fn () { return x * 2; }; }
for (let i = 0; i < 2; i++) { if (i == 1) continue; print f(i)(); }
run { m["k"].push(nil); } until (m["k"].length > 2);
print m;
'''


def parse(source):
    statements, errors = parse_program(tokenize(source))
    assert errors == []
    return statements


def test_json_round_trip_preserves_tree():
    statements = parse(SOURCE)
    data = json.loads(json.dumps(ast_to_obj(statements)))
    restored = ast_from_obj(data)
    assert restored == statements
    assert to_source(restored) == to_source(statements)


def test_nodes_are_tagged_with_their_type():
    data = ast_to_obj(parse('print 1;'))
    assert data[0]['type'] == 'PrintStmt'
    assert data[0]['expr'] == {
        'type': 'Literal',
        'token': {'__token__': {'kind': 'NUMBER', 'lexeme': '1', 'line': 1, 'column': 7}},
        'value': 1.0,
    }


def test_restored_tree_executes(capsys):
    data = json.loads(json.dumps(ast_to_obj(parse('let a = [1, 2]; print a.length + 0.5;'))))
    Interpreter().execute(ast_from_obj(data))
    assert capsys.readouterr().out == '2.5\n'
