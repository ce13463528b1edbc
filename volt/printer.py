"""Render Volt ASTs back to text.

Two renderings are provided:

``print_ast``
    A Lisp-style S-expression dump used for debugging the parser, e.g.
    ``(+ 1.000000 (group (* 2.000000 x)))``.

``to_source``
    Volt source code that parses back to an equivalent tree. Parentheses
    are only inserted where precedence requires them, and explicit
    groupings are kept, so printing the re-parsed tree gives the same
    text again.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from .ast import (
    Node, Expr, Stmt, Literal, Variable, Unary, Binary, Logical, Grouping, Call,
    Assign, CompoundAssign, Update, Ternary, ArrayLit, MapLit, Index,
    IndexAssign, Member, FunctionExpr, ExprStmt, PrintStmt, LetStmt, Block,
    IfStmt, WhileStmt, RunUntilStmt, ForStmt, FnStmt, ReturnStmt, BreakStmt,
    ContinueStmt,
)
from .types import number_literal

INDENT = '    '

###############################################################################
# S-expression dump
###############################################################################


def print_ast(node: Union[Node, Sequence[Stmt], None]) -> str:
    if node is None:
        return 'nil'
    if isinstance(node, (list, tuple)):
        return '\n'.join(print_ast(stmt) for stmt in node)
    if isinstance(node, Literal):
        value = node.value
        if value is None:
            return 'nil'
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, str):
            return f'"{value}"'
        return f"{value:.6f}"
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Unary):
        return f"({node.op} {print_ast(node.operand)})"
    if isinstance(node, (Binary, Logical)):
        return f"({node.op} {print_ast(node.left)} {print_ast(node.right)})"
    if isinstance(node, Grouping):
        return f"(group {print_ast(node.expr)})"
    if isinstance(node, Call):
        return _sexpr('call', node.callee, *node.args)
    if isinstance(node, Assign):
        return f"(= {node.name} {print_ast(node.value)})"
    if isinstance(node, CompoundAssign):
        return f"({node.op} {print_ast(node.target)} {print_ast(node.value)})"
    if isinstance(node, Update):
        if node.prefix:
            return f"({node.op} {node.name})"
        return f"({node.name} {node.op})"
    if isinstance(node, Ternary):
        return _sexpr('?:', node.condition, node.then_expr, node.else_expr)
    if isinstance(node, ArrayLit):
        return '[' + ', '.join(print_ast(e) for e in node.elements) + ']'
    if isinstance(node, MapLit):
        return '{' + ', '.join(f"{print_ast(k)}: {print_ast(v)}" for k, v in node.entries) + '}'
    if isinstance(node, Index):
        return f"{print_ast(node.target)}[{print_ast(node.index)}]"
    if isinstance(node, IndexAssign):
        return _sexpr('[]=', node.target, node.index, node.value)
    if isinstance(node, Member):
        return f"{print_ast(node.target)}.{node.name}"
    if isinstance(node, FunctionExpr):
        return f"(fn ({' '.join(node.params)}) {_sexpr('block', *node.body)})"

    if isinstance(node, ExprStmt):
        return _sexpr('expr', node.expr)
    if isinstance(node, PrintStmt):
        return _sexpr('print', node.expr)
    if isinstance(node, LetStmt):
        return f"(let {node.name} {print_ast(node.initializer)})"
    if isinstance(node, Block):
        return _sexpr('block', *node.statements)
    if isinstance(node, IfStmt):
        return _sexpr('if', node.condition, node.then_branch, node.else_branch)
    if isinstance(node, WhileStmt):
        return _sexpr('while', node.condition, node.body)
    if isinstance(node, RunUntilStmt):
        return f"(run {print_ast(node.body)} until {print_ast(node.condition)})"
    if isinstance(node, ForStmt):
        return _sexpr('for', node.init, node.condition, node.increment, node.body)
    if isinstance(node, FnStmt):
        return f"(fn {node.name} ({' '.join(node.params)}) {_sexpr('block', *node.body)})"
    if isinstance(node, ReturnStmt):
        return _sexpr('return', node.value)
    if isinstance(node, BreakStmt):
        return '(break)'
    if isinstance(node, ContinueStmt):
        return '(continue)'
    return '?'


def _sexpr(head: str, *parts: Optional[Node]) -> str:
    return '(' + ' '.join([head] + [print_ast(p) for p in parts]) + ')'


###############################################################################
# Source rendering
###############################################################################

# Binding strength per level, loosest first; mirrors the parser's method chain.
ASSIGNMENT, TERNARY, OR, AND, EQUALITY, COMPARISON, TERM, FACTOR, UNARY, POSTFIX, CALL, PRIMARY = range(1, 13)

BINARY_PRECEDENCE = {
    '||': OR, '&&': AND,
    '==': EQUALITY, '!=': EQUALITY,
    '<': COMPARISON, '<=': COMPARISON, '>': COMPARISON, '>=': COMPARISON,
    '+': TERM, '-': TERM,
    '*': FACTOR, '/': FACTOR, '%': FACTOR,
}

STRING_ESCAPES = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r', '\0': '\\0'}


def to_source(node: Union[Node, Sequence[Stmt]]) -> str:
    """Render statements or a single expression as Volt source text."""
    if isinstance(node, (list, tuple)):
        return '\n'.join(_block_lines(node, 0))
    if isinstance(node, Expr):
        return _expr(node)
    return '\n'.join(_stmt(node, 0))


def _precedence(expr: Expr) -> int:
    if isinstance(expr, (Assign, IndexAssign, CompoundAssign)):
        return ASSIGNMENT
    if isinstance(expr, Ternary):
        return TERNARY
    if isinstance(expr, (Binary, Logical)):
        return BINARY_PRECEDENCE[expr.op]
    if isinstance(expr, Unary):
        return UNARY
    if isinstance(expr, Update):
        return UNARY if expr.prefix else POSTFIX
    if isinstance(expr, (Call, Index, Member)):
        return CALL
    if isinstance(expr, Literal) and isinstance(expr.value, float) and expr.value < 0:
        # only reachable from hand-built trees; reads back as unary minus
        return UNARY
    return PRIMARY


def _expr(expr: Expr, min_prec: int = ASSIGNMENT) -> str:
    text = _expr_text(expr)
    if _precedence(expr) < min_prec:
        return f"({text})"
    return text


def _expr_text(expr: Expr) -> str:
    if isinstance(expr, Literal):
        return _literal(expr.value)
    if isinstance(expr, Variable):
        return expr.name
    if isinstance(expr, Grouping):
        return f"({_expr(expr.expr)})"
    if isinstance(expr, Unary):
        operand = _expr(expr.operand, UNARY)
        if expr.op == '-' and operand.startswith('-'):
            # keep "- -x" from lexing as "--x"
            return f"- {operand}"
        return f"{expr.op}{operand}"
    if isinstance(expr, (Binary, Logical)):
        prec = BINARY_PRECEDENCE[expr.op]
        return f"{_expr(expr.left, prec)} {expr.op} {_expr(expr.right, prec + 1)}"
    if isinstance(expr, Ternary):
        return (f"{_expr(expr.condition, OR)} ? {_expr(expr.then_expr)}"
                f" : {_expr(expr.else_expr, TERNARY)}")
    if isinstance(expr, Assign):
        return f"{expr.name} = {_expr(expr.value)}"
    if isinstance(expr, IndexAssign):
        return f"{_expr(expr.target, CALL)}[{_expr(expr.index)}] = {_expr(expr.value)}"
    if isinstance(expr, CompoundAssign):
        return f"{_expr(expr.target, CALL)} {expr.op} {_expr(expr.value)}"
    if isinstance(expr, Update):
        return f"{expr.op}{expr.name}" if expr.prefix else f"{expr.name}{expr.op}"
    if isinstance(expr, Call):
        return f"{_expr(expr.callee, CALL)}({', '.join(_expr(a) for a in expr.args)})"
    if isinstance(expr, Index):
        return f"{_expr(expr.target, CALL)}[{_expr(expr.index)}]"
    if isinstance(expr, Member):
        return f"{_expr(expr.target, CALL)}.{expr.name}"
    if isinstance(expr, ArrayLit):
        return '[' + ', '.join(_expr(e) for e in expr.elements) + ']'
    if isinstance(expr, MapLit):
        return '{' + ', '.join(f"{_expr(k)}: {_expr(v)}" for k, v in expr.entries) + '}'
    if isinstance(expr, FunctionExpr):
        body = ' '.join(line.strip() for line in _block_lines(expr.body, 0))
        params = ', '.join(expr.params)
        return f"fn ({params}) {{ {body} }}" if body else f"fn ({params}) {{}}"
    raise NotImplementedError(f"to_source: unexpected node type {type(expr).__name__}")


def _literal(value) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return '"' + ''.join(STRING_ESCAPES.get(c, c) for c in value) + '"'
    return number_literal(float(value))


def _expr_statement_text(expr: Expr) -> str:
    text = _expr(expr)
    # a leading '{' would be read back as a block
    if text.startswith('{'):
        text = f"({text})"
    return text + ';'


def _block_lines(statements: Sequence[Stmt], level: int) -> List[str]:
    lines: List[str] = []
    for stmt in statements:
        lines.extend(_stmt(stmt, level))
    return lines


def _clause(header: str, body: Stmt, level: int) -> List[str]:
    pad = INDENT * level
    if isinstance(body, Block):
        return [f"{header} {{"] + _block_lines(body.statements, level + 1) + [f"{pad}}}"]
    return [header] + _stmt(body, level + 1)


def _dangles(stmt: Stmt) -> bool:
    """True if an ``else`` printed after ``stmt`` would attach inside it."""
    if isinstance(stmt, IfStmt):
        return stmt.else_branch is None or _dangles(stmt.else_branch)
    if isinstance(stmt, (WhileStmt, ForStmt)):
        return _dangles(stmt.body)
    return False


def _stmt(stmt: Stmt, level: int) -> List[str]:
    pad = INDENT * level
    if isinstance(stmt, ExprStmt):
        return [pad + _expr_statement_text(stmt.expr)]
    if isinstance(stmt, PrintStmt):
        return [f"{pad}print {_expr(stmt.expr)};"]
    if isinstance(stmt, LetStmt):
        if stmt.initializer is None:
            return [f"{pad}let {stmt.name};"]
        return [f"{pad}let {stmt.name} = {_expr(stmt.initializer)};"]
    if isinstance(stmt, Block):
        return [pad + '{'] + _block_lines(stmt.statements, level + 1) + [pad + '}']
    if isinstance(stmt, IfStmt):
        then_branch = stmt.then_branch
        if stmt.else_branch is not None and _dangles(then_branch):
            then_branch = Block(then_branch.token, [then_branch])
        lines = _clause(f"{pad}if ({_expr(stmt.condition)})", then_branch, level)
        if stmt.else_branch is None:
            return lines
        if lines[-1] == pad + '}':
            join = lines.pop() + ' else'
        else:
            join = pad + 'else'
        if isinstance(stmt.else_branch, IfStmt):
            nested = _stmt(stmt.else_branch, level)
            return lines + [f"{join} {nested[0].lstrip()}"] + nested[1:]
        return lines + _clause(join, stmt.else_branch, level)
    if isinstance(stmt, WhileStmt):
        return _clause(f"{pad}while ({_expr(stmt.condition)})", stmt.body, level)
    if isinstance(stmt, RunUntilStmt):
        lines = _clause(f"{pad}run", stmt.body, level)
        until = f"until ({_expr(stmt.condition)});"
        if lines[-1] == pad + '}':
            lines[-1] += ' ' + until
        else:
            lines.append(pad + until)
        return lines
    if isinstance(stmt, ForStmt):
        if stmt.init is None:
            init = ';'
        else:
            init = _stmt(stmt.init, 0)[0]
        condition = f" {_expr(stmt.condition)}" if stmt.condition is not None else ''
        increment = f" {_expr(stmt.increment)}" if stmt.increment is not None else ''
        return _clause(f"{pad}for ({init}{condition};{increment})", stmt.body, level)
    if isinstance(stmt, FnStmt):
        header = f"{pad}fn {stmt.name}({', '.join(stmt.params)})"
        return _clause(header, Block(stmt.token, stmt.body), level)
    if isinstance(stmt, ReturnStmt):
        if stmt.value is None:
            return [pad + 'return;']
        return [f"{pad}return {_expr(stmt.value)};"]
    if isinstance(stmt, BreakStmt):
        return [pad + 'break;']
    if isinstance(stmt, ContinueStmt):
        return [pad + 'continue;']
    raise NotImplementedError(f"to_source: unexpected node type {type(stmt).__name__}")
