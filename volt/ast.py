"""Abstract Syntax Tree (AST) definitions for the Volt language.

Two closed families of nodes are defined here: expressions (``Expr``)
and statements (``Stmt``). Every node keeps a representative token so
that runtime errors can point back at the source. Nodes are frozen; the
interpreter never mutates the tree it walks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .lexer import Token


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    token: Token


@dataclass(frozen=True)
class Expr(Node):
    pass


@dataclass(frozen=True)
class Stmt(Node):
    pass


###############################################################################
# Expressions
###############################################################################


@dataclass(frozen=True)
class Literal(Expr):
    value: Any  # float, str, bool or None


@dataclass(frozen=True)
class Variable(Expr):
    name: str


@dataclass(frozen=True)
class Unary(Expr):
    op: str
    operand: Expr


@dataclass(frozen=True)
class Binary(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    op: str  # '&&' or '||'
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    expr: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    args: List[Expr]


@dataclass(frozen=True)
class Assign(Expr):
    name: str
    value: Expr


@dataclass(frozen=True)
class CompoundAssign(Expr):
    target: Expr  # Variable or Index
    op: str  # '+=', '-=', '*=', '/='
    value: Expr


@dataclass(frozen=True)
class Update(Expr):
    name: str
    op: str  # '++' or '--'
    prefix: bool


@dataclass(frozen=True)
class Ternary(Expr):
    condition: Expr
    then_expr: Expr
    else_expr: Expr


@dataclass(frozen=True)
class ArrayLit(Expr):
    elements: List[Expr]


@dataclass(frozen=True)
class MapLit(Expr):
    entries: List[Tuple[Expr, Expr]]


@dataclass(frozen=True)
class Index(Expr):
    target: Expr
    index: Expr


@dataclass(frozen=True)
class IndexAssign(Expr):
    target: Expr
    index: Expr
    value: Expr


@dataclass(frozen=True)
class Member(Expr):
    target: Expr
    name: str


@dataclass(frozen=True)
class FunctionExpr(Expr):
    params: List[str]
    body: List[Stmt]


###############################################################################
# Statements
###############################################################################


@dataclass(frozen=True)
class ExprStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class PrintStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class LetStmt(Stmt):
    name: str
    initializer: Optional[Expr]


@dataclass(frozen=True)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(frozen=True)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(frozen=True)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class RunUntilStmt(Stmt):
    body: Stmt
    condition: Expr


@dataclass(frozen=True)
class ForStmt(Stmt):
    init: Optional[Stmt]  # LetStmt or ExprStmt
    condition: Optional[Expr]
    increment: Optional[Expr]
    body: Stmt


@dataclass(frozen=True)
class FnStmt(Stmt):
    name: str
    params: List[str]
    body: List[Stmt]


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    value: Optional[Expr]


@dataclass(frozen=True)
class BreakStmt(Stmt):
    pass


@dataclass(frozen=True)
class ContinueStmt(Stmt):
    pass
