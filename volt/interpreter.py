"""Tree-walking interpreter for the Volt language.

The interpreter executes the AST produced by :mod:`volt.parser`. It holds
a global :class:`Environment` and a cursor to the environment that is
currently active; blocks, loops and calls move the cursor and always
restore it on the way out, whatever way that is.

Statement execution returns a control-flow signal (``None`` for normal
completion, or a ``ReturnSignal``/``BreakSignal``/``ContinueSignal``).
Every construct that runs nested statements decides explicitly whether
it consumes a signal or hands it to its own caller. Runtime errors are
the only thing raised, as :class:`VoltError`.
"""

from __future__ import annotations

import logging
import math
import sys
from contextlib import contextmanager
from typing import Any, Callable as Fn, Iterator, List, Optional, Union

from .ast import (
    Expr, Stmt, Literal, Variable, Unary, Binary, Logical, Grouping, Call,
    Assign, CompoundAssign, Update, Ternary, ArrayLit, MapLit, Index,
    IndexAssign, Member, FunctionExpr, ExprStmt, PrintStmt, LetStmt, Block,
    IfStmt, WhileStmt, RunUntilStmt, ForStmt, FnStmt, ReturnStmt, BreakStmt,
    ContinueStmt,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import (
    VoltError, ProgramError, ReturnSignal, BreakSignal, ContinueSignal, BREAK, CONTINUE,
)
from .lexer import Token, tokenize
from .members import get_member
from .parser import parse_program
from .std import populate_standard
from .types import (
    ArrayVal, MapVal, Callable, is_number, is_truthy, values_equal, to_string,
    map_key, type_name,
)

log = logging.getLogger(__name__)

Signal = Union[None, ReturnSignal, BreakSignal, ContinueSignal]

# Each Volt call costs a handful of Python frames.
RECURSION_LIMIT = 20000


class FunctionValue(Callable):
    """Represents a user-defined Volt function together with its closure."""
    def __init__(self, name: Optional[str], params: List[str], body: List[Stmt], closure: Environment):
        self.name = name
        self.params = params
        self.body = body
        self.closure = closure  # environment active where the function was defined

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        if self.name is None:
            return '<fn>'
        return f"<fn {self.name}>"


class Interpreter:
    """Core interpreter that executes Volt ASTs."""
    def __init__(self, debug_level: int = 0, implicit_declare: bool = False,
                 max_depth: int = 1000, stdout: Any = None):
        self.debug_level = debug_level
        self.implicit_declare = implicit_declare
        self.max_depth = max_depth
        self.stdout = stdout
        self.call_depth = 0
        self.globals = Environment()
        self.environment = self.globals
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.define_natives()

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level:
            log.debug(msg)

    # Host interface

    def define(self, name: str, arity: int, fn: Fn[[List[Any]], Any]):
        """Install a native function in the global scope."""
        self.globals.define(name, BuiltinFunction(name, arity, fn))

    def define_natives(self):
        populate_standard(self)

    def reset(self):
        """Drop every user binding and start again from the standard library."""
        self.globals = Environment()
        self.environment = self.globals
        self.call_depth = 0
        self.define_natives()

    def execute(self, statements: List[Stmt]):
        for stmt in statements:
            try:
                signal = self.exec_stmt(stmt)
            except RecursionError:
                raise VoltError('RecursionError', 'Expression nested too deeply') from None
            if signal is not None:
                # the parser rejects stray break/continue/return; a hand-built
                # tree that still has one gets it ignored at top level
                self.debug(f"ignoring stray {signal!r} at top level")

    @contextmanager
    def scope(self, env: Environment) -> Iterator[Environment]:
        previous = self.environment
        self.environment = env
        try:
            yield env
        finally:
            self.environment = previous

    def execute_block(self, statements: List[Stmt], env: Environment) -> Signal:
        with self.scope(env):
            for stmt in statements:
                signal = self.exec_stmt(stmt)
                if signal is not None:
                    return signal
        return None

    # Statements

    def exec_stmt(self, stmt: Stmt) -> Signal:
        if isinstance(stmt, ExprStmt):
            self.eval_expr(stmt.expr)
            return None
        if isinstance(stmt, PrintStmt):
            value = self.eval_expr(stmt.expr)
            print(to_string(value), file=self.stdout)
            return None
        if isinstance(stmt, LetStmt):
            value = self.eval_expr(stmt.initializer) if stmt.initializer is not None else None
            self.environment.define(stmt.name, value)
            self.debug(f"declare {stmt.name}: {type_name(value)} = {to_string(value)}", 2)
            return None
        if isinstance(stmt, Block):
            env = Environment(self.environment)
            self.debug(f"enter block at line {stmt.token.line}, scope depth {env.depth()}", 3)
            return self.execute_block(stmt.statements, env)
        if isinstance(stmt, IfStmt):
            truthy = is_truthy(self.eval_expr(stmt.condition))
            self.debug(f"if condition at line {stmt.token.line} -> {truthy}", 3)
            if truthy:
                return self.exec_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.exec_stmt(stmt.else_branch)
            return None
        if isinstance(stmt, WhileStmt):
            while is_truthy(self.eval_expr(stmt.condition)):
                signal = self.exec_stmt(stmt.body)
                if isinstance(signal, BreakSignal):
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
            return None
        if isinstance(stmt, RunUntilStmt):
            # body first, then stop once the condition holds
            while True:
                signal = self.exec_stmt(stmt.body)
                if isinstance(signal, BreakSignal):
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
                done = is_truthy(self.eval_expr(stmt.condition))
                self.debug(f"until condition at line {stmt.token.line} -> {done}", 3)
                if done:
                    break
            return None
        if isinstance(stmt, ForStmt):
            return self.exec_for(stmt)
        if isinstance(stmt, FnStmt):
            # the closure captures the scope the name is about to be added to,
            # which is what lets the body call itself
            function = FunctionValue(stmt.name, stmt.params, stmt.body, self.environment)
            self.environment.define(stmt.name, function)
            self.debug(f"define function {stmt.name}/{function.arity}")
            return None
        if isinstance(stmt, ReturnStmt):
            value = self.eval_expr(stmt.value) if stmt.value is not None else None
            return ReturnSignal(value)
        if isinstance(stmt, BreakStmt):
            return BREAK
        if isinstance(stmt, ContinueStmt):
            return CONTINUE
        raise NotImplementedError(f"execute: unexpected node type {type(stmt).__name__}")

    def exec_for(self, stmt: ForStmt) -> Signal:
        # the three clauses share one scope that lives only as long as the loop
        with self.scope(Environment(self.environment)):
            if stmt.init is not None:
                self.exec_stmt(stmt.init)
            while stmt.condition is None or is_truthy(self.eval_expr(stmt.condition)):
                signal = self.exec_stmt(stmt.body)
                if isinstance(signal, BreakSignal):
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
                # continue still runs the increment
                if stmt.increment is not None:
                    self.eval_expr(stmt.increment)
        return None

    # Expressions

    def evaluate(self, expr: Expr) -> Any:
        """Evaluate a single expression in the current environment."""
        try:
            return self.eval_expr(expr)
        except RecursionError:
            raise VoltError('RecursionError', 'Expression nested too deeply') from None

    def eval_expr(self, expr: Expr) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Variable):
            return self.environment.get(expr.name, expr.token)
        if isinstance(expr, Grouping):
            return self.eval_expr(expr.expr)
        if isinstance(expr, Unary):
            operand = self.eval_expr(expr.operand)
            if expr.op == '!':
                return not is_truthy(operand)
            if not is_number(operand):
                raise VoltError('TypeError', 'Operand must be a number', expr.token)
            return -operand
        if isinstance(expr, Binary):
            left = self.eval_expr(expr.left)
            right = self.eval_expr(expr.right)
            return self.apply_binary(expr.op, left, right, expr.token)
        if isinstance(expr, Logical):
            left = self.eval_expr(expr.left)
            if expr.op == '||':
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.eval_expr(expr.right)
        if isinstance(expr, Ternary):
            if is_truthy(self.eval_expr(expr.condition)):
                return self.eval_expr(expr.then_expr)
            return self.eval_expr(expr.else_expr)
        if isinstance(expr, Assign):
            value = self.eval_expr(expr.value)
            self.assign_variable(expr.name, value, expr.token)
            return value
        if isinstance(expr, CompoundAssign):
            return self.eval_compound_assign(expr)
        if isinstance(expr, Update):
            current = self.environment.get(expr.name, expr.token)
            if not is_number(current):
                raise VoltError('TypeError', 'Operand must be a number for increment/decrement', expr.token)
            updated = current + 1 if expr.op == '++' else current - 1
            self.environment.assign(expr.name, updated, expr.token)
            return updated if expr.prefix else current
        if isinstance(expr, Call):
            callee = self.eval_expr(expr.callee)
            args = [self.eval_expr(arg) for arg in expr.args]
            return self.call_value(callee, args, expr.token)
        if isinstance(expr, ArrayLit):
            return ArrayVal(self.eval_expr(element) for element in expr.elements)
        if isinstance(expr, MapLit):
            result = MapVal()
            for key_expr, value_expr in expr.entries:
                key = self.key_for(self.eval_expr(key_expr), key_expr.token)
                result.set(key, self.eval_expr(value_expr))
            return result
        if isinstance(expr, Index):
            target = self.eval_expr(expr.target)
            index = self.eval_expr(expr.index)
            return self.index_get(target, index, expr.token)
        if isinstance(expr, IndexAssign):
            target = self.eval_expr(expr.target)
            index = self.eval_expr(expr.index)
            value = self.eval_expr(expr.value)
            self.index_set(target, index, value, expr.token)
            return value
        if isinstance(expr, Member):
            target = self.eval_expr(expr.target)
            return get_member(self, target, expr.name, expr.token)
        if isinstance(expr, FunctionExpr):
            return FunctionValue(None, expr.params, expr.body, self.environment)
        raise NotImplementedError(f"evaluate: unexpected node type {type(expr).__name__}")

    def assign_variable(self, name: str, value: Any, token: Token):
        if self.implicit_declare and not self.environment.contains(name):
            self.environment.define(name, value)
            return
        self.environment.assign(name, value, token)

    def eval_compound_assign(self, expr: CompoundAssign) -> Any:
        op = expr.op[0]
        target = expr.target
        if isinstance(target, Variable):
            current = self.environment.get(target.name, target.token)
            result = self.apply_binary(op, current, self.eval_expr(expr.value), expr.token)
            self.environment.assign(target.name, result, target.token)
            return result
        if isinstance(target, Index):
            # container and index are evaluated once
            container = self.eval_expr(target.target)
            index = self.eval_expr(target.index)
            current = self.index_get(container, index, target.token)
            result = self.apply_binary(op, current, self.eval_expr(expr.value), expr.token)
            self.index_set(container, index, result, target.token)
            return result
        raise NotImplementedError(f"compound assignment to {type(target).__name__}")

    def apply_binary(self, op: str, a: Any, b: Any, token: Token) -> Any:
        if op == '+':
            if is_number(a) and is_number(b):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            if isinstance(a, str) and is_number(b):
                return a + to_string(b)
            if is_number(a) and isinstance(b, str):
                return to_string(a) + b
            raise VoltError('TypeError', 'Operands must be two numbers or two strings', token)
        if op in ('==', '!='):
            equal = values_equal(a, b)
            return equal if op == '==' else not equal
        if not (is_number(a) and is_number(b)):
            raise VoltError('TypeError', 'Operands must be numbers', token)
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0:
                raise VoltError('ZeroDivisionError', 'Division by zero', token)
            return a / b
        if op == '%':
            if b == 0:
                raise VoltError('ZeroDivisionError', 'Modulo by zero', token)
            return math.fmod(a, b)
        if op == '<':
            return a < b
        if op == '<=':
            return a <= b
        if op == '>':
            return a > b
        if op == '>=':
            return a >= b
        raise VoltError('TypeError', f"Unknown operator {op}", token)

    # Calls

    def call_value(self, callee: Any, args: List[Any], token: Optional[Token] = None) -> Any:
        if not isinstance(callee, Callable):
            raise VoltError('TypeError', f"Can only call functions, not {type_name(callee)}", token)
        if len(args) != callee.arity:
            raise VoltError(
                'ArityError',
                f"{callee.name or 'fn'}() expected {callee.arity} arguments but got {len(args)}",
                token,
            )
        return self.call_function(callee, args, token)

    def call_function(self, func: Callable, args: List[Any], token: Optional[Token] = None) -> Any:
        if isinstance(func, BuiltinFunction):
            try:
                return func.fn(args)
            except VoltError as ex:
                if ex.token is None:
                    ex.token = token
                raise
        if isinstance(func, FunctionValue):
            if self.call_depth >= self.max_depth:
                raise VoltError('RecursionError', 'Stack overflow', token)
            # the new frame hangs off the closure, not off the caller
            call_env = Environment(parent=func.closure)
            for name, arg in zip(func.params, args):
                call_env.define(name, arg)
            self.debug(f"call {func!r} with {len(args)} args", 1)
            self.call_depth += 1
            try:
                signal = self.execute_block(func.body, call_env)
            except RecursionError:
                raise VoltError('RecursionError', 'Stack overflow', token) from None
            finally:
                self.call_depth -= 1
            if isinstance(signal, ReturnSignal):
                return signal.value
            return None
        raise VoltError('TypeError', f"{func!r} is not callable", token)

    # Containers

    def key_for(self, value: Any, token: Optional[Token]) -> str:
        key = map_key(value)
        if key is None:
            raise VoltError('TypeError', 'Hash map index must be a string, number, boolean, or nil', token)
        return key

    def array_index(self, array: ArrayVal, index: Any, token: Optional[Token]) -> int:
        if not is_number(index):
            raise VoltError('TypeError', 'Array index must be a number', token)
        if not float(index).is_integer():
            raise VoltError('TypeError', f"Array index must be an integer, got {to_string(index)}", token)
        i = int(index)
        if i < 0 or i >= len(array):
            raise VoltError('IndexError', f"Array index out of bounds: {i}", token)
        return i

    def index_get(self, target: Any, index: Any, token: Optional[Token]) -> Any:
        if isinstance(target, ArrayVal):
            return target.get(self.array_index(target, index, token))
        if isinstance(target, MapVal):
            return target.get(self.key_for(index, token))
        raise VoltError('TypeError', f"Can only index arrays and hash maps, not {type_name(target)}", token)

    def index_set(self, target: Any, index: Any, value: Any, token: Optional[Token]):
        if isinstance(target, ArrayVal):
            target.set(self.array_index(target, index, token), value)
            return
        if isinstance(target, MapVal):
            target.set(self.key_for(index, token), value)
            return
        raise VoltError('TypeError', f"Can only index arrays and hash maps, not {type_name(target)}", token)


def run_program(source: str, **options: Any) -> Interpreter:
    """Convenience function to tokenize, parse and run a Volt program from source."""
    statements, errors = parse_program(tokenize(source))
    if errors:
        raise ProgramError(errors)
    interpreter = Interpreter(**options)
    interpreter.execute(statements)
    return interpreter
