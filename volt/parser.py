"""Recursive-descent parser for the Volt language.

The parser consumes the token list produced by :func:`volt.lexer.tokenize`
and builds the AST defined in :mod:`volt.ast`. Expressions are parsed by
precedence climbing, one method per level (lowest first)::

    assignment -> ternary -> or -> and -> equality -> comparison
               -> term -> factor -> unary -> postfix -> call -> primary

Syntax errors do not abort the parse. Each one is recorded as a
:class:`ParseDiagnostic`; the statement being parsed is abandoned and the
parser skips ahead to the next statement boundary, so a single pass can
report several independent mistakes.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Expr, Stmt, Literal, Variable, Unary, Binary, Logical, Grouping, Call,
    Assign, CompoundAssign, Update, Ternary, ArrayLit, MapLit, Index,
    IndexAssign, Member, FunctionExpr, ExprStmt, PrintStmt, LetStmt, Block,
    IfStmt, WhileStmt, RunUntilStmt, ForStmt, FnStmt, ReturnStmt, BreakStmt,
    ContinueStmt,
)
from .errors import ParseDiagnostic, ParseError
from .lexer import Token

MAX_ARGS = 255
TOO_DEEP = 'Expression nested too deeply'

# Tokens that can begin a statement; synchronisation stops in front of them.
STATEMENT_START = {
    'let', 'fn', 'if', 'while', 'for', 'run', 'return', 'print', 'break', 'continue',
}


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != 'EOF':
            last = tokens[-1] if tokens else None
            eof = Token('EOF', '', last.line if last else 1, last.column if last else 1)
            tokens = list(tokens) + [eof]
        self.tokens = tokens
        self.pos = 0
        self.errors: List[ParseDiagnostic] = []
        self.loop_depth = 0
        self.function_depth = 0

    @property
    def had_error(self) -> bool:
        return bool(self.errors)

    # Entry points

    def parse_program(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            try:
                statements.append(self.statement())
            except ParseError:
                self.synchronize()
            except RecursionError:
                self.error(TOO_DEEP)
                self.synchronize()
        return statements

    def parse_expression(self) -> Optional[Expr]:
        try:
            expr = self.expression()
            if not self.is_at_end():
                raise self.error('Expected end of expression')
        except ParseError:
            return None
        except RecursionError:
            self.error(TOO_DEEP)
            return None
        return expr if not self.errors else None

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == 'EOF'

    def advance(self) -> Token:
        if not self.is_at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: str) -> bool:
        return self.peek().type in types

    def check_next(self, token_type: str) -> bool:
        if self.pos + 1 >= len(self.tokens):
            return False
        return self.tokens[self.pos + 1].type == token_type

    def match(self, *types: str) -> bool:
        if self.is_at_end() or not self.check(*types):
            return False
        self.advance()
        return True

    def consume(self, token_type: str, message: str) -> Token:
        if self.check(token_type):
            return self.advance()
        raise self.error(message)

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        """Record a diagnostic and return an exception the caller may raise."""
        tok = token or self.peek()
        if tok.type == 'ERROR':
            # the lexer put its own message in the lexeme
            diagnostic = ParseDiagnostic(tok.line, tok.column, '', tok.lexeme)
        else:
            diagnostic = ParseDiagnostic(tok.line, tok.column, tok.lexeme, message, tok.type == 'EOF')
        self.errors.append(diagnostic)
        return ParseError(str(diagnostic))

    def synchronize(self):
        self.advance()
        while not self.is_at_end():
            if self.previous().type == ';':
                return
            if self.peek().type in STATEMENT_START:
                return
            self.advance()

    # Statements

    def statement(self) -> Stmt:
        if self.match('print'):
            return self.print_statement()
        if self.match('let'):
            return self.let_statement()
        if self.check('fn') and self.check_next('IDENT'):
            self.advance()
            return self.fn_statement()
        if self.match('return'):
            return self.return_statement()
        if self.match('break'):
            return self.break_statement()
        if self.match('continue'):
            return self.continue_statement()
        if self.match('if'):
            return self.if_statement()
        if self.match('while'):
            return self.while_statement()
        if self.match('run'):
            return self.run_until_statement()
        if self.match('for'):
            return self.for_statement()
        if self.match('{'):
            return Block(self.previous(), self.block())
        return self.expression_statement()

    def print_statement(self) -> PrintStmt:
        keyword = self.previous()
        expr = self.expression()
        self.consume(';', "Expected ';' after value")
        return PrintStmt(keyword, expr)

    def let_statement(self) -> LetStmt:
        name = self.consume('IDENT', 'Expected variable name')
        initializer = None
        if self.match('='):
            initializer = self.expression()
        self.consume(';', "Expected ';' after variable declaration")
        return LetStmt(name, name.lexeme, initializer)

    def fn_statement(self) -> FnStmt:
        name = self.consume('IDENT', 'Expected function name')
        params, body = self.function_rest('function name')
        return FnStmt(name, name.lexeme, params, body)

    def function_rest(self, after: str) -> Tuple[List[str], List[Stmt]]:
        self.consume('(', f"Expected '(' after {after}")
        params: List[str] = []
        if not self.check(')'):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(f"Can't have more than {MAX_ARGS} parameters")
                param = self.consume('IDENT', 'Expected parameter name')
                params.append(param.lexeme)
                if not self.match(','):
                    break
        self.consume(')', "Expected ')' after parameters")
        self.consume('{', "Expected '{' before function body")
        # a function body is a fresh loop context: break cannot reach an outer loop
        saved_loops = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        try:
            body = self.block('function body')
        finally:
            self.loop_depth = saved_loops
            self.function_depth -= 1
        return params, body

    def block(self, what: str = 'block') -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check('}') and not self.is_at_end():
            statements.append(self.statement())
        self.consume('}', f"Expected '}}' after {what}")
        return statements

    def return_statement(self) -> ReturnStmt:
        keyword = self.previous()
        if self.function_depth == 0:
            self.error("Can't return from top-level code", keyword)
        value = None
        if not self.check(';'):
            value = self.expression()
        self.consume(';', "Expected ';' after return value")
        return ReturnStmt(keyword, value)

    def break_statement(self) -> BreakStmt:
        keyword = self.previous()
        if self.loop_depth == 0:
            self.error("'break' used outside of a loop", keyword)
        self.consume(';', "Expected ';' after 'break'")
        return BreakStmt(keyword)

    def continue_statement(self) -> ContinueStmt:
        keyword = self.previous()
        if self.loop_depth == 0:
            self.error("'continue' used outside of a loop", keyword)
        self.consume(';', "Expected ';' after 'continue'")
        return ContinueStmt(keyword)

    def if_statement(self) -> IfStmt:
        keyword = self.previous()
        self.consume('(', "Expected '(' after 'if'")
        condition = self.expression()
        self.consume(')', "Expected ')' after if condition")
        then_branch = self.statement()
        else_branch = None
        if self.match('else'):
            else_branch = self.statement()
        return IfStmt(keyword, condition, then_branch, else_branch)

    def loop_body(self) -> Stmt:
        self.loop_depth += 1
        try:
            return self.statement()
        finally:
            self.loop_depth -= 1

    def while_statement(self) -> WhileStmt:
        keyword = self.previous()
        self.consume('(', "Expected '(' after 'while'")
        condition = self.expression()
        self.consume(')', "Expected ')' after condition")
        return WhileStmt(keyword, condition, self.loop_body())

    def run_until_statement(self) -> RunUntilStmt:
        keyword = self.previous()
        body = self.loop_body()
        self.consume('until', "Expected 'until' after run body")
        self.consume('(', "Expected '(' after 'until'")
        condition = self.expression()
        self.consume(')', "Expected ')' after condition")
        self.match(';')
        return RunUntilStmt(keyword, body, condition)

    def for_statement(self) -> ForStmt:
        keyword = self.previous()
        self.consume('(', "Expected '(' after 'for'")
        init: Optional[Stmt]
        if self.match(';'):
            init = None
        elif self.match('let'):
            init = self.let_statement()
        else:
            init = self.expression_statement()
        condition = None
        if not self.check(';'):
            condition = self.expression()
        self.consume(';', "Expected ';' after loop condition")
        increment = None
        if not self.check(')'):
            increment = self.expression()
        self.consume(')', "Expected ')' after for clauses")
        return ForStmt(keyword, init, condition, increment, self.loop_body())

    def expression_statement(self) -> ExprStmt:
        expr = self.expression()
        self.consume(';', "Expected ';' after expression")
        return ExprStmt(expr.token, expr)

    # Expressions

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.ternary()

        if self.match('='):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.token, expr.name, value)
            if isinstance(expr, Index):
                return IndexAssign(expr.token, expr.target, expr.index, value)
            self.error('Invalid assignment target', equals)
            return expr

        if self.match('+=', '-=', '*=', '/='):
            op = self.previous()
            value = self.assignment()
            if isinstance(expr, (Variable, Index)):
                return CompoundAssign(op, expr, op.lexeme, value)
            self.error('Invalid compound assignment target', op)
            return expr

        return expr

    def ternary(self) -> Expr:
        expr = self.logic_or()
        if self.match('?'):
            question = self.previous()
            then_expr = self.expression()
            self.consume(':', "Expected ':' in ternary expression")
            else_expr = self.ternary()
            return Ternary(question, expr, then_expr, else_expr)
        return expr

    def logic_or(self) -> Expr:
        expr = self.logic_and()
        while self.match('||'):
            op = self.previous()
            expr = Logical(op, op.lexeme, expr, self.logic_and())
        return expr

    def logic_and(self) -> Expr:
        expr = self.equality()
        while self.match('&&'):
            op = self.previous()
            expr = Logical(op, op.lexeme, expr, self.equality())
        return expr

    def equality(self) -> Expr:
        expr = self.comparison()
        while self.match('==', '!='):
            op = self.previous()
            expr = Binary(op, op.lexeme, expr, self.comparison())
        return expr

    def comparison(self) -> Expr:
        expr = self.term()
        while self.match('<', '<=', '>', '>='):
            op = self.previous()
            expr = Binary(op, op.lexeme, expr, self.term())
        return expr

    def term(self) -> Expr:
        expr = self.factor()
        while self.match('+', '-'):
            op = self.previous()
            expr = Binary(op, op.lexeme, expr, self.factor())
        return expr

    def factor(self) -> Expr:
        expr = self.unary()
        while self.match('*', '/', '%'):
            op = self.previous()
            expr = Binary(op, op.lexeme, expr, self.unary())
        return expr

    def unary(self) -> Expr:
        if self.match('!', '-'):
            op = self.previous()
            return Unary(op, op.lexeme, self.unary())
        if self.match('++', '--'):
            op = self.previous()
            if self.match('IDENT'):
                name = self.previous()
                return Update(name, name.lexeme, op.lexeme, True)
            raise self.error(f"Expected identifier after '{op.lexeme}'")
        return self.postfix()

    def postfix(self) -> Expr:
        expr = self.call()
        if self.match('++', '--'):
            op = self.previous()
            if isinstance(expr, Variable):
                return Update(expr.token, expr.name, op.lexeme, False)
            self.error('Invalid postfix operand', op)
        return expr

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match('('):
                expr = self.finish_call(expr)
            elif self.match('['):
                bracket = self.previous()
                index = self.expression()
                self.consume(']', "Expected ']' after index")
                expr = Index(bracket, expr, index)
            elif self.match('.'):
                name = self.consume('IDENT', "Expected property name after '.'")
                expr = Member(name, expr, name.lexeme)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        paren = self.previous()
        args: List[Expr] = []
        if not self.check(')'):
            while True:
                if len(args) >= MAX_ARGS:
                    self.error(f"Can't have more than {MAX_ARGS} arguments")
                args.append(self.expression())
                if not self.match(','):
                    break
        self.consume(')', "Expected ')' after arguments")
        return Call(paren, callee, args)

    def primary(self) -> Expr:
        if self.match('NUMBER'):
            tok = self.previous()
            return Literal(tok, float(tok.lexeme))
        if self.match('STRING'):
            tok = self.previous()
            return Literal(tok, tok.literal)
        if self.match('true'):
            return Literal(self.previous(), True)
        if self.match('false'):
            return Literal(self.previous(), False)
        if self.match('nil'):
            return Literal(self.previous(), None)
        if self.match('IDENT'):
            tok = self.previous()
            return Variable(tok, tok.lexeme)
        if self.match('('):
            paren = self.previous()
            expr = self.expression()
            self.consume(')', "Expected ')' after expression")
            return Grouping(paren, expr)
        if self.match('['):
            return self.array_literal()
        if self.match('{'):
            return self.map_literal()
        if self.match('fn'):
            keyword = self.previous()
            params, body = self.function_rest("'fn'")
            return FunctionExpr(keyword, params, body)
        if self.check('ERROR'):
            tok = self.advance()
            raise self.error(tok.lexeme, tok)
        raise self.error('Expected expression')

    def array_literal(self) -> ArrayLit:
        bracket = self.previous()
        elements: List[Expr] = []
        while not self.check(']'):
            elements.append(self.expression())
            if not self.match(','):
                break
        self.consume(']', "Expected ']' after array elements")
        return ArrayLit(bracket, elements)

    def map_literal(self) -> MapLit:
        brace = self.previous()
        entries: List[Tuple[Expr, Expr]] = []
        while not self.check('}'):
            key = self.expression()
            self.consume(':', "Expected ':' after hash map key")
            entries.append((key, self.expression()))
            if not self.match(','):
                break
        self.consume('}', "Expected '}' after hash map entries")
        return MapLit(brace, entries)


def parse_program(tokens: List[Token]) -> Tuple[List[Stmt], List[ParseDiagnostic]]:
    """Parse a whole program. The AST is only trustworthy if no errors came back."""
    parser = Parser(tokens)
    statements = parser.parse_program()
    return statements, parser.errors


def parse_expression(tokens: List[Token]) -> Tuple[Optional[Expr], List[ParseDiagnostic]]:
    """Parse a single expression, as typed at the REPL."""
    parser = Parser(tokens)
    expr = parser.parse_expression()
    return expr, parser.errors
