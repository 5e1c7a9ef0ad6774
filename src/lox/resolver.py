"""Static resolution pass: computes binding distances and checks context rules."""

from __future__ import annotations

from enum import Enum, auto

from lox.ast import (
    Assign,
    Binary,
    Block,
    Call,
    Class,
    Expr,
    ExprStmt,
    Function,
    FunctionExpr,
    Get,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Set,
    Stmt,
    Super,
    This,
    Unary,
    Var,
    Variable,
    While,
)
from lox.errors import ErrorReporter
from lox.tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Walk the AST once, recording how many scopes separate each use from its declaration.

    The scope stack mirrors the interpreter's environment chain exactly: one
    scope per block, per function activation, per bound method (``this``)
    and per subclass body (``super``). Names never found on the stack are
    globals and are left out of the table. Diagnostics accumulate on the
    reporter; the AST is not modified.
    """

    def __init__(self, reporter: ErrorReporter) -> None:
        self._reporter = reporter
        self._scopes: list[dict[str, bool]] = []
        self._locals: dict[Expr, int] = {}
        self._function = FunctionType.NONE
        self._class = ClassType.NONE

    def resolve(self, statements: list[Stmt] | tuple[Stmt, ...]) -> dict[Expr, int]:
        """Resolve a program and return its binding table."""
        self._scopes = []
        self._locals = {}
        self._function = FunctionType.NONE
        self._class = ClassType.NONE
        self._resolve_statements(statements)
        return self._locals

    # ------------------------------------------------------------------
    # Scope bookkeeping
    # ------------------------------------------------------------------

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: Token) -> None:
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._reporter.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self._scopes:
            return
        self._scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr: Expr, name: Token) -> None:
        for depth, scope in enumerate(reversed(self._scopes)):
            if name.lexeme in scope:
                self._locals[expr] = depth
                return

    def _resolve_function(
        self,
        params: tuple[Token, ...],
        body: tuple[Stmt, ...],
        kind: FunctionType,
    ) -> None:
        enclosing = self._function
        self._function = kind
        self._begin_scope()
        for param in params:
            self._declare(param)
            self._define(param)
        self._resolve_statements(body)
        self._end_scope()
        self._function = enclosing

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _resolve_statements(self, statements: list[Stmt] | tuple[Stmt, ...]) -> None:
        for stmt in statements:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            self._begin_scope()
            self._resolve_statements(stmt.statements)
            self._end_scope()
        elif isinstance(stmt, Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, Function):
            # Defined before the body so the function can recurse
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt.params, stmt.body, FunctionType.FUNCTION)
        elif isinstance(stmt, Class):
            self._resolve_class(stmt)
        elif isinstance(stmt, ExprStmt):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, Print):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, Return):
            self._resolve_return(stmt)
        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _resolve_return(self, stmt: Return) -> None:
        if self._function == FunctionType.NONE:
            self._reporter.error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self._function == FunctionType.INITIALIZER:
                self._reporter.error(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve_expr(stmt.value)

    def _resolve_class(self, stmt: Class) -> None:
        enclosing = self._class
        self._class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._reporter.error(stmt.superclass.name, "A class can't inherit from itself.")
            self._class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)
            self._begin_scope()
            self._scopes[-1]["super"] = True

        self._begin_scope()
        self._scopes[-1]["this"] = True
        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            self._resolve_function(method.params, method.body, kind)
        self._end_scope()

        if stmt.superclass is not None:
            self._end_scope()

        self._class = enclosing

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            if self._scopes and self._scopes[-1].get(expr.name.lexeme) is False:
                self._reporter.error(
                    expr.name, "Can't read local variable in its own initializer."
                )
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, (Binary, Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
        elif isinstance(expr, Get):
            self._resolve_expr(expr.obj)
        elif isinstance(expr, Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.obj)
        elif isinstance(expr, This):
            if self._class == ClassType.NONE:
                self._reporter.error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, Super):
            if self._class == ClassType.NONE:
                self._reporter.error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self._class != ClassType.SUBCLASS:
                self._reporter.error(
                    expr.keyword, "Can't use 'super' in a class with no superclass."
                )
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, FunctionExpr):
            self._resolve_function(expr.params, expr.body, FunctionType.FUNCTION)
        elif isinstance(expr, Literal):
            pass
        else:
            raise TypeError(f"unknown expression node: {type(expr).__name__}")


def resolve(
    statements: list[Stmt] | tuple[Stmt, ...], reporter: ErrorReporter | None = None
) -> dict[Expr, int]:
    """Convenience function: resolve statements and return the binding table."""
    if reporter is None:
        reporter = ErrorReporter()
    return Resolver(reporter).resolve(statements)
