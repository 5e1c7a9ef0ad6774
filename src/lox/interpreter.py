"""Tree-walking evaluator for resolved Lox programs."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

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
from lox.environment import Environment
from lox.errors import ErrorReporter, LoxRuntimeError
from lox.runtime import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    Returned,
    Value,
    is_equal,
    is_truthy,
    native_functions,
    stringify,
)
from lox.tokens import Token, TokenType


DEFAULT_MAX_CALL_DEPTH = 1000

# Upper bound on Python frames used by one Lox call, nested statements included
FRAMES_PER_CALL = 24


@dataclass(frozen=True, slots=True)
class InterpreterOptions:
    """Tunable interpreter limits."""

    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH


class Interpreter:
    """Execute statements against a chain of environments.

    The active environment is passed explicitly through every ``_execute``
    and ``_evaluate`` call, so no interpreter state has to be restored when
    a block exits or an error unwinds.
    """

    def __init__(
        self,
        reporter: ErrorReporter | None = None,
        stdout: TextIO | None = None,
        options: InterpreterOptions | None = None,
    ) -> None:
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.options = options if options is not None else InterpreterOptions()
        self._stdout = stdout
        self.globals = Environment()
        self._locals: dict[Expr, int] = {}
        self._call_depth = 0
        for name, native in native_functions().items():
            self.globals.define(name, native)

    def add_bindings(self, bindings: Mapping[Expr, int]) -> None:
        """Record binding distances computed by the resolver."""
        self._locals.update(bindings)

    def interpret(self, statements: list[Stmt] | tuple[Stmt, ...]) -> None:
        """Run statements in order, stopping at the first runtime error.

        Every Lox call nests several Python frames, so the host recursion
        limit is raised to fit ``max_call_depth`` while the program runs.
        """
        previous_limit = sys.getrecursionlimit()
        needed = self.options.max_call_depth * FRAMES_PER_CALL + previous_limit
        sys.setrecursionlimit(max(previous_limit, needed))
        try:
            for stmt in statements:
                self._execute(stmt, self.globals)
        except LoxRuntimeError as exc:
            self.reporter.runtime_error(exc)
        finally:
            sys.setrecursionlimit(previous_limit)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute_block(
        self, statements: tuple[Stmt, ...] | list[Stmt], environment: Environment
    ) -> Returned | None:
        """Execute statements in environment; stop early on ``return``."""
        for stmt in statements:
            completion = self._execute(stmt, environment)
            if completion is not None:
                return completion
        return None

    def _execute(self, stmt: Stmt, env: Environment) -> Returned | None:
        if isinstance(stmt, ExprStmt):
            self._evaluate(stmt.expression, env)
            return None
        if isinstance(stmt, Print):
            value = self._evaluate(stmt.expression, env)
            print(stringify(value), file=self._stdout)
            return None
        if isinstance(stmt, Var):
            value = None
            if stmt.initializer is not None:
                value = self._evaluate(stmt.initializer, env)
            env.define(stmt.name.lexeme, value)
            return None
        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(env))
        if isinstance(stmt, If):
            if is_truthy(self._evaluate(stmt.condition, env)):
                return self._execute(stmt.then_branch, env)
            if stmt.else_branch is not None:
                return self._execute(stmt.else_branch, env)
            return None
        if isinstance(stmt, While):
            while is_truthy(self._evaluate(stmt.condition, env)):
                completion = self._execute(stmt.body, env)
                if completion is not None:
                    return completion
            return None
        if isinstance(stmt, Function):
            env.define(stmt.name.lexeme, LoxFunction(stmt, env))
            return None
        if isinstance(stmt, Return):
            value = None
            if stmt.value is not None:
                value = self._evaluate(stmt.value, env)
            return Returned(value)
        if isinstance(stmt, Class):
            self._execute_class(stmt, env)
            return None
        raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _execute_class(self, stmt: Class, env: Environment) -> None:
        superclass: LoxClass | None = None
        if stmt.superclass is not None:
            candidate = self._evaluate(stmt.superclass, env)
            if not isinstance(candidate, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")
            superclass = candidate

        env.define(stmt.name.lexeme, None)

        method_env = env
        if superclass is not None:
            method_env = Environment(env)
            method_env.define("super", superclass)

        methods: dict[str, LoxFunction] = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(
                method, method_env, is_initializer=method.name.lexeme == "init"
            )

        env.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _evaluate(self, expr: Expr, env: Environment) -> Value:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self._evaluate(expr.expression, env)
        if isinstance(expr, Variable):
            return self._look_up(expr.name, expr, env)
        if isinstance(expr, Assign):
            value = self._evaluate(expr.value, env)
            distance = self._locals.get(expr)
            if distance is not None:
                env.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, Logical):
            left = self._evaluate(expr.left, env)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self._evaluate(expr.right, env)
        if isinstance(expr, Unary):
            return self._evaluate_unary(expr, env)
        if isinstance(expr, Binary):
            return self._evaluate_binary(expr, env)
        if isinstance(expr, Call):
            return self._evaluate_call(expr, env)
        if isinstance(expr, Get):
            obj = self._evaluate(expr.obj, env)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")
        if isinstance(expr, Set):
            obj = self._evaluate(expr.obj, env)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            if expr.operator is not None:
                current = obj.get(expr.name)
                value = _apply_binary(expr.operator, current, self._evaluate(expr.value, env))
            else:
                value = self._evaluate(expr.value, env)
            obj.set(expr.name, value)
            return value
        if isinstance(expr, This):
            return self._look_up(expr.keyword, expr, env)
        if isinstance(expr, Super):
            return self._evaluate_super(expr, env)
        if isinstance(expr, FunctionExpr):
            return LoxFunction(expr, env)
        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _look_up(self, name: Token, expr: Expr, env: Environment) -> Value:
        distance = self._locals.get(expr)
        if distance is not None:
            return env.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _evaluate_unary(self, expr: Unary, env: Environment) -> Value:
        right = self._evaluate(expr.right, env)
        if expr.operator.type == TokenType.BANG:
            return not is_truthy(right)
        # MINUS
        _check_number_operand(expr.operator, right)
        return -right

    def _evaluate_binary(self, expr: Binary, env: Environment) -> Value:
        left = self._evaluate(expr.left, env)
        right = self._evaluate(expr.right, env)
        return _apply_binary(expr.operator, left, right)

    def _evaluate_call(self, expr: Call, env: Environment) -> Value:
        callee = self._evaluate(expr.callee, env)
        arguments = [self._evaluate(argument, env) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        arity = callee.arity()
        if len(arguments) != arity:
            raise LoxRuntimeError(
                expr.paren, f"Expected {arity} arguments but got {len(arguments)}."
            )

        if self._call_depth >= self.options.max_call_depth:
            raise LoxRuntimeError(expr.paren, "Stack overflow.")

        self._call_depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None
        finally:
            self._call_depth -= 1

    def _evaluate_super(self, expr: Super, env: Environment) -> Value:
        distance = self._locals[expr]
        superclass = env.get_at(distance, "super")
        # The bound method's `this` scope sits directly inside the `super` scope
        instance = env.get_at(distance - 1, "this")
        assert isinstance(superclass, LoxClass) and isinstance(instance, LoxInstance)

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)


def _apply_binary(op: Token, left: Value, right: Value) -> Value:
    tt = op.type

    if tt == TokenType.EQUAL_EQUAL:
        return is_equal(left, right)
    if tt == TokenType.BANG_EQUAL:
        return not is_equal(left, right)

    if tt == TokenType.PLUS:
        if isinstance(left, float) and isinstance(right, float):
            return left + right
        if isinstance(left, str) or isinstance(right, str):
            return stringify(left) + stringify(right)
        raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

    _check_number_operands(op, left, right)
    if tt == TokenType.MINUS:
        return left - right
    if tt == TokenType.STAR:
        return left * right
    if tt == TokenType.SLASH:
        if right == 0.0:
            raise LoxRuntimeError(op, "Cannot divide by 0.")
        return left / right
    if tt == TokenType.GREATER:
        return left > right
    if tt == TokenType.GREATER_EQUAL:
        return left >= right
    if tt == TokenType.LESS:
        return left < right
    if tt == TokenType.LESS_EQUAL:
        return left <= right
    raise TypeError(f"unknown binary operator: {op.lexeme}")


def _check_number_operand(operator: Token, operand: Value) -> None:
    if isinstance(operand, float):
        return
    raise LoxRuntimeError(operator, "Operand must be a number.")


def _check_number_operands(operator: Token, left: Value, right: Value) -> None:
    if isinstance(left, float) and isinstance(right, float):
        return
    raise LoxRuntimeError(operator, "Operands must be numbers.")
