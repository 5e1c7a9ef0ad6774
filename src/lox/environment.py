"""Chained variable scopes shared by closures and the interpreter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lox.errors import LoxRuntimeError
from lox.tokens import Token

if TYPE_CHECKING:
    from lox.runtime import Value


class Environment:
    """A mapping of names to values with an optional enclosing scope.

    Environments are plain heap objects: a closure keeps its defining
    environment (and therefore the whole chain above it) alive for as long
    as the closure itself is reachable.
    """

    __slots__ = ("enclosing", "values")

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.enclosing = enclosing
        self.values: dict[str, Value] = {}

    def define(self, name: str, value: Value) -> None:
        """Bind name in this scope, overwriting any existing binding."""
        self.values[name] = value

    def get(self, name: Token) -> Value:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            assert env.enclosing is not None, "resolver and environment chain disagree"
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Value:
        """Read name from the scope exactly ``distance`` links up the chain."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Value) -> None:
        self.ancestor(distance).values[name.lexeme] = value
