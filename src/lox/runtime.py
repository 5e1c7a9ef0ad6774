"""Runtime values: callables, classes, instances and value helpers."""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from lox.ast import Function, FunctionExpr
from lox.environment import Environment
from lox.errors import LoxRuntimeError
from lox.tokens import Token

if TYPE_CHECKING:
    from lox.interpreter import Interpreter

# nil | boolean | number | text | callable | instance
Value = Union[None, bool, float, str, "LoxCallable", "LoxInstance"]

# Integral numbers below this magnitude print without exponent or fraction
INTEGER_DISPLAY_LIMIT = 1e21


@dataclass(frozen=True, slots=True)
class Returned:
    """Completion of a statement that executed ``return``."""

    value: Value


class LoxCallable:
    """Anything a call expression can invoke."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, arguments: Sequence[Value]) -> Value:
        raise NotImplementedError


class NativeFunction(LoxCallable):
    """A callable implemented in Python."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Value]) -> None:
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: Sequence[Value]) -> Value:
        return self._fn(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


class LoxFunction(LoxCallable):
    """A user-defined function or method closed over its defining environment."""

    def __init__(
        self,
        declaration: Function | FunctionExpr,
        closure: Environment,
        is_initializer: bool = False,
    ) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str | None:
        if isinstance(self.declaration, Function):
            return self.declaration.name.lexeme
        return None

    def bind(self, instance: LoxInstance) -> LoxFunction:
        """Return a copy of this method with ``this`` fixed to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: Sequence[Value]) -> Value:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion is not None:
            return completion.value
        return None

    def __str__(self) -> str:
        if self.name is None:
            return "<fn>"
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    """A class value; calling it constructs an instance."""

    def __init__(
        self,
        name: str,
        superclass: LoxClass | None,
        methods: dict[str, LoxFunction],
    ) -> None:
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> LoxFunction | None:
        klass: LoxClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: Sequence[Value]) -> Value:
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


class LoxInstance:
    """An object with its own field map, falling back to its class's methods."""

    def __init__(self, klass: LoxClass) -> None:
        self.klass = klass
        self.fields: dict[str, Value] = {}

    def get(self, name: Token) -> Value:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Value) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def is_truthy(value: Value) -> bool:
    """nil and false are falsy; everything else, including 0 and "", is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Value, b: Value) -> bool:
    if a is None:
        return b is None
    # bool is an int subclass in Python, so `true == 1` must not compare values
    if type(a) is not type(b):
        return False
    if isinstance(a, float):
        # NaN is equal to itself
        return a == b or (math.isnan(a) and math.isnan(b))
    if isinstance(a, (bool, str)):
        return a == b
    return a is b


def stringify(value: Value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < INTEGER_DISPLAY_LIMIT:
            return f"{value:.0f}"
        return repr(value)
    return str(value)


def _clock() -> float:
    return time.time()


def native_functions() -> dict[str, NativeFunction]:
    """Natives installed in every interpreter's global environment."""
    return {"clock": NativeFunction("clock", 0, _clock)}
