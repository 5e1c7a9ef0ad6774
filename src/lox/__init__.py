"""Lox: a tree-walking interpreter for a small dynamically-typed scripting language."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from lox.errors import Diagnostic, LoxRuntimeError
    from lox.interpreter import Interpreter, InterpreterOptions

__version__ = "0.1.0"


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of running one piece of source text."""

    had_error: bool
    had_runtime_error: bool
    diagnostics: tuple[Diagnostic, ...]
    runtime_error: LoxRuntimeError | None


def run(
    source: str,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    options: InterpreterOptions | None = None,
    interpreter: Interpreter | None = None,
) -> RunResult:
    """Scan, parse, resolve and (if all of that succeeded) interpret source.

    Passing an existing interpreter keeps its globals between calls, which
    is how the REPL runs one line at a time.
    """
    from lox.errors import ErrorReporter
    from lox.interpreter import Interpreter
    from lox.parser import parse
    from lox.resolver import resolve

    if interpreter is None:
        interpreter = Interpreter(ErrorReporter(stderr), stdout=stdout, options=options)
    reporter = interpreter.reporter
    reporter.reset()
    errors_before = len(reporter.runtime_errors)

    statements = parse(source, reporter)
    if not reporter.had_error:
        bindings = resolve(statements, reporter)
        if not reporter.had_error:
            interpreter.add_bindings(bindings)
            interpreter.interpret(statements)

    new_errors = reporter.runtime_errors[errors_before:]
    return RunResult(
        had_error=reporter.had_error,
        had_runtime_error=bool(new_errors),
        diagnostics=tuple(reporter.diagnostics),
        runtime_error=new_errors[0] if new_errors else None,
    )
