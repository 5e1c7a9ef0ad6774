"""Error types and the shared error-reporting sink."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

from lox.tokens import Token, TokenType


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A compile-time (lexical, syntax or resolution) error."""

    line: int
    where: str
    message: str

    def format(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


class ParseError(Exception):
    """Unwinds the parser to the nearest statement boundary after a reported error."""


class LoxRuntimeError(Exception):
    """Raised on evaluation errors; carries the offending token for its line."""

    def __init__(self, token: Token, message: str) -> None:
        self.token = token
        self.message = message
        super().__init__(self.format())

    def format(self) -> str:
        return f"{self.message}\n[line {self.token.line}]"


class ErrorReporter:
    """Collects diagnostics from every pass and tracks the driver's error flags.

    Compile-time errors are recorded and echoed immediately so one pass can
    surface several of them. Runtime errors are reported once, when the
    interpreter gives up on the program.
    """

    def __init__(self, stream: TextIO | None = None, *, echo: bool = True) -> None:
        self._stream = stream
        self._echo = echo
        self.diagnostics: list[Diagnostic] = []
        self.runtime_errors: list[LoxRuntimeError] = []
        self.had_error = False
        self.had_runtime_error = False

    def _write(self, text: str) -> None:
        if self._echo:
            print(text, file=self._stream if self._stream is not None else sys.stderr)

    def report(self, line: int, where: str, message: str) -> None:
        diagnostic = Diagnostic(line, where, message)
        self.diagnostics.append(diagnostic)
        self.had_error = True
        self._write(diagnostic.format())

    def error(self, token: Token, message: str) -> None:
        """Report an error located at a token."""
        if token.type == TokenType.EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error: LoxRuntimeError) -> None:
        self.runtime_errors.append(error)
        self.had_runtime_error = True
        self._write(error.format())

    def reset(self) -> None:
        """Forget compile-time errors, e.g. between REPL lines."""
        self.diagnostics.clear()
        self.had_error = False
