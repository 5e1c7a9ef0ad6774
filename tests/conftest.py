"""Shared test fixtures and helpers."""

from __future__ import annotations

import io
from dataclasses import dataclass

import pytest

from lox import RunResult, run
from lox.ast import Stmt
from lox.errors import ErrorReporter
from lox.parser import parse
from lox.scanner import tokenize
from lox.tokens import Token, TokenType


@dataclass
class Outcome:
    """Captured result of running a Lox program."""

    stdout: str
    stderr: str
    result: RunResult

    @property
    def lines(self) -> list[str]:
        return self.stdout.splitlines()


@pytest.fixture
def lex():
    """Return a helper that scans source and returns (tokens without EOF, reporter)."""

    def _lex(source: str) -> tuple[list[Token], ErrorReporter]:
        reporter = ErrorReporter(echo=False)
        tokens = tokenize(source, reporter)
        return [t for t in tokens if t.type != TokenType.EOF], reporter

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns (statements, reporter)."""

    def _parse(source: str) -> tuple[list[Stmt], ErrorReporter]:
        reporter = ErrorReporter(echo=False)
        return parse(source, reporter), reporter

    return _parse


def run_lox(source: str) -> Outcome:
    """Run source through the full pipeline with captured output streams."""
    out = io.StringIO()
    err = io.StringIO()
    result = run(source, stdout=out, stderr=err)
    return Outcome(out.getvalue(), err.getvalue(), result)


def assert_prints(source: str, *expected: str) -> None:
    """Assert that source runs cleanly and prints exactly the expected lines."""
    outcome = run_lox(source)
    assert not outcome.result.had_error, outcome.stderr
    assert not outcome.result.had_runtime_error, outcome.stderr
    assert outcome.lines == list(expected), f"Expected {list(expected)}, got {outcome.lines}"


def assert_runtime_error(source: str, message: str, line: int | None = None) -> Outcome:
    """Assert that source fails at runtime with the given message."""
    outcome = run_lox(source)
    assert not outcome.result.had_error, outcome.stderr
    err = outcome.result.runtime_error
    assert err is not None, "Expected a runtime error"
    assert err.message == message, f"Expected {message!r}, got {err.message!r}"
    if line is not None:
        assert err.token.line == line
    return outcome


def messages(reporter: ErrorReporter) -> list[str]:
    """Return the messages of all recorded diagnostics."""
    return [d.message for d in reporter.diagnostics]


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
