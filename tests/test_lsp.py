"""Tests for the LSP server: diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from lox.lsp import _validate, check_source

URI = "file:///test.lox"


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(TextDocumentItem(uri=uri, language_id="lox", version=0, text=source))

    return ls, published, put


# ---------------------------------------------------------------------------
# Lexical and syntax errors
# ---------------------------------------------------------------------------


class TestSyntaxErrors:
    def test_unexpected_character(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("var a = 1; @")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.message == "Unexpected character."
        assert d.source == "lox"

    def test_missing_expression_includes_location(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("print ;")
        _validate(ls, URI)

        d = published[0].diagnostics[0]
        assert d.message == "Expect expression. (at ';')"
        assert d.range.start.character == 0
        assert d.range.end.character == len("print ;")

    def test_recovery_reports_each_statement(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("var = 1;\nprint ;\n")
        _validate(ls, URI)

        lines = [d.range.start.line for d in published[0].diagnostics]
        assert lines == [0, 1]


# ---------------------------------------------------------------------------
# Resolution errors
# ---------------------------------------------------------------------------


class TestResolutionErrors:
    def test_top_level_return(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("return 1;")
        _validate(ls, URI)

        diags = published[0].diagnostics
        assert len(diags) == 1
        assert diags[0].message.startswith("Can't return from top-level code.")
        assert diags[0].severity == DiagnosticSeverity.Error

    def test_resolution_skipped_after_syntax_error(self) -> None:
        diags = check_source("return 1;\nprint ;")
        assert [d.message for d in diags] == ["Expect expression."]


# ---------------------------------------------------------------------------
# Clean document and runtime-only problems
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('fun greet(n) { print "hi " + n; }\ngreet("there");\n')
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].diagnostics == []

    def test_runtime_errors_are_not_reported(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("print 1 / 0;\nprint undefinedName;")
        _validate(ls, URI)

        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Position conversion (1-based -> 0-based)
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_error_on_third_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("var a = 1;\nvar b = 2;\nvar c = ;")
        _validate(ls, URI)

        d = published[0].diagnostics[0]
        # Error is on line 3 (1-based) -> LSP line 2 (0-based)
        assert d.range.start.line == 2
        assert d.range.end.line == 2

    def test_error_at_end_of_file(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("print 1")
        _validate(ls, URI)

        d = published[0].diagnostics[0]
        assert d.message == "Expect ';' after value. (at end)"
        assert d.range.start.line == 0
