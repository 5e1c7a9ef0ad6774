"""Minimal LSP server for Lox: static diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from lox import __version__
from lox.errors import Diagnostic as LoxDiagnostic
from lox.errors import ErrorReporter
from lox.parser import parse
from lox.resolver import resolve

server = LanguageServer("lox-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def check_source(source: str) -> list[LoxDiagnostic]:
    """Scan, parse and resolve source without running it."""
    reporter = ErrorReporter(echo=False)
    statements = parse(source, reporter)
    if not reporter.had_error:
        resolve(statements, reporter)
    return list(reporter.diagnostics)


def _to_lsp(diag: LoxDiagnostic, lines: list[str]) -> Diagnostic:
    # Diagnostics carry only a line, so the range covers the whole line
    line = max(diag.line - 1, 0)
    width = len(lines[line]) if line < len(lines) else 0
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=0),
            end=Position(line=line, character=width),
        ),
        message=f"{diag.message} ({diag.where.strip()})" if diag.where else diag.message,
        severity=DiagnosticSeverity.Error,
        source="lox",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the static Lox passes and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    lines = source.splitlines()
    diagnostics = [_to_lsp(d, lines) for d in check_source(source)]

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
