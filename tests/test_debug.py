"""Tests for the --debug AST dump."""

from __future__ import annotations

import io

from lox.debug import dump_ast


def _dump(parse_source, source: str) -> list[str]:
    statements, reporter = parse_source(source)
    assert not reporter.had_error
    out = io.StringIO()
    dump_ast(statements, file=out)
    return out.getvalue().splitlines()


class TestDumpAst:
    def test_expression_tree(self, parse_source) -> None:
        assert _dump(parse_source, "var a = 1 + 2 * 3;") == [
            "Program",
            "  Var a",
            "    Binary +",
            "      Literal(1)",
            "      Binary *",
            "        Literal(2)",
            "        Literal(3)",
        ]

    def test_string_literal_is_quoted(self, parse_source) -> None:
        assert _dump(parse_source, 'print "hi";') == ["Program", "  Print", "    Literal('hi')"]

    def test_function_and_class_headers(self, parse_source) -> None:
        lines = _dump(parse_source, "class B < A { m(x, y) { return this.x; } }")
        assert lines == [
            "Program",
            "  Class B < A",
            "    Function m(x, y)",
            "      Return",
            "        Get .x",
            "          This",
        ]

    def test_for_loop_shows_desugared_form(self, parse_source) -> None:
        lines = _dump(parse_source, "for (var i = 0; i < 1; i = i + 1) print i;")
        assert lines[1] == "  Block"
        assert lines[2] == "    Var i"
        assert "    While" in lines

    def test_compound_property_assignment(self, parse_source) -> None:
        assert _dump(parse_source, "o.x += 1;") == [
            "Program",
            "  ExprStmt",
            "    Set .x +=",
            "      Variable o",
            "      Literal(1)",
        ]
