"""Test the scanner: punctuation, operators, literals, keywords, comments, errors."""

from __future__ import annotations

from lox.scanner import tokenize
from lox.tokens import TokenType

from tests.conftest import assert_types, messages


class TestPunctuation:
    def test_single_characters(self, lex):
        tokens, _ = lex("(){},.;")
        assert_types(
            tokens,
            [
                TokenType.LEFT_PAREN,
                TokenType.RIGHT_PAREN,
                TokenType.LEFT_BRACE,
                TokenType.RIGHT_BRACE,
                TokenType.COMMA,
                TokenType.DOT,
                TokenType.SEMICOLON,
            ],
        )

    def test_eof_terminates_stream(self):
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].lexeme == ""


class TestOperators:
    def test_two_character_operators(self, lex):
        tokens, _ = lex("== != <= >=")
        assert_types(
            tokens,
            [
                TokenType.EQUAL_EQUAL,
                TokenType.BANG_EQUAL,
                TokenType.LESS_EQUAL,
                TokenType.GREATER_EQUAL,
            ],
        )

    def test_compound_assignment_operators(self, lex):
        tokens, _ = lex("+= -= *= /=")
        assert_types(
            tokens,
            [
                TokenType.PLUS_EQUAL,
                TokenType.MINUS_EQUAL,
                TokenType.STAR_EQUAL,
                TokenType.SLASH_EQUAL,
            ],
        )

    def test_maximal_munch(self, lex):
        tokens, _ = lex("===")
        assert_types(tokens, [TokenType.EQUAL_EQUAL, TokenType.EQUAL])

    def test_single_operators(self, lex):
        tokens, _ = lex("! = < > + - * /")
        assert_types(
            tokens,
            [
                TokenType.BANG,
                TokenType.EQUAL,
                TokenType.LESS,
                TokenType.GREATER,
                TokenType.PLUS,
                TokenType.MINUS,
                TokenType.STAR,
                TokenType.SLASH,
            ],
        )


class TestLiterals:
    def test_integer_is_float(self, lex):
        tokens, _ = lex("123")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].literal == 123.0
        assert isinstance(tokens[0].literal, float)

    def test_fraction(self, lex):
        tokens, _ = lex("3.25")
        assert tokens[0].literal == 3.25
        assert tokens[0].lexeme == "3.25"

    def test_trailing_dot_is_not_fraction(self, lex):
        tokens, _ = lex("12.")
        assert_types(tokens, [TokenType.NUMBER, TokenType.DOT])
        assert tokens[0].literal == 12.0

    def test_leading_minus_is_operator(self, lex):
        tokens, _ = lex("-5")
        assert_types(tokens, [TokenType.MINUS, TokenType.NUMBER])

    def test_string(self, lex):
        tokens, _ = lex('"hello world"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].literal == "hello world"
        assert tokens[0].lexeme == '"hello world"'

    def test_multiline_string_counts_lines(self, lex):
        tokens, _ = lex('"a\nb" x')
        assert tokens[0].literal == "a\nb"
        assert tokens[1].line == 2


class TestIdentifiersAndKeywords:
    def test_identifier(self, lex):
        tokens, _ = lex("foo_bar1 _x")
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.IDENTIFIER])
        assert tokens[0].lexeme == "foo_bar1"

    def test_keywords(self, lex):
        tokens, _ = lex("and class else false for fun if nil or print return super this true var while")
        assert all(t.type != TokenType.IDENTIFIER for t in tokens)
        assert tokens[5].type == TokenType.FUN

    def test_keyword_prefix_is_identifier(self, lex):
        tokens, _ = lex("classy orchid")
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.IDENTIFIER])


class TestComments:
    def test_line_comment(self, lex):
        tokens, _ = lex("1 // ignored ( ) \n2")
        assert_types(tokens, [TokenType.NUMBER, TokenType.NUMBER])
        assert tokens[1].line == 2

    def test_block_comment(self, lex):
        tokens, reporter = lex("1 /* skipped */ 2")
        assert_types(tokens, [TokenType.NUMBER, TokenType.NUMBER])
        assert not reporter.had_error

    def test_block_comment_with_star_inside(self, lex):
        tokens, reporter = lex("/* a * b */ x")
        assert_types(tokens, [TokenType.IDENTIFIER])
        assert not reporter.had_error

    def test_block_comment_with_slash_inside(self, lex):
        tokens, reporter = lex("/* a / b **/ x")
        assert_types(tokens, [TokenType.IDENTIFIER])
        assert not reporter.had_error

    def test_block_comment_does_not_nest(self, lex):
        tokens, _ = lex("/* outer /* inner */ x */")
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.STAR, TokenType.SLASH])

    def test_block_comment_counts_lines(self, lex):
        tokens, _ = lex("/*\n\n*/ x")
        assert tokens[0].line == 3

    def test_slash_alone(self, lex):
        tokens, _ = lex("a / b")
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.SLASH, TokenType.IDENTIFIER])


class TestLexicalErrors:
    def test_unexpected_character_keeps_scanning(self, lex):
        tokens, reporter = lex("1 @ 2 # 3")
        assert_types(tokens, [TokenType.NUMBER, TokenType.NUMBER, TokenType.NUMBER])
        assert messages(reporter) == ["Unexpected character.", "Unexpected character."]

    def test_unterminated_string(self, lex):
        tokens, reporter = lex('x "never closed')
        assert_types(tokens, [TokenType.IDENTIFIER])
        assert messages(reporter) == ["Unterminated string."]

    def test_unterminated_block_comment(self, lex):
        _, reporter = lex("x /* open")
        assert messages(reporter) == ["Unterminated block comment."]

    def test_error_line(self, lex):
        _, reporter = lex("ok\nok\n  $")
        assert reporter.diagnostics[0].line == 3
        assert reporter.diagnostics[0].where == ""
