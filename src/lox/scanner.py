"""Lox scanner: converts source text into a flat token stream."""

from __future__ import annotations

from lox.errors import ErrorReporter
from lox.tokens import KEYWORDS, Token, TokenType, is_alpha, is_alphanumeric, is_digit

# Characters that always form a token on their own
_SINGLE: dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ";": TokenType.SEMICOLON,
}

# Characters that become a two-character operator when followed by '='
_WITH_EQUAL: dict[str, tuple[TokenType, TokenType]] = {
    "-": (TokenType.MINUS, TokenType.MINUS_EQUAL),
    "+": (TokenType.PLUS, TokenType.PLUS_EQUAL),
    "*": (TokenType.STAR, TokenType.STAR_EQUAL),
    "!": (TokenType.BANG, TokenType.BANG_EQUAL),
    "=": (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    "<": (TokenType.LESS, TokenType.LESS_EQUAL),
    ">": (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


class Scanner:
    """Tokenize Lox source text, reporting lexical errors without stopping."""

    def __init__(self, source: str, reporter: ErrorReporter) -> None:
        self._source = source
        self._reporter = reporter
        self._tokens: list[Token] = []
        self._start = 0
        self._pos = 0
        self._line = 1

    def scan_tokens(self) -> list[Token]:
        """Scan the full source and return the token list, ending with EOF."""
        while not self._at_end():
            self._start = self._pos
            self._scan_token()

        self._tokens.append(Token(TokenType.EOF, "", None, self._line))
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self._peek() != expected:
            return False
        self._pos += 1
        return True

    def _emit(self, tt: TokenType, literal: float | str | None = None) -> None:
        text = self._source[self._start : self._pos]
        self._tokens.append(Token(tt, text, literal, self._line))

    def _error(self, message: str) -> None:
        self._reporter.report(self._line, "", message)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        ch = self._advance()

        if ch in _SINGLE:
            self._emit(_SINGLE[ch])
            return

        if ch in _WITH_EQUAL:
            plain, with_equal = _WITH_EQUAL[ch]
            self._emit(with_equal if self._match("=") else plain)
            return

        if ch == "/":
            if self._match("/"):
                # Line comment runs to the end of the line
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            elif self._match("*"):
                self._block_comment()
            else:
                self._emit(TokenType.SLASH_EQUAL if self._match("=") else TokenType.SLASH)
            return

        if ch in " \r\t":
            return

        if ch == "\n":
            self._line += 1
            return

        if ch == '"':
            self._string()
            return

        if is_digit(ch):
            self._number()
            return

        if is_alpha(ch):
            self._identifier()
            return

        self._error("Unexpected character.")

    # ------------------------------------------------------------------
    # Multi-character lexemes
    # ------------------------------------------------------------------

    def _block_comment(self) -> None:
        """Skip a non-nesting /* ... */ comment; the opening pair is consumed."""
        while not self._at_end():
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                return
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        self._error("Unterminated block comment.")

    def _string(self) -> None:
        while not self._at_end() and self._peek() != '"':
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._at_end():
            self._error("Unterminated string.")
            return

        self._advance()  # closing quote
        self._emit(TokenType.STRING, self._source[self._start + 1 : self._pos - 1])

    def _number(self) -> None:
        while is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot
        if self._peek() == "." and is_digit(self._peek(1)):
            self._advance()
            while is_digit(self._peek()):
                self._advance()

        self._emit(TokenType.NUMBER, float(self._source[self._start : self._pos]))

    def _identifier(self) -> None:
        while is_alphanumeric(self._peek()):
            self._advance()
        text = self._source[self._start : self._pos]
        self._emit(KEYWORDS.get(text, TokenType.IDENTIFIER))


def tokenize(source: str, reporter: ErrorReporter | None = None) -> list[Token]:
    """Convenience function: scan source text and return the token list."""
    if reporter is None:
        reporter = ErrorReporter()
    return Scanner(source, reporter).scan_tokens()
