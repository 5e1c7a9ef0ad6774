"""Token types, the token record, and the keyword table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Single-character punctuation
    LEFT_PAREN = auto()  # (
    RIGHT_PAREN = auto()  # )
    LEFT_BRACE = auto()  # {
    RIGHT_BRACE = auto()  # }
    COMMA = auto()  # ,
    DOT = auto()  # .
    SEMICOLON = auto()  # ;

    # Operators, one or two characters
    MINUS = auto()
    MINUS_EQUAL = auto()
    PLUS = auto()
    PLUS_EQUAL = auto()
    SLASH = auto()
    SLASH_EQUAL = auto()
    STAR = auto()
    STAR_EQUAL = auto()
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}

# Compound assignment operator -> the binary operator it desugars to
COMPOUND_OPERATORS: dict[TokenType, TokenType] = {
    TokenType.PLUS_EQUAL: TokenType.PLUS,
    TokenType.MINUS_EQUAL: TokenType.MINUS,
    TokenType.STAR_EQUAL: TokenType.STAR,
    TokenType.SLASH_EQUAL: TokenType.SLASH,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token: kind, raw lexeme, parsed literal and source line."""

    type: TokenType
    lexeme: str
    literal: float | str | None
    line: int


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return "0" <= ch <= "9"


def is_alpha(ch: str) -> bool:
    """Return True if ch may start an identifier."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_alphanumeric(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)
