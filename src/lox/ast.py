"""AST node types for parsed Lox programs.

Nodes compare and hash by identity (``eq=False``) so each one can key the
resolver's binding table regardless of its field values.
"""

from __future__ import annotations

from dataclasses import dataclass

from lox.tokens import Token

# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class Literal:
    """Number, string, boolean or nil literal."""

    value: float | str | bool | None


@dataclass(frozen=True, slots=True, eq=False)
class Grouping:
    """Parenthesized expression."""

    expression: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Unary:
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Binary:
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Logical:
    """Short-circuiting ``and`` / ``or``."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Variable:
    name: Token


@dataclass(frozen=True, slots=True, eq=False)
class Assign:
    name: Token
    value: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Call:
    """Call expression; ``paren`` is the closing parenthesis, used for error lines."""

    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]


@dataclass(frozen=True, slots=True, eq=False)
class Get:
    obj: Expr
    name: Token


@dataclass(frozen=True, slots=True, eq=False)
class Set:
    obj: Expr
    name: Token
    value: Expr
    # Arithmetic operator of a compound `obj.name op= value`, else None
    operator: Token | None = None


@dataclass(frozen=True, slots=True, eq=False)
class This:
    keyword: Token


@dataclass(frozen=True, slots=True, eq=False)
class Super:
    keyword: Token
    method: Token


@dataclass(frozen=True, slots=True, eq=False)
class FunctionExpr:
    """Anonymous function literal: ``fun (params) { body }``."""

    keyword: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class ExprStmt:
    expression: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Print:
    expression: Expr


@dataclass(frozen=True, slots=True, eq=False)
class Var:
    name: Token
    initializer: Expr | None


@dataclass(frozen=True, slots=True, eq=False)
class Block:
    statements: tuple[Stmt, ...]


@dataclass(frozen=True, slots=True, eq=False)
class If:
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True, slots=True, eq=False)
class While:
    condition: Expr
    body: Stmt


@dataclass(frozen=True, slots=True, eq=False)
class Function:
    """Named function or method declaration."""

    name: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


@dataclass(frozen=True, slots=True, eq=False)
class Return:
    keyword: Token
    value: Expr | None


@dataclass(frozen=True, slots=True, eq=False)
class Class:
    name: Token
    superclass: Variable | None
    methods: tuple[Function, ...]


Expr = (
    Literal
    | Grouping
    | Unary
    | Binary
    | Logical
    | Variable
    | Assign
    | Call
    | Get
    | Set
    | This
    | Super
    | FunctionExpr
)

Stmt = ExprStmt | Print | Var | Block | If | While | Function | Return | Class
