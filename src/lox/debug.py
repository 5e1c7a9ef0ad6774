"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from lox.ast import (
    Assign,
    Binary,
    Block,
    Call,
    Class,
    Expr,
    ExprStmt,
    Function,
    FunctionExpr,
    Get,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Set,
    Stmt,
    Super,
    This,
    Unary,
    Var,
    Variable,
    While,
)
from lox.runtime import stringify
from lox.tokens import Token


def dump_ast(statements: list[Stmt] | tuple[Stmt, ...], *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    file.write("Program\n")
    for stmt in statements:
        _dump_stmt(stmt, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _params(params: tuple[Token, ...]) -> str:
    return ", ".join(p.lexeme for p in params)


def _dump_stmt(stmt: Stmt, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(stmt, ExprStmt):
        f.write(f"{pad}ExprStmt\n")
        _dump_expr(stmt.expression, depth + 1, f)
    elif isinstance(stmt, Print):
        f.write(f"{pad}Print\n")
        _dump_expr(stmt.expression, depth + 1, f)
    elif isinstance(stmt, Var):
        f.write(f"{pad}Var {stmt.name.lexeme}\n")
        if stmt.initializer is not None:
            _dump_expr(stmt.initializer, depth + 1, f)
    elif isinstance(stmt, Block):
        f.write(f"{pad}Block\n")
        for child in stmt.statements:
            _dump_stmt(child, depth + 1, f)
    elif isinstance(stmt, If):
        f.write(f"{pad}If\n")
        _dump_expr(stmt.condition, depth + 1, f)
        _dump_stmt(stmt.then_branch, depth + 1, f)
        if stmt.else_branch is not None:
            f.write(f"{pad}Else\n")
            _dump_stmt(stmt.else_branch, depth + 1, f)
    elif isinstance(stmt, While):
        f.write(f"{pad}While\n")
        _dump_expr(stmt.condition, depth + 1, f)
        _dump_stmt(stmt.body, depth + 1, f)
    elif isinstance(stmt, Function):
        f.write(f"{pad}Function {stmt.name.lexeme}({_params(stmt.params)})\n")
        for child in stmt.body:
            _dump_stmt(child, depth + 1, f)
    elif isinstance(stmt, Return):
        f.write(f"{pad}Return\n")
        if stmt.value is not None:
            _dump_expr(stmt.value, depth + 1, f)
    elif isinstance(stmt, Class):
        header = f"{pad}Class {stmt.name.lexeme}"
        if stmt.superclass is not None:
            header += f" < {stmt.superclass.name.lexeme}"
        f.write(header + "\n")
        for method in stmt.methods:
            _dump_stmt(method, depth + 1, f)


def _dump_expr(expr: Expr, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(expr, Literal):
        text = repr(expr.value) if isinstance(expr.value, str) else stringify(expr.value)
        f.write(f"{pad}Literal({text})\n")
    elif isinstance(expr, Grouping):
        f.write(f"{pad}Grouping\n")
        _dump_expr(expr.expression, depth + 1, f)
    elif isinstance(expr, Unary):
        f.write(f"{pad}Unary {expr.operator.lexeme}\n")
        _dump_expr(expr.right, depth + 1, f)
    elif isinstance(expr, (Binary, Logical)):
        f.write(f"{pad}{type(expr).__name__} {expr.operator.lexeme}\n")
        _dump_expr(expr.left, depth + 1, f)
        _dump_expr(expr.right, depth + 1, f)
    elif isinstance(expr, Variable):
        f.write(f"{pad}Variable {expr.name.lexeme}\n")
    elif isinstance(expr, Assign):
        f.write(f"{pad}Assign {expr.name.lexeme}\n")
        _dump_expr(expr.value, depth + 1, f)
    elif isinstance(expr, Call):
        f.write(f"{pad}Call\n")
        _dump_expr(expr.callee, depth + 1, f)
        for argument in expr.arguments:
            _dump_expr(argument, depth + 1, f)
    elif isinstance(expr, Get):
        f.write(f"{pad}Get .{expr.name.lexeme}\n")
        _dump_expr(expr.obj, depth + 1, f)
    elif isinstance(expr, Set):
        suffix = f" {expr.operator.lexeme}=" if expr.operator is not None else ""
        f.write(f"{pad}Set .{expr.name.lexeme}{suffix}\n")
        _dump_expr(expr.obj, depth + 1, f)
        _dump_expr(expr.value, depth + 1, f)
    elif isinstance(expr, This):
        f.write(f"{pad}This\n")
    elif isinstance(expr, Super):
        f.write(f"{pad}Super .{expr.method.lexeme}\n")
    elif isinstance(expr, FunctionExpr):
        f.write(f"{pad}FunctionExpr({_params(expr.params)})\n")
        for child in expr.body:
            _dump_stmt(child, depth + 1, f)
