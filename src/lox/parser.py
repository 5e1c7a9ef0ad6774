"""Lox parser: converts a token stream into a list of statements."""

from __future__ import annotations

from collections.abc import Callable

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
from lox.errors import ErrorReporter, ParseError
from lox.scanner import tokenize
from lox.tokens import COMPOUND_OPERATORS, Token, TokenType

MAX_ARGUMENTS = 255

# Token types that begin a statement; synchronization stops in front of them
_STATEMENT_START = frozenset(
    {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    }
)


class Parser:
    """Recursive descent parser for Lox token streams.

    Syntax errors are reported through the shared reporter. The parser then
    skips to the next statement boundary and keeps going, so a single pass
    surfaces as many errors as it can.
    """

    def __init__(self, tokens: list[Token], reporter: ErrorReporter) -> None:
        self._tokens = tokens
        self._reporter = reporter
        self._pos = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _previous(self) -> Token:
        return self._tokens[self._pos - 1]

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _at(self, *types: TokenType) -> bool:
        return not self._at_eof() and self._peek().type in types

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _match(self, *types: TokenType) -> bool:
        if self._at(*types):
            self._advance()
            return True
        return False

    def _expect(self, tt: TokenType, message: str) -> Token:
        if self._at(tt):
            return self._advance()
        raise self._error(self._peek(), message)

    def _error(self, token: Token, message: str) -> ParseError:
        self._reporter.error(token, message)
        return ParseError(message)

    def _synchronize(self) -> None:
        self._advance()
        while not self._at_eof():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._peek().type in _STATEMENT_START:
                return
            self._advance()

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def parse(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self._at_eof():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def _declaration(self) -> Stmt | None:
        try:
            if self._match(TokenType.CLASS):
                return self._class_declaration()
            # `fun (` starts an anonymous function expression statement
            if self._at(TokenType.FUN) and self._peek(1).type == TokenType.IDENTIFIER:
                self._advance()
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None

    def _class_declaration(self) -> Class:
        name = self._expect(TokenType.IDENTIFIER, "Expect class name.")

        superclass: Variable | None = None
        if self._match(TokenType.LESS):
            self._expect(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = Variable(self._previous())

        self._expect(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods: list[Function] = []
        while not self._at(TokenType.RIGHT_BRACE) and not self._at_eof():
            methods.append(self._function("method"))
        self._expect(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return Class(name, superclass, tuple(methods))

    def _function(self, kind: str) -> Function:
        name = self._expect(TokenType.IDENTIFIER, f"Expect {kind} name.")
        params, body = self._function_body(kind)
        return Function(name, params, body)

    def _function_body(self, kind: str) -> tuple[tuple[Token, ...], tuple[Stmt, ...]]:
        self._expect(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._at(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    # Reported but not raised: the parser is not confused
                    self._reporter.error(
                        self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters."
                    )
                params.append(self._expect(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._expect(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._expect(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        return tuple(params), tuple(body)

    def _var_declaration(self) -> Var:
        name = self._expect(TokenType.IDENTIFIER, "Expect variable name.")
        initializer: Expr | None = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _statement(self) -> Stmt:
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.LEFT_BRACE):
            return Block(tuple(self._block()))
        return self._expression_statement()

    def _for_statement(self) -> Stmt:
        """Parse a for loop and desugar it into a block wrapping a while loop."""
        self._expect(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        initializer: Stmt | None
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition: Expr | None = None
        if not self._at(TokenType.SEMICOLON):
            condition = self._expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment: Expr | None = None
        if not self._at(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._expect(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()

        if increment is not None:
            body = Block((body, ExprStmt(increment)))
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block((initializer, body))
        return body

    def _if_statement(self) -> If:
        self._expect(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._expect(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch: Stmt | None = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()
        return If(condition, then_branch, else_branch)

    def _print_statement(self) -> Print:
        value = self._expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def _return_statement(self) -> Return:
        keyword = self._previous()
        value: Expr | None = None
        if not self._at(TokenType.SEMICOLON):
            value = self._expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def _while_statement(self) -> While:
        self._expect(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._expect(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return While(condition, self._statement())

    def _block(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self._at(TokenType.RIGHT_BRACE) and not self._at_eof():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._expect(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self) -> ExprStmt:
        expr = self._expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExprStmt(expr)

    # ------------------------------------------------------------------
    # Expressions, lowest precedence first
    # ------------------------------------------------------------------

    def _expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        expr = self._or()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.obj, expr.name, value)
            self._reporter.error(equals, "Invalid assignment target.")
            return expr

        if self._match(*COMPOUND_OPERATORS):
            compound = self._previous()
            value = self._assignment()
            operator = Token(
                COMPOUND_OPERATORS[compound.type],
                compound.lexeme[:-1],
                None,
                compound.line,
            )
            if isinstance(expr, Variable):
                return Assign(expr.name, Binary(expr, operator, value))
            if isinstance(expr, Get):
                # Read-modify-write on a single evaluation of the receiver
                return Set(expr.obj, expr.name, value, operator)
            self._reporter.error(compound, "Invalid assignment target.")
            return expr

        return expr

    def _or(self) -> Expr:
        return self._left_associative(self._and, Logical, TokenType.OR)

    def _and(self) -> Expr:
        return self._left_associative(self._equality, Logical, TokenType.AND)

    def _equality(self) -> Expr:
        return self._left_associative(
            self._comparison, Binary, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL
        )

    def _comparison(self) -> Expr:
        return self._left_associative(
            self._term,
            Binary,
            TokenType.GREATER,
            TokenType.GREATER_EQUAL,
            TokenType.LESS,
            TokenType.LESS_EQUAL,
        )

    def _term(self) -> Expr:
        return self._left_associative(self._factor, Binary, TokenType.MINUS, TokenType.PLUS)

    def _factor(self) -> Expr:
        return self._left_associative(self._unary, Binary, TokenType.SLASH, TokenType.STAR)

    def _left_associative(
        self,
        operand: Callable[[], Expr],
        node: type[Binary] | type[Logical],
        *types: TokenType,
    ) -> Expr:
        """Parse one operand, then fold operators of this level to the left."""
        expr = operand()
        while self._match(*types):
            operator = self._previous()
            right = operand()
            expr = node(expr, operator, right)
        return expr

    def _unary(self) -> Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            return Unary(operator, self._unary())
        return self._call()

    def _call(self) -> Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._expect(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def _finish_call(self, callee: Expr) -> Call:
        arguments: list[Expr] = []
        if not self._at(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._reporter.error(
                        self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments."
                    )
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break
        paren = self._expect(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def _primary(self) -> Expr:
        if self._match(TokenType.FALSE):
            return Literal(False)
        if self._match(TokenType.TRUE):
            return Literal(True)
        if self._match(TokenType.NIL):
            return Literal(None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self._previous().literal)

        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._expect(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._expect(TokenType.IDENTIFIER, "Expect superclass method name.")
            return Super(keyword, method)

        if self._match(TokenType.THIS):
            return This(self._previous())

        if self._match(TokenType.IDENTIFIER):
            return Variable(self._previous())

        if self._match(TokenType.FUN):
            keyword = self._previous()
            params, body = self._function_body("function")
            return FunctionExpr(keyword, params, body)

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._expect(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise self._error(self._peek(), "Expect expression.")


def parse(source: str, reporter: ErrorReporter | None = None) -> list[Stmt]:
    """Convenience function: scan and parse source text into statements."""
    if reporter is None:
        reporter = ErrorReporter()
    return Parser(tokenize(source, reporter), reporter).parse()
