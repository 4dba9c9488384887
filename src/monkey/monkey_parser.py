"""
MONKEY Language Parser

Parses MONKEY tokens into an abstract syntax tree (`Program`) using top-down operator
precedence (Pratt) parsing.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * expression statements, with an optional trailing `;`
    * `{ ... }` blocks (inside `if` and `fn`)

- Expressions:
    * Identifiers, integer literals, `true` / `false`
    * Prefix operators: `!x`, `-x`
    * Infix operators: `==`, `!=`, `<`, `>`, `+`, `-`, `*`, `/`
    * Grouping: `( <expr> )`
    * Conditionals: `if (<cond>) { ... } else { ... }`
    * Function literals: `fn(<params>) { ... }`
    * Calls: `<expr>(<args>)`

Parser Behavior
---------------
- Pulls tokens from the lexer on demand and keeps exactly two of them: the current
  token and the peek token.
- Each token type may register a prefix parse function (the token starts an
  expression) and an infix parse function (the token continues one). Binding power
  comes from the `precedences` table; same-precedence operators associate left.
- Never raises on malformed input. Diagnostics are collected in order and available
  from `Parser.errors()`; a tree produced alongside any diagnostic contains absent
  (`None`) nodes and must not be evaluated.
- A statement that fails structurally is dropped. Parsing skips any braces it opened
  and resumes after its `;`, or before a closing `}`, a `let`, a `return` or the end
  of input.

Tracing
-------
With `trace=True` (or `MONKEY_PARSER_TRACE=1` in the environment) every parse rule
logs an indented `BEGIN <rule>` / `END <rule>` pair at DEBUG level on this module's
logger.

Entry Points
------------
- `Parser(lexer).parse_program()`: parse a full program, then inspect `errors()`.
- `parse(source, strict=False)`: lex and parse a string in one call; with
  `strict=True` raises `ParserError` when any diagnostic was recorded.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable
from enum import IntEnum
from typing import Any, Protocol

from monkey.monkey_ast import (
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from monkey.monkey_constants import (
    ASSIGN,
    ASTERISK,
    COMMA,
    ELSE,
    EOF,
    EQ,
    FALSE,
    FUNCTION,
    GT,
    IDENT,
    IF,
    INT,
    LBRACE,
    LET,
    LPAREN,
    LT,
    MINUS,
    NOT_EQ,
    PLUS,
    RBRACE,
    RETURN,
    RPAREN,
    SEMICOLON,
    SLASH,
    TRUE,
    infix_operators,
    prefix_operators,
)
from monkey.monkey_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)

TRACE_ENV_VAR = "MONKEY_PARSER_TRACE"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -X or !X
    CALL = 7  # myFunction(X)


precedences: dict[str, Precedence] = {
    EQ: Precedence.EQUALS,
    NOT_EQ: Precedence.EQUALS,
    LT: Precedence.LESSGREATER,
    GT: Precedence.LESSGREATER,
    PLUS: Precedence.SUM,
    MINUS: Precedence.SUM,
    SLASH: Precedence.PRODUCT,
    ASTERISK: Precedence.PRODUCT,
    LPAREN: Precedence.CALL,
}

PrefixParseFn = Callable[[], Expression | None]
InfixParseFn = Callable[[Expression], Expression | None]


class TokenSource(Protocol):
    def next_token(self) -> Token: ...


class ParserError(Exception):
    """Raised by `parse(..., strict=True)` when the source produced diagnostics.

    Attributes:
        errors (list[str]): Every diagnostic recorded during the parse, in order.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


def trace_enabled_from_env() -> bool:
    return os.getenv(TRACE_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}


def traced(func: Callable[..., Any]) -> Callable[..., Any]:
    """Logs BEGIN/END around a parse rule when the parser has tracing enabled."""
    rule = func.__name__

    @functools.wraps(func)
    def wrapper(self: Parser, *args: Any) -> Any:
        if not self.trace:
            return func(self, *args)
        indent = "    " * self._trace_depth
        logger.debug("%sBEGIN %s", indent, rule)
        self._trace_depth += 1
        try:
            return func(self, *args)
        finally:
            self._trace_depth -= 1
            logger.debug("%sEND %s", indent, rule)

    return wrapper


def quote(literal: str) -> str:
    escaped = literal.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class Parser:
    """
    MONKEY Parser Class

    Attributes
    ----------
    lexer : TokenSource
        Anything with a `next_token()` method, usually a `Lexer`.
    trace : bool
        Whether parse rules log BEGIN/END trace lines.
    prefix_parse_fns : dict[str, PrefixParseFn]
        Token type -> function that parses an expression starting at that token.
    infix_parse_fns : dict[str, InfixParseFn]
        Token type -> function that extends an already-parsed left expression.

    Methods
    -------
    parse_program() -> Program
        Parse every statement up to end of input.
    errors() -> list[str]
        Diagnostics recorded so far, in order.
    parse_expression(precedence) -> Expression | None
        The precedence-climbing core.
    """

    def __init__(self, lexer: TokenSource, trace: bool | None = None) -> None:
        self.lexer = lexer
        self.trace: bool = trace_enabled_from_env() if trace is None else trace
        self._errors: list[str] = []
        self._trace_depth: int = 0

        self._cur_token: Token = Token(EOF, "")
        self._peek_token: Token = Token(EOF, "")

        self.prefix_parse_fns: dict[str, PrefixParseFn] = {}
        self.register_prefix(IDENT, self.parse_identifier)
        self.register_prefix(INT, self.parse_integer_literal)
        self.register_prefix(TRUE, self.parse_boolean)
        self.register_prefix(FALSE, self.parse_boolean)
        self.register_prefix(LPAREN, self.parse_grouped_expression)
        self.register_prefix(IF, self.parse_if_expression)
        self.register_prefix(FUNCTION, self.parse_function_literal)
        for token_type in prefix_operators:
            self.register_prefix(token_type, self.parse_prefix_expression)

        self.infix_parse_fns: dict[str, InfixParseFn] = {}
        for token_type in infix_operators:
            self.register_infix(token_type, self.parse_infix_expression)
        self.register_infix(LPAREN, self.parse_call_expression)

        # Fill both current and peek
        self._next_token()
        self._next_token()

    def register_prefix(self, token_type: str, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[token_type] = fn

    def register_infix(self, token_type: str, fn: InfixParseFn) -> None:
        self.infix_parse_fns[token_type] = fn

    def errors(self) -> list[str]:
        return list(self._errors)

    # Token window

    def _next_token(self) -> None:
        self._cur_token = self._peek_token
        self._peek_token = self.lexer.next_token()

    def _cur_token_is(self, token_type: str) -> bool:
        return self._cur_token.type == token_type

    def _peek_token_is(self, token_type: str) -> bool:
        return self._peek_token.type == token_type

    def _expect_peek(self, token_type: str) -> bool:
        """Advances if the peek token has the given type, otherwise records an error."""
        if self._peek_token_is(token_type):
            self._next_token()
            return True
        self._peek_error(token_type)
        return False

    def _peek_precedence(self) -> Precedence:
        return precedences.get(self._peek_token.type, Precedence.LOWEST)

    def _cur_precedence(self) -> Precedence:
        return precedences.get(self._cur_token.type, Precedence.LOWEST)

    def _synchronize(self) -> None:
        """Skips the rest of a statement that failed to parse.

        Braces opened while skipping are skipped as a unit. At brace depth zero the skip
        stops on a `;`, or just before a `}`, a `let`, a `return` or the end of input, so
        the caller's usual advance lands on the first token of whatever follows.
        """
        depth = 0
        while not self._cur_token_is(EOF) and not self._peek_token_is(EOF):
            if depth == 0 and (
                self._cur_token_is(SEMICOLON)
                or self._peek_token_is(RBRACE)
                or self._peek_token_is(LET)
                or self._peek_token_is(RETURN)
            ):
                return
            self._next_token()
            if self._cur_token_is(LBRACE):
                depth += 1
            elif self._cur_token_is(RBRACE):
                depth -= 1

    # Diagnostics

    def _record_error(self, message: str, token: Token) -> None:
        logger.debug("line %d, col %d: %s", token.line, token.col, message)
        self._errors.append(message)

    def _peek_error(self, token_type: str) -> None:
        self._record_error(
            f"expected next token to be {token_type}, got {self._peek_token.type} instead",
            self._peek_token,
        )

    def _no_prefix_parse_fn_error(self, token_type: str) -> None:
        self._record_error(
            f"no prefix parse function for {token_type} found", self._cur_token
        )

    # Statements

    def parse_program(self) -> Program:
        """Parse statements until end of input; failed statements are skipped."""
        program = Program()
        while not self._cur_token_is(EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                program.statements.append(stmt)
            else:
                self._synchronize()
            self._next_token()
        return program

    @traced
    def parse_statement(self) -> Statement | None:
        if self._cur_token_is(LET):
            return self.parse_let_statement()
        if self._cur_token_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    @traced
    def parse_let_statement(self) -> LetStatement | None:
        token = self._cur_token

        if not self._expect_peek(IDENT):
            return None
        name = Identifier(self._cur_token, self._cur_token.literal)

        if not self._expect_peek(ASSIGN):
            return None

        self._next_token()
        value = self.parse_expression(Precedence.LOWEST)

        if self._peek_token_is(SEMICOLON):
            self._next_token()

        return LetStatement(token, name, value)

    @traced
    def parse_return_statement(self) -> ReturnStatement:
        token = self._cur_token

        self._next_token()
        return_value = self.parse_expression(Precedence.LOWEST)

        if self._peek_token_is(SEMICOLON):
            self._next_token()

        return ReturnStatement(token, return_value)

    @traced
    def parse_expression_statement(self) -> ExpressionStatement:
        token = self._cur_token
        expression = self.parse_expression(Precedence.LOWEST)

        if self._peek_token_is(SEMICOLON):
            self._next_token()

        return ExpressionStatement(token, expression)

    @traced
    def parse_block_statement(self) -> BlockStatement | None:
        """Parse `{ ... }` with the current token on `{`.

        Returns None (after recording an error) if the input ends before the closing `}`.
        """
        token = self._cur_token
        statements: list[Statement] = []

        self._next_token()
        while not self._cur_token_is(RBRACE) and not self._cur_token_is(EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            else:
                self._synchronize()
            self._next_token()

        if self._cur_token_is(EOF):
            self._record_error(
                f"expected next token to be {RBRACE}, got {EOF} instead",
                self._cur_token,
            )
            return None

        return BlockStatement(token, statements)

    # Expressions

    @traced
    def parse_expression(self, precedence: Precedence) -> Expression | None:
        prefix = self.prefix_parse_fns.get(self._cur_token.type)
        if prefix is None:
            self._no_prefix_parse_fn_error(self._cur_token.type)
            return None

        left = prefix()
        if left is None:
            return None

        while not self._peek_token_is(SEMICOLON) and precedence < self._peek_precedence():
            infix = self.infix_parse_fns.get(self._peek_token.type)
            if infix is None:
                return left

            self._next_token()
            left = infix(left)
            if left is None:
                return None

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self._cur_token, self._cur_token.literal)

    @traced
    def parse_integer_literal(self) -> Expression | None:
        token = self._cur_token
        literal = token.literal

        value: int | None = None
        if literal.isascii() and literal.isdigit():
            value = int(literal)
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self._record_error(f"could not parse {quote(literal)} as integer", token)
            return None

        return IntegerLiteral(token, value)

    def parse_boolean(self) -> Expression:
        return Boolean(self._cur_token, self._cur_token_is(TRUE))

    @traced
    def parse_prefix_expression(self) -> Expression | None:
        token = self._cur_token

        self._next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        return PrefixExpression(token, token.literal, right)

    @traced
    def parse_infix_expression(self, left: Expression) -> Expression | None:
        token = self._cur_token
        precedence = self._cur_precedence()

        self._next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(token, left, token.literal, right)

    @traced
    def parse_grouped_expression(self) -> Expression | None:
        self._next_token()
        expression = self.parse_expression(Precedence.LOWEST)

        if not self._expect_peek(RPAREN):
            return None

        return expression

    @traced
    def parse_if_expression(self) -> Expression | None:
        token = self._cur_token

        if not self._expect_peek(LPAREN):
            return None

        self._next_token()
        condition = self.parse_expression(Precedence.LOWEST)

        if not self._expect_peek(RPAREN):
            return None
        if not self._expect_peek(LBRACE):
            return None

        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative: BlockStatement | None = None
        if self._peek_token_is(ELSE):
            self._next_token()

            if not self._expect_peek(LBRACE):
                return None

            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        if condition is None:
            return None

        return IfExpression(token, condition, consequence, alternative)

    @traced
    def parse_function_literal(self) -> Expression | None:
        token = self._cur_token

        if not self._expect_peek(LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self._expect_peek(LBRACE):
            return None

        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> list[Identifier] | None:
        """Parse `(a, b, c)` with the current token on `(`; `()` gives an empty list."""
        identifiers: list[Identifier] = []

        if self._peek_token_is(RPAREN):
            self._next_token()
            return identifiers

        if not self._expect_peek(IDENT):
            return None
        identifiers.append(Identifier(self._cur_token, self._cur_token.literal))

        while self._peek_token_is(COMMA):
            self._next_token()
            if not self._expect_peek(IDENT):
                return None
            identifiers.append(Identifier(self._cur_token, self._cur_token.literal))

        if not self._expect_peek(RPAREN):
            return None

        return identifiers

    @traced
    def parse_call_expression(self, function: Expression) -> Expression | None:
        token = self._cur_token

        arguments = self.parse_expression_list(RPAREN)
        if arguments is None:
            return None

        return CallExpression(token, function, arguments)

    def parse_expression_list(self, end: str) -> list[Expression] | None:
        """Parse comma-separated expressions up to `end`, current token on the opener."""
        items: list[Expression | None] = []

        if self._peek_token_is(end):
            self._next_token()
            return []

        self._next_token()
        items.append(self.parse_expression(Precedence.LOWEST))

        while self._peek_token_is(COMMA):
            self._next_token()
            self._next_token()
            items.append(self.parse_expression(Precedence.LOWEST))

        if not self._expect_peek(end):
            return None

        expressions = [item for item in items if item is not None]
        if len(expressions) != len(items):
            return None
        return expressions


def parse(source: str, strict: bool = False, trace: bool | None = None) -> Program:
    """Lex and parse `source` in one call.

    Args:
        source (str): MONKEY source text.
        strict (bool): If True, raise `ParserError` when any diagnostic was recorded.
        trace (bool | None): Passed through to `Parser`.

    Returns:
        Program: The parsed program. Without `strict`, use `Parser` directly when the
        diagnostics are needed.

    Raises:
        ParserError: In strict mode, if the source has parse errors.
    """
    parser = Parser(Lexer(CharacterStream(source)), trace=trace)
    program = parser.parse_program()
    errors = parser.errors()
    if strict and errors:
        raise ParserError(
            f"{len(errors)} parse error(s); first: {errors[0]}", errors
        )
    return program


__all__ = ["Parser", "ParserError", "Precedence", "parse", "precedences"]
