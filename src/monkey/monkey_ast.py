"""
Defines the abstract syntax tree (AST) node structure for the MONKEY programming language.

The tree is made of two closed node families plus a root:

    Statement:  LetStatement, ReturnStatement, ExpressionStatement, BlockStatement
    Expression: Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
                IfExpression, FunctionLiteral, CallExpression
    Program:    the ordered list of top-level statements

Each node keeps the token it was built from (for `token_literal()` diagnostics) and
lists its semantic attributes in `_fields`, which drive equality, `repr()` and
`to_dict()`. A child set to `None` is an absent node: the parser recorded an error
while building it, and the tree must not be evaluated.

`str(node)` renders canonical source text with every prefix and infix expression
fully parenthesised, which makes precedence visible:

    >>> from monkey.monkey_parser import parse
    >>> str(parse("a + b * c"))
    '(a + (b * c))'
"""

from typing import Any

from monkey.monkey_lexer import Token


class Node:
    """Base class of every AST node.

    Attributes:
        token (Token | None): The token the node was built from.
    """

    _fields: tuple[str, ...] = ()

    def __init__(self, token: Token | None = None) -> None:
        self.token = token

    def token_literal(self) -> str:
        return self.token.literal if self.token is not None else ""

    def __str__(self) -> str:
        return self.token_literal()

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._fields)
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return all(getattr(self, name) == getattr(other, name) for name in self._fields)

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        """Serializes the node and its descendants to plain dicts and lists."""
        data: dict[str, Any] = {
            "kind": type(self).__name__,
            "token": self.token_literal(),
        }
        for name in self._fields:
            data[name] = _serialize(getattr(self, name))
        return data


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def _render(node: Node | None) -> str:
    return "" if node is None else str(node)


class Statement(Node):
    pass


class Expression(Node):
    pass


class Program(Node):
    """Root of every parse: the top-level statements in source order."""

    _fields = ("statements",)

    def __init__(self, statements: list[Statement] | None = None) -> None:
        super().__init__(None)
        self.statements: list[Statement] = statements or []

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


# Expressions


class Identifier(Expression):
    _fields = ("value",)

    def __init__(self, token: Token | None, value: str) -> None:
        super().__init__(token)
        self.value = value

    def __str__(self) -> str:
        return self.value


class IntegerLiteral(Expression):
    _fields = ("value",)

    def __init__(self, token: Token | None, value: int) -> None:
        super().__init__(token)
        self.value = value


class Boolean(Expression):
    _fields = ("value",)

    def __init__(self, token: Token | None, value: bool) -> None:
        super().__init__(token)
        self.value = value


class PrefixExpression(Expression):
    """`<operator><right>`, e.g. `-x` or `!ok`."""

    _fields = ("operator", "right")

    def __init__(
        self, token: Token | None, operator: str, right: Expression | None = None
    ) -> None:
        super().__init__(token)
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({self.operator}{_render(self.right)})"


class InfixExpression(Expression):
    """`<left> <operator> <right>`; the token is the operator."""

    _fields = ("left", "operator", "right")

    def __init__(
        self,
        token: Token | None,
        left: Expression | None,
        operator: str,
        right: Expression | None = None,
    ) -> None:
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    def __str__(self) -> str:
        return f"({_render(self.left)} {self.operator} {_render(self.right)})"


class IfExpression(Expression):
    """`if (<condition>) { ... } else { ... }`; `alternative` is None without `else`."""

    _fields = ("condition", "consequence", "alternative")

    def __init__(
        self,
        token: Token | None,
        condition: Expression | None = None,
        consequence: "BlockStatement | None" = None,
        alternative: "BlockStatement | None" = None,
    ) -> None:
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def __str__(self) -> str:
        out = f"if{_render(self.condition)} {_render(self.consequence)}"
        if self.alternative is not None:
            out += f"else {self.alternative}"
        return out


class FunctionLiteral(Expression):
    _fields = ("parameters", "body")

    def __init__(
        self,
        token: Token | None,
        parameters: list[Identifier] | None = None,
        body: "BlockStatement | None" = None,
    ) -> None:
        super().__init__(token)
        self.parameters: list[Identifier] = parameters or []
        self.body = body

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {_render(self.body)}"


class CallExpression(Expression):
    """`<function>(<arguments>)`; the token is the opening parenthesis."""

    _fields = ("function", "arguments")

    def __init__(
        self,
        token: Token | None,
        function: Expression | None,
        arguments: list[Expression | None] | None = None,
    ) -> None:
        super().__init__(token)
        self.function = function
        self.arguments: list[Expression | None] = arguments or []

    def __str__(self) -> str:
        args = ", ".join(_render(a) for a in self.arguments)
        return f"{_render(self.function)}({args})"


# Statements


class LetStatement(Statement):
    """`let <name> = <value>;`"""

    _fields = ("name", "value")

    def __init__(
        self,
        token: Token | None,
        name: Identifier | None = None,
        value: Expression | None = None,
    ) -> None:
        super().__init__(token)
        self.name = name
        self.value = value

    def __str__(self) -> str:
        return f"{self.token_literal()} {_render(self.name)} = {_render(self.value)};"


class ReturnStatement(Statement):
    _fields = ("return_value",)

    def __init__(self, token: Token | None, return_value: Expression | None = None) -> None:
        super().__init__(token)
        self.return_value = return_value

    def __str__(self) -> str:
        return f"{self.token_literal()} {_render(self.return_value)};"


class ExpressionStatement(Statement):
    """A bare expression used as a statement; the token is the expression's first token."""

    _fields = ("expression",)

    def __init__(self, token: Token | None, expression: Expression | None = None) -> None:
        super().__init__(token)
        self.expression = expression

    def __str__(self) -> str:
        return _render(self.expression)


class BlockStatement(Statement):
    """`{ <statements> }`; the token is the opening brace."""

    _fields = ("statements",)

    def __init__(self, token: Token | None, statements: list[Statement] | None = None) -> None:
        super().__init__(token)
        self.statements: list[Statement] = statements or []

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


__all__ = [
    "Node",
    "Statement",
    "Expression",
    "Program",
    "Identifier",
    "IntegerLiteral",
    "Boolean",
    "PrefixExpression",
    "InfixExpression",
    "IfExpression",
    "FunctionLiteral",
    "CallExpression",
    "LetStatement",
    "ReturnStatement",
    "ExpressionStatement",
    "BlockStatement",
]
