"""
Shared token constants for the MONKEY language front end.

Every token kind is a plain string whose text doubles as its stable name in
parser diagnostics (e.g. ``"expected next token to be ASSIGN, got INT instead"``).

Exports:
    - Token kind names (``EOF``, ``IDENT``, ``PLUS``, ...)
    - TOKEN_TYPES: the closed set of all token kinds
    - keywords: reserved word -> token kind
    - token_hashmap: operator/delimiter text -> token kind
    - prefix_operators, infix_operators: operator kinds by position (infix ones loosest first)
    - EOF_CHAR: the end-of-input sentinel returned by the character stream
"""

# Special
ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"

# Operators
ASSIGN = "ASSIGN"
PLUS = "PLUS"
MINUS = "MINUS"
BANG = "BANG"
ASTERISK = "ASTERISK"
SLASH = "SLASH"

LT = "LT"
GT = "GT"
EQ = "EQ"
NOT_EQ = "NOT_EQ"

# Delimiters
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"

LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

EOF_CHAR = ""

keywords: dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

# Two-character entries must be matched before their one-character prefixes.
token_hashmap: dict[str, str] = {
    "==": EQ,
    "!=": NOT_EQ,
    "=": ASSIGN,
    "+": PLUS,
    "-": MINUS,
    "!": BANG,
    "*": ASTERISK,
    "/": SLASH,
    "<": LT,
    ">": GT,
    ",": COMMA,
    ";": SEMICOLON,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
}

prefix_operators: list[str] = [BANG, MINUS]

infix_operators: list[str] = [
    EQ,
    NOT_EQ,
    LT,
    GT,
    PLUS,
    MINUS,
    ASTERISK,
    SLASH,
]

TOKEN_TYPES: frozenset[str] = frozenset(
    {ILLEGAL, EOF, IDENT, INT}
    | set(token_hashmap.values())
    | set(keywords.values())
)
