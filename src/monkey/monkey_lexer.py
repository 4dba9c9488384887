"""
Lexical analyzer for the MONKEY programming language.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, literal text, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens, one per call.

Features:
    - Skips whitespace (space, tab, newline, carriage return)
    - Recognizes two-character operators (`==`, `!=`) with one character of lookahead
    - Recognizes:
        * Identifiers and keywords (ASCII letters, digits and `_`)
        * Integer literals (ASCII digits only; `-` is always its own token)
        * Operators and delimiters
    - Any other character becomes an `ILLEGAL` token; the lexer never raises on bad input

Example:
    >>> lexer = Lexer(CharacterStream("let five = 5;"))
    >>> lexer.next_token()
    Token(LET, 'let')

Exports:
    - CharacterStream
    - Token
    - Lexer
    - lookup_ident
    - tokenize
"""

import string
from collections.abc import Iterator
from typing import Any

from monkey.monkey_constants import (
    EOF,
    EOF_CHAR,
    IDENT,
    ILLEGAL,
    INT,
    keywords,
    token_hashmap,
)

IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CHARS = IDENT_START | frozenset(string.digits)
DIGITS = frozenset(string.digits)
WHITESPACE = frozenset(" \t\n\r")


def lookup_ident(ident: str) -> str:
    """Resolves an identifier to its keyword token type, defaulting to ``IDENT``."""
    return keywords.get(ident, IDENT)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    `peek()` is the lexer's current character and `peek(1)` its read-ahead character.
    Past the end of the source both return `EOF_CHAR` (the empty string), which is only
    ever used to detect the end of input and never becomes token text.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or `EOF_CHAR` if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return EOF_CHAR
        return self.source[index]

    def end_of_file(self) -> bool:
        """Checks if the stream has consumed every character of the source.

        Returns:
            bool: True if no characters remain, False otherwise.
        """
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the MONKEY language.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'INT', 'EOF').
        literal (str): The source text of the token ("" for EOF).
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("type", "literal", "line", "col")

    def __init__(self, type_: str, literal: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.literal!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.literal, self.line, self.col))


class Lexer:
    """Lexical analyzer for the MONKEY language.

    The Lexer pulls characters from a CharacterStream and produces exactly one Token per
    call to `next_token()`. Once the input is exhausted every further call returns an
    `EOF` token, so the parser may keep pulling past the end.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def __iter__(self) -> Iterator[Token]:
        """Yields tokens up to and including the first `EOF`."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == EOF:
                return

    def peek(self) -> str:
        """Returns the current character without consuming it.

        Returns:
            str: The upcoming character, or an empty string at end of input.
        """
        return self.stream.peek()

    def peek_next(self) -> str:
        """Returns the character after the current one without consuming anything.

        Returns:
            str: The character one past the current position, or an empty string if
            there is none.
        """
        return self.stream.peek(1)

    def advance(self) -> str:
        """Consumes and returns the current character.

        Returns:
            str: The consumed character.

        Raises:
            EOFError: If the stream is already at end of input.
        """
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips spaces, tabs, carriage returns and newlines."""
        while self.peek() in WHITESPACE:
            self.advance()

    def match_operator(self) -> Token | None:
        """Matches a one- or two-character operator or delimiter at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        ch = self.peek()
        pair = ch + self.peek_next()
        if len(pair) == 2 and pair in token_hashmap:
            self.advance()
            self.advance()
            return Token(token_hashmap[pair], pair, line, col)
        if ch in token_hashmap:
            self.advance()
            return Token(token_hashmap[ch], ch, line, col)
        return None

    def read_while(self, allowed: frozenset[str]) -> str:
        """Consumes the maximal run of characters in `allowed`."""
        text = ""
        while not self.stream.end_of_file() and self.peek() in allowed:
            text += self.advance()
        return text

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; `EOF` with an empty literal at end of input.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(EOF, "", line, col)

        # 1. Operator or delimiter
        token = self.match_operator()
        if token:
            return token

        ch = self.peek()

        # 2. Identifier or keyword
        if ch in IDENT_START:
            ident = self.read_while(IDENT_CHARS)
            return Token(lookup_ident(ident), ident, line, col)

        # 3. Integer
        if ch in DIGITS:
            return Token(INT, self.read_while(DIGITS), line, col)

        # 4. Unknown character
        return Token(ILLEGAL, self.advance(), line, col)


def tokenize(source: str) -> list[Token]:
    """Lexes a whole source string, returning every token including the final `EOF`."""
    return list(Lexer(CharacterStream(source)))


__all__ = ["CharacterStream", "Lexer", "Token", "lookup_ident", "tokenize"]
