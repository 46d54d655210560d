"""
  Tern Lexer

- Streaming, lazy tokenization: `lex` is a generator, so callers can stop early
  or restart from scratch by calling it again.
- A single master regex with named groups classifies each lexeme.
- Numbers become floats, strings lose their quotes; both are carried as the
  token literal.
- Backslashes inside strings are ordinary characters (no escape sequences).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from tern import TernValue
from tern.errors import LexError


class TokenKind(Enum):
    # punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACK = "["
    RBRACK = "]"
    COMMA = ","
    DOT = "."
    SEMICOLON = ";"
    COLON = ":"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    BANG = "!"
    EQUAL = "="
    EQUAL_EQUAL = "=="
    BANG_EQUAL = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    PLUS_PLUS = "++"
    MINUS_MINUS = "--"
    # literals
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    # keywords
    DEF = "def"
    VAR = "var"
    FOR = "for"
    IF = "if"
    ELSE = "else"
    PRINT = "print"
    RETURN = "return"
    WHILE = "while"
    AND = "and"
    OR = "or"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"

    EOF = "end of input"


KEYWORDS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in (
        TokenKind.DEF, TokenKind.VAR, TokenKind.FOR, TokenKind.IF, TokenKind.ELSE,
        TokenKind.PRINT, TokenKind.RETURN, TokenKind.WHILE, TokenKind.AND,
        TokenKind.OR, TokenKind.TRUE, TokenKind.FALSE, TokenKind.NULL,
    )
}

OPERATORS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in TokenKind
    if kind.value and not kind.value[0].isalpha()
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    literal: TernValue
    line: int

    def __str__(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        return f"'{self.lexeme}'"


TOKEN_RE = re.compile(
    r"(?P<newline>\n)"
    r"|(?P<whitespace>[ \t\r\f\v]+)"
    r"|(?P<comment>//[^\n]*)"  # single-line comment
    r"|(?P<number>[0-9]+(?:\.[0-9]+)?)"  # no exponent, no leading/trailing dot
    r'|(?P<string>"[^"]*")'  # double-quoted, may span lines
    r'|(?P<open_string>")'  # a quote with no closing partner
    r"|(?P<identifier>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<operator>==|!=|<=|>=|\+\+|--|[(){}\[\],.;:+\-*/!=<>])"
)


def lex(source: str) -> Iterator[Token]:
    """Token generator: yields Tokens, finishing with a single EOF token.

    Raises LexError at the first unterminated string or unknown character.
    """
    pos = 0
    line = 1
    n = len(source)

    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if m is None:
            raise LexError(f"Unexpected character {source[pos]!r}", line)
        group = m.lastgroup
        text = m.group()
        pos = m.end()

        if group == "newline":
            line += 1
        elif group in ("whitespace", "comment"):
            continue
        elif group == "number":
            yield Token(TokenKind.NUMBER, text, float(text), line)
        elif group == "string":
            yield Token(TokenKind.STRING, text, text[1:-1], line)
            line += text.count("\n")
        elif group == "open_string":
            raise LexError("Unterminated string", line)
        elif group == "identifier":
            kind = KEYWORDS.get(text, TokenKind.IDENTIFIER)
            yield Token(kind, text, None, line)
        else:
            yield Token(OPERATORS[text], text, None, line)

    yield Token(TokenKind.EOF, "", None, line)
