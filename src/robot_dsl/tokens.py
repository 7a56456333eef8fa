"""
Token types for the robot DSL lexer.

Token categories follow the error code ranges used by the diagnostics:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the DSL lexer."""

    # --- Keywords (case-insensitive) ---
    GLOBAL = auto()             # global
    FN = auto()                 # fn (reserved, no function support)
    SPEAK = auto()              # speak
    INPUT = auto()              # input
    IF = auto()                 # if
    EXIT = auto()               # exit
    LOOP = auto()               # loop

    # --- Punctuation ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    ASSIGN = auto()             # =
    SEMICOLON = auto()          # ;
    LBRACE = auto()             # {
    RBRACE = auto()             # }

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /

    # --- Comparison ---
    EQ = auto()                 # ==

    # --- Literals ---
    IDENTIFIER = auto()         # user-defined names
    NUMBER = auto()             # 3.14 (and 42 unless strict)
    STRING = auto()             # "hello"

    # --- Special ---
    ERROR = auto()              # unrecognized lexeme
    EOF = auto()                # end of file


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # float for NUMBER, str otherwise
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    @property
    def start(self) -> int:
        return self.span.start.offset

    @property
    def end(self) -> int:
        return self.span.end.offset

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.STRING,
                         TokenType.IDENTIFIER, TokenType.ERROR):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Keyword mapping, keyed by the case-folded lexeme
KEYWORDS: dict[str, TokenType] = {
    "global": TokenType.GLOBAL,
    "fn": TokenType.FN,
    "speak": TokenType.SPEAK,
    "input": TokenType.INPUT,
    "if": TokenType.IF,
    "exit": TokenType.EXIT,
    "loop": TokenType.LOOP,
}

# Single-character tokens. '=' is handled separately because of '=='.
PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ";": TokenType.SEMICOLON,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
}

# Operators the evaluator knows how to apply
BINARY_OPERATORS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
    TokenType.SLASH,
    TokenType.EQ,
})

# Whitespace skipped between tokens
WHITESPACE = " \t\n\f\r"


def keyword_type(lexeme: str) -> Optional[TokenType]:
    """Return the keyword token type for a lexeme, ignoring case."""
    return KEYWORDS.get(lexeme.casefold())


def is_keyword(token_type: TokenType) -> bool:
    """Check if a token type is one of the language keywords."""
    return token_type in KEYWORDS.values()
