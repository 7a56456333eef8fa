"""
Lexer for the robot DSL.

Converts source text into a stream of tokens for the parser.
Supports:
- Case-insensitive keywords (global, fn, speak, input, if, exit, loop)
- Unicode identifiers
- Decimal number literals (integers too, unless strict)
- Double-quoted strings without escape sequences
- Single-line comments (#)

Characters that match no pattern become ERROR tokens. The raw scan keeps
them in the stream; consumers that need well-formed input (the parser,
``spanned()``) turn them into a LexerError.
"""

from typing import Iterator, List, Optional, Tuple
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan,
    PUNCTUATION, WHITESPACE, keyword_type,
)
from .errors import error_invalid_token


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == '_'


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch == '_'


class _Scanner:
    """
    Cursor over one pass of the source text.

    Each scan gets its own scanner, so several token streams over the
    same Lexer can be consumed independently.
    """

    def __init__(self, lexer: "Lexer"):
        self.source = lexer.source
        self.filename = lexer.filename
        self.integer_literals = lexer.integer_literals
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        return SourceSpan(start, self._location())

    def end_span(self) -> SourceSpan:
        """Empty span at the current position, used for EOF."""
        here = self._location()
        return SourceSpan(here, here)

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace_and_comments(self) -> None:
        while not self._is_at_end():
            ch = self._peek()
            if ch in WHITESPACE:
                self._advance()
            elif ch == '#':
                # Comment runs to end of line, newline included
                while not self._is_at_end() and self._peek() != '\n':
                    self._advance()
            else:
                return

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _scan_string(self) -> Token:
        """Scan a string literal. Strings may span lines and have no escapes."""
        start = self._location()
        close = self.source.find('"', self.pos + 1)
        if close == -1:
            # Unterminated: the quote alone is the bad lexeme
            self._advance()
            return self._make_token(TokenType.ERROR, '"', start)

        self._advance()  # opening quote
        while self.pos < close:
            self._advance()
        self._advance()  # closing quote
        value = self.source[start.offset + 1:self.pos - 1]
        return self._make_token(TokenType.STRING, value, start)

    def _scan_number(self) -> Token:
        """Scan a numeric literal: digits.digits, or digits when integers are allowed."""
        start = self._location()
        while _is_digit(self._peek()):
            self._advance()

        has_fraction = False
        if self._peek() == '.' and _is_digit(self._peek(1)):
            has_fraction = True
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        lexeme = self.source[start.offset:self.pos]
        if not has_fraction and not self.integer_literals:
            return self._make_token(TokenType.ERROR, lexeme, start)
        return self._make_token(TokenType.NUMBER, float(lexeme), start)

    def _scan_identifier_or_keyword(self) -> Token:
        start = self._location()
        while _is_identifier_char(self._peek()):
            self._advance()

        lexeme = self.source[start.offset:self.pos]
        token_type = keyword_type(lexeme)
        if token_type is not None:
            return self._make_token(token_type, lexeme, start)
        return self._make_token(TokenType.IDENTIFIER, lexeme, start)

    def next_token(self) -> Optional[Token]:
        """Scan the next token, or return None at end of input."""
        self._skip_whitespace_and_comments()
        if self._is_at_end():
            return None

        start = self._location()
        ch = self._peek()

        if ch == '"':
            return self._scan_string()
        if _is_digit(ch):
            return self._scan_number()
        if _is_identifier_start(ch):
            return self._scan_identifier_or_keyword()

        self._advance()
        if ch == '=':
            if self._peek() == '=':
                self._advance()
                return self._make_token(TokenType.EQ, "==", start)
            return self._make_token(TokenType.ASSIGN, ch, start)
        if ch in PUNCTUATION:
            return self._make_token(PUNCTUATION[ch], ch, start)

        return self._make_token(TokenType.ERROR, ch, start)


class Lexer:
    """
    Tokenizer for the robot DSL.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming (start offset, token, end offset) triples:
        for start, token, end in Lexer(source_code).spanned():
            process(token)

    Every scan starts again from the beginning of the source text and
    keeps its own position, so streams may be interleaved.
    """

    def __init__(self, source: str, filename: Optional[str] = None,
                 integer_literals: bool = True):
        self.source = source
        self.filename = filename
        self.integer_literals = integer_literals
        self._lines: Optional[List[str]] = None

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def scan(self) -> Iterator[Token]:
        """Lazily yield every token, ERROR tokens included. No EOF token."""
        scanner = _Scanner(self)
        while True:
            token = scanner.next_token()
            if token is None:
                return
            yield token

    def _raise_invalid(self, token: Token) -> None:
        raise error_invalid_token(
            token.lexeme, token.span, self.get_source_line(token.span.start.line)
        )

    def _valid_tokens(self, scanner: _Scanner) -> Iterator[Token]:
        while True:
            token = scanner.next_token()
            if token is None:
                return
            if token.type == TokenType.ERROR:
                self._raise_invalid(token)
            yield token

    def spanned(self) -> Iterator[Tuple[int, Token, int]]:
        """Yield (start_offset, token, end_offset) triples.

        Raises:
            LexerError: when an unrecognized lexeme is reached
        """
        for token in self._valid_tokens(_Scanner(self)):
            yield token.start, token, token.end

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens, ending with EOF."""
        scanner = _Scanner(self)
        yield from self._valid_tokens(scanner)
        yield Token(TokenType.EOF, None, "", scanner.end_span())

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens ending in EOF."""
        return list(self)


def tokenize(source: str, filename: Optional[str] = None,
             integer_literals: bool = True) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        filename: Optional filename for error messages
        integer_literals: Accept number literals without a fractional part

    Returns:
        List of tokens, the last one being EOF

    Raises:
        LexerError: If the source contains an invalid token
    """
    lexer = Lexer(source, filename, integer_literals)
    return lexer.tokenize()
