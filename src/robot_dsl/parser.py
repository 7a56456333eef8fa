"""
Recursive descent parser for the robot DSL.

Converts a token stream into a list of statements (the program).

Grammar:
    program     := statement*
    statement   := 'global' IDENTIFIER '=' expression ';'
                 | 'speak' expression ';'
                 | 'input' IDENTIFIER ';'
                 | 'if' '(' expression ')' statement ';'?
                 | 'loop' statement ';'?
                 | 'exit' ';'
                 | block ';'?
                 | expression ';'
    block       := '{' statement* '}'
    expression  := IDENTIFIER '=' expression | equality
    equality    := additive ( '==' additive )*
    additive    := term ( ( '+' | '-' ) term )*
    term        := primary ( ( '*' | '/' ) primary )*
    primary     := NUMBER | STRING | IDENTIFIER | '(' expression ')'
"""

from typing import List, Optional
from .tokens import Token, TokenType, SourceSpan
from .ast import (
    Expr, Assign, Binary, Literal, Variable,
    Statement, Block, ExpressionStatement, Branch, Loop, Speak, Input, Var, Exit,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_unsupported_function,
    error_nesting_too_deep,
)
from .lexer import tokenize


class Parser:
    """
    Recursive descent parser for the robot DSL.

    Usage:
        parser = Parser(tokens)
        program = parser.parse_program()

    Operator precedence, lowest first:
        = (right-associative, statement level)
        ==
        + -
        * /
    """

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.source = source  # Original source, for error excerpts
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[idx]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _advance(self) -> Token:
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _source_line(self, line_num: int) -> Optional[str]:
        if self.source is None:
            return None
        lines = self.source.splitlines()
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def _error(self, expected: str) -> None:
        token = self._current()
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span)
        raise error_unexpected_token(
            expected, str(token), token.span, self._source_line(token.span.start.line)
        )

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        end_token = self.tokens[max(0, self.pos - 1)]
        return SourceSpan(start.span.start, end_token.span.end)

    # =========================================================================
    # Statements
    # =========================================================================

    def parse_program(self) -> List[Statement]:
        """Parse every statement up to EOF.

        Raises:
            ParserError: E104 when nesting exhausts the interpreter stack
        """
        statements = []
        try:
            while not self._is_at_end():
                statements.append(self._parse_statement())
        except RecursionError:
            token = self._current()
            raise error_nesting_too_deep(
                token.span, self._source_line(token.span.start.line)
            ) from None
        return statements

    def _parse_statement(self) -> Statement:
        token = self._current()
        kind = token.type

        if kind == TokenType.GLOBAL:
            return self._parse_var()
        if kind == TokenType.SPEAK:
            self._advance()
            expression = self._parse_expression()
            self._consume(TokenType.SEMICOLON, "';'")
            return Speak(expression, span=self._span_from(token))
        if kind == TokenType.INPUT:
            self._advance()
            name = self._consume(TokenType.IDENTIFIER, "variable name").value
            self._consume(TokenType.SEMICOLON, "';'")
            return Input(name, span=self._span_from(token))
        if kind == TokenType.IF:
            return self._parse_branch()
        if kind == TokenType.LOOP:
            self._advance()
            body = self._parse_statement()
            self._match(TokenType.SEMICOLON)
            return Loop(body, span=self._span_from(token))
        if kind == TokenType.EXIT:
            self._advance()
            self._consume(TokenType.SEMICOLON, "';'")
            return Exit(span=self._span_from(token))
        if kind == TokenType.LBRACE:
            block = self._parse_block()
            self._match(TokenType.SEMICOLON)
            return block
        if kind == TokenType.FN:
            raise error_unsupported_function(token.span, self._source_line(token.span.start.line))

        expression = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';'")
        return ExpressionStatement(expression, span=self._span_from(token))

    def _parse_var(self) -> Var:
        start = self._advance()  # 'global'
        name = self._consume(TokenType.IDENTIFIER, "variable name").value
        self._consume(TokenType.ASSIGN, "'='")
        init = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';'")
        return Var(name, init, span=self._span_from(start))

    def _parse_branch(self) -> Branch:
        start = self._advance()  # 'if'
        self._consume(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        then = self._parse_statement()
        self._match(TokenType.SEMICOLON)
        return Branch(condition, then, span=self._span_from(start))

    def _parse_block(self) -> Block:
        start = self._consume(TokenType.LBRACE, "'{'")
        statements = []
        while not self._check(TokenType.RBRACE):
            if self._is_at_end():
                self._error("'}'")
            statements.append(self._parse_statement())
        self._advance()  # '}'
        return Block(statements, span=self._span_from(start))

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expr:
        if self._check(TokenType.IDENTIFIER) and self._peek(1).type == TokenType.ASSIGN:
            start = self._advance()
            self._advance()  # '='
            value = self._parse_expression()
            return Assign(start.value, value, span=self._span_from(start))
        return self._parse_equality()

    def _parse_binary_level(self, operand, operators) -> Expr:
        start = self._current()
        left = operand()
        while self._current().type in operators:
            operator = self._advance().type
            right = operand()
            left = Binary(left, operator, right, span=self._span_from(start))
        return left

    def _parse_equality(self) -> Expr:
        return self._parse_binary_level(self._parse_additive, (TokenType.EQ,))

    def _parse_additive(self) -> Expr:
        return self._parse_binary_level(self._parse_term, (TokenType.PLUS, TokenType.MINUS))

    def _parse_term(self) -> Expr:
        return self._parse_binary_level(self._parse_primary, (TokenType.STAR, TokenType.SLASH))

    def _parse_primary(self) -> Expr:
        token = self._current()
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return Literal(token.value, span=token.span)
        if self._match(TokenType.IDENTIFIER):
            return Variable(token.value, span=token.span)
        if self._match(TokenType.LPAREN):
            expression = self._parse_expression()
            self._consume(TokenType.RPAREN, "')'")
            return expression
        self._error("expression")


def parse(tokens: List[Token], source: Optional[str] = None) -> List[Statement]:
    """
    Parse a token list (ending in EOF) into a program.

    Raises:
        ParserError: If the tokens do not form a valid program
    """
    return Parser(tokens, source=source).parse_program()


def parse_source(source: str, filename: Optional[str] = None,
                 integer_literals: bool = True) -> List[Statement]:
    """Tokenize and parse source text in one step.

    Raises:
        LexerError: If the source contains an invalid token
        ParserError: If the tokens do not form a valid program
    """
    tokens = tokenize(source, filename, integer_literals)
    return parse(tokens, source=source)
