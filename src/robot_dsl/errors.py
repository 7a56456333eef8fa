"""
DSL-specific exceptions and error handling.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime (evaluation) errors

Every fatal condition of the language maps to exactly one ErrorKind, so the
top-level driver can decide whether to abort or report and continue.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"


class ErrorKind(Enum):
    """Closed set of error kinds raised by the front-end and evaluator."""
    LEXICAL_ERROR = "lexical-error"
    PARSE_ERROR = "parse-error"
    UNBOUND_VARIABLE = "unbound-variable"
    TYPE_MISMATCH = "type-mismatch"
    DIVISION_BY_ZERO = "division-by-zero"
    NON_BOOLEAN_CONDITION = "non-boolean-condition"
    ILLEGAL_CHAINED_ASSIGNMENT = "illegal-chained-assignment"
    MISSING_OPERATOR = "missing-operator"
    NESTING_TOO_DEEP = "nesting-too-deep"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None   # None for programmatically built ASTs
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        if self.span is not None:
            parts.append(f"{self.span.start}: {self.severity.value}[{self.code}]: {self.message}")
        else:
            parts.append(f"{self.severity.value}[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            end_col = self.span.end.column if self.span.start.line == self.span.end.line else len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "range": None,
            "hints": self.hints,
        }
        if self.span is not None:
            data["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return data


class DslError(Exception):
    """Base exception for DSL errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, diagnostic: Diagnostic, kind: Optional[ErrorKind] = None):
        self.diagnostic = diagnostic
        if kind is not None:
            self.kind = kind
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(DslError):
    """Error during lexical analysis (E0xx)."""
    kind = ErrorKind.LEXICAL_ERROR


class ParserError(DslError):
    """Error during parsing (E1xx)."""
    kind = ErrorKind.PARSE_ERROR


class EvalError(DslError):
    """Error during evaluation (E4xx). The kind tells which condition fired."""
    pass


# --- Lexer error codes ---

def error_invalid_token(lexeme: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Input matches no token pattern."""
    diag = Diagnostic(
        code="E001",
        message=f"invalid token '{lexeme}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return LexerError(diag)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_unexpected_eof(expected: str, span: SourceSpan) -> ParserError:
    """E102: Unexpected end of file."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of file, expected {expected}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )
    return ParserError(diag)


def error_unsupported_function(span: SourceSpan, source_line: str = None) -> ParserError:
    """E103: 'fn' is reserved but function declarations are not supported."""
    diag = Diagnostic(
        code="E103",
        message="function declarations are not supported",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["'fn' is a reserved keyword; inline the statements instead"],
    )
    return ParserError(diag)


def error_nesting_too_deep(span: SourceSpan, source_line: str = None) -> ParserError:
    """E104: Parentheses or blocks nested beyond the parser's stack."""
    diag = Diagnostic(
        code="E104",
        message="program is nested too deeply to parse",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


# --- Runtime error codes ---

def _runtime_error(code: str, kind: ErrorKind, message: str,
                   span: Optional[SourceSpan], hints: List[str] = None) -> EvalError:
    diag = Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        hints=hints or [],
    )
    return EvalError(diag, kind)


def error_unbound_variable(name: str, span: Optional[SourceSpan] = None) -> EvalError:
    """E401: Variable read or assigned before being bound."""
    return _runtime_error(
        "E401", ErrorKind.UNBOUND_VARIABLE,
        f"variable '{name}' cannot be found", span,
        hints=[f"declare it first with 'global {name} = ...;'"],
    )


def error_type_mismatch(operator: str, left: str, right: str,
                        span: Optional[SourceSpan] = None) -> EvalError:
    """E402: Arithmetic operand is not numeric."""
    return _runtime_error(
        "E402", ErrorKind.TYPE_MISMATCH,
        f"operator '{operator}' needs numeric operands, found {left!r} and {right!r}",
        span,
    )


def error_division_by_zero(span: Optional[SourceSpan] = None) -> EvalError:
    """E403: Division by zero."""
    return _runtime_error("E403", ErrorKind.DIVISION_BY_ZERO,
                          "division by zero is not allowed", span)


def error_non_boolean_condition(found: str, span: Optional[SourceSpan] = None) -> EvalError:
    """E404: Branch condition is not "True" or "False"."""
    return _runtime_error(
        "E404", ErrorKind.NON_BOOLEAN_CONDITION,
        f"condition must be \"True\" or \"False\", found {found}", span,
    )


def error_chained_assignment(name: str, span: Optional[SourceSpan] = None) -> EvalError:
    """E405: Assignment used as a sub-expression value."""
    return _runtime_error(
        "E405", ErrorKind.ILLEGAL_CHAINED_ASSIGNMENT,
        f"chained assignment to '{name}' is not permitted", span,
        hints=["assignment may only appear as a statement of its own"],
    )


def error_missing_operator(found: str, span: Optional[SourceSpan] = None) -> EvalError:
    """E406: Binary node carries a token that is not an operator."""
    return _runtime_error("E406", ErrorKind.MISSING_OPERATOR,
                          f"need an operator, found {found}", span)


def error_evaluation_too_deep(span: Optional[SourceSpan] = None) -> EvalError:
    """E407: Statement or expression tree too deep to evaluate."""
    return _runtime_error(
        "E407", ErrorKind.NESTING_TOO_DEEP,
        "statement is nested too deeply to evaluate", span,
    )


class DiagnosticCollector:
    """Collects diagnostics during compilation and execution."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: DslError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"\n{self._error_count} error(s)")
        return "\n\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
        }
