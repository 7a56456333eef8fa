"""
Tree-walking interpreter for DSL execution.

Executes statements against an Environment and performs the program's
side effects: printing for 'speak', reading a line for 'input', and
stopping the program for 'exit'.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO, Tuple

from .values import (
    Value, ASSIGN_SENTINEL,
    number_val, string_val, bool_val, literal_val,
    TRUE_TEXT, FALSE_TEXT,
)
from .context import Environment

from ..ast import (
    Statement, Block, ExpressionStatement, Branch, Loop, Speak, Input, Var, Exit,
    Expr, Assign, Binary, Literal, Variable,
)
from ..config import RuntimeConfig, ErrorPolicy
from ..errors import (
    DslError, Diagnostic, DiagnosticCollector,
    error_type_mismatch, error_division_by_zero, error_non_boolean_condition,
    error_chained_assignment, error_missing_operator, error_evaluation_too_deep,
)
from ..tokens import TokenType, SourceSpan, BINARY_OPERATORS

logger = logging.getLogger(__name__)

OPERATOR_SYMBOLS = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.EQ: "==",
}


class ExitSignal(Exception):
    """Raised by an 'exit' statement to stop the whole program."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


@dataclass
class ExecutionResult:
    """Result of running a program."""
    success: bool
    exited: bool = False
    diagnostics: List[Diagnostic] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


class Interpreter:
    """
    Tree-walking interpreter for DSL programs.

    Evaluates AST nodes by dispatching on their type. Errors are raised as
    DslError subclasses; 'exit' raises ExitSignal. Use run_program() for a
    driver that turns both into an ExecutionResult.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None,
                 stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        """
        Initialize the interpreter.

        Args:
            config: Runtime options (scoping, value storage, error policy)
            stdin: Stream read by 'input' (defaults to sys.stdin)
            stdout: Stream written by 'speak' (defaults to sys.stdout)
        """
        self.config = config or RuntimeConfig()
        self.stdin = stdin
        self.stdout = stdout
        self.environment = Environment(self.config.scoping, self.config.value_storage)

    def run(self, program: List[Statement]) -> None:
        """Execute root statements in order.

        Raises:
            DslError: on the first error
            ExitSignal: when an 'exit' statement runs
        """
        for stmt in program:
            self.execute(stmt)

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(self, stmt: Statement) -> None:
        """Execute a statement."""
        if isinstance(stmt, Block):
            self._execute_block(stmt)
        elif isinstance(stmt, ExpressionStatement):
            self._execute_expression(stmt)
        elif isinstance(stmt, Var):
            self.environment.define(stmt.name, self._evaluate_value(stmt.init))
        elif isinstance(stmt, Speak):
            self._execute_speak(stmt)
        elif isinstance(stmt, Input):
            self._execute_input(stmt)
        elif isinstance(stmt, Branch):
            self._execute_branch(stmt)
        elif isinstance(stmt, Loop):
            self._execute_loop(stmt)
        elif isinstance(stmt, Exit):
            logger.debug("exit statement reached")
            raise ExitSignal(0)
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_block(self, block: Block) -> None:
        with self.environment.new_scope("block"):
            for stmt in block.statements:
                self.execute(stmt)

    def _execute_expression(self, stmt: ExpressionStatement) -> None:
        # The result (the assignment sentinel, usually) is discarded
        self.evaluate(stmt.expression)

    def _execute_speak(self, stmt: Speak) -> None:
        out = self.stdout if self.stdout is not None else sys.stdout
        out.write(self.display(stmt.expression) + "\n")
        out.flush()

    def _execute_input(self, stmt: Input) -> None:
        stream = self.stdin if self.stdin is not None else sys.stdin
        line = stream.readline()
        if not line:
            logger.debug("end of input while reading %r, binding empty text", stmt.name)
        self.environment.define(stmt.name, string_val(line.rstrip("\r\n")))

    def _execute_branch(self, stmt: Branch) -> None:
        condition = self.evaluate(stmt.condition)
        if condition.is_string and condition.data == TRUE_TEXT:
            self.execute(stmt.then)
        elif condition.is_string and condition.data == FALSE_TEXT:
            pass
        else:
            found = repr(condition.data) if condition.is_string else f"number {condition.display()}"
            raise error_non_boolean_condition(found, stmt.condition.span)

    def _execute_loop(self, stmt: Loop) -> None:
        while True:
            self.execute(stmt.body)

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(self, expr: Expr) -> Value:
        """Reduce an expression to a value.

        A top-level Assign performs the assignment and returns a sentinel
        String that callers should ignore.
        """
        if isinstance(expr, Assign):
            value = self._evaluate_value(expr.value)
            self.environment.assign(expr.name, value, expr.span)
            return ASSIGN_SENTINEL
        return self._evaluate_value(expr)

    def display(self, expr: Expr) -> str:
        """Evaluate an expression to its printable text."""
        return self._evaluate_value(expr).display()

    def _evaluate_value(self, expr: Expr) -> Value:
        """Evaluate an expression in value position, where Assign is illegal."""
        if isinstance(expr, Literal):
            return literal_val(expr.value)
        elif isinstance(expr, Variable):
            return self.environment.lookup(expr.name, expr.span)
        elif isinstance(expr, Binary):
            return self._eval_binary(expr)
        elif isinstance(expr, Assign):
            raise error_chained_assignment(expr.name, expr.span)
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_binary(self, op: Binary) -> Value:
        # Left-deep chains (a + b + c ...) are walked without recursion.
        # Both sides are always evaluated, left first.
        spine = []
        node = op
        while isinstance(node, Binary):
            spine.append(node)
            node = node.left

        value = self._evaluate_value(node)
        for binary in reversed(spine):
            right = self._evaluate_value(binary.right)
            value = apply_operator(binary.operator, value, right, binary)
        return value


def _numeric_operands(operator: TokenType, left: Value, right: Value,
                      span: Optional[SourceSpan]) -> Tuple[float, float]:
    left_num = left.as_number()
    right_num = right.as_number()
    if left_num is None or right_num is None:
        raise error_type_mismatch(
            OPERATOR_SYMBOLS[operator], left.display(), right.display(), span
        )
    return left_num, right_num


def apply_operator(operator: TokenType, left: Value, right: Value,
                   node: Optional[Binary] = None) -> Value:
    """Apply a binary operator to two evaluated operands.

    Raises:
        EvalError: TYPE_MISMATCH, DIVISION_BY_ZERO or MISSING_OPERATOR
    """
    span = node.span if node is not None else None
    if operator not in BINARY_OPERATORS:
        found = operator.name if isinstance(operator, TokenType) else repr(operator)
        raise error_missing_operator(found, span)

    if operator == TokenType.PLUS:
        if left.is_number and right.is_number:
            return number_val(left.data + right.data)
        if left.is_string and right.is_string:
            left_num, right_num = left.as_number(), right.as_number()
            if left_num is not None and right_num is not None:
                return number_val(left_num + right_num)
            return string_val(left.data + right.data)
        return string_val(left.display() + right.display())

    elif operator == TokenType.MINUS:
        left_num, right_num = _numeric_operands(operator, left, right, span)
        return number_val(left_num - right_num)

    elif operator == TokenType.STAR:
        left_num, right_num = _numeric_operands(operator, left, right, span)
        return number_val(left_num * right_num)

    elif operator == TokenType.SLASH:
        left_num, right_num = _numeric_operands(operator, left, right, span)
        if right_num == 0.0:
            raise error_division_by_zero(span)
        return number_val(left_num / right_num)

    else:  # EQ
        if left.is_number and right.is_number:
            return bool_val(left.data == right.data)
        return bool_val(left.display() == right.display())


# Convenience drivers

def run_program(
    program: List[Statement],
    config: Optional[RuntimeConfig] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    source: Optional[str] = None,
) -> ExecutionResult:
    """
    Run a parsed program and report how it ended.

    With ErrorPolicy.ABORT the first error stops the program. With
    ErrorPolicy.CONTINUE the failing root statement is recorded and the
    next root statement runs. 'exit' always ends the program successfully.
    When source is given, runtime diagnostics quote the failing line.
    """
    config = config or RuntimeConfig()
    interpreter = Interpreter(config, stdin=stdin, stdout=stdout)
    collector = DiagnosticCollector()

    for stmt in program:
        try:
            interpreter.execute(stmt)
        except ExitSignal:
            return ExecutionResult(
                success=not collector.has_errors,
                exited=True,
                diagnostics=collector.diagnostics,
                error_message=_first_message(collector),
            )
        except RecursionError:
            error = error_evaluation_too_deep(stmt.span)
        except DslError as e:
            error = e
        else:
            continue

        _attach_source_line(error.diagnostic, source)
        collector.add_error(error)
        if config.error_policy == ErrorPolicy.ABORT or collector.should_stop:
            break
        logger.debug("recorded %s, continuing with next statement", error.code)

    return ExecutionResult(
        success=not collector.has_errors,
        diagnostics=collector.diagnostics,
        error_message=_first_message(collector),
    )


def _attach_source_line(diagnostic: Diagnostic, source: Optional[str]) -> None:
    if source is None or diagnostic.span is None or diagnostic.source_line is not None:
        return
    lines = source.splitlines()
    line_num = diagnostic.span.start.line
    if 1 <= line_num <= len(lines):
        diagnostic.source_line = lines[line_num - 1]


def _first_message(collector: DiagnosticCollector) -> Optional[str]:
    if collector.diagnostics:
        return collector.diagnostics[0].message
    return None


def compile_and_run(
    source: str,
    config: Optional[RuntimeConfig] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    filename: Optional[str] = None,
) -> ExecutionResult:
    """
    High-level API to tokenize, parse and run DSL source in one call.

        from robot_dsl import compile_and_run

        result = compile_and_run('global x = 42; speak x;')
        if not result.success:
            print(f"Error: {result.error_message}")
    """
    from ..parser import parse_source

    config = config or RuntimeConfig()
    try:
        program = parse_source(source, filename, config.integer_literals)
    except DslError as e:
        return ExecutionResult(
            success=False,
            diagnostics=[e.diagnostic],
            error_message=e.diagnostic.message,
        )
    return run_program(program, config, stdin=stdin, stdout=stdout, source=source)
