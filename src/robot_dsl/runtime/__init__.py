"""
DSL Runtime - Tree-walking interpreter for robot DSL programs.

This module provides:
- Interpreter: Executes statements, performing speak/input/exit effects
- Value: Tagged Number/String runtime values
- Environment: Scope frame stack for variable bindings
"""

from .values import (
    Value,
    ValueType,
    TRUE_TEXT,
    FALSE_TEXT,
    ASSIGN_SENTINEL,
    number_val,
    string_val,
    bool_val,
    literal_val,
    format_number,
    parse_number,
)

from .context import (
    Scope,
    Environment,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    ExitSignal,
    apply_operator,
    run_program,
    compile_and_run,
)

__all__ = [
    # Values
    "Value",
    "ValueType",
    "TRUE_TEXT",
    "FALSE_TEXT",
    "ASSIGN_SENTINEL",
    "number_val",
    "string_val",
    "bool_val",
    "literal_val",
    "format_number",
    "parse_number",
    # Context
    "Scope",
    "Environment",
    # Interpreter
    "Interpreter",
    "ExecutionResult",
    "ExitSignal",
    "apply_operator",
    "run_program",
    "compile_and_run",
]
