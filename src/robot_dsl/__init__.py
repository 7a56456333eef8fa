"""
robot-dsl: a small scripting language for conversational robot scripts.

This package provides:
- Lexer: Tokenizes DSL source code
- Parser: Builds an AST (a list of statements) from tokens
- Interpreter: Executes statements against a scope stack
- Config: Runtime options loaded from YAML, environment and CLI

Usage:
    from robot_dsl import tokenize, parse, Interpreter

    source = '''
    global name = "Tom";
    speak "Hello, " + name;
    '''
    program = parse(tokenize(source))
    Interpreter().run(program)

Or in one call, with errors reported instead of raised:

    result = compile_and_run(source)
    if not result.success:
        print(result.error_message)
"""

import logging

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
    is_keyword,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
    parse_source,
)

from .ast import (
    AstNode,
    AstVisitor,
    # Expressions
    Expr,
    Assign,
    Binary,
    Literal,
    Variable,
    # Statements
    Statement,
    Block,
    ExpressionStatement,
    Branch,
    Loop,
    Speak,
    Input,
    Var,
    Exit,
    Program,
    # Utilities
    PrintVisitor,
    format_ast,
    print_ast,
)

from .errors import (
    ErrorKind,
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    DslError,
    LexerError,
    ParserError,
    EvalError,
)

from .config import (
    RuntimeConfig,
    ScopeMode,
    StorageMode,
    ErrorPolicy,
    ConfigError,
    load_config,
)

from .runtime import (
    Value,
    ValueType,
    Environment,
    Interpreter,
    ExecutionResult,
    ExitSignal,
    run_program,
    compile_and_run,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Tokens
    "Token",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    "KEYWORDS",
    "is_keyword",
    # Lexer
    "Lexer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    # AST
    "AstNode",
    "AstVisitor",
    "Expr",
    "Assign",
    "Binary",
    "Literal",
    "Variable",
    "Statement",
    "Block",
    "ExpressionStatement",
    "Branch",
    "Loop",
    "Speak",
    "Input",
    "Var",
    "Exit",
    "Program",
    "PrintVisitor",
    "format_ast",
    "print_ast",
    # Errors
    "ErrorKind",
    "ErrorSeverity",
    "Diagnostic",
    "DiagnosticCollector",
    "DslError",
    "LexerError",
    "ParserError",
    "EvalError",
    # Config
    "RuntimeConfig",
    "ScopeMode",
    "StorageMode",
    "ErrorPolicy",
    "ConfigError",
    "load_config",
    # Runtime
    "Value",
    "ValueType",
    "Environment",
    "Interpreter",
    "ExecutionResult",
    "ExitSignal",
    "run_program",
    "compile_and_run",
]
