#!/usr/bin/env python3
"""
CLI for the robot DSL.

Usage:
    python -m robot_dsl run FILE [--config PATH] [--legacy] [--scoping MODE]
                                 [--value-storage MODE] [--continue-on-error]
    python -m robot_dsl check FILE [--json]
    python -m robot_dsl tokens FILE
    python -m robot_dsl ast FILE

Examples:
    # Run a script, reading 'input' lines from the terminal
    python -m robot_dsl run examples/greeter.dsl

    # Run with the first-release scope merging and text storage
    python -m robot_dsl run examples/greeter.dsl --legacy

    # Show where every token starts and ends
    python -m robot_dsl tokens examples/greeter.dsl
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("robot_dsl.cli")


def _read_source(path_str: str) -> Optional[str]:
    source_path = Path(path_str)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return source_path.read_text(encoding="utf-8")


def cmd_check(args):
    """Tokenize and parse a DSL file, reporting the first error."""
    from . import DiagnosticCollector, DslError, parse_source

    source = _read_source(args.file)
    if source is None:
        return 1

    collector = DiagnosticCollector()
    statements = 0
    try:
        statements = len(parse_source(source, args.file))
    except DslError as e:
        collector.add_error(e)

    if args.json:
        summary = {"file": args.file, "statements": statements}
        summary.update(collector.to_json())
        print(json.dumps(summary, indent=2))
    elif collector.has_errors:
        print(collector.format_all(), file=sys.stderr)
    else:
        print(f"OK: {Path(args.file).name} - {statements} statement(s), no errors")
    return 1 if collector.has_errors else 0


def cmd_tokens(args):
    """Print every token with its start and end offsets."""
    from . import DslError, Lexer

    source = _read_source(args.file)
    if source is None:
        return 1

    try:
        for start, token, end in Lexer(source, args.file).spanned():
            print(f"{start}..{end} {token}")
    except DslError as e:
        print(e.diagnostic.format(), file=sys.stderr)
        return 1
    return 0


def cmd_ast(args):
    """Print the parsed statement tree."""
    from . import DslError, format_ast, parse_source

    source = _read_source(args.file)
    if source is None:
        return 1

    try:
        program = parse_source(source, args.file)
    except DslError as e:
        print(e.diagnostic.format(), file=sys.stderr)
        return 1

    if program:
        print(format_ast(program))
    return 0


def cmd_run(args):
    """Execute a DSL script."""
    from . import (
        ConfigError, DiagnosticCollector, RuntimeConfig, compile_and_run, load_config,
    )

    source = _read_source(args.file)
    if source is None:
        return 1

    try:
        config = load_config(
            args.config,
            base=RuntimeConfig.legacy() if args.legacy else None,
            scoping=args.scoping,
            value_storage=args.value_storage,
            error_policy="continue" if args.continue_on_error else None,
        )
    except (ConfigError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug("running %s with %s", args.file, config.to_dict())
    result = compile_and_run(source, config, filename=args.file)

    if result.diagnostics:
        collector = DiagnosticCollector()
        for diag in result.diagnostics:
            collector.add(diag)
        print(collector.format_all(), file=sys.stderr)
    return result.exit_code


def _enable_debug_logging() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger = logging.getLogger("robot_dsl")
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    return handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m robot_dsl',
        description='robot DSL checker and runner',
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debug output to stderr')

    subparsers = parser.add_subparsers(dest='action', required=True)

    # check command
    check_parser = subparsers.add_parser('check', help='Check DSL file for syntax errors')
    check_parser.add_argument('file', help='DSL source file')
    check_parser.add_argument('--json', action='store_true',
                              help='Print diagnostics as JSON')

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='List the tokens of a DSL file')
    tokens_parser.add_argument('file', help='DSL source file')

    # ast command
    ast_parser = subparsers.add_parser('ast', help='Print the syntax tree of a DSL file')
    ast_parser.add_argument('file', help='DSL source file')

    # run command
    run_parser = subparsers.add_parser('run', help='Run a DSL file')
    run_parser.add_argument('file', help='DSL source file')
    run_parser.add_argument('-c', '--config', metavar='PATH',
                            help='YAML configuration file')
    run_parser.add_argument('--legacy', action='store_true',
                            help='Merge block scopes outwards and store values as text')
    run_parser.add_argument('--scoping', choices=['lexical', 'merge'],
                            help='Block scoping mode')
    run_parser.add_argument('--value-storage', choices=['tagged', 'text'],
                            help='How bound values are stored')
    run_parser.add_argument('--continue-on-error', action='store_true',
                            help='Report a failing statement and run the next one')

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        _enable_debug_logging()

    if args.action == 'check':
        return cmd_check(args)
    elif args.action == 'tokens':
        return cmd_tokens(args)
    elif args.action == 'ast':
        return cmd_ast(args)
    elif args.action == 'run':
        return cmd_run(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
