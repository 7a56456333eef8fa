"""
Abstract Syntax Tree (AST) node definitions for the robot DSL.

The AST is a strict tree: every node owns its children and nothing is
shared. The interpreter only reads it, so one parsed program can be run
any number of times.

Expressions:  Assign, Binary, Literal, Variable
Statements:   Block, ExpressionStatement, Branch, Loop, Speak, Input, Var, Exit
"""

from dataclasses import dataclass, field
from typing import Optional, List, Union, Any
from abc import ABC
from .tokens import SourceSpan, TokenType


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    # Source location for error reporting; None for hand-built trees
    span: Optional[SourceSpan] = field(default=None, kw_only=True, compare=False, repr=False)

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expr(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Assign(Expr):
    """Assignment to a named variable (e.g., a = b + c)."""
    name: str
    value: Expr


@dataclass
class Binary(Expr):
    """A binary arithmetic or equality operation (e.g., b + c, x == y)."""
    left: Expr
    operator: TokenType
    right: Expr


@dataclass
class Literal(Expr):
    """A Number (float) or String (str) literal."""
    value: Union[float, str]

    @property
    def is_number(self) -> bool:
        return not isinstance(self.value, str)


@dataclass
class Variable(Expr):
    """A reference to a bound name."""
    name: str


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class Block(Statement):
    """An ordered sequence of statements; introduces a new scope.

    Syntax:
        { speak "a"; speak "b"; }
    """
    statements: List[Statement] = field(default_factory=list)


@dataclass
class ExpressionStatement(Statement):
    """An expression evaluated for its side effect (e.g., x = x + 1;)."""
    expression: Expr


@dataclass
class Branch(Statement):
    """A single-armed conditional, there is no else.

    Syntax:
        if (answer == "yes") { speak "ok"; };
    """
    condition: Expr
    then: Statement


@dataclass
class Loop(Statement):
    """An unconditional loop; only 'exit' leaves it."""
    body: Statement


@dataclass
class Speak(Statement):
    """Print the display text of an expression followed by a newline."""
    expression: Expr


@dataclass
class Input(Statement):
    """Read one line of input and bind it to a name."""
    name: str


@dataclass
class Var(Statement):
    """A variable declaration (e.g., global name = "Tom";)."""
    name: str
    init: Expr


@dataclass
class Exit(Statement):
    """Terminate the whole program successfully."""
    pass


Program = List[Statement]


# =============================================================================
# Visitor Helpers
# =============================================================================

class PrintVisitor(AstVisitor):
    """Debug visitor that renders the AST structure as indented text."""

    def __init__(self, indent: int = 0, lines: Optional[List[str]] = None):
        self.indent = indent
        self.lines = lines if lines is not None else []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def _child(self) -> "PrintVisitor":
        return PrintVisitor(self.indent + 2, self.lines)

    def generic_visit(self, node: AstNode) -> None:
        self._emit(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._emit(f"  {name}:")
                value.accept(self._child())
            elif isinstance(value, list):
                self._emit(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        item.accept(self._child())
                    else:
                        self._emit(f"    {item!r}")
                self._emit("  ]")
            elif isinstance(value, TokenType):
                self._emit(f"  {name}: {value.name}")
            else:
                self._emit(f"  {name}: {value!r}")


def format_ast(nodes: Union[AstNode, List[AstNode]]) -> str:
    """Render one node or a whole program as indented text."""
    visitor = PrintVisitor()
    for node in (nodes if isinstance(nodes, list) else [nodes]):
        node.accept(visitor)
    return "\n".join(visitor.lines)


def print_ast(nodes: Union[AstNode, List[AstNode]]) -> None:
    """Print an AST node or program for debugging."""
    print(format_ast(nodes))
