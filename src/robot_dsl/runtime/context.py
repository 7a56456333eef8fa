"""
Variable environment for the DSL interpreter.

The environment is a stack of scope frames. Entering a block pushes a
frame, leaving it pops the frame. Lookup walks from the innermost frame
outwards.

Two scoping modes are supported:
- LEXICAL: declarations go to the innermost frame and vanish with it;
  assignment updates the frame that already binds the name.
- MERGE: the legacy behaviour. A block sees every outer binding, and on
  exit every binding it made (new names included) is copied into the
  enclosing frame. Assignment to an unknown name simply creates it.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from .values import Value, string_val
from ..config import ScopeMode, StorageMode
from ..errors import error_unbound_variable
from ..tokens import SourceSpan

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """
    A single scope frame containing variable bindings.

    Scopes form a chain via the `parent` field.
    """
    variables: Dict[str, Value] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "anonymous"  # For debugging

    def get(self, name: str) -> Optional[Value]:
        """Look up a variable in this scope or parent scopes."""
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def set(self, name: str, value: Value) -> None:
        """Set a variable in this scope (shadowing parent if exists)."""
        self.variables[name] = value

    def update(self, name: str, value: Value) -> bool:
        """
        Update an existing variable in whichever frame binds it.

        Returns True if found and updated, False if not found.
        """
        scope = self
        while scope is not None:
            if name in scope.variables:
                scope.variables[name] = value
                return True
            scope = scope.parent
        return False


class Environment:
    """
    The scope stack owned by one interpreter.

    One root frame lives for the whole program. Each interpreter must have
    its own Environment; nothing here is shared between executions.
    """

    def __init__(self, scoping: ScopeMode = ScopeMode.LEXICAL,
                 storage: StorageMode = StorageMode.TAGGED):
        self.scoping = scoping
        self.storage = storage
        self.current_scope = Scope(name="global")

    @property
    def depth(self) -> int:
        """Number of frames on the stack, root included."""
        depth = 0
        scope = self.current_scope
        while scope is not None:
            depth += 1
            scope = scope.parent
        return depth

    def _stored(self, value: Value) -> Value:
        if self.storage == StorageMode.TEXT and not value.is_string:
            return string_val(value.display())
        return value

    def lookup(self, name: str, span: Optional[SourceSpan] = None) -> Value:
        """Return the value bound to name.

        Raises:
            EvalError: UNBOUND_VARIABLE if no frame binds the name
        """
        value = self.current_scope.get(name)
        if value is None:
            raise error_unbound_variable(name, span)
        return value

    def get(self, name: str) -> Optional[Value]:
        """Return the value bound to name, or None."""
        return self.current_scope.get(name)

    def define(self, name: str, value: Value) -> None:
        """Bind name in the innermost frame, overwriting any binding there."""
        self.current_scope.set(name, self._stored(value))

    def assign(self, name: str, value: Value, span: Optional[SourceSpan] = None) -> None:
        """Rebind an existing name.

        In MERGE mode the innermost frame is written and the change is
        carried outwards when the block ends, so unknown names are created.

        Raises:
            EvalError: UNBOUND_VARIABLE in LEXICAL mode when no frame binds name
        """
        value = self._stored(value)
        if self.scoping == ScopeMode.MERGE:
            self.current_scope.set(name, value)
            return
        if not self.current_scope.update(name, value):
            raise error_unbound_variable(name, span)

    def push(self, name: str = "block") -> Scope:
        """Enter a new frame."""
        self.current_scope = Scope(parent=self.current_scope, name=name)
        logger.debug("push scope %r (depth %d)", name, self.depth)
        return self.current_scope

    def pop(self) -> Scope:
        """Leave the innermost frame, merging it outwards in MERGE mode."""
        scope = self.current_scope
        if scope.parent is None:
            raise RuntimeError("cannot pop the root scope")
        if self.scoping == ScopeMode.MERGE:
            changed = {
                name: value for name, value in scope.variables.items()
                if scope.parent.get(name) != value
            }
            scope.parent.variables.update(changed)
            if changed:
                logger.debug("merged %s into enclosing scope", sorted(changed))
        self.current_scope = scope.parent
        logger.debug("pop scope %r (depth %d)", scope.name, self.depth)
        return scope

    @contextmanager
    def new_scope(self, name: str = "block") -> Iterator[Scope]:
        """
        Context manager for a nested scope.

        Usage:
            with env.new_scope("block"):
                env.define("i", number_val(0))

        The frame is popped (and merged in MERGE mode) only when the body
        completes; an exception unwinds the stack without merging.
        """
        depth = self.depth
        scope = self.push(name)
        try:
            yield scope
        except BaseException:
            while self.depth > depth:
                self.current_scope = self.current_scope.parent
            raise
        self.pop()
