"""
Tests for the scope stack used by the interpreter.
"""

import pytest

from robot_dsl import EvalError, ErrorKind, ScopeMode, StorageMode
from robot_dsl.runtime import Environment, Scope, number_val, string_val


class TestScope:
    """Test a single scope chain."""

    def test_get_from_parent(self):
        """Lookups walk to the parent."""
        parent = Scope()
        parent.set("x", number_val(1))
        child = Scope(parent=parent)
        assert child.get("x") == number_val(1)
        assert "x" not in child.variables

    def test_shadowing(self):
        """A child binding hides the parent's."""
        parent = Scope()
        parent.set("x", number_val(1))
        child = Scope(parent=parent)
        child.set("x", number_val(2))
        assert child.get("x") == number_val(2)
        assert parent.get("x") == number_val(1)

    def test_update_writes_owner(self):
        """update() rebinds in the frame that owns the name."""
        parent = Scope()
        parent.set("x", number_val(1))
        child = Scope(parent=parent)
        assert child.update("x", number_val(5))
        assert parent.variables["x"] == number_val(5)
        assert "x" not in child.variables

    def test_update_missing(self):
        """update() reports a missing name."""
        assert not Scope().update("nope", number_val(1))


class TestEnvironmentLexical:
    """Test the default lexical scoping."""

    def test_define_and_lookup(self):
        env = Environment()
        env.define("x", number_val(3))
        assert env.lookup("x") == number_val(3)

    def test_lookup_unbound(self):
        """Missing names raise UNBOUND_VARIABLE."""
        env = Environment()
        with pytest.raises(EvalError) as exc_info:
            env.lookup("ghost")
        assert exc_info.value.kind == ErrorKind.UNBOUND_VARIABLE
        assert "ghost" in exc_info.value.diagnostic.message

    def test_get_returns_none(self):
        assert Environment().get("ghost") is None

    def test_redefine_overwrites(self):
        env = Environment()
        env.define("x", number_val(1))
        env.define("x", string_val("one"))
        assert env.lookup("x") == string_val("one")

    def test_block_local_discarded(self):
        """Names declared in a block vanish with it."""
        env = Environment()
        with env.new_scope():
            env.define("tmp", number_val(1))
            assert env.depth == 2
        assert env.depth == 1
        assert env.get("tmp") is None

    def test_assign_outer_visible_after_block(self):
        """Assignment inside a block updates the outer binding."""
        env = Environment()
        env.define("x", number_val(1))
        with env.new_scope():
            env.assign("x", number_val(2))
        assert env.lookup("x") == number_val(2)

    def test_assign_unbound(self):
        """Assigning a name nobody declared is an error."""
        env = Environment()
        with pytest.raises(EvalError) as exc_info:
            env.assign("x", number_val(1))
        assert exc_info.value.kind == ErrorKind.UNBOUND_VARIABLE

    def test_push_starts_empty_frame(self):
        """A pushed frame holds only its own declarations."""
        env = Environment()
        env.define("a", number_val(1))
        env.push()
        env.define("b", number_val(2))
        assert list(env.current_scope.variables) == ["b"]
        assert list(env.current_scope.parent.variables) == ["a"]
        env.pop()

    def test_cannot_pop_root(self):
        with pytest.raises(RuntimeError):
            Environment().pop()

    def test_exception_unwinds_without_merge(self):
        """An error inside a scope restores the stack depth."""
        env = Environment(scoping=ScopeMode.MERGE)
        with pytest.raises(ValueError):
            with env.new_scope():
                env.define("tmp", number_val(1))
                env.push()
                raise ValueError("boom")
        assert env.depth == 1
        assert env.get("tmp") is None


class TestEnvironmentMerge:
    """Test the legacy merge scoping."""

    def test_block_local_leaks(self):
        """New names declared in a block reach the enclosing frame."""
        env = Environment(scoping=ScopeMode.MERGE)
        with env.new_scope():
            env.define("tmp", number_val(1))
        assert env.lookup("tmp") == number_val(1)

    def test_assign_outer_visible_after_block(self):
        env = Environment(scoping=ScopeMode.MERGE)
        env.define("x", number_val(1))
        with env.new_scope():
            env.assign("x", number_val(2))
            assert env.current_scope.parent.variables["x"] == number_val(1)
        assert env.lookup("x") == number_val(2)

    def test_assign_creates_name(self):
        """In merge mode assignment to an unknown name binds it."""
        env = Environment(scoping=ScopeMode.MERGE)
        env.assign("fresh", string_val("v"))
        assert env.lookup("fresh") == string_val("v")

    def test_nested_merge(self):
        """Merging happens one level per block exit."""
        env = Environment(scoping=ScopeMode.MERGE)
        with env.new_scope():
            with env.new_scope():
                env.define("deep", number_val(1))
            assert env.current_scope.variables["deep"] == number_val(1)
            assert "deep" not in env.current_scope.parent.variables
        assert env.lookup("deep") == number_val(1)


class TestStorageModes:
    """Test how values are stored."""

    def test_tagged_keeps_numbers(self):
        env = Environment()
        env.define("x", number_val(3))
        assert env.lookup("x").is_number

    def test_text_stores_display(self):
        """Text storage keeps only the display text."""
        env = Environment(storage=StorageMode.TEXT)
        env.define("x", number_val(3))
        assert env.lookup("x") == string_val("3")

    def test_text_assign(self):
        env = Environment(storage=StorageMode.TEXT)
        env.define("x", number_val(1))
        env.assign("x", number_val(0.5))
        assert env.lookup("x") == string_val("0.5")
