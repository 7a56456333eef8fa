"""
Tests for runtime values, number rendering and operator semantics.
"""

import math

import pytest

from robot_dsl import TokenType, EvalError, ErrorKind
from robot_dsl.runtime import (
    Value, ValueType, number_val, string_val, bool_val, literal_val,
    format_number, parse_number, apply_operator, ASSIGN_SENTINEL,
)


class TestValues:
    """Test runtime value constructors."""

    def test_number_value(self):
        """Numbers always hold floats."""
        v = number_val(42)
        assert v.data == 42.0
        assert isinstance(v.data, float)
        assert v.type == ValueType.NUMBER
        assert v.is_number and not v.is_string

    def test_string_value(self):
        """Strings hold text."""
        v = string_val("hello")
        assert v.data == "hello"
        assert v.type == ValueType.STRING

    def test_bool_value_is_text(self):
        """Conditions are the Strings True and False."""
        assert bool_val(True) == string_val("True")
        assert bool_val(False) == string_val("False")

    def test_literal_value(self):
        """literal_val picks the kind from the Python type."""
        assert literal_val(1.5) == number_val(1.5)
        assert literal_val("x") == string_val("x")

    def test_number_and_text_differ(self):
        """A Number and its display text are distinct values."""
        assert number_val(3) != string_val("3")

    def test_assign_sentinel(self):
        """The assignment result is a plain String."""
        assert ASSIGN_SENTINEL == string_val("Succeeded")

    def test_as_number(self):
        """Numeric reading of values."""
        assert number_val(2).as_number() == 2.0
        assert string_val("2.5").as_number() == 2.5
        assert string_val("two").as_number() is None


class TestFormatNumber:
    """Test number rendering."""

    @pytest.mark.parametrize("value,text", [
        (3.0, "3"),
        (0.5, "0.5"),
        (42.0, "42"),
        (-7.25, "-7.25"),
        (1e21, "1000000000000000000000"),
        (0.1 + 0.2, "0.30000000000000004"),
        (-0.0, "-0"),
    ])
    def test_positional(self, value, text):
        """Shortest round-trip text without exponent or '.0'."""
        assert format_number(value) == text

    def test_special_values(self):
        """NaN and infinities have fixed spellings."""
        assert format_number(math.nan) == "NaN"
        assert format_number(math.inf) == "inf"
        assert format_number(-math.inf) == "-inf"

    def test_display(self):
        """display() renders numbers and passes strings through."""
        assert number_val(10).display() == "10"
        assert string_val("10.0").display() == "10.0"


class TestParseNumber:
    """Test numeric parsing of text."""

    @pytest.mark.parametrize("text,value", [
        ("42", 42.0),
        ("-2.5", -2.5),
        ("+1", 1.0),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e3", 1000.0),
        ("2.5E-1", 0.25),
    ])
    def test_accepts(self, text, value):
        """Decimal forms with sign and exponent parse."""
        assert parse_number(text) == value

    @pytest.mark.parametrize("text", ["", " 42", "42 ", "1_000", "0x10", "abc", "+", "1.2.3"])
    def test_rejects(self, text):
        """Whitespace, underscores, hex and words do not parse."""
        assert parse_number(text) is None

    def test_special_words(self):
        """inf, infinity and nan parse in any case."""
        assert parse_number("inf") == math.inf
        assert parse_number("-Infinity") == -math.inf
        assert math.isnan(parse_number("NaN"))


class TestAddition:
    """Test the '+' coercion rules."""

    def test_number_plus_number(self):
        assert apply_operator(TokenType.PLUS, number_val(1), number_val(2)) == number_val(3)

    def test_numeric_strings_add(self):
        """Two numeric Strings add as numbers."""
        result = apply_operator(TokenType.PLUS, string_val("3"), string_val("4"))
        assert result == number_val(7)

    def test_strings_concatenate(self):
        """Non-numeric Strings concatenate."""
        result = apply_operator(TokenType.PLUS, string_val("ab"), string_val("cd"))
        assert result == string_val("abcd")

    def test_one_numeric_string_concatenates(self):
        """Only one numeric String is still concatenation."""
        result = apply_operator(TokenType.PLUS, string_val("3"), string_val("x"))
        assert result == string_val("3x")

    def test_mixed_concatenates_display_text(self):
        """Number + String joins display texts, left then right."""
        assert apply_operator(TokenType.PLUS, number_val(3), string_val("x")) == string_val("3x")
        assert apply_operator(TokenType.PLUS, string_val("x"), number_val(3)) == string_val("x3")

    def test_mixed_with_numeric_string_concatenates(self):
        """Mixed kinds never add, even when the String is numeric."""
        result = apply_operator(TokenType.PLUS, number_val(1), string_val("2"))
        assert result == string_val("12")


class TestArithmetic:
    """Test '-', '*' and '/'."""

    def test_subtract(self):
        assert apply_operator(TokenType.MINUS, number_val(5), number_val(2)) == number_val(3)

    def test_multiply(self):
        assert apply_operator(TokenType.STAR, number_val(2.5), number_val(4)) == number_val(10)

    def test_divide(self):
        assert apply_operator(TokenType.SLASH, number_val(1), number_val(4)) == number_val(0.25)

    def test_numeric_strings_coerce(self):
        """Numeric Strings are read as numbers."""
        result = apply_operator(TokenType.STAR, string_val("2"), number_val(3))
        assert result == number_val(6)

    def test_non_numeric_is_type_mismatch(self):
        """A non-numeric operand is a TypeMismatch."""
        with pytest.raises(EvalError) as exc_info:
            apply_operator(TokenType.MINUS, string_val("a"), number_val(1))
        assert exc_info.value.kind == ErrorKind.TYPE_MISMATCH
        assert exc_info.value.code == "E402"

    def test_division_by_zero(self):
        """Dividing by exactly zero fails."""
        with pytest.raises(EvalError) as exc_info:
            apply_operator(TokenType.SLASH, number_val(1), number_val(0))
        assert exc_info.value.kind == ErrorKind.DIVISION_BY_ZERO

    def test_division_by_negative_zero(self):
        """-0.0 is also zero."""
        with pytest.raises(EvalError):
            apply_operator(TokenType.SLASH, number_val(1), number_val(-0.0))

    def test_division_by_zero_text(self):
        """A String reading as zero is zero."""
        with pytest.raises(EvalError) as exc_info:
            apply_operator(TokenType.SLASH, number_val(1), string_val("0.0"))
        assert exc_info.value.kind == ErrorKind.DIVISION_BY_ZERO


class TestEquality:
    """Test '=='."""

    def test_numbers_equal(self):
        assert apply_operator(TokenType.EQ, number_val(1), number_val(1.0)) == string_val("True")

    def test_numbers_differ(self):
        assert apply_operator(TokenType.EQ, number_val(1), number_val(2)) == string_val("False")

    def test_strings_compare_exactly(self):
        """String equality is exact text comparison."""
        assert apply_operator(TokenType.EQ, string_val("a"), string_val("a")).data == "True"
        assert apply_operator(TokenType.EQ, string_val("a"), string_val("A")).data == "False"

    def test_mixed_compares_display_text(self):
        """A Number equals a String with its display text."""
        assert apply_operator(TokenType.EQ, number_val(3), string_val("3")).data == "True"
        assert apply_operator(TokenType.EQ, number_val(3), string_val("3.0")).data == "False"

    def test_nan_not_equal(self):
        """NaN is not equal to itself."""
        nan = number_val(math.nan)
        assert apply_operator(TokenType.EQ, nan, nan).data == "False"


class TestMissingOperator:
    """Test non-operator tokens in a binary node."""

    def test_non_operator_token(self):
        """A non-operator token is a MissingOperator error."""
        with pytest.raises(EvalError) as exc_info:
            apply_operator(TokenType.SEMICOLON, number_val(1), number_val(2))
        assert exc_info.value.kind == ErrorKind.MISSING_OPERATOR
        assert "SEMICOLON" in exc_info.value.diagnostic.message
