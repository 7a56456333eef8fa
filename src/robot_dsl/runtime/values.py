"""
Runtime values for the DSL interpreter.

A value is either a Number (float) or a String (str). There is no boolean
type: conditions produce the Strings "True" and "False".
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np


class ValueType(Enum):
    """The two runtime value kinds."""
    NUMBER = "number"
    STRING = "string"


TRUE_TEXT = "True"
FALSE_TEXT = "False"

# Result of a top-level assignment; callers discard it
ASSIGN_SENTINEL_TEXT = "Succeeded"

# Decimal or special float text; no whitespace, underscores or hex
_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its kind.

    The `data` field holds a float for NUMBER and a str for STRING.
    """
    data: Union[float, str]
    type: ValueType

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.type.name})"

    @property
    def is_number(self) -> bool:
        return self.type == ValueType.NUMBER

    @property
    def is_string(self) -> bool:
        return self.type == ValueType.STRING

    def display(self) -> str:
        """Printable text: numbers in plain decimal form, strings verbatim."""
        if self.is_number:
            return format_number(self.data)
        return self.data

    def as_number(self) -> Optional[float]:
        """The numeric reading of this value, or None if it has none."""
        if self.is_number:
            return self.data
        return parse_number(self.data)


# Convenience constructors

def number_val(x: float) -> Value:
    """Create a Number value."""
    return Value(float(x), ValueType.NUMBER)


def string_val(s: str) -> Value:
    """Create a String value."""
    return Value(str(s), ValueType.STRING)


def bool_val(b: bool) -> Value:
    """Create the String "True" or "False"."""
    return string_val(TRUE_TEXT if b else FALSE_TEXT)


def literal_val(data: Union[float, int, str]) -> Value:
    """Wrap the raw value held by a Literal node."""
    if isinstance(data, str):
        return string_val(data)
    return number_val(data)


ASSIGN_SENTINEL = string_val(ASSIGN_SENTINEL_TEXT)


def format_number(x: float) -> str:
    """
    Render a float in its shortest round-trip decimal form, never using
    exponent notation and dropping a zero fraction.

        3.0 -> "3", 0.5 -> "0.5", 1e21 -> "1000000000000000000000"
    """
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    return np.format_float_positional(x, unique=True, trim='-')


def parse_number(text: str) -> Optional[float]:
    """Read text as a float, or return None when it is not numeric."""
    if not _NUMBER_PATTERN.fullmatch(text):
        return None
    return float(text)
