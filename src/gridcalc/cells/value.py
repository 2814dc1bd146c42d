"""Numeric cell values and arithmetic operators."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(
    r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$|^[+-]?(inf|infinity|nan)$",
    re.IGNORECASE,
)


class ValueKind(str, Enum):
    integer = "integer"
    floating = "float"


@dataclass(frozen=True)
class Value:
    """An immutable numeric scalar tagged as integer or float.

    Arithmetic promotes to float whenever either side is a float;
    integer with integer stays integer.
    """

    kind: ValueKind
    number: int | float

    @classmethod
    def integer(cls, n: int) -> Value:
        return cls(ValueKind.integer, int(n))

    @classmethod
    def floating(cls, x: float) -> Value:
        return cls(ValueKind.floating, float(x))

    @classmethod
    def parse(cls, text: str) -> Value | None:
        """Parse an integer or float literal; return None if *text* is neither."""
        s = text.strip()
        if _INT_RE.match(s):
            return cls.integer(int(s))
        if _FLOAT_RE.match(s):
            return cls.floating(float(s))
        return None

    @property
    def is_float(self) -> bool:
        return self.kind is ValueKind.floating

    def _combine(self, other: Value, result: int | float) -> Value:
        if self.is_float or other.is_float:
            return Value.floating(result)
        return Value.integer(result)

    def __add__(self, other: Value) -> Value:
        if not isinstance(other, Value):
            return NotImplemented
        return self._combine(other, self.number + other.number)

    def __sub__(self, other: Value) -> Value:
        if not isinstance(other, Value):
            return NotImplemented
        return self._combine(other, self.number - other.number)

    def __lt__(self, other: Value) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.number < other.number

    def display(self) -> str:
        """Render as decimal text: ``42``, ``3.5``, ``4`` for ``4.0``."""
        if not self.is_float:
            return str(self.number)
        x = float(self.number)
        if math.isnan(x):
            return "NaN"
        if math.isinf(x):
            return "inf" if x > 0 else "-inf"
        text = format(Decimal(repr(x)), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return "0" if text == "-0" else text

    def __str__(self) -> str:
        return self.display()


ZERO = Value.integer(0)


class Operator(str, Enum):
    """Arithmetic operators recognised in expressions.

    Only ``add`` and ``subtract`` take part in evaluation.
    """

    add = "+"
    subtract = "-"
    multiply = "*"
    divide = "/"

    @classmethod
    def from_token(cls, token: str) -> Operator:
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Cant parse operator {token!r}") from None

    @property
    def is_supported(self) -> bool:
        return self in (Operator.add, Operator.subtract)

    def apply(self, left: Value, right: Value) -> Value:
        if self is Operator.add:
            return left + right
        if self is Operator.subtract:
            return left - right
        raise ValueError(f"Operator {self.value!r} is not supported in expressions")
