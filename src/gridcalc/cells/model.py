"""Cell content variants.

A cell is exactly one of:

- ``ValueCell``: a numeric literal.
- ``ExpressionCell``: ``= A1 + B1 + ...`` folded left to right.
- ``FormulaCell``: ``=SUM(A1:A3)`` / ``=MIN(A1:A3)`` over an inclusive range.
- ``CloneCell``: ``<``, ``>``, ``^``, ``v`` copying the adjacent cell.
- ``EmptyCell``: no content.

Consumers dispatch with ``isinstance`` over these classes; the ``Cell``
union is closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from gridcalc.cells.value import Operator, Value


class Function(str, Enum):
    """Range aggregate functions."""

    sum = "SUM"
    min = "MIN"


class Direction(str, Enum):
    """Neighbour a clone cell copies from, keyed by its marker."""

    left = "<"
    right = ">"
    up = "^"
    down = "v"

    @property
    def offset(self) -> tuple[int, int]:
        """(row delta, column delta) in sheet order."""
        return _OFFSETS[self]


_OFFSETS = {
    Direction.left: (0, -1),
    Direction.right: (0, 1),
    Direction.up: (-1, 0),
    Direction.down: (1, 0),
}


@dataclass(frozen=True)
class ValueCell:
    value: Value


@dataclass(frozen=True)
class ExpressionCell:
    """Operands are address strings, at least two of them."""

    operator: Operator
    operands: tuple[str, ...]


@dataclass(frozen=True)
class FormulaCell:
    function: Function
    begin: str
    end: str


@dataclass(frozen=True)
class CloneCell:
    direction: Direction


@dataclass(frozen=True)
class EmptyCell:
    pass


EMPTY = EmptyCell()

Cell = Union[ValueCell, ExpressionCell, FormulaCell, CloneCell, EmptyCell]


def is_empty(cell: Cell | None) -> bool:
    """A missing slot and an ``EmptyCell`` are the same thing."""
    return cell is None or isinstance(cell, EmptyCell)
