"""Cell content model and raw-text parsing.

Public API::

    from gridcalc.cells import parse_cell, Value, ValueCell, ExpressionCell
"""

from gridcalc.cells.model import (
    EMPTY,
    Cell,
    CloneCell,
    Direction,
    EmptyCell,
    ExpressionCell,
    FormulaCell,
    Function,
    ValueCell,
    is_empty,
)
from gridcalc.cells.parser import parse_cell
from gridcalc.cells.value import ZERO, Operator, Value, ValueKind

__all__ = [
    "EMPTY",
    "Cell",
    "CloneCell",
    "Direction",
    "EmptyCell",
    "ExpressionCell",
    "FormulaCell",
    "Function",
    "Operator",
    "Value",
    "ValueCell",
    "ValueKind",
    "ZERO",
    "is_empty",
    "parse_cell",
]
