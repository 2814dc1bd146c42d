"""Parse raw cell text into a Cell.

Precedence, first match wins:

1. empty text                    -> ``EmptyCell``
2. integer or float literal      -> ``ValueCell``
3. ``<`` ``>`` ``^`` ``v``       -> ``CloneCell``
4. ``=FUNC(BEGIN:END)``          -> ``FormulaCell`` (FUNC is SUM or MIN)
5. ``= A1 + B1 ...``             -> ``ExpressionCell`` (two or more operands)

Anything else raises ``CellParseError``.  The ``=`` forms go through a
Lark LALR grammar, so whitespace between tokens is optional (``=A1+B1``)
and references are upper-cased.  Function names are case-sensitive.
"""

from __future__ import annotations

import re

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from gridcalc.cells.model import (
    EMPTY,
    Cell,
    CloneCell,
    Direction,
    ExpressionCell,
    FormulaCell,
    Function,
    ValueCell,
)
from gridcalc.cells.value import Operator, Value
from gridcalc.errors import (
    CellParseError,
    MalformedRangeError,
    TooFewOperandsError,
    UnknownFunctionError,
)

GRAMMAR = r"""
start: "=" (formula | expression)

formula: FUNC_NAME "(" CELL_REF ":" CELL_REF ")"

expression: CELL_REF (OPERATOR CELL_REF)*

// A name directly followed by "(" is a function call.
FUNC_NAME.2: /[A-Za-z_][A-Za-z0-9_]*(?=\s*\()/

CELL_REF: /[A-Za-z]+[0-9]+/

OPERATOR: "+" | "-" | "*" | "/"

%import common.WS
%ignore WS
"""

_parser = Lark(GRAMMAR, parser="lalr", start="start")

_FORMULA_SHAPE_RE = re.compile(r"^=\s*[A-Za-z_][A-Za-z0-9_]*\s*\(")
_REF_RE = re.compile(r"[A-Za-z]+[0-9]+")
_CLONE_MARKERS = {d.value: d for d in Direction}


class _CellBuilder(Transformer):
    """Flattens the parse tree into plain tuples; validation happens after."""

    def start(self, children: list) -> tuple:
        return children[0]

    def formula(self, children: list[Token]) -> tuple:
        name, begin, end = children
        return ("formula", str(name), str(begin).upper(), str(end).upper())

    def expression(self, children: list[Token]) -> tuple:
        operands = [str(t).upper() for t in children if t.type == "CELL_REF"]
        operators = [str(t) for t in children if t.type == "OPERATOR"]
        return ("expression", operators, operands)


def parse_cell(text: str) -> Cell:
    """Parse one raw cell token.

    Args:
        text: Cell text as it appeared between the commas.

    Returns:
        The parsed cell.

    Raises:
        CellParseError: Or one of its subclasses ``TooFewOperandsError``,
            ``UnknownFunctionError``, ``MalformedRangeError``.
    """
    raw = text
    s = text.strip()
    if not s:
        return EMPTY

    value = Value.parse(s)
    if value is not None:
        return ValueCell(value)

    if s in _CLONE_MARKERS:
        return CloneCell(_CLONE_MARKERS[s])

    if not s.startswith("="):
        raise CellParseError(raw)

    if _FORMULA_SHAPE_RE.match(s):
        return _parse_formula(raw, s)
    return _parse_expression(raw, s)


def _parse_formula(raw: str, s: str) -> FormulaCell:
    try:
        kind, name, begin, end = _CellBuilder().transform(_parser.parse(s))
    except (LarkError, ValueError) as exc:
        raise MalformedRangeError(raw) from exc
    if kind != "formula":
        raise MalformedRangeError(raw)
    try:
        func = Function(name)
    except ValueError:
        raise UnknownFunctionError(raw, name) from None
    return FormulaCell(func, begin, end)


def _parse_expression(raw: str, s: str) -> ExpressionCell:
    try:
        kind, operators, operands = _CellBuilder().transform(_parser.parse(s))
    except LarkError as exc:
        if len(_REF_RE.findall(s)) < 2:
            raise TooFewOperandsError(raw) from exc
        raise CellParseError(raw, "malformed expression") from exc
    if kind != "expression":
        raise CellParseError(raw)

    if len(operands) < 2:
        raise TooFewOperandsError(raw)

    ops = {Operator.from_token(tok) for tok in operators}
    unsupported = sorted(op.value for op in ops if not op.is_supported)
    if unsupported:
        raise CellParseError(raw, f"unsupported operator {unsupported[0]!r}")
    # Any "+" makes the whole expression a sum; "-" alone makes it a difference.
    operator = Operator.add if Operator.add in ops else Operator.subtract
    return ExpressionCell(operator, tuple(operands))
