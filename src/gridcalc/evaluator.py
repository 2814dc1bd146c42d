"""Memoized sheet evaluator with cycle detection.

Walks every slot of a Sheet in row-major sheet order and resolves it to a
display string.  References are resolved on demand: a cell is computed the
first time something needs it and the result (value or error) is cached
for the rest of the pass.  Each address moves through three states --
unvisited, in progress, resolved -- and re-entering an in-progress address
raises ``CircularReferenceError`` with the cycle path.

A failing cell never aborts the pass.  Its slot in the returned grid holds
the error instead of a value.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

from gridcalc.addressing import Address, make_addr, split_addr
from gridcalc.cells.model import (
    Cell,
    CloneCell,
    EmptyCell,
    ExpressionCell,
    FormulaCell,
    Function,
    ValueCell,
)
from gridcalc.cells.value import ZERO, Value
from gridcalc.errors import (
    CircularReferenceError,
    EmptyRangeError,
    EvaluationError,
    InvalidRangeMemberError,
    UnresolvableReferenceError,
)
from gridcalc.logging.events import EventType, emit_info, emit_warning
from gridcalc.sheet import Sheet

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CellResult:
    """One slot of the computed grid: display text or an evaluation error."""

    text: str = ""
    error: EvaluationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def display(self, markers: bool = True) -> str:
        """Text to render.  Failed cells show the error marker or code."""
        if self.error is None:
            return self.text
        return self.error.marker if markers else self.error.code


class RenderedGrid:
    """Computed strings for every slot of a sheet, in sheet order.

    Attributes:
        rows: Row ids.
        columns: Column ids.
        cells: ``cells[r][c]`` is the result for ``(rows[r], columns[c])``.
    """

    def __init__(self, rows: list[str], columns: list[str]) -> None:
        self.rows = list(rows)
        self.columns = list(columns)
        self.cells: list[list[CellResult]] = [
            [CellResult() for _ in self.columns] for _ in self.rows
        ]

    def get(self, addr: str) -> CellResult:
        """Result for an A1-style address."""
        row_id, col_id = split_addr(addr)
        return self.cells[self.rows.index(row_id)][self.columns.index(col_id)]

    def texts(self, markers: bool = True) -> list[list[str]]:
        return [[cell.display(markers) for cell in row] for row in self.cells]

    def errors(self) -> dict[str, EvaluationError]:
        """Failed cells keyed by address, in sheet order."""
        out: dict[str, EvaluationError] = {}
        for r, row_id in enumerate(self.rows):
            for c, col_id in enumerate(self.columns):
                err = self.cells[r][c].error
                if err is not None:
                    out[make_addr(row_id, col_id)] = err
        return out


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class _State(Enum):
    unvisited = "unvisited"
    in_progress = "in_progress"
    resolved = "resolved"


class Evaluator:
    """Computes every slot of a Sheet.

    Usage::

        grid = Evaluator().compute(sheet)
        grid.get("B2").display()

    The evaluator holds no state between calls; each ``compute`` builds a
    fresh cache, so computing the same sheet twice gives the same grid.
    """

    def compute(self, sheet: Sheet) -> RenderedGrid:
        """Resolve every (row, column) slot of *sheet*.

        Returns:
            A RenderedGrid with one CellResult per slot.
        """
        t0 = time.monotonic()
        emit_info(
            EventType.compute_started,
            "Compute pass started",
            {"rows": len(sheet.rows), "columns": len(sheet.columns), "cells": sheet.cell_count()},
        )

        grid = RenderedGrid(sheet.rows, sheet.columns)
        cache = _ComputePass(sheet)
        n_errors = 0

        for r, c, slot, _cell in sheet.iter_slots():
            try:
                value = cache.resolve(slot)
            except EvaluationError as exc:
                n_errors += 1
                addr = make_addr(*slot)
                logger.debug("cell %s failed: %s", addr, exc)
                emit_warning(
                    EventType.cell_error,
                    str(exc),
                    {"addr": addr, "marker": exc.marker},
                    error_code=exc.code,
                )
                grid.cells[r][c] = CellResult(error=exc)
                continue
            grid.cells[r][c] = CellResult(text="" if value is None else value.display())

        emit_info(
            EventType.compute_completed,
            "Compute pass completed",
            {
                "slots": len(sheet.rows) * len(sheet.columns),
                "errors": n_errors,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return grid


class _ComputePass:
    """Per-call cache and visitation state for one ``compute``."""

    def __init__(self, sheet: Sheet) -> None:
        self._sheet = sheet
        self._state: dict[Address, _State] = {}
        self._memo: dict[Address, Value | None | EvaluationError] = {}
        self._stack: list[Address] = []

    def resolve(self, slot: Address) -> Value | None:
        """Value of *slot*, or None when it is empty.

        Raises:
            EvaluationError: The slot's own failure, cached for reuse.
        """
        state = self._state.get(slot, _State.unvisited)

        if state is _State.resolved:
            cached = self._memo[slot]
            if isinstance(cached, EvaluationError):
                raise cached
            return cached

        if state is _State.in_progress:
            cycle_start = self._stack.index(slot)
            cycle_path = self._stack[cycle_start:] + [slot]
            raise CircularReferenceError([make_addr(*s) for s in cycle_path])

        cell = self._sheet.get_cell(*slot)
        self._state[slot] = _State.in_progress
        self._stack.append(slot)
        try:
            result = self._evaluate(slot, cell)
        except EvaluationError as exc:
            self._memo[slot] = exc
            self._state[slot] = _State.resolved
            raise
        else:
            self._memo[slot] = result
            self._state[slot] = _State.resolved
            return result
        finally:
            self._stack.pop()

    def _evaluate(self, slot: Address, cell: Cell | None) -> Value | None:
        if cell is None or isinstance(cell, EmptyCell):
            return None
        if isinstance(cell, ValueCell):
            return cell.value
        if isinstance(cell, ExpressionCell):
            return self._eval_expression(cell)
        if isinstance(cell, FormulaCell):
            return self._eval_formula(cell)
        if isinstance(cell, CloneCell):
            return self._eval_clone(slot, cell)
        raise TypeError(f"Unknown cell type: {type(cell).__name__}")

    def _eval_expression(self, cell: ExpressionCell) -> Value:
        acc = ZERO
        for ref in cell.operands:
            value = self.resolve(split_addr(ref))
            if value is None:
                raise UnresolvableReferenceError(ref, f"Reference {ref} has no value")
            acc = cell.operator.apply(acc, value)
        return acc

    def _eval_formula(self, cell: FormulaCell) -> Value:
        slots = self._sheet.expand_range(split_addr(cell.begin), split_addr(cell.end))
        values: list[Value] = []
        for member in slots:
            try:
                value = self.resolve(member)
            except CircularReferenceError:
                raise
            except EvaluationError as exc:
                raise InvalidRangeMemberError(make_addr(*member), exc) from exc
            if value is not None:
                values.append(value)

        if cell.function is Function.sum:
            total = ZERO
            for value in values:
                total = total + value
            return total
        if cell.function is Function.min:
            if not values:
                raise EmptyRangeError(cell.function.value, cell.begin, cell.end)
            return min(values)
        raise TypeError(f"Unknown function: {cell.function!r}")

    def _eval_clone(self, slot: Address, cell: CloneCell) -> Value:
        target = self._sheet.neighbor(slot, cell.direction)
        value = self.resolve(target)
        if value is None:
            addr = make_addr(*target)
            raise UnresolvableReferenceError(addr, f"Clone source {addr} has no value")
        return value
