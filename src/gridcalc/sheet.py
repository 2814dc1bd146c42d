"""The owned grid of cells.

A Sheet keeps its row ids and column ids in insertion order (which is also
evaluation and render order) and owns every cell in a mapping keyed by
row id, then column id.  Column ids are generated labels (A, B, ...);
row ids are caller-supplied strings.  A slot with no stored cell is
equivalent to an empty cell.
"""

from __future__ import annotations

from typing import Iterator

from gridcalc.addressing import Address, make_addr, position_to_label, split_addr
from gridcalc.cells.model import Cell, Direction
from gridcalc.errors import (
    IndexOutOfBoundsError,
    InvalidColumnIdError,
    InvalidRowIdError,
    UnresolvableReferenceError,
)


class Sheet:
    """Ordered rows and columns plus the cells stored between them.

    Usage::

        sheet = Sheet()
        sheet.add_columns(2)          # A, B
        sheet.add_row("1")
        sheet.insert_cell_by_index(0, 1, parse_cell("5"))
        sheet.get("B1")               # ValueCell(Value(integer, 5))
    """

    def __init__(self) -> None:
        self._rows: list[str] = []
        self._columns: list[str] = []
        self._row_pos: dict[str, int] = {}
        self._col_pos: dict[str, int] = {}
        self._cells: dict[str, dict[str, Cell]] = {}

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def rows(self) -> list[str]:
        return list(self._rows)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def add_column(self) -> str:
        """Append the next column and return its generated label."""
        col_id = position_to_label(len(self._columns) + 1)
        self._col_pos[col_id] = len(self._columns)
        self._columns.append(col_id)
        return col_id

    def add_columns(self, count: int) -> list[str]:
        return [self.add_column() for _ in range(count)]

    def add_row(self, row_id: str) -> str:
        """Append a row.  Blank and duplicate ids are rejected."""
        if not isinstance(row_id, str) or not row_id.strip():
            raise InvalidRowIdError(row_id, f"Row id must be a non-blank string, got {row_id!r}")
        if row_id in self._row_pos:
            raise InvalidRowIdError(row_id, f"Duplicate row id: {row_id!r}")
        self._row_pos[row_id] = len(self._rows)
        self._rows.append(row_id)
        return row_id

    def has_row(self, row_id: str) -> bool:
        return row_id in self._row_pos

    def has_column(self, col_id: str) -> bool:
        return col_id in self._col_pos

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def insert_cell_by_index(self, row_index: int, col_index: int, cell: Cell) -> Cell:
        """Store *cell* at 0-based (row_index, col_index)."""
        if not 0 <= row_index < len(self._rows):
            raise IndexOutOfBoundsError("row", row_index, len(self._rows))
        if not 0 <= col_index < len(self._columns):
            raise IndexOutOfBoundsError("column", col_index, len(self._columns))
        return self.insert_cell_by_id(self._rows[row_index], self._columns[col_index], cell)

    def insert_cell_by_id(self, row_id: str, col_id: str, cell: Cell) -> Cell:
        """Store *cell* at (row_id, col_id); both ids must already exist."""
        if row_id not in self._row_pos:
            raise InvalidRowIdError(row_id)
        if col_id not in self._col_pos:
            raise InvalidColumnIdError(col_id)
        self._cells.setdefault(row_id, {})[col_id] = cell
        return cell

    def get_cell(self, row_id: str, col_id: str) -> Cell | None:
        """Return the stored cell, or None for an unknown or unset slot."""
        return self._cells.get(row_id, {}).get(col_id)

    def get(self, addr: str) -> Cell | None:
        """Look up a cell by A1-style address."""
        row_id, col_id = split_addr(addr)
        return self.get_cell(row_id, col_id)

    def cell_count(self) -> int:
        return sum(len(row) for row in self._cells.values())

    def iter_slots(self) -> Iterator[tuple[int, int, Address, Cell | None]]:
        """Yield (row_index, col_index, (row_id, col_id), cell) in sheet order."""
        for r, row_id in enumerate(self._rows):
            row = self._cells.get(row_id, {})
            for c, col_id in enumerate(self._columns):
                yield r, c, (row_id, col_id), row.get(col_id)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def expand_range(self, begin: Address, end: Address) -> list[Address]:
        """Expand an inclusive range into slots, row-major.

        Positions come from sheet order.  Corners may be given in either
        order; a single row or column gives a line, otherwise the full
        rectangle between the corners.

        Raises:
            UnresolvableReferenceError: If a corner lies outside the sheet.
        """
        r0, c0 = self._locate(begin)
        r1, c1 = self._locate(end)
        if r0 > r1:
            r0, r1 = r1, r0
        if c0 > c1:
            c0, c1 = c1, c0
        return [
            (self._rows[r], self._columns[c])
            for r in range(r0, r1 + 1)
            for c in range(c0, c1 + 1)
        ]

    def neighbor(self, slot: Address, direction: Direction) -> Address:
        """The slot next to *slot* in *direction*.

        Raises:
            UnresolvableReferenceError: At the edge of the sheet.
        """
        r, c = self._locate(slot)
        dr, dc = direction.offset
        nr, nc = r + dr, c + dc
        if not (0 <= nr < len(self._rows) and 0 <= nc < len(self._columns)):
            addr = make_addr(*slot)
            raise UnresolvableReferenceError(
                addr, f"No cell {direction.name} of {addr} inside the sheet"
            )
        return self._rows[nr], self._columns[nc]

    def _locate(self, slot: Address) -> tuple[int, int]:
        row_id, col_id = slot
        if row_id not in self._row_pos or col_id not in self._col_pos:
            addr = make_addr(row_id, col_id)
            raise UnresolvableReferenceError(addr, f"Address {addr} is outside the sheet")
        return self._row_pos[row_id], self._col_pos[col_id]

    def __repr__(self) -> str:
        return (
            f"Sheet(rows={len(self._rows)}, columns={len(self._columns)}, "
            f"cells={self.cell_count()})"
        )
