"""Fixed-width text rendering of computed cell strings.

The Renderer only knows about strings: row labels, column labels and
already-computed cell text.  Each cell field is right-aligned to a fixed
width.  Integers too wide for the field are compressed to
``<leading digit>*10^<power>``; other overflowing text is truncated.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from gridcalc.errors import IndexOutOfBoundsError
from gridcalc.logging.events import EventType, emit_info

if TYPE_CHECKING:
    from gridcalc.evaluator import RenderedGrid

DEFAULT_CELL_WIDTH = 8

_INT_RE = re.compile(r"^[+-]?\d+$")


class Renderer:
    """Table of labelled, fixed-width cells.

    Usage::

        out = Renderer(8)
        out.add_col("A")
        out.add_row("1")
        out.insert_cell("5", 0, 0)
        out.to_text()   # "0,       A\\n1,       5\\n"
    """

    def __init__(self, cell_width: int = DEFAULT_CELL_WIDTH) -> None:
        if cell_width < 1:
            raise ValueError(f"cell_width must be >= 1, got {cell_width}")
        self.cell_width = cell_width
        self.row_names: list[str] = []
        self.col_names: list[str] = []
        self.rows: list[list[str]] = []

    def add_row(self, row_name: str) -> None:
        self.row_names.append(row_name)
        self.rows.append(["" for _ in self.col_names])

    def add_col(self, col_name: str) -> None:
        self.col_names.append(col_name)
        for row in self.rows:
            row.append("")

    def insert_cell(self, text: str, row_index: int, col_index: int) -> None:
        """Set the text at (row_index, col_index).

        Raises:
            IndexOutOfBoundsError: If either index is outside the table.
        """
        if not 0 <= row_index < len(self.row_names):
            raise IndexOutOfBoundsError("row", row_index, len(self.row_names))
        if not 0 <= col_index < len(self.col_names):
            raise IndexOutOfBoundsError("column", col_index, len(self.col_names))
        self.rows[row_index][col_index] = text

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def trim_to_width(self, text: str) -> str:
        """Fit *text* to exactly ``cell_width`` characters."""
        if len(text) == self.cell_width:
            return text
        if len(text) < self.cell_width:
            return self._pad(text)
        return self._reduce(text)

    def _reduce(self, text: str) -> str:
        if _INT_RE.match(text):
            compressed = compress_integer(int(text))
            if len(compressed) <= self.cell_width:
                return self._pad(compressed)
        return text[: self.cell_width]

    def _pad(self, text: str) -> str:
        return text.rjust(self.cell_width)

    def header_line(self) -> str:
        return ",".join(["0"] + [self.trim_to_width(name) for name in self.col_names])

    def row_line(self, row_index: int) -> str:
        if not 0 <= row_index < len(self.row_names):
            raise IndexOutOfBoundsError("row", row_index, len(self.row_names))
        cells = [self.trim_to_width(text) for text in self.rows[row_index]]
        return ",".join([self.row_names[row_index]] + cells)

    def to_text(self) -> str:
        """Header line then one line per row, each newline-terminated."""
        lines = [self.header_line()]
        lines.extend(self.row_line(i) for i in range(len(self.row_names)))
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.to_text()


def compress_integer(n: int) -> str:
    """``123456789`` -> ``1*10^8``; the sign is kept in front."""
    sign = "-" if n < 0 else ""
    n = abs(n)
    power = 0
    while n > 9:
        n //= 10
        power += 1
    return f"{sign}{n}*10^{power}"


def render_grid(
    grid: RenderedGrid,
    cell_width: int = DEFAULT_CELL_WIDTH,
    *,
    markers: bool = True,
) -> Renderer:
    """Copy a computed grid into a Renderer.

    Args:
        grid: Output of ``Evaluator.compute``.
        cell_width: Fixed width of every cell field.
        markers: Show failed cells as ``#REF!``-style markers (True) or by
            error code (False).
    """
    out = Renderer(cell_width)
    for col in grid.columns:
        out.add_col(col)
    for row in grid.rows:
        out.add_row(row)
    for r, row_texts in enumerate(grid.texts(markers)):
        for c, text in enumerate(row_texts):
            out.insert_cell(text, r, c)
    emit_info(
        EventType.render_completed,
        "Table rendered",
        {"rows": len(grid.rows), "columns": len(grid.columns), "cell_width": cell_width},
    )
    return out
