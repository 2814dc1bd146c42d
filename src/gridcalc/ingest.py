"""Build a Sheet from comma-separated text.

Input format::

    ,A,B            <- header: corner field, then optional column labels
    1,5,3           <- row id, then one raw cell per column
    2,= A1 + B1,=SUM(A1:A2)

The header's corner field is ignored.  Named header fields must match the
generated label for their position; blank ones are allowed.  The column
count is the larger of the header width and the widest row.
"""

from __future__ import annotations

from pathlib import Path

from gridcalc.addressing import position_to_label
from gridcalc.cells.model import is_empty
from gridcalc.cells.parser import parse_cell
from gridcalc.errors import (
    CellParseError,
    GridError,
    MalformedHeaderError,
    MalformedRowError,
)
from gridcalc.logging.events import EventType, emit_error, emit_info
from gridcalc.sheet import Sheet


def load_sheet(text: str) -> Sheet:
    """Parse sheet text into a Sheet.

    Raises:
        MalformedHeaderError: Missing/blank header or misnamed columns.
        MalformedRowError: A data line with a blank row id.
        CellParseError: A cell that cannot be parsed (``line_no`` is set).
        InvalidRowIdError: A duplicate row id.
    """
    try:
        sheet = _build(text)
    except GridError as exc:
        emit_error(EventType.ingest_failed, str(exc), error_code=exc.code)
        raise
    emit_info(
        EventType.ingest_completed,
        "Sheet loaded",
        {"rows": len(sheet.rows), "columns": len(sheet.columns), "cells": sheet.cell_count()},
    )
    return sheet


def load_sheet_file(path: Path | str) -> Sheet:
    """Read and parse a sheet file (UTF-8)."""
    return load_sheet(Path(path).read_text(encoding="utf-8"))


def _build(text: str) -> Sheet:
    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise MalformedHeaderError(lines[0] if lines else None, "Missing header line")

    header = lines[0]
    named = header.split(",")[1:]

    rows: list[tuple[int, str, list[str]]] = []
    for line_no, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        fields = line.split(",")
        row_id = fields[0].strip()
        if not row_id:
            raise MalformedRowError(line, f"Missing row id on line {line_no}: {line!r}")
        rows.append((line_no, row_id, fields[1:]))

    n_cols = max([len(named)] + [len(cells) for _, _, cells in rows])
    _check_header(header, named)

    sheet = Sheet()
    sheet.add_columns(n_cols)
    for line_no, row_id, cells in rows:
        sheet.add_row(row_id)
        row_index = len(sheet.rows) - 1
        for col_index, token in enumerate(cells):
            try:
                cell = parse_cell(token)
            except CellParseError as exc:
                raise exc.at_line(line_no)
            if not is_empty(cell):
                sheet.insert_cell_by_index(row_index, col_index, cell)
    return sheet


def _check_header(header: str, named: list[str]) -> None:
    for i, field in enumerate(named):
        name = field.strip()
        if name and name != position_to_label(i + 1):
            raise MalformedHeaderError(
                header,
                f"Header column {i + 1} is {name!r}, expected {position_to_label(i + 1)!r}",
            )
