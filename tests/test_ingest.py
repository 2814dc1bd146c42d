"""Tests for building a Sheet from comma-separated text."""

from __future__ import annotations

from pathlib import Path

import pytest

from gridcalc.cells import ExpressionCell, FormulaCell, Function, Operator, Value, ValueCell
from gridcalc.errors import (
    CellParseError,
    GridParseError,
    InvalidRowIdError,
    MalformedHeaderError,
    MalformedRowError,
    TooFewOperandsError,
)
from gridcalc.ingest import load_sheet, load_sheet_file


class TestHeader:
    def test_blank_header_columns_come_from_rows(self) -> None:
        sheet = load_sheet(",\n1,5,3\n")
        assert sheet.columns == ["A", "B"]
        assert sheet.rows == ["1"]

    def test_named_header(self) -> None:
        sheet = load_sheet("0,A,B,C\n1,1\n")
        assert sheet.columns == ["A", "B", "C"]

    def test_rows_wider_than_header_add_columns(self) -> None:
        sheet = load_sheet(",A\n1,1,2,3\n")
        assert sheet.columns == ["A", "B", "C"]

    @pytest.mark.parametrize("text", ["", "\n1,2\n", "   \n1,2\n"])
    def test_missing_header(self, text: str) -> None:
        with pytest.raises(MalformedHeaderError):
            load_sheet(text)

    def test_misnamed_column(self) -> None:
        with pytest.raises(MalformedHeaderError, match="expected 'A'"):
            load_sheet(",B,A\n1,1,2\n")

    def test_header_only(self) -> None:
        sheet = load_sheet(",A,B\n")
        assert sheet.columns == ["A", "B"]
        assert sheet.rows == []


class TestRows:
    def test_cells_are_parsed(self) -> None:
        sheet = load_sheet(",A,B,C\n1,2,= A1 + A2,=SUM(A1:A2)\n2,3.5,,\n")
        assert sheet.get("A1") == ValueCell(Value.integer(2))
        assert sheet.get("B1") == ExpressionCell(Operator.add, ("A1", "A2"))
        assert sheet.get("C1") == FormulaCell(Function.sum, "A1", "A2")
        assert sheet.get("A2") == ValueCell(Value.floating(3.5))

    def test_empty_cells_are_not_stored(self) -> None:
        sheet = load_sheet(",A,B,C\n1,,2,\n")
        assert sheet.get("A1") is None
        assert sheet.cell_count() == 1

    def test_row_order_is_kept(self) -> None:
        sheet = load_sheet(",A\n3,1\n1,2\n2,3\n")
        assert sheet.rows == ["3", "1", "2"]

    def test_blank_lines_are_skipped(self) -> None:
        sheet = load_sheet(",A\n1,1\n\n2,2\n\n")
        assert sheet.rows == ["1", "2"]

    def test_windows_line_endings(self) -> None:
        sheet = load_sheet(",A\r\n1,5\r\n")
        assert sheet.get("A1") == ValueCell(Value.integer(5))

    def test_missing_row_id(self) -> None:
        with pytest.raises(MalformedRowError):
            load_sheet(",A\n,5\n")

    def test_duplicate_row_id(self) -> None:
        with pytest.raises(InvalidRowIdError):
            load_sheet(",A\n1,5\n1,6\n")

    def test_bad_cell_reports_line(self) -> None:
        with pytest.raises(CellParseError) as exc_info:
            load_sheet(",A,B\n1,1,2\n2,3,hello\n")
        assert exc_info.value.raw == "hello"
        assert exc_info.value.line_no == 3
        assert "on line 3" in str(exc_info.value)

    def test_too_few_operands_surfaces(self) -> None:
        with pytest.raises(TooFewOperandsError) as exc_info:
            load_sheet(",A\n1,= A1\n")
        assert isinstance(exc_info.value, GridParseError)


class TestFile:
    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sheet.csv"
        path.write_text(",A,B\n1,5,= A1 + A1\n", encoding="utf-8")
        sheet = load_sheet_file(path)
        assert sheet.cell_count() == 2
        assert load_sheet_file(str(path)).rows == ["1"]
