"""Error types for sheet parsing, structure and evaluation."""

from __future__ import annotations


class GridError(Exception):
    """Base class for all gridcalc errors.

    Attributes:
        code: Stable snake_case identifier, used as the event ``error_code``.
    """

    code = "grid_error"


# ---------------------------------------------------------------------------
# Parse errors (raised while building a Cell or a Sheet)
# ---------------------------------------------------------------------------


class GridParseError(GridError):
    """Raised when text cannot be turned into a Cell or Sheet."""

    code = "parse_error"


class InvalidPositionError(GridParseError, ValueError):
    """A column position that has no label (positions are 1-based)."""

    code = "invalid_position"

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"Invalid column position: {position!r} (must be >= 1)")


class InvalidLabelError(GridParseError, ValueError):
    """A column label that is empty or not made of A-Z."""

    code = "invalid_label"

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Invalid column label: {label!r}")


class MalformedHeaderError(GridParseError):
    """The header line is missing or names columns out of order."""

    code = "malformed_header"

    def __init__(self, header: str | None, message: str | None = None) -> None:
        self.header = header
        super().__init__(message or f"Malformed header: {header!r}")


class MalformedRowError(GridParseError):
    """A data line without a usable row id."""

    code = "malformed_row"

    def __init__(self, line: str, message: str | None = None) -> None:
        self.line = line
        super().__init__(message or f"Malformed row: {line!r}")


class CellParseError(GridParseError):
    """Raw cell text that matches none of the cell forms.

    Attributes:
        raw: The offending cell text.
        line_no: 1-based input line, when known.
    """

    code = "unparseable_cell"

    def __init__(self, raw: str, message: str | None = None) -> None:
        self.raw = raw
        self.detail = message
        self.line_no: int | None = None
        super().__init__(self._format())

    def _format(self) -> str:
        msg = f"Could not parse cell: {self.raw!r}"
        if self.detail:
            msg += f" ({self.detail})"
        if self.line_no is not None:
            msg += f" on line {self.line_no}"
        return msg

    def at_line(self, line_no: int) -> CellParseError:
        """Attach the input line number and refresh the message."""
        self.line_no = line_no
        self.args = (self._format(),)
        return self


class TooFewOperandsError(CellParseError):
    """An expression with fewer than two operand references."""

    code = "too_few_operands"

    def __init__(self, raw: str) -> None:
        super().__init__(raw, "not enough arguments")


class UnknownFunctionError(CellParseError):
    """A formula naming a function other than SUM or MIN."""

    code = "unknown_function"

    def __init__(self, raw: str, func_name: str) -> None:
        self.func_name = func_name
        super().__init__(raw, f"unknown function {func_name!r}")


class MalformedRangeError(CellParseError):
    """A formula whose argument is not exactly ``BEGIN:END``."""

    code = "malformed_range"

    def __init__(self, raw: str) -> None:
        super().__init__(raw, "expected FUNC(BEGIN:END)")


# ---------------------------------------------------------------------------
# Structural errors (out-of-declared-range access)
# ---------------------------------------------------------------------------


class StructuralError(GridError):
    """Raised by Sheet and Renderer on access outside the declared grid."""

    code = "structural_error"


class InvalidRowIdError(StructuralError, KeyError):
    code = "invalid_row_id"

    def __init__(self, row_id: str, message: str | None = None) -> None:
        self.row_id = row_id
        self.message = message or f"Invalid row id: {row_id!r}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InvalidColumnIdError(StructuralError, KeyError):
    code = "invalid_column_id"

    def __init__(self, col_id: str, message: str | None = None) -> None:
        self.col_id = col_id
        self.message = message or f"Invalid column id: {col_id!r}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class IndexOutOfBoundsError(StructuralError, IndexError):
    """A row or column index past the declared count.

    Attributes:
        axis: ``"row"`` or ``"column"``.
        index: The rejected index.
        length: The declared count on that axis.
    """

    code = "index_out_of_bounds"

    def __init__(self, axis: str, index: int, length: int) -> None:
        self.axis = axis
        self.index = index
        self.length = length
        super().__init__(
            f"Index out of bounds for {axis}, index is {index} length is {length}"
        )


# ---------------------------------------------------------------------------
# Evaluation errors (attached to one cell of the result grid)
# ---------------------------------------------------------------------------


class EvaluationError(GridError):
    """Raised while computing one cell.

    Attributes:
        marker: Short text shown in the rendered table for the failed cell.
    """

    code = "evaluation_error"
    marker = "#ERR!"


class UnresolvableReferenceError(EvaluationError):
    code = "unresolvable_reference"
    marker = "#REF!"

    def __init__(self, ref: str, message: str | None = None) -> None:
        self.ref = ref
        super().__init__(message or f"Unresolvable reference: {ref!r}")


class CircularReferenceError(EvaluationError):
    """Raised when resolving an address re-enters itself.

    Attributes:
        cycle_path: Addresses from the first repeat back to itself.
    """

    code = "circular_reference"
    marker = "#CIRC!"

    def __init__(self, cycle_path: list[str]) -> None:
        self.cycle_path = cycle_path
        super().__init__(f"Circular cell reference: {' -> '.join(cycle_path)}")


class InvalidRangeMemberError(EvaluationError):
    """A range member that did not resolve to a value.

    Attributes:
        addr: The failing member address.
        cause: The member's own evaluation error.
    """

    code = "invalid_range_member"
    marker = "#RANGE!"

    def __init__(self, addr: str, cause: EvaluationError) -> None:
        self.addr = addr
        self.cause = cause
        super().__init__(f"Range member {addr} has no value: {cause}")


class EmptyRangeError(EvaluationError):
    code = "empty_range"
    marker = "#EMPTY!"

    def __init__(self, func_name: str, begin: str, end: str) -> None:
        self.func_name = func_name
        self.begin = begin
        self.end = end
        super().__init__(f"{func_name}({begin}:{end}) has no values")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(GridError):
    code = "config_error"
