"""Column label helpers and A1-style address splitting.

Column positions are 1-based and map onto base-26 labels with no zero
digit: 1=A, 26=Z, 27=AA, 28=AB.  Row ids are opaque strings; an address
is the column label immediately followed by the row id (``B12``), so
only rows with digit ids can be referenced from formulas.
"""

from __future__ import annotations

import re

from gridcalc.errors import InvalidLabelError, InvalidPositionError, UnresolvableReferenceError

Address = tuple[str, str]  # (row_id, col_id)

_LABEL_RE = re.compile(r"^[A-Z]+$")
_ADDR_RE = re.compile(r"^([A-Z]+)(\d+)$")


def position_to_label(position: int) -> str:
    """Convert a 1-based column position to its letter label.

    Raises InvalidPositionError for positions below 1.
    """
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise InvalidPositionError(position)
    result = ""
    n = position
    while n > 0:
        n, rem = divmod(n - 1, 26)
        result = chr(65 + rem) + result
    return result


def label_to_position(label: str) -> int:
    """Convert a column label to its 1-based position.  A=1, Z=26, AA=27."""
    if not isinstance(label, str) or not _LABEL_RE.match(label):
        raise InvalidLabelError(label)
    pos = 0
    for ch in label:
        pos = pos * 26 + (ord(ch) - ord("A") + 1)
    return pos


def split_addr(addr: str) -> Address:
    """Split ``'AB12'`` into ``('12', 'AB')`` (row id, column label).

    Raises UnresolvableReferenceError on text that is not an address.
    """
    m = _ADDR_RE.match(addr.strip().upper())
    if not m:
        raise UnresolvableReferenceError(addr, f"Invalid cell address: {addr!r}")
    col, row = m.group(1), m.group(2)
    return row, col


def make_addr(row_id: str, col_id: str) -> str:
    """Build a cell address from a row id and column label."""
    return f"{col_id}{row_id}"
