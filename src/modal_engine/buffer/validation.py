"""Validation helpers shared across buffer services."""

from __future__ import annotations

from modal_engine.errors import OutOfRangeError

from .document import BufferDocument
from .state import Cursor


def ensure_row(document: BufferDocument, row: int) -> int:
    if row < 0 or row >= document.line_count:
        raise OutOfRangeError("Row out of range", cursor=(row, 0))
    return row


def ensure_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    row, col = cursor
    if row < 0 or row >= document.line_count:
        raise OutOfRangeError("Row out of range", cursor=cursor)
    line = document.get_line(row)
    if col < 0 or col > len(line):
        raise OutOfRangeError("Column out of range", cursor=cursor)
    return cursor


def ensure_ordered(start: Cursor, end: Cursor) -> None:
    if start > end:
        raise OutOfRangeError("Range end precedes start", cursor=end)


__all__ = ["ensure_row", "ensure_cursor", "ensure_ordered", "OutOfRangeError"]
