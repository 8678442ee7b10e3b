"""Visual selection boundaries as pure functions of anchor and cursor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from modal_engine.buffer.state import Cursor
from modal_engine.config import EditorMode

Boundary = Tuple[Cursor, Cursor]


@dataclass(frozen=True, slots=True)
class TextRange:
    """Half-open buffer range, optionally covering whole lines."""

    start: Cursor
    end: Cursor
    linewise: bool = False

    @property
    def rows(self) -> Tuple[int, int]:
        return (self.start[0], self.end[0])


def selection_boundary(
    anchor: Cursor,
    active: Cursor,
    mode: EditorMode | str,
    lines: Optional[Sequence[str]] = None,
) -> Optional[Boundary]:
    """Return the inclusive ``(start, end)`` of a visual selection.

    Positions compare row-major, so swapping ``anchor`` and ``active`` never
    changes the result. Line-wise selections widen the start to column 0 and
    the end to the last column of its line, which needs ``lines``.
    """

    start, end = (anchor, active) if anchor <= active else (active, anchor)
    if mode == EditorMode.VISUAL:
        return (start, end)
    if mode == EditorMode.VISUAL_LINE:
        if lines is None:
            raise ValueError("line-wise selections need the buffer lines")
        end_row = end[0]
        return ((start[0], 0), (end_row, max(len(lines[end_row]) - 1, 0)))
    return None


def selection_range(
    anchor: Cursor,
    active: Cursor,
    mode: EditorMode | str,
    lines: Sequence[str],
) -> Optional[TextRange]:
    """Convert a visual selection into the half-open range edits operate on."""

    boundary = selection_boundary(anchor, active, mode, lines)
    if boundary is None:
        return None
    (r1, c1), (r2, c2) = boundary
    if mode == EditorMode.VISUAL_LINE:
        return TextRange((r1, 0), (r2, len(lines[r2])), linewise=True)
    if c2 < len(lines[r2]):
        return TextRange((r1, c1), (r2, c2 + 1))
    # The inclusive end sits past the last character, so it takes the break.
    if r2 + 1 < len(lines):
        return TextRange((r1, c1), (r2 + 1, 0))
    return TextRange((r1, c1), (r2, len(lines[r2])))


__all__ = ["Boundary", "TextRange", "selection_boundary", "selection_range"]
