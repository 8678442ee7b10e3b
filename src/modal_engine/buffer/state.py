"""Cursor, selection anchor, and desired-column state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Cursor = Tuple[int, int]  # (row, column)
Selection = Tuple[Cursor, Cursor]

# Desired column meaning "end of whatever line the cursor lands on".
END_OF_LINE = 2**31 - 1


@dataclass(slots=True)
class BufferState:
    """Mutable cursor info tied to a BufferDocument version."""

    cursor: Cursor = (0, 0)
    desired_col: int = 0
    anchor: Optional[Cursor] = None
    active_register: str = '"'
    last_change_tick: int = 0

    def set_cursor(self, row: int, col: int, *, keep_desired: bool = False) -> None:
        self.cursor = (row, col)
        if not keep_desired:
            self.desired_col = col

    @property
    def selection(self) -> Optional[Selection]:
        if self.anchor is None:
            return None
        return (self.anchor, self.cursor)

    def clear_selection(self) -> None:
        self.anchor = None

    def set_anchor(self, anchor: Cursor) -> None:
        self.anchor = anchor

    def copy(self) -> "BufferState":
        return BufferState(
            cursor=self.cursor,
            desired_col=self.desired_col,
            anchor=self.anchor,
            active_register=self.active_register,
            last_change_tick=self.last_change_tick,
        )


__all__ = ["BufferState", "Cursor", "Selection", "END_OF_LINE"]
