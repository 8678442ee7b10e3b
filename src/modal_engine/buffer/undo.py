"""Snapshot-based undo/redo stacks for buffer operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .document import Lines
from .state import Cursor


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable capture of buffer content and cursor."""

    lines: Lines
    cursor: Cursor
    label: str = ""

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True, slots=True)
class TimelineMark:
    """Copy of both stacks, used to roll a failed key event back."""

    undo: Tuple[Snapshot, ...]
    redo: Tuple[Snapshot, ...]


class UndoTimeline:
    """Linear undo/redo history made of two snapshot stacks."""

    def __init__(self) -> None:
        self._undo: List[Snapshot] = []
        self._redo: List[Snapshot] = []

    def record(self, snapshot: Snapshot) -> None:
        """Push a pre-mutation snapshot and drop the redo history."""

        self._undo.append(snapshot)
        self._redo.clear()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def undo(self, current: Snapshot) -> Optional[Snapshot]:
        """Pop the latest snapshot, parking ``current`` on the redo stack."""

        if not self._undo:
            return None
        target = self._undo.pop()
        self._redo.append(current)
        return target

    def redo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self._redo:
            return None
        target = self._redo.pop()
        self._undo.append(current)
        return target

    def squash(self, depth: int) -> None:
        """Merge every step recorded above ``depth`` into a single undo step."""

        if len(self._undo) - depth > 1:
            del self._undo[depth + 1 :]

    def mark(self) -> TimelineMark:
        return TimelineMark(undo=tuple(self._undo), redo=tuple(self._redo))

    def reset_to(self, mark: TimelineMark) -> None:
        self._undo = list(mark.undo)
        self._redo = list(mark.redo)

    def __len__(self) -> int:
        return len(self._undo)


__all__ = ["Snapshot", "TimelineMark", "UndoTimeline"]
