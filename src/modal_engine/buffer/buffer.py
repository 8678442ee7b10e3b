"""High-level buffer façade combining document, state, registers, and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, Optional, Sequence

from modal_engine.errors import OutOfRangeError
from modal_engine.runtime import telemetry

from .document import BufferDocument, split_lines
from .registers import RegisterBank
from .state import BufferState, Cursor
from .sync import BufferMirror
from .undo import Snapshot, TimelineMark, UndoTimeline
from .validation import ensure_cursor, ensure_ordered, ensure_row


@dataclass(slots=True)
class BufferDelta:
    version: int
    text: str
    cursor: Cursor
    label: str


@dataclass(frozen=True, slots=True)
class BufferCheckpoint:
    """Everything needed to put a buffer back after a failed key event."""

    document: BufferDocument
    state: BufferState
    timeline: TimelineMark


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
        timeline: Optional[UndoTimeline] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()
        self.timeline = timeline or UndoTimeline()
        self.saved_lines = self.document.lines

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_text(text))

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument(lines=tuple(lines)))

    # -- read accessors -------------------------------------------------

    def line_at(self, row: int) -> str:
        ensure_row(self.document, row)
        return self.document.get_line(row)

    def line_count(self) -> int:
        return self.document.line_count

    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    def text(self) -> str:
        return self.document.text()

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.text(),
            cursor=self.state.cursor,
            selection=self.state.selection,
            version=self.document.version,
            attributes=dict(attributes or {}),
        )

    def get_text(self, start: Cursor, end: Cursor) -> str:
        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        if start > end:
            start, end = end, start
        lines = self.document.lines
        (r1, c1), (r2, c2) = start, end
        if r1 == r2:
            return lines[r1][c1:c2]
        parts = [lines[r1][c1:], *lines[r1 + 1 : r2], lines[r2][:c2]]
        return "\n".join(parts)

    @property
    def modified(self) -> bool:
        """True when the text differs from the last saved or loaded text."""

        return self.document.lines != self.saved_lines

    def mark_saved(self) -> None:
        self.saved_lines = self.document.lines

    # -- cursor ---------------------------------------------------------

    def set_cursor(self, row: int, col: int, *, keep_desired: bool = False) -> Cursor:
        ensure_cursor(self.document, (row, col))
        self.state.set_cursor(row, col, keep_desired=keep_desired)
        return self.state.cursor

    def clamp(self, row: int, col: int, *, allow_eol: bool = True) -> Cursor:
        """Return the nearest valid position; never raises."""

        row = max(0, min(row, self.document.line_count - 1))
        length = len(self.document.get_line(row))
        limit = length if allow_eol else max(length - 1, 0)
        return (row, max(0, min(col, limit)))

    # -- snapshots ------------------------------------------------------

    def snapshot(self, label: str = "") -> Snapshot:
        return Snapshot(lines=self.document.lines, cursor=self.state.cursor, label=label)

    def restore(self, snapshot: Snapshot) -> None:
        """Apply ``snapshot`` without touching the undo history."""

        self.document = self.document.replace(lines=snapshot.lines)
        row, col = self.clamp(*snapshot.cursor)
        self.state.set_cursor(row, col)
        self.state.last_change_tick = self.document.version

    def undo(self) -> bool:
        with telemetry.span(
            "buffer::undo", component="buffer", metadata={"buffer": self.name}
        ):
            target = self.timeline.undo(self.snapshot("undo"))
            if target is None:
                return False
            self.restore(target)
            return True

    def redo(self) -> bool:
        with telemetry.span(
            "buffer::redo", component="buffer", metadata={"buffer": self.name}
        ):
            target = self.timeline.redo(self.snapshot("redo"))
            if target is None:
                return False
            self.restore(target)
            return True

    def checkpoint(self) -> BufferCheckpoint:
        return BufferCheckpoint(
            document=self.document,
            state=self.state.copy(),
            timeline=self.timeline.mark(),
        )

    def rollback(self, checkpoint: BufferCheckpoint) -> None:
        self.document = checkpoint.document
        saved = checkpoint.state
        self.state.cursor = saved.cursor
        self.state.desired_col = saved.desired_col
        self.state.anchor = saved.anchor
        self.state.active_register = saved.active_register
        self.state.last_change_tick = saved.last_change_tick
        self.timeline.reset_to(checkpoint.timeline)

    # -- mutations ------------------------------------------------------

    def replace(
        self, start: Cursor, end: Cursor, text: str, *, label: str = "replace"
    ) -> BufferDelta:
        """Replace the half-open range ``[start, end)`` with ``text``.

        The cursor lands just after the inserted text.
        """

        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        ensure_ordered(start, end)
        with Transaction(self, label):
            (r1, c1), (r2, c2) = start, end
            lines = self.document.lines
            prefix = lines[r1][:c1]
            suffix = lines[r2][c2:]
            inserted = split_lines(text)
            new_lines = list(inserted)
            new_lines[0] = prefix + new_lines[0]
            cursor_row = r1 + len(inserted) - 1
            cursor_col = len(new_lines[-1])
            new_lines[-1] = new_lines[-1] + suffix
            self.document = self.document.update_lines(r1, r2 + 1, new_lines)
            self.state.set_cursor(cursor_row, cursor_col)
        return self._delta(label)

    def insert(
        self, text: str, at: Optional[Cursor] = None, *, label: str = "insert"
    ) -> BufferDelta:
        position = at if at is not None else self.state.cursor
        return self.replace(position, position, text, label=label)

    def delete(self, start: Cursor, end: Cursor, *, label: str = "delete") -> BufferDelta:
        return self.replace(start, end, "", label=label)

    def insert_lines(
        self, row: int, lines: Sequence[str], *, label: str = "insert_lines"
    ) -> BufferDelta:
        """Insert whole lines before ``row`` (``row == line_count`` appends)."""

        if row < 0 or row > self.document.line_count:
            raise OutOfRangeError("Row out of range", cursor=(row, 0))
        if not lines:
            raise OutOfRangeError("No lines to insert", cursor=(row, 0))
        with Transaction(self, label):
            self.document = self.document.update_lines(row, row, lines)
            self.state.set_cursor(row, 0)
        return self._delta(label)

    def delete_lines(
        self, first: int, last: int, *, label: str = "delete_lines"
    ) -> BufferDelta:
        """Delete rows ``first..last`` inclusive, keeping at least one line."""

        ensure_row(self.document, first)
        ensure_row(self.document, last)
        if first > last:
            raise OutOfRangeError("Range end precedes start", cursor=(last, 0))
        with Transaction(self, label):
            remaining = self.document.line_count - (last - first + 1)
            replacement = [""] if remaining == 0 else []
            self.document = self.document.update_lines(first, last + 1, replacement)
            row = min(first, self.document.line_count - 1)
            self.state.set_cursor(row, 0)
        return self._delta(label)

    def set_text(self, text: str, *, label: str = "set_text") -> BufferDelta:
        with Transaction(self, label):
            self.document = self.document.replace(lines=split_lines(text))
            row, col = self.clamp(*self.state.cursor)
            self.state.set_cursor(row, col)
        return self._delta(label)

    def _delta(self, label: str) -> BufferDelta:
        return BufferDelta(
            version=self.document.version,
            text=self.document.text(),
            cursor=self.state.cursor,
            label=label,
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Records a pre-mutation snapshot once the wrapped change succeeds."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._before: Optional[Snapshot] = None

    def __enter__(self) -> "Transaction":
        self._before = self.buffer.snapshot(self.label)
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None and self._before is not None:
            self.buffer.timeline.record(self._before)
            self.buffer.state.last_change_tick = self.buffer.document.version
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "BufferCheckpoint", "BufferDelta", "Transaction"]
