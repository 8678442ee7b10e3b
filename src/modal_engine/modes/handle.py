"""Restricted capability handle given to bound operations and commands.

Operations never see the document or the undo timeline directly. Every
mutation goes through the buffer's validated, undo-recording methods, and
cursor placement is checked against the buffer before it is clamped to the
range the current mode allows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from modal_engine.buffer import Cursor, RegisterValue
from modal_engine.buffer.state import END_OF_LINE
from modal_engine.config import EditorMode, coerce_mode
from modal_engine.errors import EngineError, OutOfRangeError
from modal_engine.selection import (
    Boundary,
    TextRange,
    clamp_col,
    max_col,
    selection_boundary,
    selection_range,
)

from .base_mode import ModeContext

if TYPE_CHECKING:  # pragma: no cover
    from modal_engine.commands import CommandRegistry


class EditorHandle:
    """Narrow view of one session handed to operations."""

    def __init__(self, context: ModeContext) -> None:
        self._context = context
        self.requested_mode: Optional[EditorMode] = None
        # Zero-based repeat number while a counted binding runs.
        self.repeat_index = 0
        # Cursor before the first repeat.
        self.repeat_origin: Optional[Cursor] = None

    # -- lines ----------------------------------------------------------

    def lines(self) -> Sequence[str]:
        return self._context.buffer.lines()

    def line(self, row: int) -> str:
        return self._context.buffer.line_at(row)

    def line_count(self) -> int:
        return self._context.buffer.line_count()

    def text(self) -> str:
        return self._context.buffer.text()

    def get_text(self, start: Cursor, end: Cursor) -> str:
        return self._context.buffer.get_text(start, end)

    # -- mutations ------------------------------------------------------

    def insert(self, text: str, at: Optional[Cursor] = None) -> Cursor:
        return self._context.buffer.insert(text, at).cursor

    def delete(self, start: Cursor, end: Cursor) -> Cursor:
        return self._context.buffer.delete(start, end).cursor

    def replace(self, start: Cursor, end: Cursor, text: str) -> Cursor:
        return self._context.buffer.replace(start, end, text).cursor

    def insert_lines(self, row: int, lines: Sequence[str]) -> Cursor:
        return self._context.buffer.insert_lines(row, list(lines)).cursor

    def delete_lines(self, first: int, last: int) -> Cursor:
        return self._context.buffer.delete_lines(first, last).cursor

    def set_text(self, text: str) -> None:
        self._context.buffer.set_text(text)

    def undo(self) -> bool:
        return self._context.buffer.undo()

    def redo(self) -> bool:
        return self._context.buffer.redo()

    def modified(self) -> bool:
        return self._context.buffer.modified

    def mark_saved(self) -> None:
        self._context.buffer.mark_saved()

    # -- cursor ---------------------------------------------------------

    def cursor(self) -> Cursor:
        return self._context.buffer.state.cursor

    def set_cursor(self, row: int, col: int, *, keep_desired: bool = False) -> Cursor:
        """Place the cursor, raising ``OutOfRangeError`` outside the buffer."""

        buffer = self._context.buffer
        if row < 0 or row >= buffer.line_count():
            raise OutOfRangeError("Row out of range", cursor=(row, col))
        line = buffer.line_at(row)
        if col < 0 or col > len(line):
            raise OutOfRangeError("Column out of range", cursor=(row, col))
        buffer.state.set_cursor(row, clamp_col(line, col, self.mode()), keep_desired=keep_desired)
        return buffer.state.cursor

    def move_cursor(self, row: int, col: int, *, keep_desired: bool = False) -> Cursor:
        """Place the cursor at the nearest valid position; never raises."""

        buffer = self._context.buffer
        row, _ = buffer.clamp(row, 0)
        col = clamp_col(buffer.line_at(row), col, self.mode())
        buffer.state.set_cursor(row, col, keep_desired=keep_desired)
        return buffer.state.cursor

    @property
    def desired_col(self) -> int:
        return self._context.buffer.state.desired_col

    def set_desired_col(self, col: int) -> None:
        self._context.buffer.state.desired_col = col

    def stick_to_line_end(self) -> None:
        self._context.buffer.state.desired_col = END_OF_LINE

    def max_col(self, row: int) -> int:
        return max_col(self.line(row), self.mode())

    # -- mode -----------------------------------------------------------

    def mode(self) -> EditorMode:
        return self.requested_mode or self._context.mode

    def set_mode(self, mode: EditorMode | str) -> None:
        """Request a mode switch, applied once the operation returns."""

        self.requested_mode = coerce_mode(mode)

    # -- selection ------------------------------------------------------

    def anchor(self) -> Optional[Cursor]:
        return self._context.buffer.state.anchor

    def set_anchor(self, anchor: Cursor) -> None:
        self._context.buffer.state.set_anchor(self._context.buffer.clamp(*anchor))

    def selection_boundary(self) -> Optional[Boundary]:
        anchor = self.anchor()
        if anchor is None:
            return None
        return selection_boundary(anchor, self.cursor(), self._context.mode, self.lines())

    def selection_range(self) -> Optional[TextRange]:
        anchor = self.anchor()
        if anchor is None:
            return None
        return selection_range(anchor, self.cursor(), self._context.mode, self.lines())

    # -- registers ------------------------------------------------------

    def register(self, name: str = '"') -> RegisterValue:
        return self._context.registers.get(name)

    def yank(
        self,
        text: str,
        *,
        linewise: bool = False,
        append: bool = False,
        name: Optional[str] = None,
    ) -> None:
        """Store ``text`` in a register; ``append`` extends its current value."""

        register = name or self._context.buffer.state.active_register or '"'
        if append:
            self._context.registers.append(register, text)
            return
        self._context.registers.yank_to(
            register, text, register_type="line" if linewise else "character"
        )

    # -- command line ---------------------------------------------------

    def command_text(self) -> str:
        return self._context.command_line.text

    def command_insert(self, text: str) -> None:
        self._context.command_line.insert(text)

    def command_delete_backward(self) -> bool:
        return self._context.command_line.delete_backward()

    def command_move(self, delta: int) -> None:
        self._context.command_line.move(delta)

    def execute_command(self, line: str) -> bool:
        """Run a colon command; failures are rolled back and reported.

        Returns ``True`` when the command completed.
        """

        registry = self._command_registry()
        checkpoint = self._context.buffer.checkpoint()
        requested = self.requested_mode
        try:
            message = registry.execute(line, self)
        except EngineError as exc:
            self._context.buffer.rollback(checkpoint)
            self.requested_mode = requested
            self._context.post_status(str(exc))
            return False
        if message:
            self._context.post_status(message)
        return True

    def _command_registry(self) -> "CommandRegistry":
        registry = self._context.extras.get("command_registry")
        if registry is None:
            raise RuntimeError("ModeContext.extras missing 'command_registry'")
        return registry  # type: ignore[return-value]

    # -- status and events ----------------------------------------------

    def status(self, message: str) -> None:
        self._context.post_status(message)

    def emit(self, event: str, payload: object | None = None) -> None:
        self._context.bus.emit(event, payload)


__all__ = ["EditorHandle"]
