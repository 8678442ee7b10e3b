"""Command-line mode: typed text goes to the command line, not the buffer."""

from __future__ import annotations

from typing import Optional

from modal_engine.config import EditorMode

from .insert_mode import TextEntryMode


class CommandMode(TextEntryMode):
    name = EditorMode.COMMAND

    def on_enter(self, previous: Optional[EditorMode]) -> None:
        del previous
        self.context.command_line.clear()
        self.context.bus.emit("command.start", None)

    def on_exit(self, next_mode: Optional[EditorMode]) -> None:
        del next_mode
        self.context.bus.emit("command.end", self.context.command_line.text)
        self.context.command_line.clear()

    def type_text(self, text: str) -> None:
        self.context.command_line.insert(text)
        self.context.bus.emit("command.text", self.context.command_line.text)


__all__ = ["CommandMode"]
