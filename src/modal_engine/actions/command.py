"""Actions that edit and evaluate the command line."""

from __future__ import annotations

from typing import Optional

from modal_engine.config import EditorMode
from modal_engine.keymaps import ResolutionMatch
from modal_engine.modes.base_mode import ModeResult
from modal_engine.modes.handle import EditorHandle

from .motion import goto_line


def submit_command_line(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    """Run the typed command and return to Normal mode.

    An all-digit command jumps to that line. Failures end up as a single
    status message with the buffer left as it was.
    """

    del match
    text = editor.command_text().strip().lstrip(":").strip()
    editor.set_mode(EditorMode.NORMAL)
    if not text:
        return ModeResult(consumed=True, status="command_empty")
    editor.emit("command.submit", text)
    if text.isdigit():
        goto_line(editor, int(text))
        return ModeResult(consumed=True, status="command_goto")
    if not editor.execute_command(text):
        return ModeResult(consumed=True, status="command_error", message=text)
    return ModeResult(consumed=True, status="command_submit", message=text)


def cancel_command_line(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.NORMAL)
    return ModeResult(consumed=True, status="command_cancel")


def command_backspace(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    """Delete before the command cursor; on an empty line, leave the mode."""

    del match
    if not editor.command_text():
        editor.set_mode(EditorMode.NORMAL)
        return ModeResult(consumed=True, status="command_cancel")
    editor.command_delete_backward()
    return None


def command_cursor_left(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    editor.command_move(-1)
    return None


def command_cursor_right(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    editor.command_move(1)
    return None


__all__ = [
    "submit_command_line",
    "cancel_command_line",
    "command_backspace",
    "command_cursor_left",
    "command_cursor_right",
]
