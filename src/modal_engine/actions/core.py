"""Mode-switching and history actions shared across modes."""

from __future__ import annotations

from typing import Optional

from modal_engine.config import EditorMode
from modal_engine.keymaps import ResolutionMatch
from modal_engine.modes.base_mode import ModeResult
from modal_engine.modes.handle import EditorHandle
from modal_engine.selection import first_non_blank


def enter_insert_mode(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.INSERT)
    return ModeResult(consumed=True, message="enter_insert")


def append_after_cursor(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.INSERT)
    row, col = editor.cursor()
    editor.move_cursor(row, col + 1 if editor.line(row) else 0)
    return ModeResult(consumed=True, message="enter_insert")


def insert_at_line_start(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.INSERT)
    row, _ = editor.cursor()
    line = editor.line(row)
    col = len(line) if not line.strip() else first_non_blank(line)
    editor.move_cursor(row, col)
    return ModeResult(consumed=True, message="enter_insert")


def append_at_line_end(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.INSERT)
    row, _ = editor.cursor()
    editor.move_cursor(row, len(editor.line(row)))
    return ModeResult(consumed=True, message="enter_insert")


def open_line_below(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    row, _ = editor.cursor()
    editor.insert_lines(row + 1, [""])
    editor.set_mode(EditorMode.INSERT)
    editor.move_cursor(row + 1, 0)
    return ModeResult(consumed=True, message="enter_insert")


def open_line_above(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    row, _ = editor.cursor()
    editor.insert_lines(row, [""])
    editor.set_mode(EditorMode.INSERT)
    editor.move_cursor(row, 0)
    return ModeResult(consumed=True, message="enter_insert")


def exit_to_normal_mode(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.NORMAL)
    return ModeResult(consumed=True, message="exit_to_normal")


def enter_command_mode(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    editor.set_mode(EditorMode.COMMAND)
    return ModeResult(consumed=True, message="enter_command")


def undo_change(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    if not editor.undo():
        editor.status("Already at oldest change")
    return None


def redo_change(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    if not editor.redo():
        editor.status("Already at newest change")
    return None


__all__ = [
    "enter_insert_mode",
    "append_after_cursor",
    "insert_at_line_start",
    "append_at_line_end",
    "open_line_below",
    "open_line_above",
    "exit_to_normal_mode",
    "enter_command_mode",
    "undo_change",
    "redo_change",
]
