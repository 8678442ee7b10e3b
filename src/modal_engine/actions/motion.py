"""Cursor motions shared by Normal, Visual and VisualLine modes.

Motions never fail: targets outside the buffer are clamped to the nearest
valid position for the current mode. Horizontal motions update the desired
column; vertical motions only read it.
"""

from __future__ import annotations

from typing import Optional

from modal_engine.keymaps import ResolutionMatch
from modal_engine.modes.base_mode import ModeResult
from modal_engine.modes.handle import EditorHandle
from modal_engine.selection import (
    first_non_blank,
    next_word_start,
    prev_word_start,
    vertical_target,
    word_end,
)


def _moved(editor: EditorHandle) -> Optional[ModeResult]:
    if editor.mode().is_visual:
        editor.emit("visual.selection", editor.selection_boundary())
    return None


def move_left(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    row, col = editor.cursor()
    editor.move_cursor(row, col - 1)
    return _moved(editor)


def move_right(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    row, col = editor.cursor()
    editor.move_cursor(row, col + 1)
    return _moved(editor)


def _vertical(editor: EditorHandle, delta: int) -> Optional[ModeResult]:
    row, _ = editor.cursor()
    target = vertical_target(editor.lines(), row, delta, editor.desired_col, editor.mode())
    editor.move_cursor(*target, keep_desired=True)
    return _moved(editor)


def move_up(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    return _vertical(editor, -1)


def move_down(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    return _vertical(editor, 1)


def line_start(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    row, _ = editor.cursor()
    editor.move_cursor(row, 0)
    return _moved(editor)


def line_first_non_blank(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    row, _ = editor.cursor()
    editor.move_cursor(row, first_non_blank(editor.line(row)))
    return _moved(editor)


def line_end(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    """``$``: jump to the line end; later vertical motions stay on line ends."""

    del match
    row, _ = editor.cursor()
    if editor.repeat_index:
        row = min(row + 1, editor.line_count() - 1)
    editor.move_cursor(row, editor.max_col(row), keep_desired=True)
    editor.stick_to_line_end()
    return _moved(editor)


def word_forward(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    editor.move_cursor(*next_word_start(editor.lines(), editor.cursor()))
    return _moved(editor)


def word_backward(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    editor.move_cursor(*prev_word_start(editor.lines(), editor.cursor()))
    return _moved(editor)


def word_end_forward(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    editor.move_cursor(*word_end(editor.lines(), editor.cursor()))
    return _moved(editor)


def goto_first_line(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    editor.move_cursor(0, first_non_blank(editor.line(0)))
    return _moved(editor)


def goto_last_line(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    row = editor.line_count() - 1
    editor.move_cursor(row, first_non_blank(editor.line(row)))
    return _moved(editor)


def goto_line(editor: EditorHandle, number: int) -> None:
    """Jump to 1-based line ``number``, clamped to the buffer."""

    row = max(0, min(number - 1, editor.line_count() - 1))
    editor.move_cursor(row, first_non_blank(editor.line(row)))


__all__ = [
    "move_left",
    "move_right",
    "move_up",
    "move_down",
    "line_start",
    "line_first_non_blank",
    "line_end",
    "word_forward",
    "word_backward",
    "word_end_forward",
    "goto_first_line",
    "goto_last_line",
    "goto_line",
]
