"""Text-changing operations: deletes, yanks, puts, joins and insert-mode keys."""

from __future__ import annotations

from typing import Optional

from modal_engine.keymaps import ResolutionMatch
from modal_engine.modes.base_mode import ModeResult
from modal_engine.modes.handle import EditorHandle
from modal_engine.selection import first_non_blank


def delete_char(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    """``x``: delete the character under the cursor into the unnamed register."""

    del match
    row, col = editor.cursor()
    line = editor.line(row)
    if not line:
        return None
    if editor.repeat_index and editor.repeat_origin is not None:
        # A count never reaches back past where it started.
        if editor.repeat_origin[1] >= len(line):
            return None
    start = min(col, len(line) - 1)
    editor.yank(line[start], append=editor.repeat_index > 0)
    editor.delete((row, start), (row, start + 1))
    editor.move_cursor(row, start)
    return None


def delete_char_before(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    row, col = editor.cursor()
    if col == 0:
        return None
    line = editor.line(row)
    col = min(col, len(line))
    editor.yank(line[col - 1], append=editor.repeat_index > 0)
    editor.delete((row, col - 1), (row, col))
    editor.move_cursor(row, col - 1)
    return None


def delete_line(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    """``dd``: delete the cursor line; the buffer always keeps one line."""

    del match
    if editor.repeat_index and editor.repeat_origin is not None:
        if editor.repeat_origin[0] >= editor.line_count():
            return None
    row, _ = editor.cursor()
    line = editor.line(row)
    if editor.line_count() == 1 and not line:
        return None
    if editor.repeat_index:
        editor.yank("\n" + line, append=True)
    else:
        editor.yank(line, linewise=True)
    new_row, _ = editor.delete_lines(row, row)
    editor.move_cursor(new_row, first_non_blank(editor.line(new_row)))
    return None


def delete_to_line_end(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    del match
    row, col = editor.cursor()
    line = editor.line(row)
    if col >= len(line):
        return None
    editor.yank(line[col:])
    editor.delete((row, col), (row, len(line)))
    editor.move_cursor(row, col)
    return None


def yank_line(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    """``yy``: copy the cursor line; a count copies that many lines."""

    del match
    row = editor.cursor()[0] + editor.repeat_index
    if row >= editor.line_count():
        return None
    line = editor.line(row)
    if editor.repeat_index:
        editor.yank("\n" + line, append=True)
    else:
        editor.yank(line, linewise=True)
    return None


def _put(editor: EditorHandle, *, after: bool) -> None:
    register = editor.register()
    if not register.text and not register.linewise:
        return
    row, col = editor.cursor()
    if register.linewise:
        target = row + 1 if after else row
        editor.insert_lines(target, register.text.split("\n"))
        editor.move_cursor(target, first_non_blank(editor.line(target)))
        return
    line = editor.line(row)
    at = min(col + 1, len(line)) if after and line else min(col, len(line))
    end_row, end_col = editor.insert(register.text, at=(row, at))
    editor.move_cursor(end_row, max(end_col - 1, 0))


def put_after(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    _put(editor, after=True)
    return None


def put_before(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    _put(editor, after=False)
    return None


def join_lines(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    """``J``: join the next line onto this one, separated by one space."""

    del match
    row, _ = editor.cursor()
    if row + 1 >= editor.line_count():
        return None
    current = editor.line(row)
    following = editor.line(row + 1)
    stripped = following.lstrip()
    separator = "" if not stripped or not current or current.endswith(" ") else " "
    editor.replace((row, len(current)), (row + 1, len(following)), separator + stripped)
    editor.move_cursor(row, len(current))
    return None


def insert_newline(editor: EditorHandle, match: ResolutionMatch) -> Optional[ModeResult]:
    del match
    editor.insert("\n")
    return None


def insert_backspace(
    editor: EditorHandle, match: ResolutionMatch
) -> Optional[ModeResult]:
    """Delete before the cursor; at column 0 join with the previous line."""

    del match
    row, col = editor.cursor()
    if col > 0:
        editor.delete((row, col - 1), (row, col))
    elif row > 0:
        editor.delete((row - 1, len(editor.line(row - 1))), (row, 0))
    return None


__all__ = [
    "delete_char",
    "delete_char_before",
    "delete_line",
    "delete_to_line_end",
    "yank_line",
    "put_after",
    "put_before",
    "join_lines",
    "insert_newline",
    "insert_backspace",
]
