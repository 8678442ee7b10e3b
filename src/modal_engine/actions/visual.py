"""Actions dedicated to Visual and VisualLine selections."""

from __future__ import annotations

from typing import Optional

from modal_engine.config import EditorMode
from modal_engine.keymaps import ResolutionMatch
from modal_engine.modes.base_mode import ModeResult
from modal_engine.modes.handle import EditorHandle
from modal_engine.selection import TextRange, first_non_blank


def toggle_visual(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    """``v``: enter character-wise Visual, or leave it when already there."""

    del match
    target = (
        EditorMode.NORMAL if editor.mode() == EditorMode.VISUAL else EditorMode.VISUAL
    )
    editor.set_mode(target)
    return ModeResult(consumed=True, message=f"enter_{target.value}")


def toggle_visual_line(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    target = (
        EditorMode.NORMAL
        if editor.mode() == EditorMode.VISUAL_LINE
        else EditorMode.VISUAL_LINE
    )
    editor.set_mode(target)
    return ModeResult(consumed=True, message=f"enter_{target.value}")


def swap_anchor(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    """``o``: move the cursor to the other end of the selection."""

    del match
    anchor = editor.anchor()
    if anchor is None:
        return ModeResult(consumed=False, status="no_selection")
    editor.set_anchor(editor.cursor())
    editor.move_cursor(*anchor)
    editor.emit("visual.selection", editor.selection_boundary())
    return ModeResult(consumed=True, status="visual_swap")


def _selected(editor: EditorHandle) -> Optional[tuple[TextRange, str]]:
    selection = editor.selection_range()
    if selection is None:
        return None
    return selection, editor.get_text(selection.start, selection.end)


def yank_selection(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    selected = _selected(editor)
    if selected is None:
        return ModeResult(consumed=False, status="no_selection")
    selection, text = selected
    editor.yank(text, linewise=selection.linewise)
    editor.set_mode(EditorMode.NORMAL)
    editor.move_cursor(*selection.start)
    editor.emit("visual.yank", text)
    return ModeResult(consumed=True, status="visual_yank")


def delete_selection(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    del match
    selected = _selected(editor)
    if selected is None:
        return ModeResult(consumed=False, status="no_selection")
    selection, text = selected
    editor.yank(text, linewise=selection.linewise)
    editor.set_mode(EditorMode.NORMAL)
    if selection.linewise:
        first, last = selection.rows
        row, _ = editor.delete_lines(first, last)
        editor.move_cursor(row, first_non_blank(editor.line(row)))
    else:
        editor.delete(selection.start, selection.end)
        editor.move_cursor(*selection.start)
    editor.emit("visual.delete", text)
    return ModeResult(consumed=True, status="visual_delete")


def change_selection(editor: EditorHandle, match: ResolutionMatch) -> ModeResult:
    """``c``: delete the selection and continue in Insert mode.

    Line-wise changes leave one empty line in place of the selected lines.
    """

    del match
    selected = _selected(editor)
    if selected is None:
        return ModeResult(consumed=False, status="no_selection")
    selection, text = selected
    editor.yank(text, linewise=selection.linewise)
    editor.set_mode(EditorMode.INSERT)
    editor.delete(selection.start, selection.end)
    editor.move_cursor(*selection.start)
    editor.emit("visual.delete", text)
    return ModeResult(consumed=True, status="visual_change")


__all__ = [
    "toggle_visual",
    "toggle_visual_line",
    "swap_anchor",
    "yank_selection",
    "delete_selection",
    "change_selection",
]
