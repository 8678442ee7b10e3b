"""Built-in keymaps that seed each mode with sensible defaults."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Mapping, Sequence

from modal_engine.actions import command as command_actions
from modal_engine.actions import core as core_actions
from modal_engine.actions import edit as edit_actions
from modal_engine.actions import motion as motion_actions
from modal_engine.actions import visual as visual_actions
from modal_engine.config import EditorMode

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

_ACTION_TABLE: tuple[tuple[str, Callable[..., object], str], ...] = (
    ("motion.left", motion_actions.move_left, "Move left"),
    ("motion.right", motion_actions.move_right, "Move right"),
    ("motion.up", motion_actions.move_up, "Move up"),
    ("motion.down", motion_actions.move_down, "Move down"),
    ("motion.line_start", motion_actions.line_start, "Go to column 0"),
    ("motion.first_non_blank", motion_actions.line_first_non_blank, "Go to first non-blank"),
    ("motion.line_end", motion_actions.line_end, "Go to end of line"),
    ("motion.word_forward", motion_actions.word_forward, "Next word start"),
    ("motion.word_backward", motion_actions.word_backward, "Previous word start"),
    ("motion.word_end", motion_actions.word_end_forward, "Next word end"),
    ("motion.first_line", motion_actions.goto_first_line, "Go to first line"),
    ("motion.last_line", motion_actions.goto_last_line, "Go to last line"),
    ("edit.delete_char", edit_actions.delete_char, "Delete character under cursor"),
    ("edit.delete_char_before", edit_actions.delete_char_before, "Delete character before cursor"),
    ("edit.delete_line", edit_actions.delete_line, "Delete line"),
    ("edit.delete_to_end", edit_actions.delete_to_line_end, "Delete to end of line"),
    ("edit.yank_line", edit_actions.yank_line, "Yank line"),
    ("edit.put_after", edit_actions.put_after, "Put after cursor"),
    ("edit.put_before", edit_actions.put_before, "Put before cursor"),
    ("edit.join_lines", edit_actions.join_lines, "Join lines"),
    ("edit.newline", edit_actions.insert_newline, "Split line"),
    ("edit.backspace", edit_actions.insert_backspace, "Delete before cursor"),
    ("core.enter_insert", core_actions.enter_insert_mode, "Insert before cursor"),
    ("core.append", core_actions.append_after_cursor, "Append after cursor"),
    ("core.insert_line_start", core_actions.insert_at_line_start, "Insert at line start"),
    ("core.append_line_end", core_actions.append_at_line_end, "Append at line end"),
    ("core.open_below", core_actions.open_line_below, "Open line below"),
    ("core.open_above", core_actions.open_line_above, "Open line above"),
    ("core.exit_to_normal", core_actions.exit_to_normal_mode, "Return to normal mode"),
    ("core.enter_command", core_actions.enter_command_mode, "Enter command-line mode"),
    ("core.undo", core_actions.undo_change, "Undo"),
    ("core.redo", core_actions.redo_change, "Redo"),
    ("visual.toggle", visual_actions.toggle_visual, "Toggle visual mode"),
    ("visual.toggle_line", visual_actions.toggle_visual_line, "Toggle visual line mode"),
    ("visual.swap_anchor", visual_actions.swap_anchor, "Swap selection anchor"),
    ("visual.yank_selection", visual_actions.yank_selection, "Yank selection"),
    ("visual.delete_selection", visual_actions.delete_selection, "Delete selection"),
    ("visual.change_selection", visual_actions.change_selection, "Change selection"),
    ("command.submit_line", command_actions.submit_command_line, "Run the command line"),
    ("command.cancel", command_actions.cancel_command_line, "Cancel the command line"),
    ("command.backspace", command_actions.command_backspace, "Delete before cursor"),
    ("command.cursor_left", command_actions.command_cursor_left, "Cursor left"),
    ("command.cursor_right", command_actions.command_cursor_right, "Cursor right"),
)

DEFAULT_ACTIONS: tuple[ActionRef, ...] = tuple(
    ActionRef(id=action_id, handler=handler, description=description)
    for action_id, handler, description in _ACTION_TABLE
)

_MOTION_KEYS: tuple[tuple[str, str], ...] = (
    ("h", "motion.left"),
    ("<Left>", "motion.left"),
    ("l", "motion.right"),
    ("<Right>", "motion.right"),
    ("k", "motion.up"),
    ("<Up>", "motion.up"),
    ("j", "motion.down"),
    ("<Down>", "motion.down"),
    ("0", "motion.line_start"),
    ("^", "motion.first_non_blank"),
    ("$", "motion.line_end"),
    ("w", "motion.word_forward"),
    ("b", "motion.word_backward"),
    ("e", "motion.word_end"),
    ("gg", "motion.first_line"),
    ("G", "motion.last_line"),
)

_NORMAL_KEYS: tuple[tuple[str, str], ...] = (
    ("x", "edit.delete_char"),
    ("X", "edit.delete_char_before"),
    ("dd", "edit.delete_line"),
    ("D", "edit.delete_to_end"),
    ("yy", "edit.yank_line"),
    ("p", "edit.put_after"),
    ("P", "edit.put_before"),
    ("J", "edit.join_lines"),
    ("i", "core.enter_insert"),
    ("a", "core.append"),
    ("I", "core.insert_line_start"),
    ("A", "core.append_line_end"),
    ("o", "core.open_below"),
    ("O", "core.open_above"),
    ("v", "visual.toggle"),
    ("V", "visual.toggle_line"),
    (":", "core.enter_command"),
    ("u", "core.undo"),
    ("<C-r>", "core.redo"),
)

_VISUAL_KEYS: tuple[tuple[str, str], ...] = (
    ("o", "visual.swap_anchor"),
    ("y", "visual.yank_selection"),
    ("d", "visual.delete_selection"),
    ("x", "visual.delete_selection"),
    ("c", "visual.change_selection"),
    ("v", "visual.toggle"),
    ("V", "visual.toggle_line"),
    ("<Esc>", "core.exit_to_normal"),
    (":", "core.enter_command"),
)

_INSERT_KEYS: tuple[tuple[str, str], ...] = (
    ("<Esc>", "core.exit_to_normal"),
    ("<CR>", "edit.newline"),
    ("<BS>", "edit.backspace"),
    ("<Left>", "motion.left"),
    ("<Right>", "motion.right"),
    ("<Up>", "motion.up"),
    ("<Down>", "motion.down"),
)

_COMMAND_KEYS: tuple[tuple[str, str], ...] = (
    ("<Esc>", "command.cancel"),
    ("<CR>", "command.submit_line"),
    ("<BS>", "command.backspace"),
    ("<Left>", "command.cursor_left"),
    ("<Right>", "command.cursor_right"),
)

_MODE_KEYS: Mapping[EditorMode, tuple[tuple[str, str], ...]] = {
    EditorMode.NORMAL: _MOTION_KEYS + _NORMAL_KEYS,
    EditorMode.VISUAL: _MOTION_KEYS + _VISUAL_KEYS,
    EditorMode.VISUAL_LINE: _MOTION_KEYS + _VISUAL_KEYS,
    EditorMode.INSERT: _INSERT_KEYS,
    EditorMode.COMMAND: _COMMAND_KEYS,
}


def _bindings_for(mode: EditorMode, keys: Iterable[tuple[str, str]]) -> list[Binding]:
    descriptions = {action.id: action.description for action in DEFAULT_ACTIONS}
    bindings = []
    for notation, action_id in keys:
        sequence = KeySequence.coerce(notation)
        bindings.append(
            Binding(
                id=f"{mode.value}.{' '.join(sequence.tokens)}",
                mode=mode.value,
                sequence=sequence,
                action_id=action_id,
                description=descriptions[action_id],
                source="default",
            )
        )
    return bindings


DEFAULT_BINDINGS: tuple[Binding, ...] = tuple(
    binding
    for mode, keys in _MODE_KEYS.items()
    for binding in _bindings_for(mode, keys)
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode.

    Bindings whose action was filtered out are skipped as well.
    """

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    for action in DEFAULT_ACTIONS:
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        if not registry.has_action(binding.action_id):
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms)
        )

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding)

    if per_mode_overrides:
        for mode, bindings in per_mode_overrides.items():
            mode_name = str(getattr(mode, "value", mode))
            for binding in bindings:
                if binding.mode != mode_name:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target mode '{mode_name}'"
                    )
                registry.register_binding(binding)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    sequence = KeySequence(binding.sequence.strokes, timeout_ms=timeout_ms)
    return replace(binding, sequence=sequence)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = ["load_default_keymaps", "DEFAULT_ACTIONS", "DEFAULT_BINDINGS"]
