"""Built-in operations bound to keys by the default keymaps."""

from .command import (
    cancel_command_line,
    command_backspace,
    command_cursor_left,
    command_cursor_right,
    submit_command_line,
)
from .core import (
    append_after_cursor,
    append_at_line_end,
    enter_command_mode,
    enter_insert_mode,
    exit_to_normal_mode,
    insert_at_line_start,
    open_line_above,
    open_line_below,
    redo_change,
    undo_change,
)
from .edit import (
    delete_char,
    delete_char_before,
    delete_line,
    delete_to_line_end,
    insert_backspace,
    insert_newline,
    join_lines,
    put_after,
    put_before,
    yank_line,
)
from .motion import (
    goto_first_line,
    goto_last_line,
    goto_line,
    line_end,
    line_first_non_blank,
    line_start,
    move_down,
    move_left,
    move_right,
    move_up,
    word_backward,
    word_end_forward,
    word_forward,
)
from .visual import (
    change_selection,
    delete_selection,
    swap_anchor,
    toggle_visual,
    toggle_visual_line,
    yank_selection,
)

__all__ = [
    "cancel_command_line",
    "command_backspace",
    "command_cursor_left",
    "command_cursor_right",
    "submit_command_line",
    "append_after_cursor",
    "append_at_line_end",
    "enter_command_mode",
    "enter_insert_mode",
    "exit_to_normal_mode",
    "insert_at_line_start",
    "open_line_above",
    "open_line_below",
    "redo_change",
    "undo_change",
    "delete_char",
    "delete_char_before",
    "delete_line",
    "delete_to_line_end",
    "insert_backspace",
    "insert_newline",
    "join_lines",
    "put_after",
    "put_before",
    "yank_line",
    "goto_first_line",
    "goto_last_line",
    "goto_line",
    "line_end",
    "line_first_non_blank",
    "line_start",
    "move_down",
    "move_left",
    "move_right",
    "move_up",
    "word_backward",
    "word_end_forward",
    "word_forward",
    "change_selection",
    "delete_selection",
    "swap_anchor",
    "toggle_visual",
    "toggle_visual_line",
    "yank_selection",
]
