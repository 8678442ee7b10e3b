"""Pure cursor and selection geometry."""

from .boundary import Boundary, TextRange, selection_boundary, selection_range
from .columns import clamp_col, first_non_blank, max_col, vertical_target
from .words import char_class, next_word_start, prev_word_start, word_end

__all__ = [
    "Boundary",
    "TextRange",
    "selection_boundary",
    "selection_range",
    "max_col",
    "clamp_col",
    "vertical_target",
    "first_non_blank",
    "char_class",
    "next_word_start",
    "prev_word_start",
    "word_end",
]
