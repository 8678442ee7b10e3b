"""Word motions (``w``, ``b``, ``e``) over a sequence of lines.

Characters fall into three classes: blanks, keyword characters (alphanumerics
and ``_``) and everything else. A word is a run of one non-blank class. Line
breaks count as blanks, except that an empty line is a word of its own for
``w`` and ``b``.
"""

from __future__ import annotations

from typing import Sequence

from modal_engine.buffer.state import Cursor

_BLANK, _KEYWORD, _PUNCT = 0, 1, 2


def char_class(char: str) -> int:
    if char.isspace():
        return _BLANK
    if char.isalnum() or char == "_":
        return _KEYWORD
    return _PUNCT


def _last_col(line: str) -> int:
    return max(len(line) - 1, 0)


def next_word_start(lines: Sequence[str], position: Cursor) -> Cursor:
    row, col = position
    line = lines[row]
    if col < len(line):
        current = char_class(line[col])
        if current != _BLANK:
            while col < len(line) and char_class(line[col]) == current:
                col += 1
    while True:
        if col >= len(line):
            if row + 1 >= len(lines):
                return (row, _last_col(line))
            row, col = row + 1, 0
            line = lines[row]
            if not line:
                return (row, 0)
            continue
        if char_class(line[col]) == _BLANK:
            col += 1
            continue
        return (row, col)


def prev_word_start(lines: Sequence[str], position: Cursor) -> Cursor:
    row, col = position
    col = min(col, len(lines[row]))
    while True:
        if col > 0:
            col -= 1
        elif row > 0:
            row -= 1
            col = len(lines[row])
            if not lines[row]:
                return (row, 0)
            continue
        else:
            return (0, 0)
        if char_class(lines[row][col]) != _BLANK:
            break
    line = lines[row]
    current = char_class(line[col])
    while col > 0 and char_class(line[col - 1]) == current:
        col -= 1
    return (row, col)


def word_end(lines: Sequence[str], position: Cursor) -> Cursor:
    row, col = position
    line = lines[row]
    col += 1
    while True:
        if col >= len(line):
            if row + 1 >= len(lines):
                return (row, _last_col(line))
            row, col = row + 1, 0
            line = lines[row]
            continue
        if char_class(line[col]) == _BLANK:
            col += 1
            continue
        break
    current = char_class(line[col])
    while col + 1 < len(line) and char_class(line[col + 1]) == current:
        col += 1
    return (row, col)


__all__ = ["char_class", "next_word_start", "prev_word_start", "word_end"]
