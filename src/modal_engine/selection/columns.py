"""Column limits and desired-column resolution for cursor motions."""

from __future__ import annotations

from typing import Sequence

from modal_engine.buffer.state import Cursor
from modal_engine.config import EditorMode, coerce_mode


def max_col(line: str, mode: EditorMode | str) -> int:
    """Largest column the cursor may occupy on ``line`` in ``mode``."""

    if coerce_mode(mode).allows_eol:
        return len(line)
    return max(len(line) - 1, 0)


def clamp_col(line: str, col: int, mode: EditorMode | str) -> int:
    return max(0, min(col, max_col(line, mode)))


def vertical_target(
    lines: Sequence[str],
    row: int,
    delta: int,
    desired_col: int,
    mode: EditorMode | str,
) -> Cursor:
    """Where a vertical motion of ``delta`` rows lands.

    The desired column is only read here; lines too short for it get the
    cursor clamped to their own end.
    """

    target_row = max(0, min(row + delta, len(lines) - 1))
    return (target_row, clamp_col(lines[target_row], desired_col, mode))


def first_non_blank(line: str) -> int:
    stripped = len(line) - len(line.lstrip())
    if stripped >= len(line):
        return max(len(line) - 1, 0) if line else 0
    return stripped


__all__ = ["max_col", "clamp_col", "vertical_target", "first_non_blank"]
