from __future__ import annotations

import itertools

import pytest

from modal_engine.config import EditorMode
from modal_engine.selection import (
    TextRange,
    clamp_col,
    first_non_blank,
    max_col,
    next_word_start,
    prev_word_start,
    selection_boundary,
    selection_range,
    vertical_target,
    word_end,
)

LINES = ("abcdef", "gh", "", "ijklmn")
POSITIONS = [(0, 0), (0, 3), (0, 6), (1, 1), (2, 0), (3, 2), (3, 5)]


@pytest.mark.parametrize("mode", [EditorMode.VISUAL, EditorMode.VISUAL_LINE])
def test_selection_boundary_is_symmetric(mode: EditorMode) -> None:
    for first, second in itertools.combinations(POSITIONS, 2):
        assert selection_boundary(first, second, mode, LINES) == selection_boundary(
            second, first, mode, LINES
        )


def test_characterwise_boundary_orders_row_major() -> None:
    assert selection_boundary((1, 0), (0, 4), EditorMode.VISUAL) == ((0, 4), (1, 0))
    assert selection_boundary((0, 3), (0, 1), EditorMode.VISUAL) == ((0, 1), (0, 3))


def test_linewise_boundary_widens_to_full_lines() -> None:
    boundary = selection_boundary((3, 2), (0, 4), EditorMode.VISUAL_LINE, LINES)

    assert boundary == ((0, 0), (3, 5))


def test_linewise_boundary_on_empty_line() -> None:
    assert selection_boundary((2, 0), (2, 0), EditorMode.VISUAL_LINE, LINES) == (
        (2, 0),
        (2, 0),
    )


def test_boundary_outside_visual_modes_is_none() -> None:
    assert selection_boundary((0, 0), (0, 1), EditorMode.NORMAL, LINES) is None


def test_linewise_boundary_needs_lines() -> None:
    with pytest.raises(ValueError):
        selection_boundary((0, 0), (1, 0), EditorMode.VISUAL_LINE)


def test_selection_range_includes_the_end_character() -> None:
    assert selection_range((0, 1), (0, 3), EditorMode.VISUAL, LINES) == TextRange(
        (0, 1), (0, 4)
    )


def test_selection_range_past_line_end_takes_the_line_break() -> None:
    selected = selection_range((0, 4), (0, 6), EditorMode.VISUAL, LINES)

    assert selected == TextRange((0, 4), (1, 0))


def test_linewise_selection_range() -> None:
    selected = selection_range((1, 1), (0, 2), EditorMode.VISUAL_LINE, LINES)

    assert selected == TextRange((0, 0), (1, 2), linewise=True)
    assert selected.rows == (0, 1)


def test_column_limits_depend_on_mode() -> None:
    assert max_col("abc", EditorMode.NORMAL) == 2
    assert max_col("abc", EditorMode.INSERT) == 3
    assert max_col("", EditorMode.NORMAL) == 0
    assert clamp_col("abc", 9, "visual") == 3


def test_vertical_target_reads_desired_column() -> None:
    lines = ("abcdef", "ab", "abcdef")

    assert vertical_target(lines, 0, 1, 4, EditorMode.NORMAL) == (1, 1)
    assert vertical_target(lines, 1, 1, 4, EditorMode.NORMAL) == (2, 4)
    assert vertical_target(lines, 2, 5, 4, EditorMode.NORMAL) == (2, 4)
    assert vertical_target(lines, 0, -3, 4, EditorMode.NORMAL) == (0, 4)


def test_first_non_blank() -> None:
    assert first_non_blank("   abc") == 3
    assert first_non_blank("abc") == 0
    assert first_non_blank("   ") == 2
    assert first_non_blank("") == 0


def test_word_motions_within_a_line() -> None:
    lines = ("foo bar.baz qux",)

    assert next_word_start(lines, (0, 0)) == (0, 4)
    assert next_word_start(lines, (0, 4)) == (0, 7)
    assert next_word_start(lines, (0, 7)) == (0, 8)
    assert word_end(lines, (0, 0)) == (0, 2)
    assert word_end(lines, (0, 2)) == (0, 6)
    assert prev_word_start(lines, (0, 12)) == (0, 8)
    assert prev_word_start(lines, (0, 8)) == (0, 7)


def test_word_motions_cross_lines_and_stop_on_empty_lines() -> None:
    lines = ("foo", "", "  bar")

    assert next_word_start(lines, (0, 0)) == (1, 0)
    assert next_word_start(lines, (1, 0)) == (2, 2)
    assert prev_word_start(lines, (2, 2)) == (1, 0)
    assert prev_word_start(lines, (1, 0)) == (0, 0)
    assert word_end(lines, (0, 2)) == (2, 4)


def test_word_motions_stop_at_buffer_edges() -> None:
    lines = ("foo bar",)

    assert next_word_start(lines, (0, 4)) == (0, 6)
    assert word_end(lines, (0, 6)) == (0, 6)
    assert prev_word_start(lines, (0, 0)) == (0, 0)
