from __future__ import annotations

import pytest

from modal_engine import EditorMode, EditorSession, EngineConfig
from modal_engine.errors import OutOfRangeError


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_session(*lines: str, **kwargs: object) -> EditorSession:
    return EditorSession.from_lines(lines or ("",), **kwargs)


def test_delete_line_then_undo_restores_buffer_and_cursor() -> None:
    session = make_session("abc", "def")

    session.feed("dd")
    assert list(session.lines()) == ["def"]
    assert session.cursor() == (0, 0)

    session.undo()
    assert list(session.lines()) == ["abc", "def"]
    assert session.cursor() == (0, 0)


def test_counted_delete_removes_exactly_count_lines() -> None:
    session = make_session("abc", "def", "ghi", "jkl", "mno")

    session.feed("3dd")

    assert list(session.lines()) == ["jkl", "mno"]
    assert session.cursor() == (0, 0)
    assert session.pending_count() is None
    register = session.context.registers.get()
    assert register.text == "abc\ndef\nghi"
    assert register.linewise


def test_counted_operation_is_one_undo_step() -> None:
    session = make_session("abcdef")

    session.feed("3x")
    assert session.text() == "def"
    assert session.context.registers.get().text == "abc"

    session.feed("u")
    assert session.text() == "abcdef"


def test_counted_delete_line_stops_at_buffer_end() -> None:
    session = make_session("a", "b", "c")
    session.feed("G")

    session.feed("3dd")

    assert list(session.lines()) == ["a", "b"]
    assert session.cursor() == (1, 0)
    register = session.context.registers.get()
    assert register.text == "c"
    assert register.linewise


def test_counted_delete_line_from_middle_keeps_lines_above() -> None:
    session = make_session("a", "b", "c", "d")
    session.feed("j")

    session.feed("9dd")

    assert list(session.lines()) == ["a"]
    assert session.context.registers.get().text == "b\nc\nd"


def test_counted_delete_char_stops_at_line_end() -> None:
    session = make_session("abc")
    session.feed("l")

    session.feed("5x")

    assert session.text() == "a"
    assert session.cursor() == (0, 0)
    assert session.context.registers.get().text == "bc"

    session.feed("u")
    assert session.text() == "abc"


def test_multi_digit_count() -> None:
    session = make_session("abcdefghijkl")

    session.feed("10x")

    assert session.text() == "kl"


def test_count_resets_after_a_miss() -> None:
    session = make_session("abcdef")

    session.feed("3z")
    assert session.pending_count() is None

    session.feed("x")
    assert session.text() == "bcdef"


def test_leading_zero_moves_to_line_start() -> None:
    session = make_session("abcdef")
    session.feed("llll")

    session.feed("0")

    assert session.cursor() == (0, 0)
    assert session.pending_count() is None


def test_pending_prefix_times_out_without_side_effects() -> None:
    clock = FakeClock()
    session = make_session("abc", "def", clock=clock)
    session.feed("jl")

    session.feed("g")
    assert session.pending_keys() == ("g",)
    clock.advance(0.75)
    session.process_timeouts()

    assert session.pending_keys() == ()
    assert list(session.lines()) == ["abc", "def"]
    assert session.cursor() == (1, 1)
    assert session.status_messages() == ()


def test_configured_timeout_applies_to_default_bindings() -> None:
    clock = FakeClock()
    session = make_session("abc", clock=clock, config=EngineConfig(sequence_timeout_ms=2000))

    result = session.handle_key("g")
    clock.advance(1.5)
    session.process_timeouts()

    assert result.timeout_ms == 2000
    assert session.pending_keys() == ("g",)


def test_visual_selection_follows_cursor() -> None:
    session = make_session("abcdef")
    session.feed("l")

    session.feed("v")
    assert session.current_mode() == EditorMode.VISUAL
    assert session.anchor() == (0, 1)

    session.feed("ll")
    assert session.cursor() == (0, 3)
    assert session.selection_boundary() == ((0, 1), (0, 3))

    session.feed("0")
    assert session.selection_boundary() == ((0, 0), (0, 1))


def test_leaving_visual_clears_selection() -> None:
    session = make_session("abcdef")

    session.feed("vl<Esc>")

    assert session.current_mode() == EditorMode.NORMAL
    assert session.selection_boundary() is None


def test_switching_visual_kinds_keeps_anchor() -> None:
    session = make_session("abc", "def")
    session.feed("lvj")

    session.feed("V")

    assert session.current_mode() == EditorMode.VISUAL_LINE
    assert session.anchor() == (0, 1)
    assert session.selection_boundary() == ((0, 0), (1, 2))


def test_visual_line_delete_and_put() -> None:
    session = make_session("abc", "defgh", "ij")
    session.feed("jVj")

    session.feed("d")
    assert list(session.lines()) == ["abc"]
    assert session.current_mode() == EditorMode.NORMAL

    session.feed("p")
    assert list(session.lines()) == ["abc", "defgh", "ij"]
    assert session.cursor() == (1, 0)


def test_escape_from_insert_clamps_cursor_onto_last_character() -> None:
    session = make_session("abc")

    session.feed("A")
    assert session.cursor() == (0, 3)

    session.feed("<Esc>")
    assert session.current_mode() == EditorMode.NORMAL
    assert session.cursor() == (0, 2)


def test_insert_mode_types_text_literally() -> None:
    session = make_session("abc")

    session.feed("iX1<Esc>")

    assert session.text() == "X1abc"
    assert session.cursor() == (0, 2)
    assert session.status_messages() == ("-- INSERT --",)


def test_insert_mode_newline_and_backspace() -> None:
    session = make_session("")

    session.feed("iab<CR>cd<BS><BS><BS>e")

    assert list(session.lines()) == ["abe"]


def test_open_line_below_and_above() -> None:
    session = make_session("mid")

    session.feed("obelow<Esc>")
    session.feed("kOabove<Esc>")

    assert list(session.lines()) == ["above", "mid", "below"]


def test_desired_column_survives_short_lines() -> None:
    session = make_session("abcdef", "ab", "abcdef")
    session.feed("llll")

    session.feed("j")
    assert session.cursor() == (1, 1)

    session.feed("j")
    assert session.cursor() == (2, 4)

    session.feed("hk")
    assert session.cursor() == (1, 1)
    session.feed("k")
    assert session.cursor() == (0, 3)


def test_dollar_sticks_to_line_end() -> None:
    session = make_session("abc", "abcdef", "a")

    session.feed("$")
    assert session.cursor() == (0, 2)

    session.feed("j")
    assert session.cursor() == (1, 5)

    session.feed("j")
    assert session.cursor() == (2, 0)


def test_word_motions_with_count() -> None:
    session = make_session("foo bar.baz qux")

    session.feed("2w")
    assert session.cursor() == (0, 7)

    session.feed("e")
    assert session.cursor() == (0, 10)

    session.feed("b")
    assert session.cursor() == (0, 8)


def test_first_and_last_line_motions() -> None:
    session = make_session("one", "two", "  three")

    session.feed("G")
    assert session.cursor() == (2, 2)

    session.feed("gg")
    assert session.cursor() == (0, 0)


def test_delete_char_then_put_swaps_characters() -> None:
    session = make_session("abc")

    session.feed("xp")

    assert session.text() == "bac"
    assert session.cursor() == (0, 1)


def test_put_before_charwise() -> None:
    session = make_session("abc")

    session.feed("lxP")

    assert session.text() == "abc"
    assert session.cursor() == (0, 1)


def test_yank_line_and_put_before() -> None:
    session = make_session("one", "two")
    session.feed("j")

    session.feed("yyP")

    assert list(session.lines()) == ["one", "two", "two"]
    assert session.cursor() == (1, 0)


def test_join_lines() -> None:
    session = make_session("foo", "   bar", "baz")

    session.feed("J")

    assert list(session.lines()) == ["foo bar", "baz"]
    assert session.cursor() == (0, 3)


def test_delete_to_line_end() -> None:
    session = make_session("abcdef")
    session.feed("ll")

    session.feed("D")

    assert session.text() == "ab"
    assert session.cursor() == (0, 1)


def test_undo_and_redo_keys() -> None:
    session = make_session("abc")
    session.feed("x")

    session.feed("u")
    assert session.text() == "abc"

    session.feed("<C-r>")
    assert session.text() == "bc"

    session.feed("<C-r>")
    assert session.status_messages()[-1] == "Already at newest change"


def test_add_binding_runs_operation_with_handle() -> None:
    session = make_session("abc")

    def shout(editor):
        row, _ = editor.cursor()
        editor.replace((row, 0), (row, len(editor.line(row))), editor.line(row).upper())
        editor.set_mode("insert")

    session.add_binding("normal", "gu", shout)
    session.feed("gu")

    assert session.text() == "ABC"
    assert session.current_mode() == EditorMode.INSERT


def test_add_binding_replaces_default_for_same_keys() -> None:
    session = make_session("abc")
    session.add_binding("normal", "x", lambda editor: editor.status("custom x"))

    session.feed("x")

    assert session.text() == "abc"
    assert session.status_messages() == ("custom x",)


def test_insert_mode_bindings_are_single_key_only() -> None:
    session = make_session("")
    session.add_binding("insert", "jk", lambda editor: editor.set_mode("normal"))

    session.feed("ijk")

    assert session.text() == "jk"
    assert session.current_mode() == EditorMode.INSERT


def test_failing_operation_leaves_state_untouched() -> None:
    session = make_session("abc", "def")
    session.feed("l")

    def broken(editor):
        editor.insert("junk")
        editor.set_cursor(99, 0)

    session.add_binding("normal", "Q", broken)
    session.feed("3Q")

    assert list(session.lines()) == ["abc", "def"]
    assert session.cursor() == (0, 1)
    assert session.current_mode() == EditorMode.NORMAL
    assert session.pending_count() is None
    assert session.status_messages() == ("Row out of range",)
    assert session.undo() is False


def test_unexpected_exception_is_wrapped_and_rolled_back() -> None:
    session = make_session("abc")

    def broken(editor):
        editor.insert("junk")
        raise ValueError("boom")

    session.add_binding("normal", "Q", broken)
    result = session.handle_key("Q")

    assert result.status == "error"
    assert session.text() == "abc"
    assert session.status_messages()[-1].endswith("boom")


def test_handle_set_cursor_validates_bounds() -> None:
    session = make_session("abc")
    seen = []

    def probe(editor):
        with pytest.raises(OutOfRangeError):
            editor.set_cursor(0, 4)
        seen.append(editor.set_cursor(0, 3))

    session.add_binding("normal", "Q", probe)
    session.feed("Q")

    assert seen == [(0, 2)]


def test_sessions_are_independent() -> None:
    first = make_session("abc")
    second = make_session("abc")

    first.feed("x")

    assert first.text() == "bc"
    assert second.text() == "abc"


def test_host_undo_redo_keeps_normal_cursor_on_a_character() -> None:
    session = make_session("abc")
    session.feed("Ax<Esc>")
    assert session.cursor() == (0, 3)

    assert session.undo() is True
    assert list(session.lines()) == ["abc"]
    assert session.current_mode() == EditorMode.NORMAL
    assert session.cursor() == (0, 2)

    assert session.redo() is True
    assert session.text() == "abcx"
    row, col = session.cursor()
    assert col <= len(session.lines()[row]) - 1


def test_from_lines_forwards_session_options() -> None:
    clock = FakeClock()
    session = EditorSession.from_lines(
        ["abc", "def"],
        config=EngineConfig(sequence_timeout_ms=2000),
        clock=clock,
        load_defaults=False,
    )

    session.feed("x")

    assert list(session.lines()) == ["abc", "def"]
    assert session.config.sequence_timeout_ms == 2000
