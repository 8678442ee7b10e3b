from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from modal_engine.buffer import Buffer
from modal_engine.commands import CommandRegistry, register_builtin_commands
from modal_engine.config import EditorMode, EngineConfig
from modal_engine.keymaps import (
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)
from modal_engine.keymaps.defaults import load_default_keymaps
from modal_engine.modes import (
    CommandMode,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    NormalMode,
    TextEntryMode,
    VisualMode,
)
from modal_engine.modes.mode_manager import ModeManager


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_context(
    registry: KeymapRegistry,
    resolver: KeymapResolver,
    *,
    buffer: Optional[Buffer] = None,
    mode: EditorMode = EditorMode.NORMAL,
) -> ModeContext:
    buffer_obj = buffer or Buffer()
    registers = buffer_obj.registers
    commands = CommandRegistry()
    register_builtin_commands(commands)
    extras: Dict[str, Any] = {
        "keymap_registry": registry,
        "keymap_resolver": resolver,
        "command_registry": commands,
    }
    return ModeContext(
        buffer=buffer_obj,
        registers=registers,
        bus=ModeBus(),
        mode=mode,
        extras=extras,
    )


def make_defaults() -> tuple[KeymapRegistry, KeymapResolver]:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    return registry, KeymapResolver(registry)


def make_manager(
    text: str = "", *, clock: Optional[FakeClock] = None
) -> ModeManager:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver, buffer=Buffer.from_text(text))
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        clock=clock or FakeClock(),
    )
    manager.register_default_modes()
    return manager


def test_normal_mode_uses_keymap_binding() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="i"))

    assert result.switch_to == "insert"
    assert result.consumed is True


def test_insert_mode_escape_binding() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver, mode=EditorMode.INSERT)
    mode = InsertMode(context)

    result = mode.handle_key(KeyInput(key="ESC"))

    assert result.switch_to == "normal"
    assert result.consumed is True


def test_insert_mode_types_unbound_text() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("bc")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.INSERT)
    mode = InsertMode(context)

    result = mode.handle_key(KeyInput(key="a", text="a"))

    assert result.status == "text"
    assert buffer.text() == "abc"
    assert buffer.cursor == (0, 1)


def test_insert_mode_ignores_ctrl_chords_without_binding() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("abc")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.INSERT)
    mode = InsertMode(context)

    result = mode.handle_key(KeyInput(key="x", modifiers=("ctrl",), text="x"))

    assert result.consumed is False
    assert buffer.text() == "abc"


def test_text_entry_mode_requires_type_text_override() -> None:
    class BareEntryMode(TextEntryMode):
        name = EditorMode.INSERT

    registry, resolver = make_defaults()
    buffer = Buffer.from_text("abc")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.INSERT)
    mode = BareEntryMode(context)

    with pytest.raises(NotImplementedError):
        mode.handle_key(KeyInput(key="z", text="z"))
    assert buffer.text() == "abc"


def test_normal_mode_pending_sequence() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)

    custom_binding = Binding(
        id="normal.zz",
        mode="normal",
        sequence=KeySequence.from_strings("z", "z"),
        action_id="core.enter_insert",
    )
    registry.register_binding(custom_binding)

    mode = NormalMode(context)

    pending = mode.handle_key(KeyInput(key="z"))
    assert pending.status == "pending"
    assert pending.consumed is True
    assert mode.pending_tokens == ("z",)

    match = mode.handle_key(KeyInput(key="z"))
    assert match.switch_to == "insert"
    assert mode.pending_tokens == ()


def test_normal_mode_miss_discards_sequence() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    mode.handle_key(KeyInput(key="3"))
    mode.handle_key(KeyInput(key="g"))
    result = mode.handle_key(KeyInput(key="q"))

    assert result.status == "miss"
    assert result.consumed is False
    assert mode.pending_tokens == ()
    assert mode.pending_count is None


def test_count_digits_accumulate_most_significant_first() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    assert mode.handle_key(KeyInput(key="1")).status == "count"
    assert mode.handle_key(KeyInput(key="0")).status == "count"
    assert mode.handle_key(KeyInput(key="5")).status == "count"

    assert mode.pending_count == 105


def test_leading_zero_is_a_motion_not_a_count() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("abcdef")
    buffer.set_cursor(0, 4)
    context = make_context(registry, resolver, buffer=buffer)
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="0"))

    assert result.status == "ok"
    assert mode.pending_count is None
    assert buffer.cursor == (0, 0)


def test_count_is_capped_by_config() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    context.config = EngineConfig(max_count=40)
    mode = NormalMode(context)

    for digit in "999":
        mode.handle_key(KeyInput(key=digit))

    assert mode.pending_count == 40


def test_pending_sequence_timeout_via_mode_manager() -> None:
    manager = make_manager("abc")

    pending = manager.handle_key(KeyInput(key="g"))
    assert pending.status == "pending"
    assert pending.timeout_ms == 750
    assert manager.has_pending_timeout()

    timeouts = manager.force_timeout("normal")
    assert list(timeouts) == [EditorMode.NORMAL]
    timeout_result = timeouts[EditorMode.NORMAL]
    assert timeout_result.status == "timeout"
    assert timeout_result.consumed is False
    assert not manager.has_pending_timeout()


def test_pending_prefix_expires_after_sequence_timeout() -> None:
    clock = FakeClock()
    manager = make_manager("abc\ndef", clock=clock)
    manager.handle_key("j")
    manager.handle_key("l")
    before_text = manager.context.buffer.text()
    before_cursor = manager.context.buffer.cursor

    manager.handle_key("g")
    clock.advance(0.5)
    assert manager.process_timeouts() == {}
    assert manager.active_mode.pending_tokens == ("g",)

    clock.advance(0.25)
    results = manager.process_timeouts()

    assert results[EditorMode.NORMAL].status == "timeout"
    assert manager.active_mode.pending_tokens == ()
    assert manager.context.buffer.text() == before_text
    assert manager.context.buffer.cursor == before_cursor
    assert manager.mode == EditorMode.NORMAL
    assert manager.context.status.messages == ()


def test_each_key_restarts_the_sequence_timeout() -> None:
    clock = FakeClock()
    manager = make_manager("abc", clock=clock)
    registry = manager.keymap_registry
    registry.register_binding(
        Binding(
            id="normal.gqx",
            mode="normal",
            sequence=KeySequence.from_strings("g", "q", "x"),
            action_id="core.enter_insert",
        )
    )

    manager.handle_key("g")
    clock.advance(0.5)
    manager.handle_key("q")
    clock.advance(0.5)

    assert manager.process_timeouts() == {}
    assert manager.active_mode.pending_tokens == ("g", "q")

    clock.advance(0.25)
    assert EditorMode.NORMAL in manager.process_timeouts()
    assert manager.active_mode.pending_tokens == ()


def test_stale_prefix_is_dropped_before_the_next_key() -> None:
    clock = FakeClock()
    manager = make_manager("one\ntwo\nthree", clock=clock)
    manager.handle_key("G")

    manager.handle_key("g")
    clock.advance(1.0)
    result = manager.handle_key("g")

    assert result.status == "pending"
    assert manager.context.buffer.cursor == (2, 0)


def test_mode_manager_switches_to_visual_mode() -> None:
    manager = make_manager("abc")

    result = manager.handle_key(KeyInput(key="v"))

    assert result.switch_to == "visual"
    assert manager.active_mode and manager.active_mode.name == "visual"
    assert manager.context.buffer.state.anchor == (0, 0)
    assert manager.context.status.latest == "-- VISUAL --"


def test_register_mode_twice_is_rejected() -> None:
    manager = make_manager()

    with pytest.raises(ValueError):
        manager.register_mode(NormalMode)


def test_mode_changed_event_fires_on_switch() -> None:
    manager = make_manager("abc")
    changes: list[object] = []
    manager.context.bus.subscribe("mode.changed", changes.append)

    manager.handle_key("i")
    manager.handle_key("ESC")

    assert changes == [EditorMode.INSERT, EditorMode.NORMAL]


def test_command_mode_text_entry_and_submit() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver, mode=EditorMode.COMMAND)
    submitted: list[object] = []
    context.bus.subscribe("command.submit", submitted.append)
    mode = CommandMode(context)
    mode.on_enter(EditorMode.NORMAL)

    mode.handle_key(KeyInput(key="e", text="e"))
    mode.handle_key(KeyInput(key="c", text="c"))
    mode.handle_key(KeyInput(key="h", text="h"))
    mode.handle_key(KeyInput(key="o", text="o"))
    mode.handle_key(KeyInput(key=" ", text=" "))
    mode.handle_key(KeyInput(key="h", text="h"))
    mode.handle_key(KeyInput(key="i", text="i"))
    result = mode.handle_key(KeyInput(key="ENTER"))

    assert result.switch_to == "normal"
    assert result.status == "command_submit"
    assert submitted == ["echo hi"]
    assert context.status.messages == ("hi",)


def test_command_mode_editing_keys() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver, mode=EditorMode.COMMAND)
    mode = CommandMode(context)
    mode.on_enter(EditorMode.NORMAL)

    for key in "wq":
        mode.handle_key(KeyInput(key=key, text=key))
    mode.handle_key(KeyInput(key="LEFT"))
    mode.handle_key(KeyInput(key="BACKSPACE"))

    assert context.command_line.text == "q"
    assert context.command_line.cursor == 0


def test_command_mode_backspace_on_empty_line_leaves_mode() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver, mode=EditorMode.COMMAND)
    mode = CommandMode(context)
    mode.on_enter(EditorMode.NORMAL)

    result = mode.handle_key(KeyInput(key="BACKSPACE"))

    assert result.switch_to == "normal"
    assert result.status == "command_cancel"


def test_leaving_command_mode_clears_text() -> None:
    manager = make_manager("abc")
    ended: list[object] = []
    manager.context.bus.subscribe("command.end", ended.append)

    for key in (":", "e", "c"):
        manager.handle_key(key)
    assert manager.context.command_line.text == "ec"
    manager.handle_key("ESC")

    assert manager.mode == EditorMode.NORMAL
    assert manager.context.command_line.text == ""
    assert ended == ["ec"]


def test_visual_mode_selection_and_yank() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("alpha")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.VISUAL)
    mode = VisualMode(context)
    mode.on_enter(EditorMode.NORMAL)

    move = mode.handle_key(KeyInput(key="l"))

    assert move.status == "ok"
    assert context.buffer.state.selection == ((0, 0), (0, 1))

    yank = mode.handle_key(KeyInput(key="y"))

    assert yank.status == "visual_yank"
    assert yank.switch_to == "normal"
    assert context.buffer.registers.get('"').text == "al"
    assert context.buffer.cursor == (0, 0)


def test_visual_mode_swap_anchor() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("abcd")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.VISUAL)
    mode = VisualMode(context)
    mode.on_enter(EditorMode.NORMAL)

    mode.handle_key(KeyInput(key="l"))
    swap = mode.handle_key(KeyInput(key="o"))

    assert swap.status == "visual_swap"
    assert context.buffer.state.cursor == (0, 0)
    assert context.buffer.state.selection == ((0, 1), (0, 0))


def test_visual_mode_delete_selection_returns_to_normal() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("alpha")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.VISUAL)
    mode = VisualMode(context)
    mode.on_enter(EditorMode.NORMAL)
    mode.handle_key(KeyInput(key="l"))

    result = mode.handle_key(KeyInput(key="d"))

    assert result.switch_to == "normal"
    assert context.buffer.text() == "pha"
    assert context.buffer.registers.get('"').text == "al"


def test_visual_mode_change_selection_switches_to_insert() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("alpha")
    context = make_context(registry, resolver, buffer=buffer, mode=EditorMode.VISUAL)
    mode = VisualMode(context)
    mode.on_enter(EditorMode.NORMAL)
    mode.handle_key(KeyInput(key="l"))

    result = mode.handle_key(KeyInput(key="c"))

    assert result.switch_to == "insert"
    assert context.buffer.text() == "pha"
    assert context.buffer.cursor == (0, 0)
