"""Editing session: one buffer, its modes, keymaps and commands."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Optional, Sequence, Tuple

from modal_engine.buffer import Buffer, Cursor
from modal_engine.commands import (
    CommandInvocation,
    CommandRegistry,
    Storage,
    register_builtin_commands,
)
from modal_engine.config import EditorMode, EngineConfig, coerce_mode
from modal_engine.keymaps import (
    ActionRef,
    Binding,
    KeymapRegistry,
    KeymapResolver,
    KeySequence,
    tokenize_notation,
)
from modal_engine.keymaps.defaults import load_default_keymaps
from modal_engine.modes import (
    EditorHandle,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeManager,
    ModeResult,
    StatusChannel,
)
from modal_engine.modes.mode_manager import Clock
from modal_engine.runtime import telemetry
from modal_engine.selection import Boundary

Operation = Callable[[EditorHandle], object]
CommandOperation = Callable[[EditorHandle, CommandInvocation], Optional[str]]


class EditorSession:
    """Public entry point hosts drive with key events.

    Sessions share nothing, so any number may live in one process. Every
    key event is processed to completion before the next one starts.
    """

    def __init__(
        self,
        text: str = "",
        *,
        config: Optional[EngineConfig] = None,
        storage: Optional[Storage] = None,
        name: str = "default",
        clock: Clock = time.monotonic,
        load_defaults: bool = True,
    ) -> None:
        self.config = config or EngineConfig()
        self.logger = telemetry.get_logger(f"{self.config.logger_name}.session")
        self.buffer = Buffer.from_text(text, name=name)
        self.bus = ModeBus()
        self.status = StatusChannel(maxlen=self.config.status_history)
        self.context = ModeContext(
            buffer=self.buffer,
            registers=self.buffer.registers,
            bus=self.bus,
            status=self.status,
            config=self.config,
        )
        self.keymaps = KeymapRegistry(logger_name=f"{self.config.logger_name}.keymaps")
        if load_defaults:
            load_default_keymaps(
                self.keymaps,
                default_sequence_timeout_ms=self.config.sequence_timeout_ms,
            )
        self.resolver = KeymapResolver(
            self.keymaps, logger_name=f"{self.config.logger_name}.keymaps"
        )
        self.commands = CommandRegistry(logger_name=f"{self.config.logger_name}.commands")
        register_builtin_commands(self.commands, storage=storage)
        self.context.extras["command_registry"] = self.commands
        self.manager = ModeManager(
            self.context,
            keymap_registry=self.keymaps,
            keymap_resolver=self.resolver,
            clock=clock,
        )
        self.manager.register_default_modes()
        self.quit_requested = False
        self.bus.subscribe("session.quit", self._on_quit)
        self._custom_ids = 0

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        *,
        config: Optional[EngineConfig] = None,
        storage: Optional[Storage] = None,
        name: str = "default",
        clock: Clock = time.monotonic,
        load_defaults: bool = True,
    ) -> "EditorSession":
        return cls(
            "\n".join(lines),
            config=config,
            storage=storage,
            name=name,
            clock=clock,
            load_defaults=load_defaults,
        )

    # -- input ----------------------------------------------------------

    def handle_key(self, key: KeyInput | str) -> ModeResult:
        return self.manager.handle_key(KeyInput.coerce(key))

    def feed(self, notation: str) -> list[ModeResult]:
        """Send every key in ``notation`` (``"3dd"``, ``":w<CR>"``) in order."""

        return [self.handle_key(token) for token in tokenize_notation(notation)]

    def process_timeouts(self) -> dict[EditorMode, ModeResult]:
        return self.manager.process_timeouts()

    def force_timeout(self) -> dict[EditorMode, ModeResult]:
        return self.manager.force_timeout()

    # -- read accessors -------------------------------------------------

    def current_mode(self) -> EditorMode:
        return self.manager.mode

    def cursor(self) -> Cursor:
        return self.buffer.state.cursor

    def anchor(self) -> Optional[Cursor]:
        return self.buffer.state.anchor

    def selection_boundary(self) -> Optional[Boundary]:
        return EditorHandle(self.context).selection_boundary()

    def text(self) -> str:
        return self.buffer.text()

    def lines(self) -> Sequence[str]:
        return self.buffer.lines()

    def command_text(self) -> str:
        return self.context.command_line.text

    def pending_keys(self) -> Tuple[str, ...]:
        mode = self.manager.active_mode
        return mode.pending_tokens if mode else ()

    def pending_count(self) -> Optional[int]:
        mode = self.manager.active_mode
        return mode.pending_count if mode else None

    def status_messages(self) -> Tuple[str, ...]:
        return self.status.messages

    def clear_status(self) -> None:
        self.status.clear()

    @property
    def modified(self) -> bool:
        return self.buffer.modified

    # -- history --------------------------------------------------------

    def undo(self) -> bool:
        restored = self.buffer.undo()
        self.manager.enforce_cursor()
        return restored

    def redo(self) -> bool:
        restored = self.buffer.redo()
        self.manager.enforce_cursor()
        return restored

    # -- extension ------------------------------------------------------

    def add_binding(
        self,
        mode: EditorMode | str,
        keys: KeySequence | str | Sequence[str],
        operation: Operation,
        *,
        description: str = "",
    ) -> Binding:
        """Bind ``keys`` in ``mode`` to ``operation(editor)``.

        An existing binding for the same keys in that mode is replaced.
        """

        target = coerce_mode(mode)
        sequence = KeySequence.coerce(keys, timeout_ms=self.config.sequence_timeout_ms)
        self._custom_ids += 1
        action_id = f"user.{self._custom_ids}"

        def handler(editor: EditorHandle, match: object) -> object:
            del match
            return operation(editor)

        self.keymaps.register_action(
            ActionRef(id=action_id, handler=handler, description=description)
        )
        binding = Binding(
            id=f"{target.value}.user.{self._custom_ids}",
            mode=target.value,
            sequence=sequence,
            action_id=action_id,
            description=description,
            source="user",
        )
        return self.keymaps.register_binding(binding)

    def add_command(
        self,
        name: str,
        operation: CommandOperation,
        *,
        aliases: Tuple[str, ...] = (),
        description: str = "",
    ) -> None:
        self.commands.register(name, operation, aliases=aliases, description=description)

    def _on_quit(self, payload: object) -> None:
        self.logger.debug("quit requested: %r", payload)
        self.quit_requested = True


__all__ = ["EditorSession", "Operation", "CommandOperation"]
