"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Optional, Tuple

from modal_engine.buffer import Buffer, RegisterBank
from modal_engine.config import EditorMode, EngineConfig
from modal_engine.keymaps.models import KeyStroke


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @classmethod
    def coerce(cls, value: "KeyInput | str") -> "KeyInput":
        """Build a key event from a token such as ``"x"``, ``"ESC"`` or ``"ctrl+r"``."""

        if isinstance(value, KeyInput):
            return value
        stroke = KeyStroke.parse(value)
        text = stroke.key if len(stroke.key) == 1 and not stroke.modifiers else None
        return cls(key=stroke.key, modifiers=stroke.modifiers, text=text)


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``."""

    consumed: bool
    switch_to: Optional[EditorMode | str] = None
    status: str = "ok"
    message: Optional[str] = None
    timeout_ms: Optional[int] = None


class StatusChannel:
    """Transient messages for the host to display and clear."""

    def __init__(self, *, maxlen: int = 50) -> None:
        self._messages: Deque[str] = deque(maxlen=maxlen)

    def post(self, message: str) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(self._messages)

    @property
    def latest(self) -> Optional[str]:
        return self._messages[-1] if self._messages else None

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)


@dataclass(slots=True)
class CommandLine:
    """Text typed after ``:`` plus the insertion point within it."""

    text: str = ""
    cursor: int = 0

    def clear(self) -> None:
        self.text = ""
        self.cursor = 0

    def insert(self, value: str) -> None:
        self.text = self.text[: self.cursor] + value + self.text[self.cursor :]
        self.cursor += len(value)

    def delete_backward(self) -> bool:
        if self.cursor == 0:
            return False
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1
        return True

    def move(self, delta: int) -> None:
        self.cursor = max(0, min(self.cursor + delta, len(self.text)))


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access."""

    buffer: Buffer
    registers: RegisterBank
    bus: ModeBus
    status: StatusChannel = field(default_factory=StatusChannel)
    command_line: CommandLine = field(default_factory=CommandLine)
    config: EngineConfig = field(default_factory=EngineConfig)
    mode: EditorMode = EditorMode.NORMAL
    extras: Dict[str, object] = field(default_factory=dict)

    def post_status(self, message: str) -> None:
        self.status.post(message)
        self.bus.emit("status", message)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: EditorMode = EditorMode.NORMAL

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(self, previous: Optional[EditorMode]) -> None:
        del previous

    def on_exit(self, next_mode: Optional[EditorMode]) -> None:
        del next_mode

    def handle_key(self, key: KeyInput) -> ModeResult:  # pragma: no cover - abstract
        raise NotImplementedError

    def handle_timeout(self) -> ModeResult:
        """Invoked by the manager when a pending key sequence expires."""

        return ModeResult(consumed=False, status="timeout")

    def reset_pending(self) -> None:
        """Drop any partially typed sequence and count."""

    @property
    def pending_tokens(self) -> Tuple[str, ...]:
        return ()

    @property
    def pending_count(self) -> Optional[int]:
        return None


__all__ = [
    "KeyInput",
    "ModeResult",
    "StatusChannel",
    "CommandLine",
    "ModeBus",
    "ModeContext",
    "Mode",
]
