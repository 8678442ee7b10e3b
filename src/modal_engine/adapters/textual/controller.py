"""Minimal Textual adapter that wires session events into UI callbacks.

Nothing here imports Textual, so the controller can be driven from tests or
any other host that delivers key names in Textual's spelling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from modal_engine.buffer import BufferMirror
from modal_engine.config import MODE_CONFIGS, EditorMode
from modal_engine.modes import KeyInput, ModeResult
from modal_engine.session import EditorSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    show_command: Callable[[str], None] = _noop
    show_mode: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    request_exit: Callable[[], None] = _noop
    log: Callable[[str], None] = _noop


class TextualVimAdapter:
    """Bridges an ``EditorSession`` and its bus events to UI callbacks."""

    EVENTS = (
        "visual.selection",
        "visual.yank",
        "visual.delete",
        "command.start",
        "command.end",
        "command.text",
        "command.submit",
        "mode.changed",
        "session.quit",
        "status",
    )

    def __init__(self, session: EditorSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_command_line()
        self._refresh_mode()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        key_input = KeyInput.coerce(key)
        extra = tuple(str(mod).lower() for mod in modifiers)
        if extra:
            key_input = KeyInput(
                key=key_input.key,
                modifiers=tuple(sorted(set(key_input.modifiers) | set(extra))),
                text=text,
            )
        elif text is not None:
            key_input.text = text
        self._log_state("key ->", key=key_input.key, text=key_input.text)
        result = self.session.handle_key(key_input)
        self._after_mode_result(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
        )
        return result

    def process_timeouts(self) -> Dict[EditorMode, ModeResult]:
        """Forward expired timers and surface results to the UI."""

        results = self.session.process_timeouts()
        for mode, outcome in results.items():
            self._log_state("timeout ->", source_mode=mode.value, status=outcome.status)
        if results:
            self._refresh_buffer()
        return results

    def _after_mode_result(self, result: ModeResult) -> None:
        if result.status == "error" and result.message:
            self.hooks.update_status(result.message)
        self._refresh_buffer()
        self._refresh_command_line()

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        for event in self.EVENTS:
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == "status" and isinstance(payload, str):
            self.hooks.update_status(payload)
        elif name == "mode.changed":
            self._refresh_mode()
        elif name == "session.quit":
            self.hooks.request_exit()
        elif name.startswith("command"):
            self._refresh_command_line()
        elif name.startswith("visual"):
            self._refresh_buffer()

    def _refresh_buffer(self) -> None:
        mode = self.session.current_mode()
        mirror = self.session.buffer.mirror(attributes={"mode": mode.value})
        self.hooks.update_buffer(mirror)

    def _refresh_command_line(self) -> None:
        self.hooks.show_command(self.session.command_text())

    def _refresh_mode(self) -> None:
        self.hooks.show_mode(MODE_CONFIGS[self.session.current_mode()].label)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        session = self.session
        return {
            "mode": session.current_mode().value,
            "cursor": session.cursor(),
            "selection": session.selection_boundary(),
            "command": session.command_text(),
            "pending": session.pending_keys(),
            "buffer_version": session.buffer.document.version,
        }


__all__ = ["TextualVimAdapter", "TextualUIHooks"]
