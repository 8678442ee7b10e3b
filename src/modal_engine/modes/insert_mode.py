"""Insert mode and the literal-text dispatch shared with command mode."""

from __future__ import annotations

from modal_engine.config import EditorMode
from modal_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class TextEntryMode(Mode):
    """Control keys resolve by exact single-key lookup; other text is typed.

    There is never a pending sequence here, so typed characters are not
    delayed waiting for a longer binding.
    """

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"modal_engine.modes.{self.name.value}")
        self._resolver = require_keymap_resolver(context)

    def handle_key(self, key: KeyInput) -> ModeResult:
        match = self._resolver.lookup(self.name, (key_to_token(key),))
        if match is not None:
            return execute_match(self.context, match)
        if key.text and not (set(key.modifiers) & {"ctrl", "alt"}):
            self.type_text(key.text)
            return ModeResult(consumed=True, status="text")
        return ModeResult(consumed=False, status="miss")

    def type_text(self, text: str) -> None:
        """Consume literal text; every concrete entry mode overrides this."""

        raise NotImplementedError


class InsertMode(TextEntryMode):
    name = EditorMode.INSERT

    def type_text(self, text: str) -> None:
        self.context.buffer.insert(text, label="type")


__all__ = ["TextEntryMode", "InsertMode"]
