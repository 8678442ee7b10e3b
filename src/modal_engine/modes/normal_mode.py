"""Normal mode plus the count/sequence resolution shared with visual modes."""

from __future__ import annotations

from typing import List, Optional, Tuple

from modal_engine.config import EditorMode
from modal_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .keymap_helpers import execute_match, key_to_token, require_keymap_resolver


class SequenceMode(Mode):
    """Resolves multi-key sequences with an optional count prefix.

    Digits typed before any other key accumulate into the count, most
    significant first. A bare leading ``0`` is not a count digit; it goes to
    the resolver like any other key. When the typed keys are a proper prefix
    of a bound sequence the mode stays pending and asks the manager to arm a
    timeout.
    """

    def __init__(self, context: ModeContext) -> None:
        super().__init__(context)
        self.logger = telemetry.get_logger(f"modal_engine.modes.{self.name.value}")
        self._resolver = require_keymap_resolver(context)
        self._pending: List[str] = []
        self._count: Optional[int] = None

    @property
    def pending_tokens(self) -> Tuple[str, ...]:
        return tuple(self._pending)

    @property
    def pending_count(self) -> Optional[int]:
        return self._count

    def reset_pending(self) -> None:
        self._pending.clear()
        self._count = None

    def on_exit(self, next_mode: Optional[EditorMode]) -> None:
        del next_mode
        self.reset_pending()

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self._is_count_digit(key):
            digit = int(key.key)
            count = (self._count or 0) * 10 + digit
            self._count = min(count, self.context.config.max_count)
            return ModeResult(consumed=True, status="count")

        self._pending.append(key_to_token(key))
        result = self._resolver.resolve(self.name, tuple(self._pending))

        if result.status == "match" and result.match:
            count = self._count or 1
            self.reset_pending()
            return execute_match(self.context, result.match, count=count)

        if result.status == "pending":
            return ModeResult(
                consumed=True,
                status="pending",
                message="awaiting_sequence",
                timeout_ms=result.timeout_ms or self.context.config.sequence_timeout_ms,
            )

        self.logger.debug("no binding for %r in %s", self._pending, self.name.value)
        self.reset_pending()
        return ModeResult(consumed=False, status="miss")

    def handle_timeout(self) -> ModeResult:
        if not self._pending and self._count is None:
            return ModeResult(consumed=False, status="timeout")
        self.logger.debug("discarding pending %r", self._pending)
        self.reset_pending()
        return ModeResult(consumed=False, status="timeout", message="pending_timeout")

    def _is_count_digit(self, key: KeyInput) -> bool:
        if key.modifiers or self._pending:
            return False
        if len(key.key) != 1 or key.key not in "0123456789":
            return False
        return self._count is not None or key.key != "0"


class NormalMode(SequenceMode):
    name = EditorMode.NORMAL

    def on_enter(self, previous: Optional[EditorMode]) -> None:
        del previous
        self.reset_pending()
        buffer = self.context.buffer
        row, col = buffer.clamp(*buffer.state.cursor, allow_eol=False)
        buffer.state.set_cursor(row, col, keep_desired=True)


__all__ = ["SequenceMode", "NormalMode"]
