"""Mode manager coordinating the Normal/Insert/Visual/Command pipelines."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Dict, Mapping, Optional, Type

from modal_engine.config import MODE_CONFIGS, EditorMode, coerce_mode
from modal_engine.errors import EngineError
from modal_engine.keymaps import KeymapRegistry, KeymapResolver
from modal_engine.runtime import telemetry

from .base_mode import KeyInput, Mode, ModeContext, ModeResult
from .command_mode import CommandMode
from .insert_mode import InsertMode
from .normal_mode import NormalMode
from .visual_mode import VisualLineMode, VisualMode

Clock = Callable[[], float]

# Every EditorMode must appear here; Normal first so it becomes active.
DEFAULT_MODE_CLASSES: Mapping[EditorMode, Type[Mode]] = {
    EditorMode.NORMAL: NormalMode,
    EditorMode.INSERT: InsertMode,
    EditorMode.VISUAL: VisualMode,
    EditorMode.VISUAL_LINE: VisualLineMode,
    EditorMode.COMMAND: CommandMode,
}


@dataclass
class PendingTimeout:
    deadline: float
    timeout_ms: int
    generation: int


class ModeManager:
    """Owns active mode, handles transitions, and dispatches key events.

    Each key event is atomic: buffer, command line and pending state are
    checkpointed first and restored if the handling raises ``EngineError``.
    """

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.context = context
        self._modes: Dict[EditorMode, Mode] = {}
        self._active: Optional[EditorMode] = None
        self._clock = clock
        self.logger = telemetry.get_logger("modal_engine.modes")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="modal_engine.keymaps"
        )
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            self.keymap_registry, logger_name="modal_engine.keymaps"
        )
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("mode_manager", self)
        self._pending_timeouts: Dict[EditorMode, PendingTimeout] = {}
        self._timer_counter = 0

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def mode(self) -> EditorMode:
        if self._active is None:
            raise RuntimeError("No active mode registered")
        return self._active

    def get_mode(self, name: EditorMode | str) -> Mode:
        return self._modes[coerce_mode(name)]

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.name in self._modes:
            raise ValueError(f"Mode '{mode.name.value}' already registered")
        self._modes[mode.name] = mode
        if self._active is None:
            self._active = mode.name
            self.context.mode = mode.name
            mode.on_enter(None)
        return mode

    def register_default_modes(self) -> None:
        for mode_cls in DEFAULT_MODE_CLASSES.values():
            self.register_mode(mode_cls)
        missing = set(EditorMode) - set(self._modes)
        if missing:
            raise RuntimeError(f"Modes without handlers: {sorted(m.value for m in missing)}")

    def switch_mode(self, name: EditorMode | str) -> None:
        target = coerce_mode(name)
        if target not in self._modes:
            raise KeyError(f"Unknown mode '{target.value}'")
        previous = self.active_mode
        if previous and previous.name == target:
            return
        with telemetry.span(
            name="mode::switch",
            component="modes",
            metadata={
                "from": previous.name.value if previous else None,
                "to": target.value,
            },
        ):
            if previous:
                self.cancel_timeout(previous.name)
                previous.on_exit(target)
            self._active = target
            self.context.mode = target
            self._modes[target].on_enter(previous.name if previous else None)
            self.cancel_timeout(target)
            self.enforce_cursor()
        status = MODE_CONFIGS[target].status
        if status:
            self.context.post_status(status)
        self.context.bus.emit("mode.changed", target)
        telemetry.record_event("mode.switch", data={"mode": target.value})

    def handle_key(self, key: KeyInput | str) -> ModeResult:
        key = KeyInput.coerce(key)
        self.process_timeouts()
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        buffer_checkpoint = self.context.buffer.checkpoint()
        command_text = self.context.command_line.text
        command_cursor = self.context.command_line.cursor
        try:
            with telemetry.span(
                name=f"mode::{mode.name.value}",
                component="modes",
                metadata={"key": key.key, "mode": mode.name.value},
                expected=(EngineError,),
            ):
                result = mode.handle_key(key)
        except EngineError as exc:
            self.context.buffer.rollback(buffer_checkpoint)
            self.context.command_line.text = command_text
            self.context.command_line.cursor = command_cursor
            mode.reset_pending()
            self.cancel_timeout(mode.name)
            self.logger.info("key %r failed in %s: %s", key.key, mode.name.value, exc)
            self.context.post_status(str(exc))
            return ModeResult(consumed=True, status="error", message=str(exc))
        return self._after_mode_result(mode, result)

    def _after_mode_result(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.timeout_ms:
            self.arm_timeout(mode.name, result.timeout_ms)
        else:
            self.cancel_timeout(mode.name)
        if result.switch_to:
            self.switch_mode(result.switch_to)
        self.enforce_cursor()
        return result

    def enforce_cursor(self) -> None:
        """Clamp the cursor into the range the active mode allows."""

        state = self.context.buffer.state
        row, col = self.context.buffer.clamp(
            *state.cursor, allow_eol=self.context.mode.allows_eol
        )
        if (row, col) != state.cursor:
            state.set_cursor(row, col, keep_desired=True)

    def arm_timeout(self, mode_name: EditorMode, timeout_ms: int) -> None:
        self._timer_counter += 1
        deadline = self._clock() + (timeout_ms / 1000.0)
        self._pending_timeouts[mode_name] = PendingTimeout(
            deadline=deadline,
            timeout_ms=timeout_ms,
            generation=self._timer_counter,
        )

    def cancel_timeout(self, mode_name: EditorMode) -> None:
        self._pending_timeouts.pop(mode_name, None)

    def has_pending_timeout(self) -> bool:
        return bool(self._pending_timeouts)

    def process_timeouts(self) -> Dict[EditorMode, ModeResult]:
        now = self._clock()
        expired = {
            mode_name: timer
            for mode_name, timer in self._pending_timeouts.items()
            if timer.deadline <= now
        }
        results: Dict[EditorMode, ModeResult] = {}
        for mode_name, timer in expired.items():
            results[mode_name] = self._trigger_timeout(mode_name, timer.generation)
        return results

    def force_timeout(
        self, mode_name: Optional[EditorMode | str] = None
    ) -> Dict[EditorMode, ModeResult]:
        if mode_name is not None:
            target = coerce_mode(mode_name)
            timer = self._pending_timeouts.get(target)
            if not timer:
                return {}
            return {target: self._trigger_timeout(target, timer.generation)}

        current = list(self._pending_timeouts.items())
        results: Dict[EditorMode, ModeResult] = {}
        for name, timer in current:
            results[name] = self._trigger_timeout(name, timer.generation)
        return results

    def _trigger_timeout(self, mode_name: EditorMode, generation: int) -> ModeResult:
        timer = self._pending_timeouts.get(mode_name)
        if not timer or timer.generation != generation:
            return ModeResult(consumed=False, status="timeout")
        self._pending_timeouts.pop(mode_name, None)
        mode = self._modes.get(mode_name)
        if mode is None:
            return ModeResult(consumed=False, status="timeout")
        with telemetry.span(
            name=f"mode_timeout::{mode_name.value}",
            component="modes",
            metadata={"mode": mode_name.value, "timeout_ms": timer.timeout_ms},
        ):
            result = mode.handle_timeout()
        return self._after_mode_result(mode, result)


__all__ = ["ModeManager", "PendingTimeout", "DEFAULT_MODE_CLASSES", "Clock"]
