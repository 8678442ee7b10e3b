"""Helper utilities for keymap-driven modes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from modal_engine.errors import ActionExecutionError, EngineError
from modal_engine.keymaps import KeymapResolver, KeyStroke, ResolutionMatch
from modal_engine.runtime import telemetry

from .base_mode import KeyInput, ModeContext, ModeResult
from .handle import EditorHandle

if TYPE_CHECKING:  # pragma: no cover
    from modal_engine.commands import CommandRegistry


def key_to_token(key: KeyInput) -> str:
    """Return the resolver token for ``key`` (``"x"``, ``"ESC"``, ``"ctrl+r"``)."""

    modifiers = key.modifiers
    if len(key.key) == 1 and key.key.isprintable():
        # Shift is already folded into the character itself.
        modifiers = tuple(modifier for modifier in modifiers if modifier != "shift")
    return KeyStroke(key.key, modifiers=modifiers).token


def require_keymap_resolver(context: ModeContext) -> KeymapResolver:
    resolver = context.extras.get("keymap_resolver")
    if not isinstance(resolver, KeymapResolver):
        raise RuntimeError("ModeContext.extras missing 'keymap_resolver'")
    return resolver


def require_command_registry(context: ModeContext) -> "CommandRegistry":
    registry = context.extras.get("command_registry")
    if registry is None:
        raise RuntimeError("ModeContext.extras missing 'command_registry'")
    return registry  # type: ignore[return-value]


def execute_match(
    context: ModeContext, match: ResolutionMatch, *, count: int = 1
) -> ModeResult:
    """Run the action behind ``match`` ``count`` times.

    Actions receive an ``EditorHandle``. Mode requests made through the
    handle and ``ModeResult.switch_to`` values are merged; the last one wins.
    Failures other than ``EngineError`` are wrapped in ``ActionExecutionError``.
    Changes made by the repeats form a single undo step.
    """

    editor = EditorHandle(context)
    timeline = context.buffer.timeline
    depth = len(timeline)
    switch_to: Optional[object] = None
    outcome: Optional[ModeResult] = None
    editor.repeat_origin = context.buffer.state.cursor
    with telemetry.span(
        "keymaps::execute",
        component="keymaps",
        metadata={
            "binding_id": match.binding.id,
            "action": match.action.id,
            "count": count,
        },
        expected=(EngineError,),
    ):
        for index in range(max(count, 1)):
            editor.repeat_index = index
            try:
                returned = match.action(editor, match)
            except EngineError:
                raise
            except Exception as exc:
                raise ActionExecutionError(match.action.id, str(exc)) from exc
            if isinstance(returned, ModeResult):
                outcome = returned
                if returned.switch_to is not None:
                    switch_to = returned.switch_to
            if editor.requested_mode is not None:
                switch_to = editor.requested_mode
        timeline.squash(depth)

    result = outcome or ModeResult(consumed=True)
    result.consumed = True
    if switch_to is not None:
        result.switch_to = switch_to  # type: ignore[assignment]
    return result


__all__ = [
    "key_to_token",
    "require_keymap_resolver",
    "require_command_registry",
    "execute_match",
]
