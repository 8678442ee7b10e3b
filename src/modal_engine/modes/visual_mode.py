"""Character-wise and line-wise visual modes."""

from __future__ import annotations

from typing import Optional

from modal_engine.config import EditorMode

from .normal_mode import SequenceMode


class VisualMode(SequenceMode):
    """Selection between the anchor and the cursor.

    The anchor is recorded on entry. Switching straight between the two
    visual modes keeps it, so ``v`` then ``V`` widens the same selection.
    """

    name = EditorMode.VISUAL

    def on_enter(self, previous: Optional[EditorMode]) -> None:
        self.reset_pending()
        state = self.context.buffer.state
        if previous is None or not previous.is_visual or state.anchor is None:
            state.set_anchor(state.cursor)
        self.context.bus.emit("visual.selection", state.selection)

    def on_exit(self, next_mode: Optional[EditorMode]) -> None:
        self.reset_pending()
        if next_mode is None or not next_mode.is_visual:
            self.context.buffer.state.clear_selection()


class VisualLineMode(VisualMode):
    name = EditorMode.VISUAL_LINE


__all__ = ["VisualMode", "VisualLineMode"]
