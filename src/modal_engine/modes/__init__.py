"""Mode manager, per-mode dispatch, and the operation capability handle."""

from .base_mode import (
    CommandLine,
    KeyInput,
    Mode,
    ModeBus,
    ModeContext,
    ModeResult,
    StatusChannel,
)
from .handle import EditorHandle
from .normal_mode import NormalMode, SequenceMode
from .insert_mode import InsertMode, TextEntryMode
from .visual_mode import VisualLineMode, VisualMode
from .command_mode import CommandMode
from .mode_manager import DEFAULT_MODE_CLASSES, ModeManager, PendingTimeout

__all__ = [
    "CommandLine",
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeResult",
    "StatusChannel",
    "EditorHandle",
    "SequenceMode",
    "NormalMode",
    "TextEntryMode",
    "InsertMode",
    "VisualMode",
    "VisualLineMode",
    "CommandMode",
    "ModeManager",
    "PendingTimeout",
    "DEFAULT_MODE_CLASSES",
]
