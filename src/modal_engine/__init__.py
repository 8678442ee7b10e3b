"""UI-agnostic modal (Vim-style) text editing engine."""

from .config import EditorMode, EngineConfig
from .errors import (
    ActionExecutionError,
    CommandExecutionError,
    EngineError,
    OutOfRangeError,
    UnknownCommandError,
)
from .session import EditorSession

__all__ = [
    "EditorSession",
    "EditorMode",
    "EngineConfig",
    "EngineError",
    "OutOfRangeError",
    "UnknownCommandError",
    "CommandExecutionError",
    "ActionExecutionError",
    "adapters",
    "actions",
    "buffer",
    "commands",
    "keymaps",
    "modes",
    "runtime",
    "selection",
]

__version__ = "0.1.0"
