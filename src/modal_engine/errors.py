"""Exception hierarchy shared by the engine's components."""

from __future__ import annotations

from typing import Optional, Tuple

Position = Tuple[int, int]


class EngineError(RuntimeError):
    """Base class for every recoverable engine failure."""


class OutOfRangeError(EngineError):
    """Raised when a cursor or range falls outside the buffer bounds."""

    def __init__(self, message: str, *, cursor: Optional[Position] = None) -> None:
        super().__init__(message)
        self.cursor = cursor


class UnknownCommandError(EngineError):
    """Raised when a colon command name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Not an editor command: {name}")
        self.name = name


class CommandExecutionError(EngineError):
    """Raised when a registered colon command fails while running."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class ActionExecutionError(EngineError):
    """Raised when an operation bound to a key sequence fails."""

    def __init__(self, action_id: str, reason: str) -> None:
        super().__init__(f"{action_id}: {reason}")
        self.action_id = action_id
        self.reason = reason


__all__ = [
    "EngineError",
    "OutOfRangeError",
    "UnknownCommandError",
    "CommandExecutionError",
    "ActionExecutionError",
]
