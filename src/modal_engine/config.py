"""Editor mode definitions and engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

ENV_PREFIX = "MODAL_ENGINE_"
DEFAULT_SEQUENCE_TIMEOUT_MS = 750


class EditorMode(str, Enum):
    """Available editor modes."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    VISUAL_LINE = "visual_line"
    COMMAND = "command"

    @property
    def is_visual(self) -> bool:
        return self in (EditorMode.VISUAL, EditorMode.VISUAL_LINE)

    @property
    def allows_eol(self) -> bool:
        """Whether the cursor may rest one past the last character."""

        return self in (EditorMode.INSERT, EditorMode.VISUAL, EditorMode.VISUAL_LINE)


@dataclass(frozen=True)
class ModeConfig:
    """Presentation hints for each mode."""

    label: str
    status: Optional[str]
    read_only: bool


MODE_CONFIGS: Mapping[EditorMode, ModeConfig] = {
    EditorMode.NORMAL: ModeConfig("NORMAL", None, True),
    EditorMode.INSERT: ModeConfig("INSERT", "-- INSERT --", False),
    EditorMode.VISUAL: ModeConfig("VISUAL", "-- VISUAL --", True),
    EditorMode.VISUAL_LINE: ModeConfig("V-LINE", "-- VISUAL LINE --", True),
    EditorMode.COMMAND: ModeConfig(":", None, True),
}


def coerce_mode(mode: "EditorMode | str") -> EditorMode:
    if isinstance(mode, EditorMode):
        return mode
    try:
        return EditorMode(mode)
    except ValueError as exc:
        raise KeyError(f"Unknown mode '{mode}'") from exc


def _env_int(name: str, fallback: int) -> int:
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass
class EngineConfig:
    """Tunables shared by a session's components."""

    sequence_timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS
    status_history: int = 50
    max_count: int = 99999
    logger_name: str = "modal_engine"

    def __post_init__(self) -> None:
        if self.sequence_timeout_ms <= 0:
            raise ValueError("sequence_timeout_ms must be positive")
        if self.status_history <= 0:
            raise ValueError("status_history must be positive")
        if self.max_count <= 0:
            raise ValueError("max_count must be positive")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            sequence_timeout_ms=_env_int("TIMEOUT_MS", DEFAULT_SEQUENCE_TIMEOUT_MS),
            status_history=_env_int("STATUS_HISTORY", 50),
            max_count=_env_int("MAX_COUNT", 99999),
            logger_name=os.environ.get(f"{ENV_PREFIX}LOGGER", "modal_engine"),
        )


__all__ = [
    "EditorMode",
    "ModeConfig",
    "MODE_CONFIGS",
    "EngineConfig",
    "DEFAULT_SEQUENCE_TIMEOUT_MS",
    "coerce_mode",
]
