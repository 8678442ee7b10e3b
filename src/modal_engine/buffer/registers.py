"""Register storage for yank, delete, and put."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal

RegisterType = Literal["character", "line"]


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    type: RegisterType = "character"

    @property
    def linewise(self) -> bool:
        return self.type == "line"


class RegisterBank:
    """Tracks the unnamed register plus any named registers."""

    def __init__(self) -> None:
        self._registers: Dict[str, RegisterValue] = {'"': RegisterValue(text="")}

    def get(self, name: str = '"') -> RegisterValue:
        return self._registers.get(name, RegisterValue(text=""))

    def set(self, name: str, value: RegisterValue) -> None:
        self._registers[name] = value
        if name != '"':
            self._registers['"'] = value

    def append(self, name: str, text: str) -> None:
        existing = self.get(name)
        combined = RegisterValue(text=existing.text + text, type=existing.type)
        self.set(name, combined)

    def yank_to(
        self, name: str, text: str, *, register_type: RegisterType = "character"
    ) -> None:
        self.set(name, RegisterValue(text=text, type=register_type))


__all__ = ["RegisterBank", "RegisterValue", "RegisterType"]
