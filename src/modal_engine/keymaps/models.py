"""Dataclasses describing keymap bindings and action metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence

from modal_engine.config import DEFAULT_SEQUENCE_TIMEOUT_MS

KEY_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "esc": "ESC",
        "escape": "ESC",
        "<esc>": "ESC",
        "enter": "ENTER",
        "return": "ENTER",
        "<cr>": "ENTER",
        "<enter>": "ENTER",
        "<return>": "ENTER",
        "backspace": "BACKSPACE",
        "<bs>": "BACKSPACE",
        "<backspace>": "BACKSPACE",
        "left": "LEFT",
        "<left>": "LEFT",
        "right": "RIGHT",
        "<right>": "RIGHT",
        "up": "UP",
        "<up>": "UP",
        "down": "DOWN",
        "<down>": "DOWN",
        "tab": "TAB",
        "<tab>": "TAB",
        "space": " ",
        "<space>": " ",
    }
)

_MODIFIER_ALIASES: Mapping[str, str] = MappingProxyType(
    {"c": "ctrl", "control": "ctrl", "m": "alt", "a": "alt", "meta": "alt", "s": "shift"}
)


def normalize_key(key: str) -> str:
    """Map host spellings (``escape``, ``<Esc>``, ``RETURN``) to one name."""

    if len(key) == 1:
        return key
    return KEY_ALIASES.get(key.lower(), key)


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = []
    for modifier in modifiers:
        cleaned = modifier.strip().lower()
        if cleaned:
            values.append(_MODIFIER_ALIASES.get(cleaned, cleaned))
    return tuple(sorted(dict.fromkeys(values)))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Single normalized key press used by key sequences."""

    key: str
    modifiers: tuple[str, ...] = ()
    text: str | None = None

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "key", normalize_key(self.key))
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        if self.modifiers:
            modifier = "+".join(self.modifiers)
            return f"{modifier}+{self.key}"
        return self.key

    @classmethod
    def parse(cls, notation: str) -> "KeyStroke":
        """Parse a token such as ``x``, ``ESC``, ``ctrl+r`` or ``<C-r>``."""

        if len(notation) == 1:
            return cls(notation)
        if notation.startswith("<") and notation.endswith(">"):
            inner = notation[1:-1]
            if "-" in inner and len(inner) > 2:
                *mods, key = inner.split("-")
                return cls(key, modifiers=tuple(mods))
            return cls(notation)
        if "+" in notation and len(notation) > 1:
            *mods, key = notation.split("+")
            if key:
                return cls(key, modifiers=tuple(mods))
        return cls(notation)


def tokenize_notation(notation: str) -> tuple[str, ...]:
    """Split ``"dd"`` or ``"<C-w>j"`` into individual key tokens."""

    tokens: list[str] = []
    index = 0
    while index < len(notation):
        if notation[index] == "<":
            close = notation.find(">", index)
            if close > index + 1:
                tokens.append(KeyStroke.parse(notation[index : close + 1]).token)
                index = close + 1
                continue
        tokens.append(notation[index])
        index += 1
    return tuple(tokens)


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable collection of keystrokes."""

    strokes: tuple[KeyStroke, ...]
    timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def append(self, *strokes: KeyStroke) -> "KeySequence":
        return KeySequence(self.strokes + tuple(strokes), timeout_ms=self.timeout_ms)

    @classmethod
    def from_strings(
        cls, *keys: str, timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS
    ) -> "KeySequence":
        strokes = tuple(KeyStroke.parse(key) for key in keys if key)
        return cls(strokes=strokes, timeout_ms=timeout_ms)

    @classmethod
    def coerce(
        cls,
        keys: "KeySequence | str | Sequence[str]",
        *,
        timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS,
    ) -> "KeySequence":
        """Accept a sequence, Vim notation (``"gg"``), or a list of tokens."""

        if isinstance(keys, KeySequence):
            return keys
        if isinstance(keys, str):
            return cls.from_strings(*tokenize_notation(keys), timeout_ms=timeout_ms)
        return cls.from_strings(*keys, timeout_ms=timeout_ms)


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Callable metadata used during binding execution."""

    id: str
    handler: Callable[..., object]
    telemetry_name: str | None = None
    description: str = ""
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.telemetry_name is None:
            object.__setattr__(self, "telemetry_name", self.id)

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Associates a key sequence in one mode with an action."""

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not self.action_id:
            raise ValueError("binding action_id cannot be empty")
        # EditorMode members are str subclasses; store the plain value.
        object.__setattr__(self, "mode", str(getattr(self.mode, "value", self.mode)))

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)


__all__ = [
    "KeyStroke",
    "KeySequence",
    "ActionRef",
    "Binding",
    "KEY_ALIASES",
    "normalize_key",
    "tokenize_notation",
]
