"""Declarative keymap registry and resolver.

Default bindings live in ``modal_engine.keymaps.defaults``; they import the
built-in actions and are therefore loaded on demand.
"""

from .models import (
    KEY_ALIASES,
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    normalize_key,
    tokenize_notation,
)
from .registry import KeymapRegistry, RegistryStats
from .resolver import KeymapResolver, ResolutionMatch, ResolutionResult

__all__ = [
    "ActionRef",
    "Binding",
    "KeySequence",
    "KeyStroke",
    "KEY_ALIASES",
    "normalize_key",
    "tokenize_notation",
    "KeymapRegistry",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
]
