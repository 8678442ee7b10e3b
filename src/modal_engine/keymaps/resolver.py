"""Trie-based keymap resolution with telemetry instrumentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from modal_engine.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    """Single trie node tracking a binding and child transitions."""

    binding_id: Optional[str] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children.keys()))


@dataclass(slots=True)
class KeymapTrie:
    """Concrete trie built for a given mode."""

    mode: str
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        node.binding_id = binding.id

    def walk(self, tokens: Sequence[str]) -> Optional[TrieNode]:
        node = self.root
        for token in tokens:
            child = node.children.get(token)
            if child is None:
                return None
            node = child
        return node


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """Resolved binding paired with its action."""

    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome returned from the resolver."""

    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class KeymapResolver:
    """Builds mode-specific tries and resolves sequences."""

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._cache: Dict[str, tuple[int, KeymapTrie]] = {}

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    def resolve(self, mode: object, tokens: Sequence[str]) -> ResolutionResult:
        """Resolve ``tokens`` in ``mode``.

        An exact match wins even when longer sequences share the prefix.
        """

        mode_name = str(getattr(mode, "value", mode))
        normalized = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode_name, "length": len(normalized)},
        ) as handle:
            if not normalized:
                handle.add_metadata("status", "miss")
                return ResolutionResult(status="miss")

            node = self._ensure_trie(mode_name).walk(normalized)
            if node is None:
                handle.add_metadata("status", "miss")
                return ResolutionResult(status="miss")

            if node.binding_id is not None:
                binding = self._registry.get_binding(node.binding_id)
                action = self._registry.get_action(binding.action_id)
                handle.add_metadata("status", "match")
                handle.add_metadata("binding_id", binding.id)
                return ResolutionResult(
                    status="match",
                    match=ResolutionMatch(binding=binding, action=action),
                    consumed=len(normalized),
                )

            next_expected = node.next_tokens()
            if next_expected:
                handle.add_metadata("status", "pending")
                timeout_ms = self._pending_timeout(node)
                if timeout_ms is not None:
                    handle.add_metadata("timeout_ms", timeout_ms)
                return ResolutionResult(
                    status="pending",
                    consumed=len(normalized),
                    next_expected=next_expected,
                    timeout_ms=timeout_ms,
                )

            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss", consumed=len(normalized))

    def lookup(self, mode: object, tokens: Sequence[str]) -> Optional[ResolutionMatch]:
        """Exact-match lookup only; prefixes count as misses."""

        result = self.resolve(mode, tokens)
        return result.match if result.status == "match" else None

    def is_prefix(self, mode: object, tokens: Sequence[str]) -> bool:
        """True iff ``tokens`` is a non-empty full-or-proper prefix in ``mode``."""

        if not tokens:
            return False
        mode_name = str(getattr(mode, "value", mode))
        return self._ensure_trie(mode_name).walk(tuple(tokens)) is not None

    def _ensure_trie(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        cached = self._cache.get(mode)
        if cached and cached[0] == revision:
            return cached[1]

        trie = KeymapTrie(mode=mode)
        for binding in self._registry.iter_bindings(mode):
            trie.add_binding(binding)
        self._cache[mode] = (revision, trie)
        return trie

    def _pending_timeout(self, node: TrieNode) -> Optional[int]:
        timeouts: list[int] = []
        stack = list(node.children.values())
        while stack:
            current = stack.pop()
            if current.binding_id is not None:
                binding = self._registry.get_binding(current.binding_id)
                timeouts.append(binding.sequence.timeout_ms)
            stack.extend(current.children.values())
        if not timeouts:
            return None
        return min(timeouts)


__all__ = [
    "KeymapResolver",
    "KeymapTrie",
    "ResolutionResult",
    "ResolutionMatch",
]
