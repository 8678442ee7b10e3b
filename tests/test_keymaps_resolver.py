from __future__ import annotations

from modal_engine.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "g"),
    action_id: str = "core.test",
    timeout_ms: int = 1000,
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.from_strings(*keys, timeout_ms=timeout_ms),
        action_id=action_id,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    action_ids = {binding.action_id for binding in bindings}
    for action_id in action_ids:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.match.action.id == "core.test"


def test_resolver_reports_pending_for_prefix() -> None:
    binding = make_binding("normal.gg")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("g",)


def test_resolver_misses_unknown_and_overlong_sequences() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    assert resolver.resolve("normal", ("x",)).status == "miss"
    assert resolver.resolve("normal", ("g", "g", "g")).status == "miss"
    assert resolver.resolve("normal", ()).status == "miss"
    assert resolver.resolve("visual", ("g", "g")).status == "miss"


def test_exact_match_wins_over_longer_sequence() -> None:
    short = make_binding("normal.d", keys=("d",), action_id="core.short")
    long = make_binding("normal.dd", keys=("d", "d"), action_id="core.long")
    resolver = KeymapResolver(build_registry([short, long]))

    result = resolver.resolve("normal", ("d",))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == "normal.d"


def test_is_prefix_covers_full_and_proper_prefixes() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    assert resolver.is_prefix("normal", ("g",)) is True
    assert resolver.is_prefix("normal", ("g", "g")) is True
    assert resolver.is_prefix("normal", ()) is False
    assert resolver.is_prefix("normal", ("x",)) is False
    assert resolver.is_prefix("insert", ("g",)) is False


def test_lookup_treats_prefix_as_miss() -> None:
    registry = build_registry([make_binding("normal.gg")])
    resolver = KeymapResolver(registry)

    assert resolver.lookup("normal", ("g",)) is None
    match = resolver.lookup("normal", ("g", "g"))
    assert match is not None
    assert match.binding.id == "normal.gg"


def test_resolver_pending_returns_timeout_hint() -> None:
    binding = make_binding("normal.gg", timeout_ms=1500)
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.timeout_ms == 1500


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("normal", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("normal.x", keys=("x",), action_id="core.x")
    registry.register_action(make_action("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("normal", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id


def test_overwritten_binding_resolves_to_latest() -> None:
    first = make_binding("normal.gg", action_id="core.first")
    registry = build_registry([first])
    resolver = KeymapResolver(registry)
    assert resolver.lookup("normal", ("g", "g")) is not None

    registry.register_action(make_action("core.second"))
    registry.register_binding(make_binding("normal.gg.user", action_id="core.second"))

    match = resolver.lookup("normal", ("g", "g"))
    assert match is not None
    assert match.action.id == "core.second"
