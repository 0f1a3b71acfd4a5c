"""Discovery of built-in and plugin line rules."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Set

from .base import LineRule
from .rules import (
    ModuleDependencyRule,
    named_setup_rule,
    named_teardown_rule,
    named_test_rule,
    setup_rule,
    teardown_rule,
)

_ENTRY_POINT_GROUP = "fruitrun.rules"

_BUILTIN_FACTORIES: dict[str, Callable[[], LineRule]] = {
    "modules": ModuleDependencyRule,
    "setup": setup_rule,
    "teardown": teardown_rule,
    "named_setup": named_setup_rule,
    "named_teardown": named_teardown_rule,
    "tests": named_test_rule,
}


def discover_rules() -> List[LineRule]:
    """Return the built-in rules followed by any registered through entry points."""
    rules: List[LineRule] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], LineRule]) -> None:
        key = name.lower()
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, LineRule):
            raise TypeError(f"Rule factory for '{name}' did not return a LineRule instance")
        rules.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load rule entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> LineRule:
            return _coerce_rule(obj)

        _add(name, _factory)

    return rules


def _coerce_rule(obj: object) -> LineRule:
    if isinstance(obj, LineRule):
        return obj
    if isinstance(obj, type) and issubclass(obj, LineRule):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, LineRule):
            return instance
    raise TypeError("Rule entry point must be a LineRule subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = ["discover_rules"]
