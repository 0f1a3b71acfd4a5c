"""Built-in naming conventions for FRUIT sources."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from ..models import RoutineKind
from .base import Finding, LineRule, RoutineRule

_MODULE_DECLARATION = re.compile(r"^[ \t]*module[ \t]+(?P<name>[A-Za-z_]\w*)")

# "module procedure foo" and separate module procedures are not dependencies
_NOT_MODULE_NAMES = frozenset(
    {
        "procedure",
        "subroutine",
        "function",
        "pure",
        "impure",
        "elemental",
        "recursive",
        "non_recursive",
    }
)


class ModuleDependencyRule(LineRule):
    """Captures ``module <name>`` declarations so the driver can ``use`` them."""

    name = "modules"

    def match(self, line: str) -> Iterable[Finding]:
        found = _MODULE_DECLARATION.match(line)
        if found is None:
            return ()
        module = found.group("name")
        if module in _NOT_MODULE_NAMES:
            return ()
        return (Finding(name=module),)


class GlobalRoutineRule(RoutineRule):
    """Matches the single session-wide routine named exactly ``routine``."""

    def __init__(self, routine: str, kind: RoutineKind) -> None:
        self.routine = routine
        self.kind = kind
        self.name = routine

    def accepts(self, routine: str) -> bool:
        return routine == self.routine


class AffixRoutineRule(RoutineRule):
    """Matches routines whose name starts or ends with a marker."""

    def __init__(
        self,
        name: str,
        kind: RoutineKind,
        *,
        prefixes: Sequence[str] = (),
        suffixes: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.kind = kind
        self.prefixes = tuple(prefixes)
        self.suffixes = tuple(suffixes)

    def accepts(self, routine: str) -> bool:
        return routine.startswith(self.prefixes) or routine.endswith(self.suffixes)


def setup_rule() -> LineRule:
    return GlobalRoutineRule("setup", RoutineKind.SETUP_GLOBAL)


def teardown_rule() -> LineRule:
    return GlobalRoutineRule("teardown", RoutineKind.TEARDOWN_GLOBAL)


def named_setup_rule() -> LineRule:
    return AffixRoutineRule(
        "named_setup", RoutineKind.SETUP_NAMED, prefixes=("setup_",), suffixes=("_setup",)
    )


def named_teardown_rule() -> LineRule:
    return AffixRoutineRule(
        "named_teardown",
        RoutineKind.TEARDOWN_NAMED,
        prefixes=("teardown_",),
        suffixes=("_teardown",),
    )


def named_test_rule() -> LineRule:
    return AffixRoutineRule("tests", RoutineKind.TEST, prefixes=("test_",))

