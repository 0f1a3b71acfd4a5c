"""Base classes for line-classification rules."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from ..models import RoutineKind

DECLARATION = re.compile(r"subroutine[ \t]+(?P<name>[A-Za-z_]\w*)")


@dataclass(frozen=True)
class Finding:
    """One name captured from a source line.

    ``kind`` is ``None`` for module dependencies and a :class:`RoutineKind`
    for subroutines.
    """

    name: str
    kind: Optional[RoutineKind] = None

    @property
    def is_module(self) -> bool:
        return self.kind is None


class LineRule(ABC):
    """Contract for rules that classify a single source line."""

    name: str = "rule"

    @abstractmethod
    def match(self, line: str) -> Iterable[Finding]:
        """Return the findings this rule extracts from ``line``."""


class RoutineRule(LineRule):
    """Rule matching ``subroutine <name>`` declarations by name."""

    kind: RoutineKind

    def match(self, line: str) -> Iterable[Finding]:
        found = DECLARATION.search(line)
        if found is None:
            return ()
        routine = found.group("name")
        if not self.accepts(routine):
            return ()
        return (Finding(name=routine, kind=self.kind),)

    @abstractmethod
    def accepts(self, routine: str) -> bool:
        """Return True when ``routine`` follows this rule's naming convention."""
