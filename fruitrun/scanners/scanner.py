"""Per-file scanning of FRUIT sources."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Set

from ..errors import UnreadableSourceError
from ..logging import get_logger
from ..models import ArtifactSet, RoutineArtifact, RoutineKind, SourceUnit
from .base import Finding, LineRule
from .registry import discover_rules

_GLOBAL_KINDS = {
    RoutineKind.SETUP_GLOBAL: "has_setup",
    RoutineKind.TEARDOWN_GLOBAL: "has_teardown",
}


class ArtifactScanner:
    """Applies line rules to a source file and records what they find."""

    def __init__(self, rules: Optional[Sequence[LineRule]] = None) -> None:
        self.rules = list(rules) if rules is not None else discover_rules()
        self.logger = get_logger("scanner")

    def scan(self, path: str | Path, artifacts: Optional[ArtifactSet] = None) -> ArtifactSet:
        """Scan ``path`` and append its modules and routines to ``artifacts``.

        Test names are recorded as found; duplicates such as the ones produced
        by ``end subroutine test_x`` lines are removed when the driver is
        written, not here.
        """
        unit = SourceUnit(path=Path(path))
        if not unit.exists:
            raise UnreadableSourceError(str(path))

        if artifacts is None:
            artifacts = ArtifactSet()

        source = unit.path.as_posix()
        self.logger.info("Scanning %s", source)
        artifacts.sources.append(source)

        # the global routines count once per file, however many lines mention them
        globals_in_file: Set[RoutineKind] = set()
        with unit.path.open(encoding="utf-8", errors="replace") as handle:
            for line in handle:
                for finding in self._classify(line.rstrip("\r\n")):
                    self._record(finding, artifacts, source, globals_in_file)
        return artifacts

    def _classify(self, line: str) -> Iterable[Finding]:
        for rule in self.rules:
            yield from rule.match(line)

    def _record(
        self,
        finding: Finding,
        artifacts: ArtifactSet,
        source: str,
        globals_in_file: Set[RoutineKind],
    ) -> None:
        if finding.kind is None:
            artifacts.add_module(finding.name)
            return

        flag = _GLOBAL_KINDS.get(finding.kind)
        if flag is None:
            artifacts.add_routine(RoutineArtifact(name=finding.name, kind=finding.kind, source=source))
            return

        if finding.kind in globals_in_file:
            return
        globals_in_file.add(finding.kind)
        if getattr(artifacts, flag):
            self.logger.warning(
                "2 %s routines found (second in %s), expect linking errors",
                finding.name,
                source,
            )
        else:
            setattr(artifacts, flag, True)
