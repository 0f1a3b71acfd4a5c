"""Core data models shared across fruitrun components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class OutputFormat(str, Enum):
    """Report flavour requested on the command line."""

    NONE = "none"
    JUNIT = "junit"
    XML = "xml"

    @property
    def framework_suffix(self) -> str:
        # junit is produced by converting the plain log, not by the framework
        return "_xml" if self is OutputFormat.XML else ""


class RoutineKind(str, Enum):
    SETUP_GLOBAL = "setup-global"
    TEARDOWN_GLOBAL = "teardown-global"
    SETUP_NAMED = "setup-named"
    TEARDOWN_NAMED = "teardown-named"
    TEST = "test"


class RunOutcome(str, Enum):
    """Exit classification of one test run."""

    SUCCESS = "success"
    TEST_FAILURE = "test-failure"
    BUILD_FAILURE = "build-failure"
    EXECUTION_FAILURE = "execution-failure"
    REPORT_FAILURE = "report-failure"


@dataclass(frozen=True)
class SourceUnit:
    """One input file handed to the scanner."""

    path: Path

    @property
    def exists(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class RoutineArtifact:
    """A discovered subroutine name tagged with its role."""

    name: str
    kind: RoutineKind
    source: Optional[str] = None


@dataclass
class ArtifactSet:
    """Accumulated discovery results across all scanned sources."""

    modules: List[str] = field(default_factory=list)
    setups: List[RoutineArtifact] = field(default_factory=list)
    teardowns: List[RoutineArtifact] = field(default_factory=list)
    tests: List[RoutineArtifact] = field(default_factory=list)
    has_setup: bool = False
    has_teardown: bool = False
    sources: List[str] = field(default_factory=list)

    def add_module(self, name: str) -> None:
        self.modules.append(name)

    def add_routine(self, artifact: RoutineArtifact) -> None:
        """Append a routine to the list matching its kind."""
        if artifact.kind is RoutineKind.SETUP_NAMED:
            self.setups.append(artifact)
        elif artifact.kind is RoutineKind.TEARDOWN_NAMED:
            self.teardowns.append(artifact)
        elif artifact.kind is RoutineKind.TEST:
            self.tests.append(artifact)
        else:
            raise ValueError(f"Global routines are tracked as flags, not entries: {artifact.kind.value}")

    def unique_modules(self) -> List[str]:
        """Module names sorted and without duplicates."""
        return sorted(set(self.modules))

    def unique_tests(self) -> List[str]:
        """Test names in first-seen order without duplicates."""
        return _unique_names(self.tests)

    def unique_setups(self) -> List[str]:
        return _unique_names(self.setups)

    def unique_teardowns(self) -> List[str]:
        return _unique_names(self.teardowns)


def _unique_names(artifacts: List[RoutineArtifact]) -> List[str]:
    return list(dict.fromkeys(artifact.name for artifact in artifacts))


@dataclass(frozen=True)
class WorkingPaths:
    """Files derived from one invocation's working basename."""

    directory: Path
    basename: str

    @property
    def source(self) -> Path:
        return self.directory / f"{self.basename}.f90"

    @property
    def executable(self) -> Path:
        return self.directory / self.basename

    @property
    def log(self) -> Path:
        return self.directory / f"{self.basename}.log"

    @property
    def intermediates(self) -> tuple[Path, ...]:
        """Build by-products removed even when the driver is kept."""
        return (self.directory / f"{self.basename}.o",)


__all__ = [
    "ArtifactSet",
    "OutputFormat",
    "RoutineArtifact",
    "RoutineKind",
    "RunOutcome",
    "SourceUnit",
    "WorkingPaths",
]
