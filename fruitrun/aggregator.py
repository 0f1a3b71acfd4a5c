"""Input resolution and artifact aggregation across source files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .logging import get_logger
from .models import ArtifactSet
from .scanners import ArtifactScanner

SETUP_FILE_PREFIX = "setup_"


class ArtifactAggregator:
    """Walks the inputs one level deep and scans every eligible source.

    Files named ``setup_*<suffix>`` are never taken from the inputs directly.
    Instead every directory referenced by the inputs is searched for them once
    the ordinary sources have been scanned, so shared setup code is picked up
    by convention.
    """

    def __init__(
        self,
        scanner: Optional[ArtifactScanner] = None,
        *,
        suffix: str = ".f90",
    ) -> None:
        self.scanner = scanner or ArtifactScanner()
        self.suffix = suffix
        self.logger = get_logger("aggregator")

    def aggregate(self, inputs: Sequence[str | Path]) -> ArtifactSet:
        """Scan all sources named by ``inputs`` into a single artifact set."""
        if not inputs:
            raise ValueError("At least one file or directory is required")

        artifacts = ArtifactSet()
        for path in self.resolve_sources(inputs):
            self.scanner.scan(path, artifacts)
        for path in self.resolve_setup_files(inputs):
            self.scanner.scan(path, artifacts)

        self.logger.debug(
            "Collected %d module(s), %d test(s), %d setup and %d teardown routine(s)",
            len(artifacts.unique_modules()),
            len(artifacts.unique_tests()),
            len(artifacts.setups),
            len(artifacts.teardowns),
        )
        return artifacts

    def resolve_sources(self, inputs: Sequence[str | Path]) -> List[Path]:
        """Return the ordinary (non-setup) sources in input order.

        Missing paths are passed through so the scanner can reject them.
        """
        return _deduplicate(self._iter_sources(inputs))

    def resolve_setup_files(self, inputs: Sequence[str | Path]) -> List[Path]:
        """Return ``setup_*`` sources found directly inside the referenced directories."""
        directories = _deduplicate(_parent_directory(Path(raw)) for raw in inputs)
        found: List[Path] = []
        for directory in directories:
            if not directory.is_dir():
                continue
            found.extend(
                child for child in _sorted_children(directory) if self._is_setup_file(child)
            )
        return _deduplicate(found)

    def _iter_sources(self, inputs: Sequence[str | Path]) -> Iterator[Path]:
        for raw in inputs:
            path = Path(raw)
            if path.is_dir():
                for child in _sorted_children(path):
                    if self._is_source(child) and not self._is_setup_file(child):
                        yield child
            elif not path.exists():
                yield path
            elif self._is_source(path) and not self._is_setup_file(path):
                yield path
            else:
                self.logger.debug("Skipping %s", path)

    def _is_source(self, path: Path) -> bool:
        return path.is_file() and path.name.endswith(self.suffix)

    def _is_setup_file(self, path: Path) -> bool:
        return self._is_source(path) and path.name.startswith(SETUP_FILE_PREFIX)


def _parent_directory(path: Path) -> Path:
    return path if path.is_dir() else path.parent


def _sorted_children(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda child: child.name)


def _deduplicate(paths: Iterable[Path]) -> List[Path]:
    seen = set()
    unique: List[Path] = []
    for path in paths:
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        unique.append(path)
    return unique


__all__ = ["ArtifactAggregator", "SETUP_FILE_PREFIX"]
