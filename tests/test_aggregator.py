"""Tests for fruitrun.aggregator."""

from __future__ import annotations

import pytest

from fruitrun.aggregator import ArtifactAggregator
from fruitrun.errors import UnreadableSourceError
from tests._fixtures.source_builder import SourceBuilder


def _write_suite(sources: SourceBuilder) -> None:
    sources.write(
        {
            "tests/b_test.f90": "module b_test\nsubroutine test_b\nend subroutine test_b\n",
            "tests/a_test.f90": "module a_test\nsubroutine test_a\nend subroutine test_a\n",
            "tests/setup_common.f90": "module common_setup\nsubroutine setup\nend subroutine setup\n",
            "tests/notes.txt": "subroutine test_ignored\n",
            "tests/nested/c_test.f90": "module c_test\nsubroutine test_c\n",
            "other/setup_other.f90": "module other_setup\nsubroutine setup_other\n",
        }
    )


def test_directory_input_scans_sources_in_sorted_order(sources: SourceBuilder) -> None:
    _write_suite(sources)

    artifacts = ArtifactAggregator().aggregate([sources.path("tests")])

    assert artifacts.unique_tests() == ["test_a", "test_b"]
    assert "test_ignored" not in artifacts.unique_tests()
    assert "test_c" not in artifacts.unique_tests()


def test_directory_input_adds_setup_files_last(sources: SourceBuilder) -> None:
    _write_suite(sources)

    artifacts = ArtifactAggregator().aggregate([sources.path("tests")])

    assert artifacts.has_setup is True
    assert artifacts.unique_modules() == ["a_test", "b_test", "common_setup"]
    assert artifacts.sources[-1].endswith("setup_common.f90")
    assert "other_setup" not in artifacts.modules


def test_file_input_pulls_setup_files_from_its_directory(sources: SourceBuilder) -> None:
    _write_suite(sources)

    artifacts = ArtifactAggregator().aggregate([sources.path("tests/b_test.f90")])

    assert artifacts.unique_tests() == ["test_b"]
    assert artifacts.has_setup is True
    assert "common_setup" in artifacts.modules


def test_setup_files_are_not_scanned_twice(sources: SourceBuilder) -> None:
    _write_suite(sources)
    aggregator = ArtifactAggregator()

    artifacts = aggregator.aggregate(
        [sources.path("tests"), sources.path("tests/setup_common.f90"), sources.path("tests/a_test.f90")]
    )

    scanned = [path for path in artifacts.sources if path.endswith("setup_common.f90")]
    assert len(scanned) == 1
    assert len([path for path in artifacts.sources if path.endswith("a_test.f90")]) == 1


def test_resolve_setup_files_covers_every_referenced_directory(sources: SourceBuilder) -> None:
    _write_suite(sources)
    aggregator = ArtifactAggregator()

    found = aggregator.resolve_setup_files([sources.path("tests/a_test.f90"), sources.path("other")])

    assert [path.name for path in found] == ["setup_common.f90", "setup_other.f90"]


def test_files_with_other_suffix_are_skipped(sources: SourceBuilder) -> None:
    _write_suite(sources)

    resolved = ArtifactAggregator().resolve_sources([sources.path("tests/notes.txt")])

    assert resolved == []


def test_custom_suffix(sources: SourceBuilder) -> None:
    sources.write({"suite/alpha.F90": "module alpha\nsubroutine test_alpha\n"})

    artifacts = ArtifactAggregator(suffix=".F90").aggregate([sources.path("suite")])

    assert artifacts.unique_tests() == ["test_alpha"]


def test_missing_input_aborts_aggregation(sources: SourceBuilder) -> None:
    _write_suite(sources)

    with pytest.raises(UnreadableSourceError):
        ArtifactAggregator().aggregate([sources.path("tests"), sources.path("tests/missing.f90")])


def test_aggregate_requires_inputs() -> None:
    with pytest.raises(ValueError):
        ArtifactAggregator().aggregate([])
