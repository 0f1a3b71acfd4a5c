"""Tests for fruitrun.runner."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Optional

import pytest

from fruitrun.errors import BuildFailure, ExecutionFailure, ReportFailure
from fruitrun.models import OutputFormat, RunOutcome, WorkingPaths
from fruitrun.runner import FAILURE_MARKER, ExecutionRunner

PASSING_LOG = "Test module initialized\n\n    . : successful assert\n\nSUCCESSFUL!\n"
FAILING_LOG = f"Test module initialized\n\n    F : failed assert\n\n{FAILURE_MARKER}\n"


class RecordingRunner:
    """Command runner double that records calls and fakes the test log."""

    def __init__(self, *, log: str = PASSING_LOG, codes: Optional[dict[str, int]] = None) -> None:
        self.log = log
        self.codes = codes or {}
        self.calls: list[tuple[list[str], Path, bool]] = []

    def __call__(self, args, cwd, stdout: IO[str] | None = None) -> int:  # type: ignore[no-untyped-def]
        self.calls.append((list(args), Path(cwd), stdout is not None))
        if stdout is not None:
            stdout.write(self.log)
        for marker, code in self.codes.items():
            if marker in args[0] or marker in args[-1]:
                return code
        return 0


def _paths(tmp_path: Path) -> WorkingPaths:
    return WorkingPaths(directory=tmp_path, basename="test_abc")


def test_successful_run_builds_runs_and_removes_log(tmp_path: Path) -> None:
    recorder = RecordingRunner()
    echoed: list[str] = []
    runner = ExecutionRunner(runner=recorder, echo=echoed.append)
    paths = _paths(tmp_path)

    outcome = runner.build_and_run(paths)

    assert outcome is RunOutcome.SUCCESS
    assert recorder.calls[0] == (["make", "test_abc"], tmp_path, False)
    assert recorder.calls[1] == (["./test_abc"], tmp_path, True)
    assert len(recorder.calls) == 2
    assert echoed == [PASSING_LOG]
    assert not paths.log.exists()


def test_failure_marker_reports_test_failure_and_keeps_log(tmp_path: Path) -> None:
    runner = ExecutionRunner(runner=RecordingRunner(log=FAILING_LOG), echo=lambda text: None)
    paths = _paths(tmp_path)

    outcome = runner.build_and_run(paths)

    assert outcome is RunOutcome.TEST_FAILURE
    assert paths.log.read_text(encoding="utf-8") == FAILING_LOG


def test_run_command_prefixes_executable(tmp_path: Path) -> None:
    recorder = RecordingRunner()
    runner = ExecutionRunner(runner=recorder, echo=lambda text: None)

    runner.build_and_run(_paths(tmp_path), run_cmd="mpirun -np 2")

    assert recorder.calls[1][0] == ["mpirun", "-np", "2", "./test_abc"]


def test_custom_build_command(tmp_path: Path) -> None:
    recorder = RecordingRunner()
    runner = ExecutionRunner(build_command=["make", "-C", "build"], runner=recorder, echo=lambda text: None)

    runner.build_and_run(_paths(tmp_path))

    assert recorder.calls[0][0] == ["make", "-C", "build", "test_abc"]


def test_build_failure_propagates_exit_code(tmp_path: Path) -> None:
    recorder = RecordingRunner(codes={"make": 2})
    runner = ExecutionRunner(runner=recorder, echo=lambda text: None)

    with pytest.raises(BuildFailure) as excinfo:
        runner.build_and_run(_paths(tmp_path))

    assert excinfo.value.exit_code == 2
    assert excinfo.value.outcome is RunOutcome.BUILD_FAILURE
    assert "Making test_abc" in str(excinfo.value)
    assert len(recorder.calls) == 1


def test_execution_failure_propagates_exit_code(tmp_path: Path) -> None:
    recorder = RecordingRunner(codes={"./test_abc": 139})
    runner = ExecutionRunner(runner=recorder, echo=lambda text: None)

    with pytest.raises(ExecutionFailure) as excinfo:
        runner.build_and_run(_paths(tmp_path))

    assert excinfo.value.exit_code == 139
    assert len(recorder.calls) == 2


def test_execution_failure_echoes_and_removes_log(tmp_path: Path) -> None:
    recorder = RecordingRunner(log="    . : partial output\n", codes={"./test_abc": 3})
    echoed: list[str] = []
    runner = ExecutionRunner(runner=recorder, echo=echoed.append)
    paths = _paths(tmp_path)

    with pytest.raises(ExecutionFailure):
        runner.build_and_run(paths)

    assert echoed == ["    . : partial output\n"]
    assert not paths.log.exists()


def test_execution_failure_in_junit_mode_skips_echo(tmp_path: Path) -> None:
    recorder = RecordingRunner(codes={"./test_abc": 3})
    echoed: list[str] = []
    runner = ExecutionRunner(runner=recorder, echo=echoed.append)
    paths = _paths(tmp_path)

    with pytest.raises(ExecutionFailure):
        runner.build_and_run(paths, OutputFormat.JUNIT)

    assert echoed == []
    assert len(recorder.calls) == 2
    assert not paths.log.exists()


def test_junit_converts_log_without_echo(tmp_path: Path) -> None:
    recorder = RecordingRunner()
    echoed: list[str] = []
    runner = ExecutionRunner(runner=recorder, echo=echoed.append)
    paths = _paths(tmp_path)

    outcome = runner.build_and_run(paths, OutputFormat.JUNIT)

    assert outcome is RunOutcome.SUCCESS
    assert recorder.calls[2][0] == ["util/fruit2junit.sh", str(paths.log)]
    assert echoed == []


def test_junit_with_failing_tests_still_converts(tmp_path: Path) -> None:
    recorder = RecordingRunner(log=FAILING_LOG)
    runner = ExecutionRunner(runner=recorder, echo=lambda text: None)

    outcome = runner.build_and_run(_paths(tmp_path), OutputFormat.JUNIT)

    assert outcome is RunOutcome.TEST_FAILURE
    assert [call[0][0] for call in recorder.calls] == ["make", "./test_abc", "util/fruit2junit.sh"]


def test_converter_failure_raises_report_failure(tmp_path: Path) -> None:
    recorder = RecordingRunner(codes={"fruit2junit": 3})
    runner = ExecutionRunner(runner=recorder, echo=lambda text: None)

    with pytest.raises(ReportFailure) as excinfo:
        runner.build_and_run(_paths(tmp_path), OutputFormat.JUNIT)

    assert excinfo.value.exit_code == 3


def test_default_runner_reports_missing_command(tmp_path: Path) -> None:
    runner = ExecutionRunner(build_command=["definitely-not-a-real-build-tool"])

    with pytest.raises(BuildFailure) as excinfo:
        runner.build(_paths(tmp_path))

    assert excinfo.value.exit_code == 127
