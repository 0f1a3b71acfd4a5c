"""Error taxonomy for fruit test runs."""

from __future__ import annotations

from .models import RunOutcome


class FruitError(RuntimeError):
    """Base class for failures that terminate a run with a specific exit code."""

    exit_code: int = 1
    outcome: RunOutcome | None = None

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UsageError(FruitError):
    """Raised for missing arguments or invalid flag values."""


class UnreadableSourceError(FruitError):
    """Raised when an input path does not resolve to a regular file."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Cannot open '{path}'.")
        self.path = path


class CommandFailure(FruitError):
    """A collaborator command exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int) -> None:
        super().__init__(
            f'"{command}" command failed with exit code {exit_code}.',
            exit_code=exit_code,
        )
        self.command = command


class BuildFailure(CommandFailure):
    """The build collaborator could not produce the test executable."""

    outcome = RunOutcome.BUILD_FAILURE


class ExecutionFailure(CommandFailure):
    """The test executable itself exited with a non-zero status."""

    outcome = RunOutcome.EXECUTION_FAILURE


class ReportFailure(CommandFailure):
    """The log-to-report converter exited with a non-zero status."""

    outcome = RunOutcome.REPORT_FAILURE


class TestFailure(FruitError):
    """The framework reported failing assertions in the run log."""

    __test__ = False
    outcome = RunOutcome.TEST_FAILURE

    def __init__(self, log_path: str) -> None:
        super().__init__(f"Failing tests detected (see {log_path}).")
        self.log_path = log_path


__all__ = [
    "BuildFailure",
    "CommandFailure",
    "ExecutionFailure",
    "FruitError",
    "ReportFailure",
    "TestFailure",
    "UnreadableSourceError",
    "UsageError",
]
