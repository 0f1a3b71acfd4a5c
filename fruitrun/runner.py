"""Building, executing and reporting on the generated test driver."""

from __future__ import annotations

import shlex
import subprocess
import sys
from pathlib import Path
from typing import IO, Callable, Optional, Sequence

from .errors import BuildFailure, ExecutionFailure, ReportFailure
from .logging import get_logger
from .models import OutputFormat, RunOutcome, WorkingPaths

FAILURE_MARKER = "Some tests failed!"

# Exit statuses a POSIX shell reports for missing or non-executable commands.
_COMMAND_NOT_FOUND = 127
_NOT_EXECUTABLE = 126


class ExecutionRunner:
    """Drives the external build, the test executable and the report converter.

    Every external command goes through ``runner(args, cwd, stdout=None)``,
    which returns the exit status. Tests inject a recorder instead of
    compiling Fortran.
    """

    def __init__(
        self,
        *,
        build_command: Sequence[str] = ("make",),
        junit_converter: Sequence[str] = ("util/fruit2junit.sh",),
        runner: Callable[..., int] | None = None,
        echo: Callable[[str], object] | None = None,
    ) -> None:
        self.build_command = list(build_command)
        self.junit_converter = list(junit_converter)
        self._runner = runner or self._default_runner
        self._echo = echo or sys.stdout.write
        self.logger = get_logger("runner")

    def build_and_run(
        self,
        paths: WorkingPaths,
        output_format: OutputFormat = OutputFormat.NONE,
        run_cmd: Optional[str] = None,
    ) -> RunOutcome:
        """Build and execute the driver, returning how the tests fared.

        Build, execution and conversion failures raise; failing assertions are
        reported as :attr:`RunOutcome.TEST_FAILURE` and leave the log in place.
        """
        self.build(paths)
        try:
            self.execute(paths, run_cmd)
        except ExecutionFailure:
            # show what the crashed run printed, then drop the log
            if output_format is not OutputFormat.JUNIT and paths.log.exists():
                self._echo(paths.log.read_text(encoding="utf-8", errors="replace"))
            paths.log.unlink(missing_ok=True)
            raise

        log_text = paths.log.read_text(encoding="utf-8", errors="replace")
        if output_format is OutputFormat.JUNIT:
            self.convert(paths)
        else:
            self._echo(log_text)

        if FAILURE_MARKER in log_text:
            self.logger.error("Failing tests detected, log kept at %s", paths.log)
            return RunOutcome.TEST_FAILURE

        paths.log.unlink(missing_ok=True)
        return RunOutcome.SUCCESS

    def build(self, paths: WorkingPaths) -> None:
        args = [*self.build_command, paths.basename]
        self.logger.debug("Building with: %s", shlex.join(args))
        code = self._runner(args, cwd=paths.directory)
        if code != 0:
            raise BuildFailure(f"Making {paths.basename}", code)

    def execute(self, paths: WorkingPaths, run_cmd: Optional[str] = None) -> None:
        args = [*shlex.split(run_cmd or ""), f"./{paths.basename}"]
        self.logger.debug("Running: %s > %s", shlex.join(args), paths.log.name)
        with paths.log.open("w", encoding="utf-8") as handle:
            code = self._runner(args, cwd=paths.directory, stdout=handle)
        if code != 0:
            raise ExecutionFailure(f"Running {shlex.join(args)}", code)

    def convert(self, paths: WorkingPaths) -> None:
        args = [*self.junit_converter, str(paths.log)]
        self.logger.debug("Converting log with: %s", shlex.join(args))
        code = self._runner(args, cwd=paths.directory)
        if code != 0:
            raise ReportFailure(shlex.join(args), code)

    def _default_runner(
        self,
        args: Sequence[str],
        cwd: Path,
        stdout: IO[str] | None = None,
    ) -> int:
        # flush our own output so it is not interleaved with the child's
        sys.stdout.flush()
        try:
            completed = subprocess.run(list(args), cwd=cwd, stdout=stdout, check=False)
        except FileNotFoundError:
            self.logger.error("Unable to locate '%s'", args[0])
            return _COMMAND_NOT_FOUND
        except PermissionError:
            self.logger.error("'%s' is not executable", args[0])
            return _NOT_EXECUTABLE
        if completed.returncode < 0:
            # killed by a signal, report it the way a shell would
            return 128 - completed.returncode
        return completed.returncode


__all__ = ["ExecutionRunner", "FAILURE_MARKER"]
