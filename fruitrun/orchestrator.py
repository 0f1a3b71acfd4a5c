"""Pipeline orchestration for a single fruit test run."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .aggregator import ArtifactAggregator
from .config import FruitConfig
from .errors import TestFailure
from .lifecycle import WorkingArea
from .logging import get_logger
from .models import OutputFormat, RunOutcome
from .runner import ExecutionRunner
from .scanners import ArtifactScanner
from .synthesizer import DriverSynthesizer


class Orchestrator:
    """Coordinates scan, synthesis, build, execution and cleanup."""

    def __init__(
        self,
        config: FruitConfig | None = None,
        *,
        aggregator: ArtifactAggregator | None = None,
        synthesizer: DriverSynthesizer | None = None,
        runner: ExecutionRunner | None = None,
        working_dir: Path | None = None,
        handle_signals: bool = True,
    ) -> None:
        self.config = config or FruitConfig(root=Path.cwd())
        self.aggregator = aggregator or ArtifactAggregator(
            ArtifactScanner(), suffix=self.config.source_suffix
        )
        self.synthesizer = synthesizer or DriverSynthesizer(
            framework_module=self.config.framework_module,
            templates_dir=self.config.templates_dir,
        )
        self.runner = runner or ExecutionRunner(
            build_command=self.config.build.command,
            junit_converter=self.config.report.junit_converter,
        )
        self.working_dir = working_dir
        self.handle_signals = handle_signals
        self.logger = get_logger("orchestrator")

    def run(
        self,
        inputs: Sequence[str | Path],
        *,
        output_format: OutputFormat = OutputFormat.NONE,
        only_test: Optional[str] = None,
        run_cmd: Optional[str] = None,
        keep: bool = False,
    ) -> RunOutcome:
        """Run the tests found in ``inputs``.

        Raises a :class:`~fruitrun.errors.FruitError` subclass for every
        non-successful outcome; the working files are cleaned up first.
        """
        area = WorkingArea(self.working_dir, keep=keep, handle_signals=self.handle_signals)
        with area as paths:
            artifacts = self.aggregator.aggregate(inputs)
            self.logger.debug(
                "Scanned %d file(s); writing driver %s", len(artifacts.sources), paths.source.name
            )
            source = self.synthesizer.synthesize(
                artifacts,
                paths.basename,
                output_format=output_format,
                only_test=only_test,
            )
            paths.source.write_text(source, encoding="utf-8")
            outcome = self.runner.build_and_run(
                paths,
                output_format=output_format,
                run_cmd=run_cmd if run_cmd is not None else self.config.run_command,
            )

        if outcome is RunOutcome.TEST_FAILURE:
            raise TestFailure(str(paths.log))
        self.logger.debug("Run finished: %s", outcome.value)
        return outcome


__all__ = ["Orchestrator"]
