"""Generation of the Fortran driver program that runs discovered tests."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .logging import get_logger
from .models import ArtifactSet, OutputFormat

# Fortran free-form source lines may not exceed this many characters.
MAX_LINE_LENGTH = 132
_CONTINUATION_INDENT = "    "


class DriverSynthesizer:
    """Renders the driver program from an artifact set.

    The call order is fixed by the template: framework init, global ``setup``,
    named setups, test cases, summary, finalize, named teardowns, global
    ``teardown``. A custom ``driver.f90.j2`` placed in ``templates_dir`` takes
    precedence over the bundled one.
    """

    TEMPLATE_NAME = "driver.f90.j2"

    def __init__(
        self,
        *,
        framework_module: str = "fruit",
        templates_dir: Path | None = None,
    ) -> None:
        self.framework_module = framework_module
        self.templates_dir = templates_dir
        self.logger = get_logger("synthesizer")
        self._env = self._create_env(templates_dir)

    def synthesize(
        self,
        artifacts: ArtifactSet,
        program_name: str,
        output_format: OutputFormat = OutputFormat.NONE,
        only_test: Optional[str] = None,
    ) -> str:
        """Return the complete driver source text."""
        tests = artifacts.unique_tests()
        if only_test:
            tests = [name for name in tests if name == only_test]
            if not tests:
                self.logger.warning("No test routine named %s was found", only_test)

        template = self._env.get_template(self.TEMPLATE_NAME)
        rendered = template.render(
            program_name=program_name,
            framework_module=self.framework_module,
            modules=artifacts.unique_modules(),
            format_suffix=output_format.framework_suffix,
            has_setup=artifacts.has_setup,
            setups=artifacts.unique_setups(),
            tests=tests,
            teardowns=artifacts.unique_teardowns(),
            has_teardown=artifacts.has_teardown,
        )

        lines: List[str] = []
        for line in rendered.splitlines():
            lines.extend(wrap_line(line))
        self.logger.debug("Driver %s invokes %d test(s)", program_name, len(tests))
        return "\n".join(lines) + "\n"

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


def wrap_line(line: str, limit: int = MAX_LINE_LENGTH) -> List[str]:
    """Split ``line`` at argument commas using ``&`` continuations."""
    if len(line) <= limit:
        return [line]
    split_at = _last_break(line, limit - 2)
    if split_at is None:
        return [line]
    head = line[: split_at + 1]
    tail = _CONTINUATION_INDENT + line[split_at + 1 :].lstrip()
    return [f"{head} &"] + wrap_line(tail, limit)


def _last_break(line: str, limit: int) -> Optional[int]:
    quote: Optional[str] = None
    candidate: Optional[int] = None
    for index, char in enumerate(line[:limit]):
        if quote:
            if char == quote:
                quote = None
        elif char in {'"', "'"}:
            quote = char
        elif char == "," and index > len(_CONTINUATION_INDENT):
            candidate = index
    return candidate


__all__ = ["DriverSynthesizer", "MAX_LINE_LENGTH", "wrap_line"]
