"""CLI entrypoint for compiling and running FRUIT unit tests."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .config import ConfigError, load_config
from .errors import FruitError, UnreadableSourceError, UsageError
from .logging import configure_logging
from .models import OutputFormat
from .orchestrator import Orchestrator


class _FruitArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.usage_error(message)

    def usage_error(self, message: str) -> NoReturn:
        sys.stderr.write(f"{message}\n")
        self.print_help(sys.stderr)
        self.exit(UsageError.exit_code)


def _build_parser() -> _FruitArgumentParser:
    parser = _FruitArgumentParser(
        prog="fruit",
        description="Compile and run the FRUIT unit tests in the given files or directories.",
        epilog="The executable created will have a temporary file name.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="file/dir",
        help="A file or directory containing FRUIT test (files).",
    )
    parser.add_argument(
        "-k",
        "--keep",
        action="store_true",
        help="Keep the generated test executable and source file (for running in GDB).",
    )
    parser.add_argument(
        "-t",
        "--type",
        dest="output_format",
        default=OutputFormat.NONE.value,
        choices=[fmt.value for fmt in OutputFormat],
        metavar="type",
        help="Type of output. Either none, junit or xml (default none).",
    )
    parser.add_argument(
        "-s",
        "--single",
        dest="only_test",
        metavar="name",
        help="Test only a single subroutine if specified.",
    )
    parser.add_argument(
        "-c",
        "--command",
        dest="run_cmd",
        metavar="cmd",
        help="Command used to run binary. Otherwise, run unix-style ./binary.",
    )
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .fruit.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write fruit's own log messages to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors from fruit itself.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for the fruit test runner."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.paths:
        parser.usage_error("Missing file/directory name.")

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = Orchestrator(config)
    try:
        orchestrator.run(
            args.paths,
            output_format=OutputFormat(args.output_format),
            only_test=args.only_test,
            run_cmd=args.run_cmd,
            keep=bool(args.keep),
        )
    except UnreadableSourceError as exc:
        parser.usage_error(str(exc))
    except FruitError as exc:
        parser.exit(exc.exit_code, f"{exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
