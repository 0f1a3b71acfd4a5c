"""Ownership and cleanup of one invocation's temporary files."""

from __future__ import annotations

import atexit
import os
import signal
import tempfile
import threading
from pathlib import Path
from types import FrameType
from typing import Dict, Optional

from .logging import get_logger
from .models import WorkingPaths

_HANDLED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGHUP") if hasattr(signal, name)
)


class WorkingArea:
    """Reserves a unique basename and removes everything derived from it.

    The basename is reserved by atomically creating ``<basename>.f90`` in
    ``directory``, so concurrent runs in the same directory never collide.
    Cleanup runs when the context exits, at interpreter exit, and when one of
    SIGINT/SIGTERM/SIGHUP arrives; it is idempotent.
    """

    PREFIX = "test_"

    def __init__(
        self,
        directory: Path | None = None,
        *,
        keep: bool = False,
        handle_signals: bool = True,
    ) -> None:
        self.directory = Path(directory) if directory is not None else Path.cwd()
        self.keep = keep
        self.handle_signals = handle_signals
        self.paths: Optional[WorkingPaths] = None
        self.logger = get_logger("lifecycle")
        self._cleaned = False
        self._previous_handlers: Dict[int, object] = {}

    def __enter__(self) -> WorkingPaths:
        fd, name = tempfile.mkstemp(prefix=self.PREFIX, suffix=".f90", dir=self.directory)
        os.close(fd)
        self.paths = WorkingPaths(directory=self.directory, basename=Path(name).stem)
        self.logger.debug("Reserved working basename %s", self.paths.basename)
        atexit.register(self.cleanup)
        if self.handle_signals:
            self._install_signal_handlers()
        return self.paths

    def __exit__(self, exc_type, exc, tb) -> bool:  # type: ignore[no-untyped-def]
        self._restore_signal_handlers()
        atexit.unregister(self.cleanup)
        self.cleanup()
        return False

    def cleanup(self) -> None:
        """Remove intermediates, and the driver unless it should be kept."""
        if self._cleaned or self.paths is None:
            return
        self._cleaned = True

        for path in self.paths.intermediates:
            path.unlink(missing_ok=True)

        if self.keep:
            self.logger.warning("Test executable saved in %s", self.paths.executable)
            return
        self.paths.source.unlink(missing_ok=True)
        self.paths.executable.unlink(missing_ok=True)

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in _HANDLED_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._on_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]
        self._previous_handlers.clear()

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        self.logger.debug("Interrupted by signal %d", signum)
        # unwinding through SystemExit lets the context manager clean up
        raise SystemExit(128 + signum)


__all__ = ["WorkingArea"]
