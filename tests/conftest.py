from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.source_builder import SourceBuilder


@pytest.fixture
def sources(tmp_path: Path) -> SourceBuilder:
    """Provide a reusable Fortran source builder rooted at the pytest tmp_path."""
    return SourceBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_fruit_logger() -> Iterator[None]:
    """Undo CLI logging configuration so caplog sees fruitrun records."""
    logger = logging.getLogger("fruitrun")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
