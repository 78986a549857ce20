from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.docs_builder import DocsBuilder


@pytest.fixture
def docs_builder(tmp_path: Path) -> DocsBuilder:
    """Provide a reusable docs builder rooted at the pytest tmp_path."""
    return DocsBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_fastdocs_logger() -> Iterator[None]:
    """Undo `configure_logging` side effects so caplog keeps seeing fastdocs records."""
    yield
    logger = logging.getLogger("fastdocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logging.getLogger("watchdog").setLevel(logging.NOTSET)
