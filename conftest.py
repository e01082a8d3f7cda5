"""Pytest configuration to expose the tile_server package for imports."""

import logging
import pathlib
import sys
from collections.abc import Iterator

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tile_server.core import config, logging_setup  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Iterator[None]:
    """Drop cached settings and log handlers between tests.

    Settings are re-read so environment changes made by a test take effect,
    and handlers bound to a previous test's captured stdout are removed.
    """
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
    logging.getLogger(logging_setup.ROOT_LOGGER_NAME).handlers.clear()
