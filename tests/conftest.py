import logging

import pytest

from tests.infrastructure import TinyParser


@pytest.fixture
def parser() -> TinyParser:
    return TinyParser()


@pytest.fixture(autouse=True)
def _reset_trellis_logger():
    """The CLI attaches a handler bound to the captured stderr; drop it between tests."""
    logger = logging.getLogger("trellis")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for h in list(logger.handlers):
        if h not in handlers:
            logger.removeHandler(h)
    logger.setLevel(level)
