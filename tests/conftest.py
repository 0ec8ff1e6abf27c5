import logging

import pytest

from string_waves.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def package_logger():
    """Package logger, with any handlers a test attached removed afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
