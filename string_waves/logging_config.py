"""
Logging setup for the command line.

Log records go to stderr so that data written to stdout (for example by
`string-waves shape`) stays clean enough to pipe into another program.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "string_waves"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

# Third-party loggers that flood the output at DEBUG
NOISY_LOGGERS = ('matplotlib', 'PIL')


def level_for_verbosity(verbosity: int) -> int:
    """0 -> WARNING, 1 -> INFO, 2 or more -> DEBUG."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach handlers to the package logger and return it.

    Calling again replaces the handlers from the previous call. The log
    file, if given, always records INFO and above so a quiet console run
    still leaves a record of drains, evictions and auto-saves.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    file_level = level
    if log_file:
        file_level = min(level, logging.INFO)
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    logger.setLevel(file_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    logger.debug("Logging to stderr at %s%s", logging.getLevelName(level),
                 f" and to {log_file}" if log_file else "")
    return logger
