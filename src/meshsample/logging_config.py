"""
Logging setup for scripts and command-line tools built on meshsample.

Library modules only create ``logging.getLogger(__name__)`` loggers and never
attach handlers on import; an entry point calls :func:`setup_logging` once.
"""
import logging
import sys
from typing import Optional

from meshsample.config import LOG_FORMAT, LOG_DATE_FORMAT


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler, and optionally a file handler, to the ``meshsample`` logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Level for the logger and its handlers.
        log_file: Path of a log file to overwrite, or None for console only.

    Returns:
        The ``meshsample`` logger.
    """
    logger = logging.getLogger("meshsample")
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging to stdout{f' and {log_file}' if log_file else ''} at level {logging.getLevelName(level)}.")
    return logger
