"""Logging setup for the aljabar engine and its command line.

Each engine module (parser, optimizer, expansion, factorization, solver,
numeric, ...) logs under ``aljabar.<module>``. Guard trips such as the
rewrite depth limit, the division step limit or an expansion that grows
past its term cap are reported at DEBUG, so they stay silent unless the
command line is run with ``--log-level DEBUG``.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

ROOT_LOGGER = "aljabar"


class StructuredFormatter(logging.Formatter):
    """One line per record: timestamp, level, engine module and message."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        module = record.name.removeprefix(f"{ROOT_LOGGER}.")
        line = f"{timestamp} [{record.levelname}] {module}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Attach handlers to the ``aljabar`` logger.

    Calling it again replaces the previous handlers, so the command line
    can be invoked repeatedly in one process (as the tests do).

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names fall
            back to WARNING.
        log_file: Also append records to this file.

    Returns:
        The ``aljabar`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    return logger


def get_logger(module: str) -> logging.Logger:
    """Logger for an engine module, e.g. ``get_logger("solver")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{module}")
