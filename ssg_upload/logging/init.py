from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Every line is `LABEL message` with labels DEBUG|INFO|WARN|ERROR|SUMMARY.
The SUMMARY level carries the one-line run summary printed by the CLI.
Library modules log through logging.getLogger(__name__); their records reach
the console handler because the application logger is the package root
"ssg_upload".
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "get_logger",
    "log_summary",
    "reset_logging",
    "setup_logging",
]

LOGGER_NAME = "ssg_upload"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter producing `LABEL message` lines."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the application logger (idempotent).

    Output goes to stdout; propagation to the root logger is disabled to
    avoid duplicate lines. Passing ``debug=True`` on a later call lowers the
    level of the already configured logger.
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        if debug:
            _logger.setLevel(level)
            for h in _logger.handlers:
                h.setLevel(level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
    _logger = None
