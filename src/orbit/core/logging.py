"""
Logging configuration.

Everything logs under the "orbit" namespace. Warnings and errors reach stderr
so CLI output on stdout stays parseable; the log file records everything at
the configured level, down to per-call traces with --debug.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the orbit logger: stderr for warnings, optional file at level.

    Calling again replaces the handlers from the previous call.
    """
    logger = logging.getLogger("orbit")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console.setLevel(logging.WARNING)
    logger.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under orbit, e.g. get_logger("memory.store")."""
    return logging.getLogger(f"orbit.{name}")
