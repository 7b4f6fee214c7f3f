"""Loguru sinks for the hoop-rivals command line.

Library modules (the store, the report builder, the engine helpers) log
through ``logging.getLogger(__name__)`` and never import loguru. The CLI
calls :func:`setup_logging` once per invocation, which installs a console
sink, a dated file sink and a root stdlib handler that forwards every record
into loguru.

Example:
    >>> from hoop_rivals.logging import setup_logging
    >>> setup_logging(level="DEBUG", log_dir="logs", sql_echo=True)
    >>> logging.getLogger("hoop_rivals.data.store").info("Recorded 4 stat rows")
"""

from __future__ import annotations

import inspect
import logging
import sys
from pathlib import Path

from loguru import logger

LOG_FILE_PATTERN = "hoop_rivals_{time:YYYY-MM-DD}.log"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

# Emits each statement at INFO
SQL_LOGGER = "sqlalchemy.engine"


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path = "logs",
    rotation: str = "1 day",
    retention: str = "30 days",
    serialize: bool = True,
    sql_echo: bool = False,
) -> Path:
    """Install the console and file sinks.

    Replaces any sinks added earlier, so calling it again (as the CLI does on
    every invocation) never duplicates output.

    Args:
        level: Minimum level for both sinks.
        log_dir: Directory for the dated log files; created if missing.
        rotation: When to start a new file, e.g. "1 day" or "10 MB".
        retention: How long old files are kept.
        serialize: Write file records as JSON lines.
        sql_echo: Route SQLAlchemy's statement log through the sinks. Routing
            it here keeps SQL off stdout, where ``stats report --json``
            writes its document.

    Returns:
        The log directory.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / LOG_FILE_PATTERN,
        level=level,
        format=FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        serialize=serialize,
        enqueue=True,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    sql_level = logging.INFO if sql_echo else logging.WARNING
    logging.getLogger(SQL_LOGGER).setLevel(sql_level)
    return log_path


__all__ = ["InterceptHandler", "logger", "setup_logging"]
