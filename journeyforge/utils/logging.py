"""
Logging for JourneyForge.

Every module logs below the ``journeyforge`` logger. The CLI configures it
once per invocation from ``JourneyForgeConfig.log_level`` and, when
``log_to_file`` is set, also writes ``journeyforge.log`` under the data
directory.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

ROOT_LOGGER_NAME = "journeyforge"
LOG_FILENAME = "journeyforge.log"

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class JourneyForgeFormatter(logging.Formatter):
    """``[time] LEVEL [module] message`` with the ``journeyforge.`` prefix dropped.

    Colours are for terminals only; the file handler gets plain text.
    """

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%d %H:%M:%S")
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{_LEVEL_COLORS.get(record.levelno, '')}{level}{_RESET}"
        name = record.name.removeprefix(f"{ROOT_LOGGER_NAME}.")

        line = f"[{timestamp}] {level} [{name:20}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    log_dir: str | Path | None = None,
    console_output: bool = True,
    file_output: bool = True,
) -> None:
    """(Re)configure the ``journeyforge`` logger; earlier handlers are closed.

    Args:
        level: Minimum level for the logger and its handlers
        log_dir: Directory for ``journeyforge.log``; file output is skipped without one
        console_output: Log to stderr
        file_output: Log to ``log_dir``
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = []
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JourneyForgeFormatter(use_colors=True))
        handlers.append(console_handler)
    if file_output and log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / LOG_FILENAME, encoding="utf-8")
        file_handler.setFormatter(JourneyForgeFormatter(use_colors=False))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger below ``journeyforge``; ``get_logger("extraction.engine")``."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    details: dict | None = None,
    level: int = logging.INFO,
) -> None:
    """Log ``operation: key=value, ...``."""
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        logger.log(level, f"{operation}: {detail_str}")
    else:
        logger.log(level, operation)


def log_error(
    logger: logging.Logger,
    operation: str,
    error: Exception,
    context: dict | None = None,
) -> None:
    """Log a failed command with the exception type and its context.

    The traceback goes out at DEBUG only, so the console stays readable.
    """
    msg = f"FAILED {operation}: {type(error).__name__}: {error}"
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        msg = f"{msg} | {context_str}"
    logger.error(msg)
    logger.debug("Traceback for %s", operation, exc_info=error)


# Console-only setup until the CLI applies the configured level
setup_logging(level="WARNING", console_output=True, file_output=False)
