"""Logging utilities."""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as loguru_logger


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past logging internals so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logger(
    name: str = "repolingo",
    level: str = "INFO",
    log_file: Optional[str] = None
) -> "LoguruWrapper":
    """
    Set up logger with configuration.

    Library modules log through ``logging.getLogger(__name__)``; this routes
    those records into loguru sinks.

    Args:
        name: Root logger name to intercept
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Returns:
        Configured logger
    """
    loguru_logger.remove()

    loguru_logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            log_file,
            level=level.upper(),
            rotation="10 MB",
            retention="1 week"
        )

    std_logger = logging.getLogger(name)
    std_logger.handlers = [InterceptHandler()]
    std_logger.setLevel(getattr(logging, level.upper()))
    std_logger.propagate = False

    return LoguruWrapper(loguru_logger)


def get_logger() -> "LoguruWrapper":
    """Get the shared loguru logger."""
    return LoguruWrapper(loguru_logger)


class LoguruWrapper:
    """Wrapper for loguru to standard logging interface."""

    def __init__(self, logger):
        self._logger = logger

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        self._logger.exception(msg, *args, **kwargs)
