"""Centralized logging configuration.

Application modules log through ``loguru``. Standard library loggers used by
uvicorn, asyncpg and friends are routed into the same sinks so there is one
output stream with one format.
"""

import inspect
import logging
import sys

from loguru import logger

from .settings import Settings


# Modules that should only log warnings and above
QUIET_MODULES = [
    "asyncpg",
    "uvicorn.access",
]

# Modules that should only log errors
ERROR_ONLY_MODULES = [
    "httpx",
    "httpcore",
    "asyncio",
]


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller frame outside the logging module
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(settings: Settings, intercept_stdlib: bool = True) -> None:
    """Configure loguru sinks from settings.

    Replaces the default sink with a stderr sink at ``settings.log_level`` and,
    when ``settings.log_file`` is set, adds a rotating file sink.
    """
    level = settings.log_level.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=settings.log_format,
        backtrace=settings.debug,
        diagnose=settings.debug,
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level=level,
            format=settings.log_format,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            enqueue=True,
        )

    if intercept_stdlib:
        logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
        for module in QUIET_MODULES:
            set_module_level(module, "WARNING" if level != "DEBUG" else "DEBUG")
        for module in ERROR_ONLY_MODULES:
            set_module_level(module, "ERROR")

    logger.debug(f"Logging configured: level={level}, file={settings.log_file}")


def set_module_level(module_name: str, level: str) -> None:
    """Set log level for a standard library logger."""
    logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))
