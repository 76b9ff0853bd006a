"""Logging utilities for githistory.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs. Each logger is self-contained and
does not modify global structlog configuration.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

# ReturnLogger never writes; filtering at CRITICAL skips processing for the rest
_SILENT_LEVEL = logging.CRITICAL


def _get_log_level() -> int:
    """Get the log level from environment variables.

    Checks GITHISTORY_DEBUG first (sets DEBUG if present), then
    GITHISTORY_LOG_LEVEL. Defaults to INFO if neither is set.

    Returns:
        The logging level as an integer.
    """
    if getenv("GITHISTORY_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(getenv("GITHISTORY_LOG_LEVEL", "info").upper(), logging.INFO)


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, GITHISTORY_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("GITHISTORY_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def _create_logger(
    log_file_path: str | None,
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        log_file_path: Path to the log file (opened in append mode), or None
            to write to stderr.
        log_level: Override log level (uses env vars if not specified).
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = log_level if log_level is not None else _get_log_level()

    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.WriteLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def create_history_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
    component: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for githistory components.

    The log level is determined by (in order of precedence):
    1. GITHISTORY_DEBUG environment variable (if set, enables DEBUG level)
    2. The `level` parameter (if provided)
    3. GITHISTORY_LOG_LEVEL environment variable
    4. Default: INFO

    Args:
        level: Optional log level string (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file. Logs go to stderr if empty.
        component: Component name bound to all entries if provided.

    Returns:
        A FilteringBoundLogger instance.
    """
    effective_level: int | None = None
    if level is not None:
        effective_level = _log_level_from_string(level, respect_env=True)

    logger = _create_logger(
        log_file or None,
        log_level=effective_level,
        log_format=log_format,
    )

    if component:
        return logger.bind(component=component)
    return logger


def create_null_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger that discards every event.

    Used as the default when a component is constructed without a logger.

    Returns:
        A FilteringBoundLogger that never writes output.
    """
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(_SILENT_LEVEL),
            context_class=dict,
        ),
    )
