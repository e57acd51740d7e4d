"""Logging utilities for enginerun.

This module provides a standalone structlog logger factory writing JSON or
text records to a file or to stderr. Each logger is self-contained and
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


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, ENGINERUN_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("ENGINERUN_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    log_file: str = "",
    **context: object,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    The log level can be overridden by environment variables:
    - ENGINERUN_DEBUG: If set, enables DEBUG level logging regardless of config

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file (appended to). Writes to stderr if empty.
        **context: Values bound to every log entry.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = _log_level_from_string(level, respect_env=True)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.WriteLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        # Add dict_tracebacks for structured exception logging in JSON
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(
            structlog.dev.ConsoleRenderer(colors=not log_file and sys.stderr.isatty())
        )

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    # Use wrap_logger for standalone logger creation (doesn't affect global config)
    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )

    if context:
        return logger.bind(**context)
    return logger
