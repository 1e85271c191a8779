"""Structured logging setup for Logquartz."""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import structlog

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_FILE = Path.home() / ".cache" / "logquartz" / "logs" / "logquartz.log"


def resolve_log_level(verbose: bool = False) -> str:
    """Pick the log level from LOGQUARTZ_LOG_LEVEL, forcing DEBUG when verbose.

    Unknown level names fall back to INFO.
    """
    if verbose:
        return "DEBUG"
    level = os.environ.get("LOGQUARTZ_LOG_LEVEL", "INFO").upper()
    return level if level in VALID_LEVELS else "INFO"


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure structlog for JSON logging to ~/.cache/logquartz/logs/logquartz.log.

    Log level can be controlled via the LOGQUARTZ_LOG_LEVEL environment variable:
    - DEBUG: skipped sources, query fallbacks, per-file writes
    - INFO: run phases and their counts (default)
    - WARNING: missing git history, unreadable config.edn
    - ERROR: per-document failures

    With ``verbose`` the level is DEBUG and events are rendered for humans
    on stderr instead of written to the log file.

    Example:
        # Enable debug logging
        export LOGQUARTZ_LOG_LEVEL=DEBUG
        logquartz build --input ~/notes

        # View logs with jq for readability:
        tail -f ~/.cache/logquartz/logs/logquartz.log | jq .
    """
    log_level = resolve_log_level(verbose)

    if verbose:
        renderer = structlog.dev.ConsoleRenderer()
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)
    else:
        log_file = log_file or DEFAULT_LOG_FILE
        log_file.parent.mkdir(parents=True, exist_ok=True)
        renderer = structlog.processors.JSONRenderer()
        logger_factory = structlog.WriteLoggerFactory(file=open(log_file, "a"))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level)),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("pages_published", published=120, skipped=3)
    """
    return structlog.get_logger(name)
