"""Structured logging for jira-test.

This module provides:
- Structured logging setup via structlog
- A module logger accessor for components that accept an injected logger
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

LOGGER_NAME = "jira_test"


def get_logger(name: str = LOGGER_NAME) -> BoundLogger:
    """Get a structlog logger.

    Args:
        name: Logger name, usually the calling module's ``__name__``.

    Returns:
        structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("jira_issue_fetched", key="PROJ-123")
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def configure_logging(
    *,
    log_level: str = "WARNING",
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for jira-test.

    Log output goes to stderr so that stdout stays reserved for the
    terminal report.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG")
    """
    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )


__all__ = ["LOGGER_NAME", "configure_logging", "get_logger"]
