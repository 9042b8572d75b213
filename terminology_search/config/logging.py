"""
Structured logging configuration for Terminology Search.

This module provides structured JSON logging using structlog, with a
search correlation ID that ties together every log line emitted while a
single search (or page change) is in flight.
"""

import logging
import sys
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog


@dataclass
class LoggingConfig:
    """Logging configuration."""

    suppressed_loggers: dict[str, str] = field(
        default_factory=lambda: {
            "httpx": "WARNING",
            "httpcore": "WARNING",
            "asyncio": "WARNING",
            "uvicorn.access": "WARNING",
            "websockets": "WARNING",
        }
    )
    search_id_length: int = 8
    colors: bool = True


# Default logging configuration
_logging_config = LoggingConfig()


@dataclass(frozen=True)
class SearchContext:
    """Search whose work is in progress in the current task."""

    search_id: str
    surface: str
    token: int


# Context variable for the search in flight
search_context_var: ContextVar[SearchContext | None] = ContextVar("search_context", default=None)


def bind_search(surface: str, token: int, search_id: str | None = None) -> SearchContext:
    """
    Mark the current task as running one search.

    Every log line emitted afterwards in the task (gateway requests, guard
    decisions, listener errors) carries the surface, the token serial and a
    short correlation ID. A page change of the same search gets a new ID.
    """
    context = SearchContext(
        search_id=search_id or str(uuid.uuid4())[: _logging_config.search_id_length],
        surface=surface,
        token=token,
    )
    search_context_var.set(context)
    return context


def add_search_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor to add the in-flight search to log events."""
    context = search_context_var.get()
    if context is not None:
        event_dict["search_id"] = context.search_id
        event_dict.setdefault("surface", context.surface)
        event_dict.setdefault("token", context.token)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARN, ERROR)
        json_format: If True, output JSON logs; otherwise, use console format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Callable] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_search_context,
    ]

    if json_format:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=_logging_config.colors),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    for logger_name, logger_level in _logging_config.suppressed_loggers.items():
        suppressed_level = getattr(logging, logger_level.upper(), logging.WARNING)
        logging.getLogger(logger_name).setLevel(suppressed_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
