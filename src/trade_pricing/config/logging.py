"""
Structured logging configuration using structlog.

Every pricing decision worth auditing (price source, shipping misses,
VAT treatment) is logged as key-value events. Events logged while one order
is priced carry its company and destination.
"""
from __future__ import annotations

import logging
import sys
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from structlog.typing import EventDict, Processor, WrappedLogger


def decimals_as_strings(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Render Decimal money as exact strings (JSON has no decimal type)."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def configure_logging(
    *,
    json_format: bool = False,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_format: Use JSON output (for log aggregation) instead of console format.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        decimals_as_strings,
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    level = logging.getLevelName(log_level.upper())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn logs through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def quote_context(company_id: str, destination: str) -> AbstractContextManager:
    """Bind the company and destination to every event logged inside the block."""
    return structlog.contextvars.bound_contextvars(company_id=company_id, destination=destination)
