"""
Logging configuration for MediClear.

Uses structlog for structured JSON logging suitable for production.

Report text, images and model output must not reach the logs. Two
processors enforce this on every event:
- RedactReportFields replaces values of keys listed in
  settings.log_redacted_fields
- scrub_exception_inputs removes ``input_value=...`` fragments that
  validation errors copy into formatted tracebacks
"""

import logging
import re
import sys
from typing import Any, Iterable, Optional

import structlog
from structlog.types import EventDict, Processor

from app.config import settings

REDACTED = "[redacted]"

# Pydantic validation errors echo the rejected input before input_type
_INPUT_VALUE = re.compile(r"input_value=.*?(?=, input_type=|\]$)", re.DOTALL | re.MULTILINE)


class RedactReportFields:
    """Processor replacing report-bearing values with a placeholder."""

    def __init__(self, fields: Iterable[str]):
        self.fields = frozenset(fields)

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key in self.fields.intersection(event_dict):
            event_dict[key] = REDACTED
        return event_dict


def scrub_exception_inputs(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Remove echoed input values from a formatted exception."""
    exception = event_dict.get("exception")
    if isinstance(exception, str):
        event_dict["exception"] = _INPUT_VALUE.sub(f"input_value={REDACTED}", exception)
    return event_dict


def configure_logging(
    log_level: Optional[str] = None,
    json_format: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        json_format: Whether to output JSON (True) or console format (False)
    """
    level = log_level or settings.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        RedactReportFields(settings.redacted_log_fields),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        scrub_exception_inputs,
    ]

    if json_format:
        processors: list[Processor] = shared_processors + [
            structlog.processors.JSONRenderer()
        ]
    else:
        processors = shared_processors + [
            # Exceptions are already formatted and scrubbed above
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback
            )
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx/google-genai log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


def get_logger(name: str = "mediclear") -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name for identification

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# Configure logging on module import (can be reconfigured later)
configure_logging(
    log_level=settings.log_level,
    json_format=not settings.debug
)

logger = get_logger()
