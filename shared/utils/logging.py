"""
Structured logging setup for the challenge trigger job.

Provides consistent logging configuration with structured output
and run-scoped correlation IDs.
"""

import logging
import sys
from typing import Optional
import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    service_name: str,
    log_level: str = "info",
    format_type: str = "json"
) -> None:
    """
    Setup structured logging for the job.

    Args:
        service_name: Name of the service
        log_level: Logging level (debug, info, warning, error)
        format_type: Output format (json, console)
    """
    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper())
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Every event emitted during this process carries the service name
    structlog.contextvars.bind_contextvars(service=service_name)


def get_run_id() -> Optional[str]:
    """Return the run correlation ID bound for the current invocation, if any."""
    return structlog.contextvars.get_contextvars().get("run_id")


def bind_run_id(run_id: str) -> None:
    """Attach the run correlation ID to every subsequent log event."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def clear_run_id() -> None:
    """Drop the run correlation ID once an invocation finishes."""
    structlog.contextvars.unbind_contextvars("run_id")
