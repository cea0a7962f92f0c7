"""Structured logging configuration using structlog.

JSON lines in production, colored console output in development. Every
entry is stamped with the service name and environment; entries emitted
while serving an HTTP request also carry the request_id and caller bound
by the API middleware. Records from the standard library (uvicorn) go
through the same processor chain.

Usage:
    from title_escrow.logging_config import setup_logging, get_logger
    setup_logging(log_level="DEBUG", json_logs=False)
    logger = get_logger(__name__)
    logger.info("escrow.listed", title_id=1, purchase_price=10)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

SERVICE_NAME = "title-escrow"


def _service_stamper(env: str) -> structlog.types.Processor:
    def stamp(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("env", env)
        return event_dict

    return stamp


def setup_logging(
    log_level: str = "DEBUG",
    json_logs: bool = False,
    env: str = "development",
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Standard Python log level string (DEBUG, INFO, WARNING, etc.)
        json_logs: If True, output JSON (for production). If False, colored console.
        env: Deployment environment recorded on every entry.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _service_stamper(env),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.DEBUG))

    # uvicorn installs its own handlers; let its records reach the root handler instead.
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True
    for noisy_logger in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structured logger, usually named after the calling module."""
    return structlog.get_logger(name)
