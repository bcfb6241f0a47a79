"""Structured logging for subregistry.

Stores and the schema resolver emit structlog events named after what
happened (``schema_resolved``, ``subscription_inserted``, ...) with the
keyspace, table and subscription attached as key-value pairs.

Usage:
    from subregistry.logging import configure_logging, get_logger

    configure_logging(json_format=True)
    logger = get_logger(__name__)
    logger.info("subscription_inserted", subscription="svc-1", ttl=30)

Anything bound with ``bind_context`` (a request id, say) is added to every
event logged from the same context.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

_configured = False


def configure_logging(json_format: bool = False, level: int = logging.INFO) -> None:
    """Configure structlog for subregistry events.

    Args:
        json_format: Render one JSON object per line instead of console output.
        level: Minimum level; store writes log at DEBUG, schema events at INFO.
    """
    global _configured

    renderer: Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> Any:
    """Get a logger, applying the default configuration on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key-value pairs to every event logged from this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def store_logger(keyspace: str, table: str) -> Any:
    """Logger with the subscription table's location bound."""
    return get_logger("subregistry.store").bind(keyspace=keyspace, table=table)
