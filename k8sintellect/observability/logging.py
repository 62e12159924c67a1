"""Structured logging for the analyze CLI and the API server.

Both entry points log through structlog to stderr; stdout is reserved for
``k8sintellect analyze`` results. The server emits one JSON object per line
for log shippers, while an interactive ``analyze`` run gets the
human-readable console renderer.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _renderer(fmt: str) -> Any:
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(level: str = "info", *, fmt: str = "json") -> None:
    """Configure structlog at *level*, rendering as ``json`` or ``console``.

    Unknown levels fall back to info and unknown formats to json.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
