#!/usr/bin/env python3
"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Optional, TextIO

import structlog

# Agent responses can be arbitrarily long; logged strings are clipped to this
MAX_LOGGED_VALUE_CHARS = 500


def _clip_long_values(_, __, event_dict: dict) -> dict:
    """Structlog processor that shortens oversized string values (raw responses, reasons)."""
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str) and len(value) > MAX_LOGGED_VALUE_CHARS:
            event_dict[key] = value[:MAX_LOGGED_VALUE_CHARS] + f"... ({len(value)} chars)"
    return event_dict


def setup_logging(json_mode: bool = False, level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Configure structlog and route it through the stdlib root logger.

    Args:
        json_mode: one JSON object per line instead of the console renderer.
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names fall back to INFO).
        stream: destination; stderr by default so CLI output on stdout stays parseable.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _clip_long_values,
    ]

    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdlib records from third-party libraries get the same treatment
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
