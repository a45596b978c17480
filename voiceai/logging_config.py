"""
Structured logging configuration using structlog wrapping stdlib.

Library modules log through ``logging.getLogger(__name__)``; this module only
decides how those records are rendered. JSON output suits log shippers,
console output suits a terminal.

Usage:
    from voiceai.logging_config import setup_logging
    setup_logging()

Environment:
    VOICEAI_LOG_LEVEL   Level name (default INFO)
    VOICEAI_LOG_FORMAT  "json" for JSON lines, anything else for console
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog

NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route all records to ``stream`` (stderr by default).

    httpx and httpcore log every request at INFO; they are held at WARNING
    unless the level is DEBUG.
    """
    if level is None:
        level = os.environ.get("VOICEAI_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("VOICEAI_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from plain stdlib loggers go through the same processors
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
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
        )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
