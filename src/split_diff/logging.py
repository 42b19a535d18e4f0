"""Structured logging setup for the CLI and TUI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def parse_level(level: str) -> int:
    """Map a level name to a stdlib level.

    Raises:
        ValueError: If the name is not a known level.
    """
    try:
        return _LEVEL_MAP[level.upper()]
    except KeyError:
        valid = ", ".join(name.lower() for name in _LEVEL_MAP)
        msg = f"Invalid log level '{level}'. Choose from: {valid}"
        raise ValueError(msg) from None


def configure_logging(
    *,
    level: str = "WARNING",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog through stdlib logging to ``stream`` (stderr by default)."""
    default_level = parse_level(level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(default_level)
