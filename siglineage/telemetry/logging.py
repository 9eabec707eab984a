"""
SigLineage — Structured Logging

All logging via structlog, routed through stdlib logging so library
records and lineage decisions share one handler. Command output owns
stdout; logs always go to stderr (or a caller-supplied stream).
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import structlog

if TYPE_CHECKING:
    from siglineage.config import LoggingConfig

_HANDLER_NAME = "siglineage"


def _pre_chain() -> list[Any]:
    # Applied to structlog events and to foreign stdlib records alike.
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(config: LoggingConfig, stream: TextIO) -> Any:
    if config.format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def setup_logging(config: LoggingConfig, stream: TextIO | None = None) -> None:
    """
    Configure structured logging for the command line and embedding callers.

    Per-query decision events are debug level; ``filter_by_level`` drops
    them before any formatting work unless the configured level admits them.
    Calling again replaces the previous handler instead of stacking another.
    """
    stream = stream or sys.stderr
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            *_pre_chain(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config, stream),
        ],
    ))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
