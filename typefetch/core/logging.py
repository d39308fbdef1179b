"""Structured logging configuration — structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os
import sys
from typing import TextIO

import structlog


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    *,
    engine_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Arguments win over the environment:
        TYPEFETCH_LOG_LEVEL        — service/API log level (default: INFO)
        TYPEFETCH_ENGINE_LOG_LEVEL — typefetch.engine.* level (default: the service level)
        TYPEFETCH_LOG_FORMAT       — console | json (default: console)

    Records go to *stream*, stderr by default, so stdout stays free for
    ``typefetch fetch --json``.
    """
    log_level = (level or os.environ.get("TYPEFETCH_LOG_LEVEL", "INFO")).upper()
    engine_log_level = (
        engine_level or os.environ.get("TYPEFETCH_ENGINE_LOG_LEVEL") or log_level
    ).upper()
    log_format = (fmt or os.environ.get("TYPEFETCH_LOG_FORMAT", "console")).lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        # no colour codes when the stream is a pipe or a file
        renderer = structlog.dev.ConsoleRenderer(
            colors=_is_tty(stream if stream is not None else sys.stderr)
        )

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": stream if stream is not None else "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "typefetch": {"level": log_level},
                "typefetch.api": {"level": log_level},
                "typefetch.engine": {"level": engine_log_level},
                "uvicorn.access": {"level": "WARNING"},
                "uvicorn.error": {"level": "INFO"},
                "asyncio": {"level": "WARNING"},
            },
        }
    )


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())
