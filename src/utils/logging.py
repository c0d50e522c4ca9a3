"""Structured logging setup using structlog.

stdout carries the snapshot JSON, so log lines go to stderr unless a
stream is given.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog


def _json_from_env() -> bool:
    return os.environ.get("JSON_LOGS", "").strip().lower() in ("1", "true", "yes")


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog. JSON lines when `json_logs` (or JSON_LOGS=1), console otherwise."""
    use_json = _json_from_env() if json_logs is None else json_logs

    renderer = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def bind_run_context(**values) -> None:
    """Attach generator parameters to every log line of the current run."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
