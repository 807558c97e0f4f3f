"""Log routing for the depgraph CLI.

Logs always go to stderr; stdout carries only command results, so
``depgraph --json cycles all | jq`` stays parseable with ``-v`` on.
``--log-json`` turns the log lines themselves into JSON objects. The
``depgraph`` logger tree drops to DEBUG under ``--verbose`` while
SQLAlchemy stays at WARNING.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

HANDLER_NAME = "depgraph"
QUIET_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool")


def _pre_chain() -> list[structlog.types.Processor]:
    """Processors shared by structlog loggers and stdlib ``logging`` records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def build_handler(*, log_json: bool = False, stream: TextIO | None = None) -> logging.Handler:
    """A stderr handler rendering both structlog and stdlib records."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=_final_processors(log_json),
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install depgraph's stderr handler, replacing one from an earlier call.

    Handlers installed by anything else (pytest's capture, an embedding
    application) are left in place.
    """
    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(build_handler(log_json=log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("depgraph").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
