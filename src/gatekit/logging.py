"""Structured logging for Gatekit.

Gatekit modules only ask structlog for a logger; importing the package
configures nothing. Applications that want Gatekit's own rendering call
``configure_logging()`` once at startup:

    from gatekit.logging import configure_logging

    configure_logging(level="DEBUG", fmt="console")

Defaults come from GATEKIT_LOG_LEVEL and GATEKIT_LOG_FORMAT=json|console.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import IO, Any

import structlog

SENSITIVE_KEYS = frozenset({
    "password", "secret", "token", "api_key", "apikey",
    "authorization", "auth", "credential", "cookie",
})

REDACTED = "[REDACTED]"

HANDLER_NAME = "gatekit.structlog"

logging.getLogger("gatekit").addHandler(logging.NullHandler())


def _is_sensitive(key: object) -> bool:
    return str(key).lower() in SENSITIVE_KEYS


def redact_secrets(logger: Any, method: str, event_dict: dict) -> dict:
    """Mask secret fields, one level deep inside header-like mappings."""
    for key, value in list(event_dict.items()):
        if _is_sensitive(key):
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if _is_sensitive(k) else v
                for k, v in value.items()
            }
    return event_dict


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Route structlog through stdlib logging and render ``gatekit`` records.

    Calling it again replaces the handler installed by the previous call.
    Returns the installed handler.
    """
    level_name = (level or os.getenv("GATEKIT_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("GATEKIT_LOG_FORMAT", "json")).lower()
    numeric_level = getattr(logging, level_name, logging.INFO)

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]
    if fmt == "console":
        renderer: Any = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger("gatekit")
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)
    return handler
