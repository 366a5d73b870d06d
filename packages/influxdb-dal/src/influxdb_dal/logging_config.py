"""structlog setup for processes embedding the adapter."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

APP_NAME = "influxdb-dal"


def _add_app_context(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """
    Tag every record with the library name.
    """
    event_dict["app"] = APP_NAME
    return event_dict


def setup_logging(level: str = "INFO", *, json_logs: bool = True) -> None:
    """
    Configure structlog + stdlib logging.

    Call this once from the process entry point; the library itself only
    ever calls `structlog.get_logger`.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
    )

    # httpx logs every request at INFO, which duplicates our own events
    logging.getLogger("httpx").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    processors = [
        structlog.contextvars.merge_contextvars,
        _add_app_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
