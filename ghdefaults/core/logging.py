"""structlog setup.

Every module logs through ``structlog.get_logger(__name__)`` with context
as keyword arguments (owner, repo, installation_id, action, event_type).
Output is one JSON object per line in production and coloured console
lines when ``DEBUG`` is set. Lines written while a delivery is being
handled carry its ``request_id``.
"""

from __future__ import annotations

import logging
import sys

import structlog

from ghdefaults.core.middleware import get_request_id
from ghdefaults.core.sentry import redact

# Libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _inject_request_id(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _redact_secrets(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Mask values logged under a sensitive key such as ``token``."""
    event = event_dict.pop("event", None)
    redact(event_dict)
    if event is not None:
        event_dict["event"] = event
    return event_dict


def build_processors(debug: bool) -> list:
    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer()
    )
    return [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_request_id,
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog and stdlib logging for the process.

    Safe to call more than once; the last call wins.
    """
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=build_processors(debug),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through stdlib logging.
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
