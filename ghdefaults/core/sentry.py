"""Sentry error reporting, off unless SENTRY_DSN is set.

Events pass through ``_scrub_secrets`` before leaving the process. The
same ``redact`` walk is used by the log pipeline, so a field named
``token`` or ``webhook_secret`` is masked in both places.
"""

from __future__ import annotations

from typing import Any

import structlog

logger = structlog.get_logger(__name__)

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = frozenset(
    {"secret", "token", "private_key", "password", "dsn", "authorization", "signature"}
)


def is_sensitive_key(key: str) -> bool:
    key = key.lower().replace("-", "_")
    return any(sensitive in key for sensitive in _SENSITIVE_KEYS)


def redact(value: Any) -> Any:
    """Mask sensitive keys in *value* in place, descending into dicts and lists."""
    if isinstance(value, dict):
        for key in list(value):
            if isinstance(key, str) and is_sensitive_key(key):
                value[key] = REDACTED
            else:
                redact(value[key])
    elif isinstance(value, list):
        for item in value:
            redact(item)
    return value


def _scrub_secrets(event: dict[str, Any], hint: Any) -> dict[str, Any]:
    """before_send hook covering extras, request data/headers and breadcrumbs."""
    redact(event.get("extra", {}))
    request = event.get("request", {})
    for section in ("data", "headers"):
        redact(request.get(section))
    breadcrumbs = event.get("breadcrumbs", {})
    if isinstance(breadcrumbs, dict):
        redact(breadcrumbs.get("values", []))
    return event


def init_sentry(dsn: str, environment: str = "production") -> None:
    """Initialise sentry-sdk with the FastAPI and httpx integrations.

    An empty or blank DSN leaves Sentry disabled.
    """
    if not dsn.strip():
        logger.debug("sentry disabled", reason="no dsn")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.httpx import HttpxIntegration

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[FastApiIntegration(), HttpxIntegration()],
        traces_sample_rate=0.1,
        # Webhook bodies and headers stay out of events.
        send_default_pii=False,
        before_send=_scrub_secrets,
    )
    logger.info("sentry enabled", environment=environment)
