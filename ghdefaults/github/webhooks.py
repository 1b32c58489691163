"""GitHub webhook verification and decoding.

Verifies webhook signatures and decodes payloads into typed events.
The webhook secret is shared between GitHub and the App; it must never
be logged or exposed.

Signature verification uses HMAC-SHA256 as specified by GitHub:
https://docs.github.com/en/webhooks/using-webhooks/validating-webhook-deliveries
"""

import hashlib
import hmac

from pydantic import ValidationError

from ghdefaults.errors import AuthConfigInvalid, InvalidSignature, MalformedPayload
from ghdefaults.github.schemas import (
    InstallationEvent,
    OtherEvent,
    RepositoryEvent,
    WebhookEvent,
)

# Event types decoded into a typed model; everything else becomes OtherEvent.
_EVENT_MODELS = {
    "installation": InstallationEvent,
    "repository": RepositoryEvent,
}

SIGNATURE_SCHEME = "sha256"


def _body_digest(payload_body: bytes, secret: str) -> bytes:
    mac = hmac.new(secret.encode("utf-8"), payload_body, hashlib.sha256)
    return mac.hexdigest().encode("ascii")


def verify_webhook_signature(
    payload_body: bytes, signature_header: str, secret: str
) -> bool:
    """Check X-Hub-Signature-256 (``sha256=<hex HMAC of the body>``).

    Any header that is not exactly that, including one carrying
    non-ASCII text, is a mismatch.

    Raises:
        AuthConfigInvalid: If no secret is configured.
    """
    if not secret:
        raise AuthConfigInvalid("GITHUB_WEBHOOK_SECRET not configured")

    scheme, sep, received = signature_header.partition("=")
    if scheme != SIGNATURE_SCHEME or not sep:
        return False

    # compare_digest rejects non-ASCII str; bytes compare in constant time.
    return hmac.compare_digest(
        _body_digest(payload_body, secret),
        received.encode("utf-8", "surrogateescape"),
    )


def parse_webhook_event(event_type: str, payload_body: bytes) -> WebhookEvent:
    """Decode a verified payload according to its X-GitHub-Event type.

    Raises:
        MalformedPayload: If the body is not valid JSON for the event type.
    """
    model = _EVENT_MODELS.get(event_type)
    if model is None:
        return OtherEvent(event_type=event_type)

    try:
        return model.model_validate_json(payload_body)
    except ValidationError as exc:
        raise MalformedPayload(
            f"{event_type} payload: {exc.error_count()} validation error(s)"
        ) from exc


def verify_and_parse(
    payload_body: bytes,
    signature_header: str,
    event_type: str,
    secret: str,
) -> tuple[str, WebhookEvent]:
    """Authenticate a delivery, then decode it.

    The body is only parsed after the signature has been checked.

    Returns:
        The event type label and the decoded event.

    Raises:
        InvalidSignature: Signature missing or wrong.
        MalformedPayload: Signature fine, payload undecodable.
        AuthConfigInvalid: No webhook secret configured.
    """
    if not verify_webhook_signature(payload_body, signature_header, secret):
        raise InvalidSignature("signature does not match payload")

    if not event_type:
        raise MalformedPayload("missing X-GitHub-Event header")

    return event_type, parse_webhook_event(event_type, payload_body)
