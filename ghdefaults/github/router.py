"""GitHub webhook endpoint.

The endpoint is public (no auth dependency) but verifies the
X-Hub-Signature-256 header to confirm the payload came from GitHub.

Response bodies are fixed strings per status class; the cause of a
failure is only logged server-side. Processing is abandoned, and its
outbound GitHub calls cancelled, when the deadline passes or the
sender disconnects.
"""

import asyncio
from typing import Mapping

import structlog
from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import PlainTextResponse

from ghdefaults.core.config import Settings, get_settings
from ghdefaults.errors import AuthConfigInvalid, InvalidSignature, MalformedPayload
from ghdefaults.github.dispatch import Outcome, dispatch
from ghdefaults.github.webhooks import verify_and_parse
from ghdefaults.policy import RepositorySettings, get_policy

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["github"])

# Seconds between checks for a dropped connection while processing.
DISCONNECT_POLL_INTERVAL = 0.5


def _internal_error() -> PlainTextResponse:
    return PlainTextResponse(
        "internal error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


@router.post("/webhook", response_class=PlainTextResponse)
async def handle_webhook(
    request: Request,
    x_hub_signature_256: str = Header(default=""),
    x_github_event: str = Header(default=""),
    settings: Settings = Depends(get_settings),
    policy: Mapping[str, RepositorySettings] = Depends(get_policy),
) -> PlainTextResponse:
    """Handle incoming GitHub App webhook events.

    Verifies the HMAC signature before decoding. Handles:
    - installation (created): apply defaults to every listed repository
    - repository (created/transferred): apply defaults to that repository
    Everything else is acknowledged and ignored.
    """
    body = await request.body()
    log = logger.bind(event_type=x_github_event)

    try:
        _, event = verify_and_parse(
            body, x_hub_signature_256, x_github_event, settings.github_webhook_secret
        )
    except (InvalidSignature, MalformedPayload) as exc:
        log.warning("invalid payload", error=str(exc))
        return PlainTextResponse(
            "invalid payload", status_code=status.HTTP_400_BAD_REQUEST
        )
    except AuthConfigInvalid as exc:
        log.error("webhook secret unavailable", error=str(exc))
        return _internal_error()

    work = asyncio.ensure_future(
        asyncio.wait_for(dispatch(event, policy), timeout=settings.webhook_timeout)
    )
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [task for task in (work, watcher) if not task.done()]
        for task in pending:
            task.cancel()
        # Nothing outlives the request.
        await asyncio.gather(*pending, return_exceptions=True)

    if work.cancelled():
        log.warning("process event", error="client disconnected")
        return _internal_error()

    try:
        outcome = work.result()
    except asyncio.TimeoutError:
        log.error("process event", error="timed out", timeout=settings.webhook_timeout)
        return _internal_error()

    if outcome is Outcome.PARTIALLY_FAILED:
        log.error("process event", outcome=outcome.value)
        return _internal_error()

    if outcome is Outcome.IGNORED:
        log.debug("processed event", outcome=outcome.value)
    else:
        log.info("processed event", outcome=outcome.value)
    return PlainTextResponse("ok")
