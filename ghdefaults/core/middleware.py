"""Request ID middleware.

Each request is tagged with an ID that the log pipeline attaches to every
line. For webhook deliveries the ID is GitHub's ``X-GitHub-Delivery``
GUID, which is what the App settings page lists under "Recent
Deliveries".
"""

import uuid
from contextvars import ContextVar
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Checked in order; the first one present wins.
REQUEST_ID_HEADERS = ("X-GitHub-Delivery", "X-Request-ID")

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Return the ID of the request being handled, or "" outside one."""
    return _request_id_var.get()


def _pick_request_id(request: Request) -> str:
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind the request ID for the request and echo it as X-Request-ID."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = _pick_request_id(request)

        token = _request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
