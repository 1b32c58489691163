"""ASGI application factory.

Routes:
  POST /webhook   GitHub App deliveries (see ``ghdefaults.github.router``)
  GET  /-/ready   readiness probe, always "ok" once the process serves
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from ghdefaults import __version__
from ghdefaults.core.config import get_settings
from ghdefaults.core.logging import configure_structlog
from ghdefaults.core.middleware import RequestIdMiddleware
from ghdefaults.core.sentry import init_sentry
from ghdefaults.github.router import router as github_router


def create_app() -> FastAPI:
    settings = get_settings()

    # Before anything logs.
    configure_structlog(debug=settings.debug)
    init_sentry(
        dsn=settings.sentry_dsn,
        environment="development" if settings.debug else "production",
    )

    _app = FastAPI(
        title="ghdefaults",
        description="GitHub App that applies default repository settings",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )
    _app.add_middleware(RequestIdMiddleware)

    @_app.get("/-/ready", response_class=PlainTextResponse, include_in_schema=False)
    async def ready() -> str:
        return "ok"

    _app.include_router(github_router)

    return _app


app = create_app()
