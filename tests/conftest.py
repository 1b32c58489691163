"""Shared test fixtures for the ghdefaults test suite.

Settings are overridden per app instance so no test depends on the
environment. GitHub is never contacted: tests patch the functions in
``ghdefaults.github.client``.
"""

import hashlib
import hmac
import json
from collections.abc import AsyncGenerator

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from ghdefaults.core.config import Settings, get_settings
from ghdefaults.main import create_app

TEST_WEBHOOK_SECRET = "test-webhook-secret"
TEST_APP_ID = 12345
TEST_INSTALLATION_ID = 999


def _generate_test_private_key() -> str:
    """Generate a valid RSA private key for testing."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    return pem.decode()


TEST_PRIVATE_KEY = _generate_test_private_key()


def sign(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Compute the X-Hub-Signature-256 value GitHub would send."""
    sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"sha256={sig}"


def installation_payload(
    owner: str,
    repos: list[dict],
    action: str = "created",
    installation_id: int = TEST_INSTALLATION_ID,
) -> dict:
    return {
        "action": action,
        "installation": {
            "id": installation_id,
            "account": {"login": owner, "id": 1},
        },
        "repositories": [
            {"id": i, "full_name": f"{owner}/{r['name']}", **r}
            for i, r in enumerate(repos, 1)
        ],
    }


def repository_payload(
    owner: str,
    name: str,
    action: str = "created",
    fork: bool = False,
    installation_id: int = TEST_INSTALLATION_ID,
) -> dict:
    return {
        "action": action,
        "repository": {
            "id": 42,
            "name": name,
            "full_name": f"{owner}/{name}",
            "fork": fork,
            "owner": {"login": owner, "id": 1},
        },
        "installation": {"id": installation_id},
    }


def webhook_request(event_type: str, payload: dict, secret: str = TEST_WEBHOOK_SECRET) -> dict:
    """Build kwargs for ``client.post("/webhook", **kwargs)``."""
    body = json.dumps(payload).encode()
    return {
        "content": body,
        "headers": {
            "X-Hub-Signature-256": sign(body, secret),
            "X-GitHub-Event": event_type,
            "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
            "Content-Type": "application/json",
        },
    }


def _override_settings() -> Settings:
    return Settings(
        github_app_id=TEST_APP_ID,
        github_private_key=TEST_PRIVATE_KEY,
        github_webhook_secret=TEST_WEBHOOK_SECRET,
        sentry_dsn="",
        debug=False,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app():
    """A FastAPI app with test settings."""
    test_app = create_app()
    test_app.dependency_overrides[get_settings] = _override_settings
    return test_app


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client wired to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
