"""GitHub API client for installation-scoped operations.

Uses httpx for async HTTP calls. Apart from the token exchange itself,
every call takes an installation access token obtained via the GitHub
App JWT exchange.

Three operations are needed to reconcile a repository:
1. Exchange the App JWT for an installation token
2. Patch the repository settings
3. Disable Actions (forks only)
"""

import httpx

from ghdefaults.core.config import get_settings
from ghdefaults.errors import TokenRequestFailed
from ghdefaults.github.auth import create_app_jwt
from ghdefaults.github.schemas import InstallationToken

GITHUB_API_BASE = "https://api.github.com"


async def get_installation_token(installation_id: int) -> InstallationToken:
    """Exchange a GitHub App JWT for an installation access token.

    Installation tokens are scoped to the repos the owner granted
    access to and expire after 1 hour. A new token is minted on every
    call; callers that want reuse must cache by installation ID.

    Raises:
        AuthConfigInvalid: App credentials missing or unusable.
        TokenRequestFailed: The exchange failed (transport or non-2xx).
    """
    app_jwt = create_app_jwt()

    try:
        async with httpx.AsyncClient(timeout=get_settings().github_timeout) as client:
            response = await client.post(
                f"{GITHUB_API_BASE}/app/installations/{installation_id}/access_tokens",
                headers=_auth_headers(app_jwt),
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TokenRequestFailed(
            f"create installation token: HTTP {exc.response.status_code}",
            installation_id=installation_id,
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise TokenRequestFailed(
            f"create installation token: {type(exc).__name__}",
            installation_id=installation_id,
        ) from exc

    try:
        return InstallationToken.model_validate(response.json())
    except ValueError as exc:
        # Not chained: the validation error can quote the response body.
        raise TokenRequestFailed(
            f"create installation token: unexpected response ({type(exc).__name__})",
            installation_id=installation_id,
            status_code=response.status_code,
        ) from None


async def edit_repository(token: str, owner: str, repo: str, settings: dict) -> None:
    """PATCH /repos/{owner}/{repo}

    Only the keys present in *settings* are changed on GitHub. The
    response body is not read.
    """
    async with httpx.AsyncClient(timeout=get_settings().github_timeout) as client:
        response = await client.patch(
            f"{GITHUB_API_BASE}/repos/{owner}/{repo}",
            headers=_auth_headers(token),
            json=settings,
        )
        response.raise_for_status()


async def disable_actions(token: str, owner: str, repo: str) -> None:
    """PUT /repos/{owner}/{repo}/actions/permissions with enabled=false."""
    async with httpx.AsyncClient(timeout=get_settings().github_timeout) as client:
        response = await client.put(
            f"{GITHUB_API_BASE}/repos/{owner}/{repo}/actions/permissions",
            headers=_auth_headers(token),
            json={"enabled": False},
        )
        response.raise_for_status()


def _auth_headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
