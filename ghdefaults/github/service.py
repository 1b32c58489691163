"""GitHub service layer for repository reconciliation.

Orchestrates the multi-step settings workflow:
installation token -> settings patch -> (forks) disable Actions.

This layer is the boundary between the policy table and the GitHub API
client. It translates client failures into ReconcileError subclasses
carrying owner/repo/installation context.
"""

from typing import Mapping

import httpx
import structlog

from ghdefaults.errors import (
    APIUpdateFailed,
    AuthConfigInvalid,
    AuthFailed,
    TokenRequestFailed,
    UnknownOwner,
)
from ghdefaults.github import client as github_client
from ghdefaults.policy import RepositorySettings

logger = structlog.get_logger(__name__)


async def set_defaults(
    installation_id: int,
    owner: str,
    repo: str,
    fork: bool,
    policy: Mapping[str, RepositorySettings],
) -> None:
    """Apply the owner's default settings to one repository.

    Steps:
    1. Look up the owner's settings document
    2. Mint an installation token
    3. Patch the repository with exactly the fields the document sets
    4. For forks, disable GitHub Actions

    Steps 3 and 4 are not transactional. If 4 fails the settings from 3
    stay applied and the repository is still reported as failed.

    Raises:
        UnknownOwner: Owner has no policy entry; nothing was called.
        AuthFailed: No installation token could be minted.
        APIUpdateFailed: The settings patch or Actions call failed.
    """
    log = logger.bind(
        owner=owner, repo=repo, installation_id=installation_id, fork=fork
    )

    defaults = policy.get(owner)
    if defaults is None:
        raise UnknownOwner("owner not managed", owner, repo, installation_id)

    try:
        installation_token = await github_client.get_installation_token(installation_id)
    except (AuthConfigInvalid, TokenRequestFailed) as exc:
        raise AuthFailed(str(exc), owner, repo, installation_id) from exc

    token = installation_token.token

    try:
        await github_client.edit_repository(token, owner, repo, defaults.to_patch())
    except httpx.HTTPError as exc:
        raise APIUpdateFailed(
            f"update repo settings: {_describe(exc)}", owner, repo, installation_id
        ) from exc
    log.info("repo settings applied")

    if fork:
        try:
            await github_client.disable_actions(token, owner, repo)
        except httpx.HTTPError as exc:
            raise APIUpdateFailed(
                f"disable actions: {_describe(exc)}", owner, repo, installation_id
            ) from exc
        log.info("actions disabled on fork")


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    return type(exc).__name__
