"""Event classification and fan-out.

Decides, per delivery, whether an event warrants reconciliation:

- installation.created        -> every listed repository
- repository.created          -> that repository
- repository.transferred      -> that repository
- anything else               -> ignored

Repositories of one installation event are reconciled concurrently. One
repository failing never stops the others; any failure marks the whole
event as partially failed. Every repository task has finished by the time
``dispatch`` returns. Per-repository detail only goes to the logs.
"""

import asyncio
from enum import Enum
from typing import Mapping

import structlog

from ghdefaults.errors import ReconcileError, UnknownOwner
from ghdefaults.github.schemas import InstallationEvent, RepositoryEvent, WebhookEvent
from ghdefaults.github.service import set_defaults
from ghdefaults.policy import RepositorySettings

logger = structlog.get_logger(__name__)

REPOSITORY_ACTIONS = frozenset({"created", "transferred"})


class Outcome(str, Enum):
    IGNORED = "ignored"
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"


async def dispatch(
    event: WebhookEvent, policy: Mapping[str, RepositorySettings]
) -> Outcome:
    """Classify *event* and reconcile the repositories it names."""
    if isinstance(event, InstallationEvent):
        return await _installation_event(event, policy)
    if isinstance(event, RepositoryEvent):
        return await _repository_event(event, policy)

    logger.debug("ignoring event type", event_type=event.event_type)
    return Outcome.IGNORED


async def _installation_event(
    event: InstallationEvent, policy: Mapping[str, RepositorySettings]
) -> Outcome:
    log = logger.bind(
        owner=event.account_login,
        action=event.action,
        installation_id=event.installation_id,
    )

    if event.action != "created":
        log.debug("ignoring action")
        return Outcome.IGNORED

    if event.account_login not in policy:
        log.debug("ignoring owner", reason="unknown owner")
        return Outcome.IGNORED

    results = await asyncio.gather(
        *(
            _reconcile(
                event.installation_id,
                event.account_login,
                repo.name,
                repo.fork,
                policy,
            )
            for repo in event.repositories
        ),
        return_exceptions=True,
    )

    failed = 0
    for repo, result in zip(event.repositories, results):
        if isinstance(result, BaseException):
            log.error(
                "set defaults",
                repo=repo.name,
                error_type=type(result).__name__,
                exc_info=result,
            )
        if result is not True:
            failed += 1

    if failed:
        log.error(
            "errors setting repo defaults",
            failed=failed,
            total=len(results),
        )
        return Outcome.PARTIALLY_FAILED

    log.info("installation reconciled", repositories=len(results))
    return Outcome.SUCCEEDED


async def _repository_event(
    event: RepositoryEvent, policy: Mapping[str, RepositorySettings]
) -> Outcome:
    log = logger.bind(
        owner=event.owner_login,
        repository=event.full_name,
        action=event.action,
        installation_id=event.installation_id,
    )

    if event.action not in REPOSITORY_ACTIONS:
        log.debug("ignoring action")
        return Outcome.IGNORED

    if event.owner_login not in policy:
        log.debug("ignoring owner", reason="unknown owner")
        return Outcome.IGNORED

    ok = await _reconcile(
        event.installation_id,
        event.owner_login,
        event.repo_name,
        event.is_fork,
        policy,
    )
    return Outcome.SUCCEEDED if ok else Outcome.PARTIALLY_FAILED


async def _reconcile(
    installation_id: int,
    owner: str,
    repo: str,
    fork: bool,
    policy: Mapping[str, RepositorySettings],
) -> bool:
    """Run set_defaults for one repository, logging instead of raising."""
    try:
        await set_defaults(installation_id, owner, repo, fork, policy)
    except UnknownOwner:
        logger.debug("ignoring owner", owner=owner, repo=repo)
        return True
    except ReconcileError as exc:
        logger.error(
            "set defaults",
            error=str(exc),
            error_type=type(exc).__name__,
            owner=exc.owner,
            repo=exc.repo,
            installation_id=exc.installation_id,
        )
        return False
    return True
