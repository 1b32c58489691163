"""Pydantic schemas for GitHub webhook events and API responses.

Webhook payloads are decoded straight into flat, frozen event models; the
nested GitHub JSON is reached through validation aliases. ``WebhookEvent``
is the tagged union the dispatcher matches on.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import AliasPath, BaseModel, ConfigDict, Field


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class InstallationRepository(_Event):
    """A repository listed in an installation event.

    GitHub omits ``fork`` from these entries; absent means not a fork.
    """

    name: str
    fork: bool = False


class InstallationEvent(_Event):
    """``installation`` event: the App was installed, removed, suspended..."""

    action: str
    installation_id: int = Field(validation_alias=AliasPath("installation", "id"))
    account_login: str = Field(
        validation_alias=AliasPath("installation", "account", "login")
    )
    repositories: tuple[InstallationRepository, ...] = ()


class RepositoryEvent(_Event):
    """``repository`` event for a repository the App can see."""

    action: str
    installation_id: int = Field(validation_alias=AliasPath("installation", "id"))
    owner_login: str = Field(
        validation_alias=AliasPath("repository", "owner", "login")
    )
    repo_name: str = Field(validation_alias=AliasPath("repository", "name"))
    is_fork: bool = Field(default=False, validation_alias=AliasPath("repository", "fork"))

    @property
    def full_name(self) -> str:
        return f"{self.owner_login}/{self.repo_name}"


class OtherEvent(_Event):
    """Any event type the App does not act on (ping, push, ...)."""

    event_type: str


WebhookEvent = Union[InstallationEvent, RepositoryEvent, OtherEvent]


class InstallationToken(BaseModel):
    """Response of ``POST /app/installations/{id}/access_tokens``."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(repr=False)
    expires_at: Optional[datetime] = None
