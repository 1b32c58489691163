"""Exception taxonomy for the webhook pipeline.

Delivery errors (bad signature, bad payload) map to 400. Credential and
GitHub API errors map to 500. ``UnknownOwner`` is not a failure: the
dispatcher treats it as "ignore this event".

None of these messages may contain the App private key, the webhook
secret, or an installation token.
"""

from typing import Optional


class GhDefaultsError(Exception):
    """Base class for all errors raised by ghdefaults."""


class InvalidSignature(GhDefaultsError):
    """The delivery's X-Hub-Signature-256 does not match the shared secret."""


class MalformedPayload(GhDefaultsError):
    """The delivery passed verification but could not be decoded."""


class AuthConfigInvalid(GhDefaultsError):
    """App credentials or the webhook secret are missing or unusable."""


class TokenRequestFailed(GhDefaultsError):
    """Exchanging the App JWT for an installation token failed."""

    def __init__(self, message: str, installation_id: int, status_code: Optional[int] = None):
        self.installation_id = installation_id
        self.status_code = status_code
        super().__init__(message)


class ReconcileError(GhDefaultsError):
    """A repository could not be brought to its owner's default settings.

    Attributes:
        owner: Repository owner login.
        repo: Repository name.
        installation_id: GitHub App installation the call was scoped to.
    """

    def __init__(self, message: str, owner: str, repo: str, installation_id: int):
        self.owner = owner
        self.repo = repo
        self.installation_id = installation_id
        super().__init__(f"{owner}/{repo}: {message}")


class UnknownOwner(ReconcileError):
    """The owner has no entry in the policy table."""


class AuthFailed(ReconcileError):
    """No installation token could be minted for the repository."""


class APIUpdateFailed(ReconcileError):
    """A settings or Actions-permissions call to GitHub failed."""
