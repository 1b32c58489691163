"""Owner policy table.

Maps an owner login (exact, case-sensitive) to the repository settings
applied when one of its repositories becomes visible to the App. Owners
missing from the table are never touched.

The table is built once at import time and exposed read-only; handlers
receive it through the ``get_policy`` dependency so tests can swap it.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class RepositorySettings(BaseModel):
    """Partial update document for ``PATCH /repos/{owner}/{repo}``.

    Field names match the GitHub REST API. ``None`` means "leave unchanged";
    only fields that are set are sent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_merge_commit: Optional[bool] = None
    allow_squash_merge: Optional[bool] = None
    allow_rebase_merge: Optional[bool] = None
    allow_update_branch: Optional[bool] = None
    allow_auto_merge: Optional[bool] = None
    delete_branch_on_merge: Optional[bool] = None
    has_issues: Optional[bool] = None
    has_wiki: Optional[bool] = None
    has_pages: Optional[bool] = None
    has_projects: Optional[bool] = None
    has_downloads: Optional[bool] = None
    has_discussions: Optional[bool] = None
    is_template: Optional[bool] = None
    archived: Optional[bool] = None
    squash_merge_commit_title: Optional[str] = None
    squash_merge_commit_message: Optional[str] = None

    def to_patch(self) -> dict:
        """Return only the fields that are set, ready to send as JSON."""
        return self.model_dump(exclude_none=True)


_PERSONAL = RepositorySettings(
    allow_merge_commit=False,
    allow_update_branch=True,
    allow_auto_merge=True,
    allow_squash_merge=True,
    allow_rebase_merge=False,
    delete_branch_on_merge=True,
    has_issues=False,
    has_wiki=False,
    has_pages=False,
    has_projects=False,
    has_downloads=False,
    has_discussions=False,
    is_template=False,
)

# "erred" is an archive org: everything that lands there is archived.
_ARCHIVE = _PERSONAL.model_copy(update={"archived": True})

DEFAULT_POLICY: Mapping[str, RepositorySettings] = MappingProxyType(
    {
        "erred": _ARCHIVE,
        "seankhliao": _PERSONAL,
    }
)


def get_policy() -> Mapping[str, RepositorySettings]:
    return DEFAULT_POLICY
