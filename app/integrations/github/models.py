"""
GitHub Data Models

Transient views of pull requests, comments and board fields. Nothing here is
persisted; every instance is rebuilt from a live query.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class UpstreamQueryError(Exception):
    """
    Raised when a GitHub REST or GraphQL call fails.
    This is an upstream error (500) - the message is surfaced to the caller.
    """

    pass


class PullRequestInfo(BaseModel):
    """Pull request fields the bot reasons about."""

    number: int
    title: str = ""
    state: str = "open"
    draft: bool = False
    labels: List[str] = Field(default_factory=list)
    head_sha: Optional[str] = None
    mergeable: Optional[bool] = None  # None while GitHub is still computing it
    mergeable_state: Optional[str] = None
    node_id: Optional[str] = None
    body: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"

    def has_label(self, label: str) -> bool:
        return label in self.labels


class PullRequestRef(BaseModel):
    """Concrete (owner, repo, number) triple resolved from a node id."""

    owner: str
    repo: str
    number: int


class IssueCommentInfo(BaseModel):
    """Issue comment on a pull request conversation."""

    id: int
    body: str = ""
    author_login: str = ""
    author_type: str = ""


class ReviewInfo(BaseModel):
    """Pull request review (only the state matters here)."""

    id: int
    state: str
    author_login: str = ""


class BoardFields(BaseModel):
    """Project board custom fields attached to a pull request."""

    week: Optional[str] = None
    status: Optional[str] = None


class MergeMethod(str, Enum):
    """Merge methods accepted by the REST merge endpoint."""

    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"

    @property
    def graphql_value(self) -> str:
        return self.value.upper()


class MergeOutcome(BaseModel):
    """Result of a merge (or auto-merge enablement) attempt."""

    merged: bool
    auto_merge_enabled: bool = False
    sha: Optional[str] = None
    error: Optional[str] = None
