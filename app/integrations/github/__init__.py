"""
GitHub Integration Module

Provides GitHub App authentication, REST/GraphQL access and webhook
signature checks.
"""

from app.integrations.github.auth import AuthError, GitHubAppAuth
from app.integrations.github.client import GitHubClient
from app.integrations.github.models import (
    BoardFields,
    IssueCommentInfo,
    MergeMethod,
    MergeOutcome,
    PullRequestInfo,
    PullRequestRef,
    ReviewInfo,
    UpstreamQueryError,
)
from app.integrations.github.webhook import verify_webhook_signature

__all__ = [
    "AuthError",
    "GitHubAppAuth",
    "GitHubClient",
    "BoardFields",
    "IssueCommentInfo",
    "MergeMethod",
    "MergeOutcome",
    "PullRequestInfo",
    "PullRequestRef",
    "ReviewInfo",
    "UpstreamQueryError",
    "verify_webhook_signature",
]
