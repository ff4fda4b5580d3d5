"""
GitHub API Client

Responsibilities:
- Pull request reads (open list, detail, reviews, files)
- Issue comment listing/creation/deletion
- Review approval and merge execution
- Project board field reads and node id lookups (GraphQL)

PyGithub and requests are synchronous; every call runs in a worker thread so
the request handler only suspends on network I/O.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from github import Auth, Github
from github.GithubException import GithubException

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
from app.integrations.github.queries import (
    ENABLE_AUTO_MERGE_MUTATION,
    PROJECT_FIELDS_QUERY,
    PULL_REQUEST_BY_NODE_QUERY,
    extract_board_fields,
    extract_pull_request_ref,
)
from app.utils.helpers import validate_repo_identifier

logger = logging.getLogger(__name__)


def _github_error_message(e: GithubException) -> str:
    if isinstance(e.data, dict) and e.data.get("message"):
        return f"{e.status} {e.data['message']}"
    return f"{e.status} {e}"


def _graphql_url(api_url: str) -> str:
    base = api_url.rstrip("/")
    if base.endswith("/api/v3"):
        # GitHub Enterprise Server
        return base[: -len("/v3")] + "/graphql"
    return f"{base}/graphql"


class GitHubClient:
    """GitHub API client wrapper bound to one installation token."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        user_agent: str = "DaleStudy-GitHub-App",
        timeout: float = 30.0,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.graphql_url = _graphql_url(self.api_url)
        self.user_agent = user_agent
        self.timeout = timeout
        self.client = Github(
            auth=Auth.Token(token),
            base_url=self.api_url,
            user_agent=user_agent,
            per_page=100,
            timeout=int(timeout),
        )

    async def _run(self, description: str, func: Callable, *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except GithubException as e:
            message = _github_error_message(e)
            logger.error(f"GitHub API error while trying to {description}: {message}")
            raise UpstreamQueryError(f"Failed to {description}: {message}") from e
        except requests.RequestException as e:
            logger.error(f"GitHub transport error while trying to {description}: {e}")
            raise UpstreamQueryError(f"Failed to {description}: {e}") from e

    def _repo(self, owner: str, repo: str):
        validate_repo_identifier(owner)
        validate_repo_identifier(repo)
        return self.client.get_repo(f"{owner}/{repo}", lazy=True)

    @staticmethod
    def _to_pull_request_info(pr, with_mergeability: bool = False) -> PullRequestInfo:
        # Listing responses omit mergeability; touching it would trigger a
        # lazy per-PR fetch, so only detail reads populate it.
        info = PullRequestInfo(
            number=pr.number,
            title=pr.title or "",
            state=pr.state,
            draft=bool(pr.draft),
            labels=[label.name for label in pr.labels],
            head_sha=pr.head.sha if pr.head else None,
            node_id=pr.node_id,
            body=pr.body,
        )
        if with_mergeability:
            info.mergeable = pr.mergeable
            info.mergeable_state = pr.mergeable_state
        return info

    # Pull requests

    def _list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequestInfo]:
        pulls = self._repo(owner, repo).get_pulls(state="open")
        return [self._to_pull_request_info(pr) for pr in pulls]

    async def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequestInfo]:
        """List every open pull request (all pages)."""
        prs = await self._run("fetch open PRs", self._list_open_pull_requests, owner, repo)
        logger.info(f"Found {len(prs)} open PRs in {owner}/{repo}")
        return prs

    def _get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        pr = self._repo(owner, repo).get_pull(number)
        return self._to_pull_request_info(pr, with_mergeability=True)

    async def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        """Fetch live PR state, including mergeable/mergeable_state."""
        return await self._run(
            f"fetch PR #{number}", self._get_pull_request, owner, repo, number
        )

    def _get_pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        pr = self._repo(owner, repo).get_pull(number)
        chunks = []
        for changed in pr.get_files():
            chunks.append(f"diff --git a/{changed.filename} b/{changed.filename}")
            if changed.patch:
                chunks.append(changed.patch)
        return "\n".join(chunks)

    async def get_pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        """Concatenate per-file patches into a unified diff."""
        return await self._run(
            f"get PR diff for #{number}", self._get_pull_request_diff, owner, repo, number
        )

    # Issue comments

    def _list_issue_comments(self, owner: str, repo: str, number: int) -> List[IssueCommentInfo]:
        issue = self._repo(owner, repo).get_issue(number)
        return [
            IssueCommentInfo(
                id=comment.id,
                body=comment.body or "",
                author_login=comment.user.login if comment.user else "",
                author_type=comment.user.type if comment.user else "",
            )
            for comment in issue.get_comments()
        ]

    async def list_issue_comments(self, owner: str, repo: str, number: int) -> List[IssueCommentInfo]:
        return await self._run(
            f"list comments on PR #{number}", self._list_issue_comments, owner, repo, number
        )

    def _create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> int:
        comment = self._repo(owner, repo).get_issue(number).create_comment(body)
        return comment.id

    async def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> int:
        """Create a comment and return its id."""
        return await self._run(
            f"create comment on PR #{number}",
            self._create_issue_comment,
            owner,
            repo,
            number,
            body,
        )

    def _delete_issue_comment(self, owner: str, repo: str, number: int, comment_id: int) -> None:
        self._repo(owner, repo).get_issue(number).get_comment(comment_id).delete()

    async def delete_issue_comment(self, owner: str, repo: str, number: int, comment_id: int) -> None:
        await self._run(
            f"delete comment {comment_id} on PR #{number}",
            self._delete_issue_comment,
            owner,
            repo,
            number,
            comment_id,
        )

    # Reviews and merging

    def _list_reviews(self, owner: str, repo: str, number: int) -> List[ReviewInfo]:
        pr = self._repo(owner, repo).get_pull(number)
        return [
            ReviewInfo(
                id=review.id,
                state=review.state,
                author_login=review.user.login if review.user else "",
            )
            for review in pr.get_reviews()
        ]

    async def list_reviews(self, owner: str, repo: str, number: int) -> List[ReviewInfo]:
        return await self._run(
            f"fetch reviews for PR #{number}", self._list_reviews, owner, repo, number
        )

    async def has_approved_review(self, owner: str, repo: str, number: int) -> bool:
        reviews = await self.list_reviews(owner, repo, number)
        return any(review.state == "APPROVED" for review in reviews)

    def _approve_pull_request(self, owner: str, repo: str, number: int, body: str) -> None:
        pr = self._repo(owner, repo).get_pull(number)
        pr.create_review(body=body, event="APPROVE")

    async def approve_pull_request(self, owner: str, repo: str, number: int, body: str) -> None:
        await self._run(
            f"approve PR #{number}", self._approve_pull_request, owner, repo, number, body
        )

    def _merge_pull_request(
        self, owner: str, repo: str, number: int, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        pr = self._repo(owner, repo).get_pull(number)
        merge_args = {"merge_method": method.value}
        if sha:
            merge_args["sha"] = sha
        try:
            status = pr.merge(**merge_args)
        except GithubException as e:
            message = e.data.get("message") if isinstance(e.data, dict) else str(e)
            return MergeOutcome(merged=False, error=message or "Merge failed")
        if not status.merged:
            return MergeOutcome(merged=False, error=status.message or "Merge failed")
        return MergeOutcome(merged=True, sha=status.sha or sha)

    async def merge_pull_request(
        self, owner: str, repo: str, number: int, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        """
        Merge via REST, pinned to ``sha`` so a moved head is rejected by GitHub.

        A refusal from GitHub comes back as MergeOutcome.error, not an exception.
        """
        return await self._run(
            f"merge PR #{number}", self._merge_pull_request, owner, repo, number, method, sha
        )

    async def enable_auto_merge(
        self, node_id: str, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        """Hand the PR to the merge queue via enablePullRequestAutoMerge."""
        variables = {
            "pullRequestId": node_id,
            "mergeMethod": method.graphql_value,
            "expectedHeadOid": sha,
        }
        try:
            data = await self.graphql(ENABLE_AUTO_MERGE_MUTATION, variables)
        except UpstreamQueryError as e:
            return MergeOutcome(merged=False, error=str(e))

        if ((data.get("enablePullRequestAutoMerge") or {}).get("pullRequest")) is None:
            return MergeOutcome(merged=False, error="Auto-merge failed")
        return MergeOutcome(merged=True, auto_merge_enabled=True, sha=sha)

    # GraphQL

    def _post_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        try:
            response = requests.post(
                self.graphql_url,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamQueryError(f"GraphQL request failed: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise UpstreamQueryError(
                f"GraphQL response was not JSON ({response.status_code})"
            ) from e

        if not response.ok:
            message = result.get("message") if isinstance(result, dict) else None
            raise UpstreamQueryError(
                f"GraphQL request failed: {response.status_code} {message or response.reason}"
            )
        if result.get("errors"):
            raise UpstreamQueryError(f"GraphQL error: {result['errors']}")
        return result.get("data") or {}

    async def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a parameterized GraphQL document and return its ``data`` object."""
        return await asyncio.to_thread(self._post_graphql, query, variables)

    async def get_project_fields(self, owner: str, repo: str, number: int) -> BoardFields:
        """
        Read the PR's Week and Status board fields.

        Returns:
            BoardFields; missing fields are None rather than an error

        Raises:
            UpstreamQueryError: On transport, HTTP or GraphQL failure
        """
        validate_repo_identifier(owner)
        validate_repo_identifier(repo)
        data = await self.graphql(
            PROJECT_FIELDS_QUERY, {"owner": owner, "name": repo, "number": int(number)}
        )
        fields = extract_board_fields(data)
        logger.debug(f"PR #{number} board fields: week={fields.week}, status={fields.status}")
        return fields

    async def resolve_pull_request_node(self, node_id: str) -> Optional[PullRequestRef]:
        """Resolve a board item's content node id to (owner, repo, number)."""
        data = await self.graphql(PULL_REQUEST_BY_NODE_QUERY, {"nodeId": node_id})
        return extract_pull_request_ref(data)
