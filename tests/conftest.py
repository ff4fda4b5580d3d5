"""
Shared test fixtures.

FakeGitHubClient stands in for the PyGithub/GraphQL-backed GitHubClient with
in-memory PRs, comments, board fields and reviews, and records every write.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from typing import Dict, List, Optional, Tuple

import pytest

from app.config import Settings, StudyScope
from app.integrations.github.models import (
    BoardFields,
    IssueCommentInfo,
    MergeMethod,
    MergeOutcome,
    PullRequestInfo,
    PullRequestRef,
    UpstreamQueryError,
)

BOT_LOGIN = "dalestudy[bot]"


class FakeGitHubClient:
    """In-memory GitHub client."""

    def __init__(self):
        self.prs: Dict[int, PullRequestInfo] = {}
        self.fields: Dict[int, BoardFields] = {}
        self.comments: Dict[int, List[IssueCommentInfo]] = {}
        self.approved: Dict[int, bool] = {}
        self.mergeability: Dict[int, List[Tuple[Optional[bool], Optional[str]]]] = {}
        self.nodes: Dict[str, PullRequestRef] = {}
        self.diffs: Dict[int, str] = {}
        self.failing_fields: set = set()

        self.created_comments: List[Tuple[int, str]] = []
        self.deleted_comments: List[Tuple[int, int]] = []
        self.approvals: List[int] = []
        self.merges: List[Tuple[int, MergeMethod, Optional[str]]] = []
        self.auto_merges: List[Tuple[str, MergeMethod, Optional[str]]] = []
        self.pr_reads: List[int] = []
        self._next_comment_id = 1000

    # Setup helpers

    def add_pr(
        self,
        number: int,
        week: Optional[str] = None,
        status: Optional[str] = None,
        labels: Optional[List[str]] = None,
        draft: bool = False,
        state: str = "open",
        approved: bool = False,
        node_id: Optional[str] = None,
    ) -> PullRequestInfo:
        pr = PullRequestInfo(
            number=number,
            title=f"PR {number}",
            state=state,
            draft=draft,
            labels=labels or [],
            head_sha=f"sha-{number}",
            mergeable=True,
            mergeable_state="clean",
            node_id=node_id or f"PR_node_{number}",
        )
        self.prs[number] = pr
        self.fields[number] = BoardFields(week=week, status=status)
        self.comments.setdefault(number, [])
        self.approved[number] = approved
        self.nodes[pr.node_id] = PullRequestRef(
            owner="DaleStudy", repo="leetcode-study", number=number
        )
        return pr

    def add_comment(
        self, number: int, body: str, author_login: str = BOT_LOGIN, author_type: str = "Bot"
    ) -> IssueCommentInfo:
        comment = IssueCommentInfo(
            id=self._new_comment_id(),
            body=body,
            author_login=author_login,
            author_type=author_type,
        )
        self.comments.setdefault(number, []).append(comment)
        return comment

    def _new_comment_id(self) -> int:
        self._next_comment_id += 1
        return self._next_comment_id

    # Reads

    async def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequestInfo]:
        return [pr for pr in self.prs.values() if pr.state == "open"]

    async def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        self.pr_reads.append(number)
        pr = self.prs[number]
        sequence = self.mergeability.get(number)
        if sequence:
            mergeable, state = sequence.pop(0) if len(sequence) > 1 else sequence[0]
            pr = pr.model_copy(update={"mergeable": mergeable, "mergeable_state": state})
        return pr

    async def get_pull_request_diff(self, owner: str, repo: str, number: int) -> str:
        return self.diffs.get(number, "")

    async def list_issue_comments(
        self, owner: str, repo: str, number: int
    ) -> List[IssueCommentInfo]:
        return list(self.comments.get(number, []))

    async def has_approved_review(self, owner: str, repo: str, number: int) -> bool:
        return self.approved.get(number, False)

    async def get_project_fields(self, owner: str, repo: str, number: int) -> BoardFields:
        if number in self.failing_fields:
            raise UpstreamQueryError("GraphQL errors: rate limited")
        return self.fields.get(number, BoardFields())

    async def resolve_pull_request_node(self, node_id: str) -> Optional[PullRequestRef]:
        return self.nodes.get(node_id)

    # Writes

    async def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> int:
        comment = self.add_comment(number, body)
        self.created_comments.append((number, body))
        return comment.id

    async def delete_issue_comment(
        self, owner: str, repo: str, number: int, comment_id: int
    ) -> None:
        self.comments[number] = [c for c in self.comments[number] if c.id != comment_id]
        self.deleted_comments.append((number, comment_id))

    async def approve_pull_request(self, owner: str, repo: str, number: int, body: str) -> None:
        self.approved[number] = True
        self.approvals.append(number)

    async def merge_pull_request(
        self, owner: str, repo: str, number: int, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        self.merges.append((number, method, sha))
        self.prs[number] = self.prs[number].model_copy(update={"state": "closed"})
        return MergeOutcome(merged=True, sha=f"merge-{number}")

    async def enable_auto_merge(
        self, node_id: str, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        self.auto_merges.append((node_id, method, sha))
        return MergeOutcome(merged=True, auto_merge_enabled=True, sha=sha)


class SleepRecorder:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def scope() -> StudyScope:
    return StudyScope(bot_login=BOT_LOGIN)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        github_app_id="12345",
        bot_login=BOT_LOGIN,
        openai_api_key="",
        webhook_secret="",
    )


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
