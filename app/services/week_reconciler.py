"""
Week Warning Reconciler

Keeps the "missing Week" warning comment in line with the PR's board field:
the warning exists exactly when Week is unset.

Existence is recomputed from the live comment list on every call. The
check-then-act sequence is not atomic: two overlapping invocations for the
same PR can both pass the check and post duplicate warnings.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.config import StudyScope
from app.integrations.github.client import GitHubClient
from app.integrations.github.models import IssueCommentInfo

logger = logging.getLogger(__name__)

WARNING_MARKER = "Week 설정이 누락되었습니다"

WARNING_COMMENT_BODY = f"""## ⚠️ {WARNING_MARKER}

프로젝트에서 Week를 설정해주세요!

### 설정 방법
1. PR 우측의 `Projects` 섹션에서 `리트코드 스터디` 옆 드롭다운(▼) 클릭
2. 현재 주차를 선택해주세요 (예: `Week 14(current)` 또는 `Week 14`)

📚 [자세한 가이드 보기](https://github.com/DaleStudy/leetcode-study/wiki/%EB%8B%B5%EC%95%88-%EC%A0%9C%EC%B6%9C-%EA%B0%80%EC%9D%B4%EB%93%9C#pr-%EC%9E%91%EC%84%B1%EB%B2%95)

---
🤖 이 댓글은 GitHub App을 통해 자동으로 작성되었습니다."""


class ReconcileAction(str, Enum):
    """What reconciliation has to do to restore the invariant."""

    NOOP = "noop"
    CREATE_WARNING = "create_warning"
    DELETE_WARNING = "delete_warning"


def decide_reconcile_action(week: Optional[str], has_warning: bool) -> ReconcileAction:
    """Pure decision: a warning must exist iff week is unset."""
    if not week and not has_warning:
        return ReconcileAction.CREATE_WARNING
    if week and has_warning:
        return ReconcileAction.DELETE_WARNING
    return ReconcileAction.NOOP


@dataclass
class ReconcileOutcome:
    """Observed board fields plus what reconciliation changed."""

    week: Optional[str]
    status: Optional[str] = None
    commented: bool = False
    deleted: bool = False


class WeekReconciler:
    """Idempotent warn/clear state machine for the Week warning comment."""

    def __init__(self, client: GitHubClient, scope: StudyScope):
        self.client = client
        self.scope = scope

    def is_warning_comment(self, comment: IssueCommentInfo) -> bool:
        """A warning is a Bot-authored comment carrying the marker text."""
        if comment.author_type != "Bot":
            return False
        if self.scope.bot_login and comment.author_login != self.scope.bot_login:
            return False
        return WARNING_MARKER in (comment.body or "")

    async def find_warning_comment(
        self, owner: str, repo: str, number: int
    ) -> Optional[IssueCommentInfo]:
        comments = await self.client.list_issue_comments(owner, repo, number)
        for comment in comments:
            if self.is_warning_comment(comment):
                return comment
        return None

    async def _post_warning(self, owner: str, repo: str, number: int) -> None:
        await self.client.create_issue_comment(owner, repo, number, WARNING_COMMENT_BODY)
        logger.info(f"Created warning comment on PR #{number}")

    async def _delete_warning(
        self, owner: str, repo: str, number: int, warning: IssueCommentInfo
    ) -> None:
        await self.client.delete_issue_comment(owner, repo, number, warning.id)
        logger.info(f"Deleted warning comment {warning.id} on PR #{number}")

    async def ensure_warning(self, owner: str, repo: str, number: int) -> bool:
        """
        Post the warning comment unless one already exists.

        Returns:
            True if a comment was created, False if one was already there
        """
        if await self.find_warning_comment(owner, repo, number):
            logger.info(f"PR #{number} already has warning comment, skipping")
            return False

        await self._post_warning(owner, repo, number)
        return True

    async def remove_warning(self, owner: str, repo: str, number: int) -> bool:
        """
        Delete the first warning comment on the PR.

        Returns:
            True if a comment was deleted, False if none was found
        """
        warning = await self.find_warning_comment(owner, repo, number)
        if warning is None:
            return False

        await self._delete_warning(owner, repo, number, warning)
        return True

    async def reconcile(self, owner: str, repo: str, number: int) -> ReconcileOutcome:
        """
        Read the PR's board fields and create or delete the warning to match.

        The comment list is read once and shared by the decision and the
        delete, so a reconcile costs one listing.

        Returns:
            ReconcileOutcome with the observed week/status and the change made
        """
        fields = await self.client.get_project_fields(owner, repo, number)
        outcome = ReconcileOutcome(week=fields.week, status=fields.status)

        warning = await self.find_warning_comment(owner, repo, number)
        action = decide_reconcile_action(fields.week, warning is not None)

        if action == ReconcileAction.CREATE_WARNING:
            await self._post_warning(owner, repo, number)
            outcome.commented = True
        elif action == ReconcileAction.DELETE_WARNING:
            await self._delete_warning(owner, repo, number, warning)
            outcome.deleted = True
        else:
            logger.debug(f"PR #{number}: warning already consistent with Week={fields.week}")

        return outcome
