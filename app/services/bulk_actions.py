"""
Bulk PR Actions

Administrative approve-all and merge-all over the repository's open PRs.

PRs are processed one at a time in list order: it paces API usage and keeps
the per-PR results in a stable order. A failure on one PR is recorded in that
PR's result and the batch moves on.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from app.config import StudyScope
from app.integrations.github.client import GitHubClient
from app.integrations.github.models import (
    BoardFields,
    MergeMethod,
    MergeOutcome,
    PullRequestInfo,
    UpstreamQueryError,
)
from app.models.api_responses import ApproveResponse, BulkActionResult, MergeResponse
from app.services.mergeability import wait_for_mergeability

logger = logging.getLogger(__name__)

APPROVAL_COMMENT = "현재 주차가 종료되어 자동으로 승인되었습니다. PR을 병합해주세요!"

CURRENT_SUFFIX = "(current)"


def matches_week(actual: Optional[str], wanted: str) -> bool:
    """
    Compare a board Week value against a requested week.

    Matches when:
    - the values are equal: "Week 8" / "Week 8"
    - the actual value is the requested one plus a parenthesised suffix:
      "Week 8(current)" / "Week 8"
    - with "(current)" removed, the actual value starts with the requested one
      at a word boundary: "Week 8 (current)" / "Week 8"

    "Week 10" never matches "Week 1", and an unset week never matches.
    """
    if not actual or not wanted:
        return False
    if actual == wanted or actual.startswith(f"{wanted}("):
        return True

    stripped = actual.replace(CURRENT_SUFFIX, "").strip()
    if stripped == wanted:
        return True
    if stripped.startswith(wanted):
        return not stripped[len(wanted)].isalnum()
    return False


def parse_merge_method(raw: Optional[str]) -> MergeMethod:
    """
    Parse the requested merge method (case-insensitive, default "merge").

    Raises:
        ValueError: For anything other than merge, squash or rebase
    """
    value = (raw or MergeMethod.MERGE.value).strip().lower()
    try:
        return MergeMethod(value)
    except ValueError:
        allowed = ", ".join(method.value for method in MergeMethod)
        raise ValueError(f"Invalid merge_method. Allowed values: {allowed}") from None


def filter_excluded(
    prs: Iterable[PullRequestInfo], excludes: Optional[List[int]]
) -> List[PullRequestInfo]:
    if not excludes:
        return list(prs)
    excluded = set(excludes)
    return [pr for pr in prs if pr.number not in excluded]


@dataclass
class WeekFilterResult:
    """PRs whose board Week matched, with the counters for the response."""

    matched: List[Tuple[PullRequestInfo, BoardFields]] = field(default_factory=list)
    week_matched: int = 0
    week_mismatched: int = 0
    solving_excluded: int = 0
    failures: List[BulkActionResult] = field(default_factory=list)


class BulkActionService:
    """Sequential approve/merge over open PRs."""

    def __init__(
        self,
        client: GitHubClient,
        scope: StudyScope,
        merge_max_retries: int = 3,
        merge_retry_delay: float = 2.0,
        use_auto_merge: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.scope = scope
        self.merge_max_retries = merge_max_retries
        self.merge_retry_delay = merge_retry_delay
        self.use_auto_merge = use_auto_merge
        self.sleep = sleep

    def get_skip_reason(self, pr: PullRequestInfo) -> Optional[str]:
        """Reasons every bulk action skips a PR regardless of its state."""
        if pr.has_label(self.scope.maintenance_label):
            return "maintenance labeled"
        if pr.draft:
            return "draft PR"
        return None

    @staticmethod
    def _result(pr: PullRequestInfo, **outcome) -> BulkActionResult:
        return BulkActionResult(pr=pr.number, title=pr.title, **outcome)

    # Approve

    async def approve_all(
        self, owner: str, repo: str, excludes: Optional[List[int]] = None
    ) -> ApproveResponse:
        """
        Approve every open PR that is not skipped and not yet approved.

        Returns:
            ApproveResponse with processed/approved/skipped counts
        """
        open_prs = await self.client.list_open_pull_requests(owner, repo)
        targets = filter_excluded(open_prs, excludes)

        results: List[BulkActionResult] = []
        processed = approved = skipped = 0

        for pr in targets:
            skip_reason = self.get_skip_reason(pr)
            if skip_reason:
                skipped += 1
                results.append(self._result(pr, skipped=True, reason=skip_reason))
                continue

            processed += 1
            try:
                if await self.client.has_approved_review(owner, repo, pr.number):
                    skipped += 1
                    results.append(self._result(pr, skipped=True, reason="already approved"))
                    continue

                await self.client.approve_pull_request(owner, repo, pr.number, APPROVAL_COMMENT)
                approved += 1
                results.append(self._result(pr, approved=True))
                logger.info(f"Approved PR #{pr.number}")
            except UpstreamQueryError as e:
                logger.error(f"Approval failed for PR #{pr.number}: {e}")
                results.append(self._result(pr, approved=False, error=str(e)))

        return ApproveResponse(
            success=True,
            action="approve",
            repo=f"{owner}/{repo}",
            total_open_prs=len(open_prs),
            processed=processed,
            approved=approved,
            skipped=skipped,
            results=results,
        )

    # Merge

    async def filter_by_week_and_status(
        self, owner: str, repo: str, prs: Iterable[PullRequestInfo], week: str
    ) -> WeekFilterResult:
        """
        Keep PRs whose board Week matches ``week`` and whose Status is not
        the in-progress status.

        Solving PRs still count towards ``week_matched``.
        """
        result = WeekFilterResult()

        for pr in prs:
            try:
                fields = await self.client.get_project_fields(owner, repo, pr.number)
            except UpstreamQueryError as e:
                logger.error(f"Board query failed for PR #{pr.number}: {e}")
                result.failures.append(
                    self._result(pr, skipped=True, reason="board query failed", error=str(e))
                )
                continue

            if not matches_week(fields.week, week):
                result.week_mismatched += 1
                continue

            result.week_matched += 1
            if fields.status == self.scope.solving_status:
                logger.info(f"Excluding PR #{pr.number}: status {fields.status}")
                result.solving_excluded += 1
                continue

            result.matched.append((pr, fields))

        return result

    async def _execute_merge(
        self, owner: str, repo: str, pr: PullRequestInfo, method: MergeMethod, sha: Optional[str]
    ) -> MergeOutcome:
        if self.use_auto_merge:
            if not pr.node_id:
                return MergeOutcome(merged=False, error="Failed to get PR node ID")
            return await self.client.enable_auto_merge(pr.node_id, method, sha)
        return await self.client.merge_pull_request(owner, repo, pr.number, method, sha)

    async def _merge_one(
        self, owner: str, repo: str, pr: PullRequestInfo, fields: BoardFields, method: MergeMethod
    ) -> BulkActionResult:
        board = {"week": fields.week, "status": fields.status}

        if not await self.client.has_approved_review(owner, repo, pr.number):
            return self._result(pr, skipped=True, reason="no approvals", **board)

        check, retries = await wait_for_mergeability(
            self.client,
            owner,
            repo,
            pr.number,
            max_retries=self.merge_max_retries,
            delay=self.merge_retry_delay,
            sleep=self.sleep,
        )
        if not check.mergeable:
            return self._result(pr, skipped=True, reason=check.reason, retries=retries, **board)

        outcome = await self._execute_merge(owner, repo, pr, method, check.sha)
        if outcome.merged:
            logger.info(f"Merged PR #{pr.number} at {check.sha} ({method.value})")
        else:
            logger.warning(f"Merge failed for PR #{pr.number}: {outcome.error}")

        result = self._result(pr, merged=outcome.merged, sha=outcome.sha, retries=retries, **board)
        if outcome.auto_merge_enabled:
            result.auto_merge_enabled = True
        if outcome.error:
            result.error = outcome.error
        return result

    async def merge_all(
        self,
        owner: str,
        repo: str,
        week: str,
        excludes: Optional[List[int]] = None,
        merge_method: MergeMethod = MergeMethod.MERGE,
    ) -> MergeResponse:
        """
        Merge every approved, cleanly mergeable open PR of the given week.

        Steps:
        1. List open PRs
        2. Keep PRs whose board Week matches, dropping "Solving" ones
        3. Apply the exclude list and the maintenance/draft skip filter
        4. Require an approving review
        5. Poll mergeability, then merge at the sha of the clean check

        Returns:
            MergeResponse with per-stage counters and per-PR results
        """
        open_prs = await self.client.list_open_pull_requests(owner, repo)
        week_filter = await self.filter_by_week_and_status(owner, repo, open_prs, week)

        excluded = set(excludes or [])
        targets = [(pr, fields) for pr, fields in week_filter.matched if pr.number not in excluded]

        results: List[BulkActionResult] = list(week_filter.failures)
        processed = merged = 0
        skipped = len(week_filter.failures)

        for pr, fields in targets:
            skip_reason = self.get_skip_reason(pr)
            if skip_reason:
                skipped += 1
                results.append(
                    self._result(
                        pr, week=fields.week, status=fields.status, skipped=True, reason=skip_reason
                    )
                )
                continue

            processed += 1
            try:
                result = await self._merge_one(owner, repo, pr, fields, merge_method)
            except UpstreamQueryError as e:
                logger.error(f"Merge processing failed for PR #{pr.number}: {e}")
                result = self._result(
                    pr, week=fields.week, status=fields.status, merged=False, error=str(e)
                )

            if result.skipped:
                skipped += 1
            if result.merged:
                merged += 1
            results.append(result)

        return MergeResponse(
            success=True,
            action="merge",
            repo=f"{owner}/{repo}",
            week_filter=week,
            total_open_prs=len(open_prs),
            week_matched=week_filter.week_matched,
            week_mismatched=week_filter.week_mismatched,
            solving_excluded=week_filter.solving_excluded,
            processed=processed,
            merged=merged,
            skipped=skipped,
            merge_method=merge_method.value,
            results=results,
        )
