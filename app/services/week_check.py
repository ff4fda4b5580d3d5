"""
Week Check Service

Scans every open PR and reconciles its Week warning comment. Used by the
manual POST /check-weeks trigger to repair anything the webhooks missed.
"""

import logging
from typing import List

from app.config import StudyScope
from app.integrations.github.client import GitHubClient
from app.integrations.github.models import UpstreamQueryError
from app.models.api_responses import WeekCheckResponse, WeekCheckResult
from app.services.week_reconciler import WeekReconciler

logger = logging.getLogger(__name__)


class WeekCheckService:
    """Bulk reconciliation over open PRs."""

    def __init__(self, client: GitHubClient, scope: StudyScope):
        self.client = client
        self.scope = scope
        self.reconciler = WeekReconciler(client, scope)

    async def check_all(self, owner: str, repo: str) -> WeekCheckResponse:
        """
        Reconcile every open, non-maintenance PR.

        Returns:
            WeekCheckResponse with checked/commented/deleted counts
        """
        prs = await self.client.list_open_pull_requests(owner, repo)

        results: List[WeekCheckResult] = []
        checked = commented = deleted = 0

        for pr in prs:
            if pr.has_label(self.scope.maintenance_label):
                logger.info(f"Skipping PR #{pr.number}: has maintenance label")
                continue

            checked += 1
            try:
                outcome = await self.reconciler.reconcile(owner, repo, pr.number)
            except UpstreamQueryError as e:
                logger.error(f"Week check failed for PR #{pr.number}: {e}")
                results.append(WeekCheckResult(pr=pr.number, week=None, error=str(e)))
                continue

            if outcome.week:
                if outcome.deleted:
                    deleted += 1
                results.append(
                    WeekCheckResult(
                        pr=pr.number, week=outcome.week, commented=False, deleted=outcome.deleted
                    )
                )
            else:
                if outcome.commented:
                    commented += 1
                results.append(
                    WeekCheckResult(pr=pr.number, week=None, commented=outcome.commented)
                )

        logger.info(
            f"Week check done: {checked} checked, {commented} commented, {deleted} deleted"
        )
        return WeekCheckResponse(
            success=True,
            total_prs=len(prs),
            checked=checked,
            commented=commented,
            deleted=deleted,
            results=results,
        )
