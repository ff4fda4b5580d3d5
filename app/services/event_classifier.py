"""
Webhook Event Classifier

Decides what an inbound GitHub event means for the Week warning:
1. Scope filter - allowed organization, then allowed repository
2. Event-specific filters - action, changed field, content type
3. Live PR checks - closed PRs and maintenance-labeled PRs are left alone
4. Reconcile the warning comment (or run an AI review for mentions)

Each filter that fails short-circuits to an "Ignored: <reason>" acknowledgement.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from app.ai_core.review.pr_reviewer import PRReviewer, ReviewGenerationError
from app.config import Settings, StudyScope
from app.integrations.github.client import GitHubClient
from app.integrations.github.models import UpstreamQueryError
from app.models.api_responses import WebhookAck
from app.models.events import (
    IssueCommentEvent,
    ParsedEvent,
    ProjectsV2ItemEvent,
    PullRequestEvent,
    parse_event,
)
from app.services.week_reconciler import WeekReconciler
from app.utils.helpers import strip_mention

logger = logging.getLogger(__name__)

PROJECT_ITEM_ACTIONS = {"edited", "created", "deleted"}
PULL_REQUEST_ACTIONS = {"opened", "reopened"}
PULL_REQUEST_CONTENT_TYPE = "PullRequest"


class InvalidEventError(Exception):
    """Raised when an in-scope payload does not match its event shape (400)."""

    pass


class EventProcessingError(Exception):
    """Raised when an accepted event cannot be acted on (500)."""

    pass


def _ignored(reason: str) -> WebhookAck:
    logger.info(f"Ignored: {reason}")
    return WebhookAck(message=f"Ignored: {reason}")


def _nested_str(payload: Dict[str, Any], *keys: str) -> Optional[str]:
    value: Any = payload
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value if isinstance(value, str) else None


class EventClassifier:
    """Routes webhook events to the reconciler or the AI reviewer."""

    def __init__(
        self,
        scope: StudyScope,
        settings: Settings,
        connect: Callable[[], Awaitable[GitHubClient]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        reviewer_factory: Optional[Callable[[GitHubClient], PRReviewer]] = None,
    ):
        """
        Args:
            scope: Allowed organization/repository and board field names
            settings: Delays and AI review configuration
            connect: Coroutine returning an authenticated GitHub client; only
                awaited once an event has passed the filters
            sleep: Delay coroutine (injected in tests)
            reviewer_factory: Builds a PRReviewer for a client
        """
        self.scope = scope
        self.settings = settings
        self.connect = connect
        self.sleep = sleep
        self.reviewer_factory = reviewer_factory or (
            lambda client: PRReviewer(client, settings)
        )

    def scope_rejection(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Apply the organization and repository filters to a raw payload.

        Runs before the payload is validated, so out-of-scope events are
        ignored even when malformed.

        Returns:
            The ignore reason, or None if the event is in scope
        """
        org = _nested_str(payload, "organization", "login")
        if org != self.scope.org:
            logger.info(f"Ignoring event from organization: {org}")
            return f"not {self.scope.org} organization"

        repo_name = _nested_str(payload, "repository", "name")
        if repo_name and repo_name != self.scope.repo:
            logger.info(f"Ignoring event from repository: {repo_name}")
            return repo_name

        return None

    async def handle(self, event_type: Optional[str], payload: Dict[str, Any]) -> WebhookAck:
        """
        Classify and process one webhook delivery.

        Raises:
            InvalidEventError: If an in-scope payload has the wrong shape
            EventProcessingError: If the PR cannot be resolved or reviewed
        """
        logger.info(f"Received webhook event: {event_type}")

        rejection = self.scope_rejection(payload)
        if rejection:
            return WebhookAck(message=f"Ignored: {rejection}")

        try:
            event = parse_event(event_type, payload)
        except ValidationError as e:
            raise InvalidEventError(f"Invalid {event_type} payload: {e.error_count()} error(s)") from e

        return await self.dispatch(event)

    async def dispatch(self, event: ParsedEvent) -> WebhookAck:
        if isinstance(event, ProjectsV2ItemEvent):
            return await self.handle_project_item(event)
        if isinstance(event, PullRequestEvent):
            return await self.handle_pull_request(event)
        if isinstance(event, IssueCommentEvent):
            return await self.handle_issue_comment(event)

        logger.info(f"Unhandled event type: {event.name}")
        return WebhookAck(message=f"Ignored: {event.name}")

    async def handle_project_item(self, event: ProjectsV2ItemEvent) -> WebhookAck:
        """
        Board item added, removed or edited.

        Removal makes Week impossible to set, so it always warns. Addition and
        Week edits re-read the board and reconcile.
        """
        action = event.action
        if action not in PROJECT_ITEM_ACTIONS:
            return _ignored(action or "no action")

        if action == "edited":
            change = event.changes.field_value if event.changes else None
            if change is None or not change.touches(self.scope.week_field):
                return _ignored("not Week field")

        item = event.projects_v2_item
        if item is None or item.content_type != PULL_REQUEST_CONTENT_TYPE:
            return _ignored("not a PR")
        if not item.content_node_id:
            return _ignored("no content_node_id")

        logger.info(f"Processing projects_v2_item action: {action}")
        client = await self.connect()

        ref = await client.resolve_pull_request_node(item.content_node_id)
        if ref is None:
            logger.error(f"Failed to get PR info for node: {item.content_node_id}")
            raise EventProcessingError("Failed to get PR info")
        if ref.repo != self.scope.repo:
            return _ignored(ref.repo)

        pr = await client.get_pull_request(ref.owner, ref.repo, ref.number)
        if pr.is_closed:
            return _ignored("closed PR")
        if pr.has_label(self.scope.maintenance_label):
            return _ignored("maintenance label")

        reconciler = WeekReconciler(client, self.scope)

        if action == "deleted":
            logger.info(f"Project removed from PR #{ref.number}")
            await reconciler.ensure_warning(ref.owner, ref.repo, ref.number)
            return WebhookAck(message="Processed", pr=ref.number, action=action, week=None)

        outcome = await reconciler.reconcile(ref.owner, ref.repo, ref.number)
        logger.info(f"Week after {action} for PR #{ref.number}: {outcome.week or 'not set'}")
        return WebhookAck(message="Processed", pr=ref.number, action=action, week=outcome.week)

    async def handle_pull_request(self, event: PullRequestEvent) -> WebhookAck:
        """
        PR opened or reopened.

        Waits before reading the board: the PR is usually attached to the
        project a moment after it is opened.
        """
        action = event.action
        if action not in PULL_REQUEST_ACTIONS:
            return _ignored(action or "no action")

        pr = event.pull_request
        if pr is None or pr.number is None:
            return _ignored("no pull_request")
        if self.scope.maintenance_label in pr.label_names:
            return _ignored("maintenance label")

        owner = event.repo_owner or self.scope.org
        repo = event.repo_name or self.scope.repo
        logger.info(f"New PR {action}: #{pr.number}")

        await self.sleep(self.settings.pr_opened_delay_seconds)

        client = await self.connect()
        outcome = await WeekReconciler(client, self.scope).reconcile(owner, repo, pr.number)
        return WebhookAck(message="Processed", pr=pr.number, week=outcome.week)

    async def handle_issue_comment(self, event: IssueCommentEvent) -> WebhookAck:
        """Mention of the bot on a PR conversation → AI review."""
        if event.action != "created":
            return _ignored(event.action or "no action")

        issue = event.issue
        if issue is None or issue.number is None or not issue.is_pull_request:
            return _ignored("not a PR comment")

        comment = event.comment
        body = (comment.body if comment else None) or ""
        if comment and comment.user and comment.user.type == "Bot":
            return _ignored("bot comment")

        mention = self.settings.review_mention
        if mention.lower() not in body.lower():
            return _ignored("not mentioned")

        if not self.settings.openai_api_key:
            logger.info("OPENAI_API_KEY not configured")
            return WebhookAck(message="AI review not configured")

        owner = event.repo_owner or self.scope.org
        repo = event.repo_name or self.scope.repo
        question = strip_mention(body, mention) or None
        logger.info(f"AI review requested for PR #{issue.number}")

        client = await self.connect()
        reviewer = self.reviewer_factory(client)
        try:
            posted = await reviewer.review(
                owner, repo, issue.number, issue.title or "", issue.body, question
            )
        except (ReviewGenerationError, UpstreamQueryError) as e:
            logger.error(f"AI review failed for PR #{issue.number}: {e}")
            raise EventProcessingError(f"AI review failed: {e}") from e

        if not posted:
            return WebhookAck(message="AI review skipped: diff too large", pr=issue.number)
        return WebhookAck(message="AI review posted", pr=issue.number)
