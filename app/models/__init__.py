# Shared data models
from app.models.api_responses import (
    ApproveResponse,
    BulkActionResult,
    ErrorResponse,
    MergeResponse,
    PrActionRequest,
    WebhookAck,
    WeekCheckRequest,
    WeekCheckResponse,
    WeekCheckResult,
)
from app.models.events import (
    IssueCommentEvent,
    ProjectsV2ItemEvent,
    PullRequestEvent,
    UnsupportedEvent,
    parse_event,
)

__all__ = [
    "ApproveResponse",
    "BulkActionResult",
    "ErrorResponse",
    "MergeResponse",
    "PrActionRequest",
    "WebhookAck",
    "WeekCheckRequest",
    "WeekCheckResponse",
    "WeekCheckResult",
    "IssueCommentEvent",
    "ProjectsV2ItemEvent",
    "PullRequestEvent",
    "UnsupportedEvent",
    "parse_event",
]
