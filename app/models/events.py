"""
Webhook Event Models

Typed views of the GitHub webhook payloads the bot reacts to. The event type
comes from the X-GitHub-Event header; every nested field is optional so a
missing key reads as None instead of failing deep inside a handler.
"""

from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Account(_Payload):
    login: Optional[str] = None
    type: Optional[str] = None


class RepositoryPayload(_Payload):
    name: Optional[str] = None
    full_name: Optional[str] = None
    owner: Optional[Account] = None


class LabelPayload(_Payload):
    name: str = ""


class PullRequestPayload(_Payload):
    number: Optional[int] = None
    title: Optional[str] = None
    body: Optional[str] = None
    state: Optional[str] = None
    draft: bool = False
    labels: List[LabelPayload] = Field(default_factory=list)

    @property
    def label_names(self) -> List[str]:
        return [label.name for label in self.labels]


class FieldValueChange(_Payload):
    """``changes.field_value`` of a projects_v2_item edit."""

    field_name: Optional[str] = None
    field_type: Optional[str] = None
    from_value: Optional[Any] = Field(None, alias="from")
    to_value: Optional[Any] = Field(None, alias="to")

    def touches(self, field: str) -> bool:
        """True if the changed field (before or after) is named ``field``."""
        if self.field_name == field:
            return True
        # Text, number and date fields carry plain values here, not objects
        if isinstance(self.from_value, dict):
            return self.from_value.get("field_name") == field
        return False


class ItemChanges(_Payload):
    field_value: Optional[FieldValueChange] = None


class ProjectsV2ItemPayload(_Payload):
    id: Optional[int] = None
    node_id: Optional[str] = None
    content_type: Optional[str] = None
    content_node_id: Optional[str] = None


class IssuePayload(_Payload):
    number: Optional[int] = None
    title: Optional[str] = None
    body: Optional[str] = None
    pull_request: Optional[Dict[str, Any]] = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class CommentPayload(_Payload):
    id: Optional[int] = None
    body: Optional[str] = None
    user: Optional[Account] = None


class WebhookEvent(_Payload):
    """Fields shared by every event the bot handles."""

    event_type: ClassVar[str] = ""

    action: Optional[str] = None
    organization: Optional[Account] = None
    repository: Optional[RepositoryPayload] = None

    @property
    def org_login(self) -> Optional[str]:
        return self.organization.login if self.organization else None

    @property
    def repo_name(self) -> Optional[str]:
        return self.repository.name if self.repository else None

    @property
    def repo_owner(self) -> Optional[str]:
        if self.repository and self.repository.owner:
            return self.repository.owner.login
        return None


class ProjectsV2ItemEvent(WebhookEvent):
    event_type: ClassVar[str] = "projects_v2_item"

    projects_v2_item: Optional[ProjectsV2ItemPayload] = None
    changes: Optional[ItemChanges] = None


class PullRequestEvent(WebhookEvent):
    event_type: ClassVar[str] = "pull_request"

    number: Optional[int] = None
    pull_request: Optional[PullRequestPayload] = None


class IssueCommentEvent(WebhookEvent):
    event_type: ClassVar[str] = "issue_comment"

    issue: Optional[IssuePayload] = None
    comment: Optional[CommentPayload] = None


class UnsupportedEvent(WebhookEvent):
    """Any event type without a dedicated handler."""

    name: str = ""


EVENT_MODELS: Dict[str, Type[WebhookEvent]] = {
    model.event_type: model
    for model in (ProjectsV2ItemEvent, PullRequestEvent, IssueCommentEvent)
}

ParsedEvent = Union[ProjectsV2ItemEvent, PullRequestEvent, IssueCommentEvent, UnsupportedEvent]


def parse_event(event_type: Optional[str], payload: Dict[str, Any]) -> ParsedEvent:
    """
    Validate a raw webhook payload into its event model.

    Args:
        event_type: Value of the X-GitHub-Event header
        payload: Decoded JSON body

    Returns:
        The matching event model, or UnsupportedEvent for other types

    Raises:
        pydantic.ValidationError: If a known field has the wrong type
    """
    model = EVENT_MODELS.get(event_type or "")
    if model is None:
        event = UnsupportedEvent.model_validate(payload or {})
        event.name = event_type or "unknown"
        return event
    return model.model_validate(payload or {})
