"""
API Request/Response Models

Pydantic models for the request bodies and response structures of the HTTP
endpoints. Optional per-PR fields are only emitted when set (routes use
``response_model_exclude_unset``), so top-level fields carry no defaults.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(..., description="Human-readable error message")


# Requests


class WeekCheckRequest(BaseModel):
    """Body of POST /check-weeks."""

    model_config = ConfigDict(extra="ignore")

    repo_owner: Optional[str] = Field(None, description="Organization login")
    repo_name: Optional[str] = Field(None, description="Repository name")


class PrActionRequest(BaseModel):
    """Body of POST /approve-prs and POST /merge-prs."""

    model_config = ConfigDict(extra="ignore")

    repo_owner: Optional[str] = Field(
        None, description="Organization login (defaults to the allowed organization)"
    )
    repo_name: Optional[str] = Field(None, description="Repository name")
    excludes: Optional[Any] = Field(None, description="PR numbers to leave untouched")
    week: Optional[str] = Field(None, description="Week filter (merge only, required)")
    merge_method: Optional[str] = Field(
        None, description="merge, squash or rebase (merge only, default merge)"
    )


# Responses


class WeekCheckResult(BaseModel):
    """Per-PR outcome of a week check."""

    pr: int
    week: Optional[str] = None
    commented: bool = False
    deleted: Optional[bool] = None
    error: Optional[str] = None


class WeekCheckResponse(BaseModel):
    """Response of POST /check-weeks."""

    success: bool
    total_prs: int
    checked: int
    commented: int
    deleted: int
    results: List[WeekCheckResult]


class BulkActionResult(BaseModel):
    """Per-PR outcome of a bulk approve/merge."""

    pr: int
    title: str
    week: Optional[str] = None
    status: Optional[str] = None
    skipped: Optional[bool] = None
    reason: Optional[str] = None
    approved: Optional[bool] = None
    merged: Optional[bool] = None
    auto_merge_enabled: Optional[bool] = None
    sha: Optional[str] = None
    retries: Optional[int] = None
    error: Optional[str] = None


class ApproveResponse(BaseModel):
    """Response of POST /approve-prs."""

    success: bool
    action: str
    repo: str
    total_open_prs: int
    processed: int
    approved: int
    skipped: int
    results: List[BulkActionResult]


class MergeResponse(BaseModel):
    """Response of POST /merge-prs."""

    success: bool
    action: str
    repo: str
    week_filter: str
    total_open_prs: int
    week_matched: int
    week_mismatched: int
    solving_excluded: int
    processed: int
    merged: int
    skipped: int
    merge_method: str
    results: List[BulkActionResult]


class WebhookAck(BaseModel):
    """Acknowledgement returned for every webhook delivery."""

    message: str
    pr: Optional[int] = None
    action: Optional[str] = None
    week: Optional[str] = None
