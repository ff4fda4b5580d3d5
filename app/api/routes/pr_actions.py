"""
Bulk PR Action Routes

Operator endpoints that approve or merge every eligible open PR.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from app.api.dependencies import (
    ClientProvider,
    Sleeper,
    check_identifier,
    get_client_provider,
    get_scope,
    get_sleep,
    parse_json_object,
)
from app.config import Settings, StudyScope, get_settings
from app.models.api_responses import ApproveResponse, MergeResponse, PrActionRequest
from app.services.bulk_actions import BulkActionService, parse_merge_method
from app.utils.helpers import parse_number_array

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_action_request(request: Request) -> PrActionRequest:
    body = parse_json_object(await request.body())
    try:
        return PrActionRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")


def _resolve_target(
    payload: PrActionRequest, scope: StudyScope
) -> Tuple[str, str, Optional[List[int]]]:
    """Validate owner/repo and parse the exclude list."""
    owner = payload.repo_owner or scope.org
    if not payload.repo_name:
        raise HTTPException(status_code=400, detail="Missing required field: repo_name")
    if owner != scope.org:
        logger.warning(f"Rejected bulk action for organization: {owner}")
        raise HTTPException(status_code=403, detail=f"Unauthorized organization: {owner}")

    return (
        check_identifier(owner),
        check_identifier(payload.repo_name),
        parse_number_array(payload.excludes),
    )


def _build_service(client, scope: StudyScope, settings: Settings, sleep: Sleeper) -> BulkActionService:
    return BulkActionService(
        client,
        scope,
        merge_max_retries=settings.merge_max_retries,
        merge_retry_delay=settings.merge_retry_delay_seconds,
        use_auto_merge=settings.merge_use_auto_merge,
        sleep=sleep,
    )


@router.post(
    "/approve-prs",
    response_model=ApproveResponse,
    response_model_exclude_unset=True,
)
async def approve_prs(
    request: Request,
    scope: StudyScope = Depends(get_scope),
    settings: Settings = Depends(get_settings),
    connect: ClientProvider = Depends(get_client_provider),
    sleep: Sleeper = Depends(get_sleep),
):
    """
    Approve every open PR that is not excluded, labeled maintenance, a
    draft, or already approved.
    """
    payload = await _read_action_request(request)
    owner, repo, excludes = _resolve_target(payload, scope)

    logger.info(f"Approving PRs in {owner}/{repo} (excludes: {excludes or []})")
    client = await connect()
    return await _build_service(client, scope, settings, sleep).approve_all(owner, repo, excludes)


@router.post(
    "/merge-prs",
    response_model=MergeResponse,
    response_model_exclude_unset=True,
)
async def merge_prs(
    request: Request,
    scope: StudyScope = Depends(get_scope),
    settings: Settings = Depends(get_settings),
    connect: ClientProvider = Depends(get_client_provider),
    sleep: Sleeper = Depends(get_sleep),
):
    """
    Merge every approved, cleanly mergeable PR of one week.

    Body: ``{"repo_name": "leetcode-study", "week": "Week 5",
    "merge_method": "squash", "excludes": [12]}``
    """
    payload = await _read_action_request(request)
    owner, repo, excludes = _resolve_target(payload, scope)

    if not payload.week:
        raise HTTPException(status_code=400, detail="Missing required field: week")
    try:
        merge_method = parse_merge_method(payload.merge_method)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Merging {payload.week} PRs in {owner}/{repo} ({merge_method.value})")
    client = await connect()
    return await _build_service(client, scope, settings, sleep).merge_all(
        owner, repo, payload.week, excludes, merge_method
    )
