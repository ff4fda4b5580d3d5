"""
Week Check Route

Manual trigger that reconciles the Week warning on every open PR.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from app.api.dependencies import (
    ClientProvider,
    check_identifier,
    get_client_provider,
    get_scope,
    parse_json_object,
)
from app.config import StudyScope
from app.models.api_responses import WeekCheckRequest, WeekCheckResponse
from app.services.week_check import WeekCheckService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/check-weeks",
    response_model=WeekCheckResponse,
    response_model_exclude_unset=True,
)
async def check_weeks(
    request: Request,
    scope: StudyScope = Depends(get_scope),
    connect: ClientProvider = Depends(get_client_provider),
):
    """
    Reconcile the Week warning comment on all open PRs.

    Body: ``{"repo_owner": "DaleStudy", "repo_name": "leetcode-study"}``
    """
    body = parse_json_object(await request.body())
    try:
        payload = WeekCheckRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    if not payload.repo_owner or not payload.repo_name:
        raise HTTPException(
            status_code=400, detail="Missing required fields: repo_owner, repo_name"
        )
    if payload.repo_owner != scope.org:
        logger.warning(f"Rejected week check for organization: {payload.repo_owner}")
        raise HTTPException(status_code=403, detail="Unauthorized organization")

    owner = check_identifier(payload.repo_owner)
    repo = check_identifier(payload.repo_name)

    logger.info(f"Checking weeks for {owner}/{repo}")
    client = await connect()
    return await WeekCheckService(client, scope).check_all(owner, repo)
