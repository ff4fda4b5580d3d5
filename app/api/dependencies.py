"""
Request-scoped dependencies for the API routes.

Every request gets a fresh installation token and client; tests replace these
through ``app.dependency_overrides``.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict

from fastapi import Depends, HTTPException

from app.config import Settings, StudyScope, get_settings
from app.integrations.github.auth import GitHubAppAuth
from app.integrations.github.client import GitHubClient
from app.utils.helpers import validate_repo_identifier


ClientProvider = Callable[[], Awaitable[GitHubClient]]
Sleeper = Callable[[float], Awaitable[None]]


def get_scope(settings: Settings = Depends(get_settings)) -> StudyScope:
    return StudyScope.from_settings(settings)


def get_client_provider(settings: Settings = Depends(get_settings)) -> ClientProvider:
    """
    Return a coroutine factory for an installation-authenticated client.

    The token exchange is deferred until a handler actually needs GitHub, so
    ignored webhook deliveries never hit the API.
    """

    async def connect() -> GitHubClient:
        auth = GitHubAppAuth(
            app_id=settings.github_app_id,
            private_key=settings.resolve_private_key(),
            org=settings.allowed_org,
            api_url=settings.github_api_url,
            user_agent=settings.github_user_agent,
        )
        token = await auth.obtain_token()
        return GitHubClient(
            token=token,
            api_url=settings.github_api_url,
            user_agent=settings.github_user_agent,
        )

    return connect


def get_sleep() -> Sleeper:
    return asyncio.sleep


def parse_json_object(raw: bytes) -> Dict[str, Any]:
    """Decode a JSON object request body or fail with 400."""
    try:
        data = json.loads(raw or b"null")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    return data


def check_identifier(value: str) -> str:
    """Reject malformed owner/repository names with 400."""
    try:
        return validate_repo_identifier(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
