"""
GitHub Webhook Route

Receives App webhook deliveries (projects_v2_item, pull_request,
issue_comment) and hands them to the event classifier.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.dependencies import (
    ClientProvider,
    Sleeper,
    get_client_provider,
    get_scope,
    get_sleep,
    parse_json_object,
)
from app.config import Settings, StudyScope, get_settings
from app.integrations.github.webhook import verify_webhook_signature
from app.models.api_responses import WebhookAck
from app.services.event_classifier import (
    EventClassifier,
    EventProcessingError,
    InvalidEventError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"


@router.post(
    "/webhooks",
    response_model=WebhookAck,
    response_model_exclude_unset=True,
)
async def receive_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    scope: StudyScope = Depends(get_scope),
    connect: ClientProvider = Depends(get_client_provider),
    sleep: Sleeper = Depends(get_sleep),
):
    """
    Handle one webhook delivery.

    The signature is checked against the raw body before it is parsed.
    """
    raw = await request.body()

    if settings.webhook_secret:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not verify_webhook_signature(raw, signature, settings.webhook_secret):
            logger.warning("Rejected webhook delivery with invalid signature")
            raise HTTPException(status_code=401, detail="Invalid signature")

    payload = parse_json_object(raw)
    event_type = request.headers.get(EVENT_HEADER)

    classifier = EventClassifier(scope, settings, connect, sleep=sleep)
    try:
        return await classifier.handle(event_type, payload)
    except InvalidEventError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EventProcessingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Webhook error for {event_type}: {e}")
        raise HTTPException(status_code=500, detail=f"Webhook error: {e}")
