"""
Notification trigger routes: scheduled daily sweep and mood-entry webhook.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from typing import Optional
import logging

from app.api.dependencies import get_event_adapter, get_sweep_adapter
from app.core.errors import (
    ConfigurationError, InvalidEventPayload, TriggerAuthError
)
from app.schemas.notification import EventResponse, RunSummary
from app.services.triggers import MoodEventAdapter, ScheduledSweepAdapter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/daily-check", response_model=RunSummary)
async def daily_mood_check(
    x_cron_secret: Optional[str] = Header(None),
    adapter: ScheduledSweepAdapter = Depends(get_sweep_adapter)
):
    """Check yesterday's moods for every user with support contacts."""
    try:
        return await adapter.handle(x_cron_secret)
    except TriggerAuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    except ConfigurationError as e:
        logger.error(f"Daily mood check not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Notification service is not configured"
        )


@router.post("/mood-events", response_model=EventResponse)
async def mood_entry_event(
    request: Request,
    x_webhook_secret: Optional[str] = Header(None),
    adapter: MoodEventAdapter = Depends(get_event_adapter)
):
    """Evaluate a user immediately after a mood entry is inserted."""
    try:
        adapter.authenticate(x_webhook_secret)
    except TriggerAuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    try:
        body = await request.json()
    except ValueError:
        logger.warning("Rejected mood event: body is not valid JSON")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload"
        )

    try:
        return await adapter.process(body)
    except InvalidEventPayload as e:
        logger.warning(f"Rejected mood event: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ConfigurationError as e:
        logger.error(f"Mood event handling not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Notification service is not configured"
        )
