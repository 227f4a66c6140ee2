"""
Trigger adapters: the scheduled daily sweep and the mood-entry event.

Both authenticate or validate their invocation before any data-store or
email work, then hand off to the same NotificationDispatcher.
"""
from datetime import datetime
from typing import Any, Callable, Optional
import logging

from pydantic import ValidationError

from app.core.errors import ConfigurationError, InvalidEventPayload, TriggerAuthError
from app.core.security import secrets_match
from app.core.utils import yesterday
from app.schemas.notification import (
    EventResponse, MoodEventPayload, MoodEventRecord, RunSummary, TriggerKind
)
from app.services.mood_evaluation import is_low_mood
from app.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

MOOD_TABLE = "mood_entries"
INSERT_EVENT = "INSERT"

DispatcherFactory = Callable[[], NotificationDispatcher]


class ScheduledSweepAdapter:
    """Daily sweep over yesterday's moods, invoked by an external scheduler."""

    def __init__(self, cron_secret: str, dispatcher_factory: DispatcherFactory, timezone: str):
        self._cron_secret = cron_secret
        self._dispatcher_factory = dispatcher_factory
        self._timezone = timezone

    def authenticate(self, provided_secret: Optional[str]) -> None:
        if not self._cron_secret:
            raise ConfigurationError("CRON_SECRET is not configured")
        if not secrets_match(provided_secret, self._cron_secret):
            logger.warning("Rejected daily mood check: X-Cron-Secret missing or wrong")
            raise TriggerAuthError("Invalid cron secret")

    async def handle(self, provided_secret: Optional[str], now: datetime = None) -> RunSummary:
        self.authenticate(provided_secret)
        reference_date = yesterday(self._timezone, now)
        dispatcher = self._dispatcher_factory()
        try:
            return await dispatcher.run_batch(reference_date)
        finally:
            await dispatcher.aclose()


class MoodEventAdapter:
    """Evaluates a single user right after a mood entry is inserted."""

    def __init__(self, dispatcher_factory: DispatcherFactory, webhook_secret: str = ""):
        self._dispatcher_factory = dispatcher_factory
        self._webhook_secret = webhook_secret

    def authenticate(self, provided_secret: Optional[str]) -> None:
        if self._webhook_secret and not secrets_match(provided_secret, self._webhook_secret):
            logger.warning("Rejected mood event: X-Webhook-Secret missing or wrong")
            raise TriggerAuthError("Invalid webhook secret")

    def parse(self, body: Any) -> Optional[MoodEventRecord]:
        """
        Validate the change notification. Returns None for events this
        adapter does not handle; raises InvalidEventPayload when malformed.
        """
        try:
            envelope = MoodEventPayload.model_validate(body)
        except ValidationError as e:
            raise InvalidEventPayload(f"Malformed event envelope: {e.error_count()} error(s)") from e

        if envelope.type != INSERT_EVENT or envelope.table != MOOD_TABLE:
            return None

        if envelope.record is None:
            raise InvalidEventPayload("Insert event without a record")
        try:
            return MoodEventRecord.model_validate(envelope.record)
        except ValidationError as e:
            raise InvalidEventPayload(f"Malformed mood record: {e.error_count()} error(s)") from e

    async def handle(self, body: Any, provided_secret: Optional[str] = None) -> EventResponse:
        self.authenticate(provided_secret)
        return await self.process(body)

    async def process(self, body: Any) -> EventResponse:
        """Handle an already authenticated change notification."""
        record = self.parse(body)
        if record is None:
            return EventResponse(status="ignored", detail="Not a mood entry insert")

        if not is_low_mood(record.mood_value):
            return EventResponse(status="not_low", detail=f"Mood {record.mood_value} needs no action")

        logger.info(f"Low mood ({record.mood_value}) recorded by user {record.user_id} for {record.entry_date}")
        dispatcher = self._dispatcher_factory()
        try:
            outcome = await dispatcher.run_single(record.user_id, record.entry_date, TriggerKind.EVENT)
        finally:
            await dispatcher.aclose()
        return EventResponse(status=outcome.state.value, outcome=outcome)
