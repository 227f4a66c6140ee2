"""
Mood evaluation: decides whether a user's day warrants notifying their contacts.
"""
from datetime import date
from typing import Optional
import logging

from app.schemas.notification import LOW_MOOD_VALUES, NotificationDecision, NotificationReason
from app.services.repository import NotificationRepository

logger = logging.getLogger(__name__)


def is_low_mood(mood_value: Optional[int]) -> bool:
    """True for the values that alert contacts (1 and 2)."""
    return mood_value in LOW_MOOD_VALUES


def decide(user_id: str, reference_date: date, mood_value: Optional[int], has_entry: bool) -> NotificationDecision:
    """
    Apply the notification policy to what is known about the day.

    First match wins: no entry, then a low value (1 or 2). Values 3 to 5
    produce a decision without a reason.
    """
    if not has_entry:
        return NotificationDecision(
            user_id=user_id,
            reference_date=reference_date,
            reason=NotificationReason.NO_ENTRY,
        )
    if is_low_mood(mood_value):
        return NotificationDecision(
            user_id=user_id,
            reference_date=reference_date,
            reason=NotificationReason.LOW_MOOD,
            mood_value=mood_value,
        )
    return NotificationDecision(user_id=user_id, reference_date=reference_date, mood_value=mood_value)


class MoodEvaluator:
    """Looks up a user's mood for a date and applies the notification policy."""

    def __init__(self, repository: NotificationRepository):
        self._repository = repository

    def evaluate(self, user_id: str, reference_date: date) -> NotificationDecision:
        """
        Evaluate (user_id, reference_date).

        A data-store failure propagates as DataStoreError; it is never
        read as a missing entry.
        """
        entry = self._repository.find_mood_entry(user_id, reference_date)
        decision = decide(
            user_id,
            reference_date,
            mood_value=entry.mood_value if entry else None,
            has_entry=entry is not None,
        )
        if decision.should_notify:
            logger.info(
                f"User {user_id} on {reference_date}: {decision.reason.description}"
                + (f" ({decision.mood_value})" if decision.mood_value else "")
            )
        else:
            logger.debug(f"User {user_id} on {reference_date}: mood {decision.mood_value}, no notification")
        return decision
