"""
Support contact resolution, scoped to the owning user.
"""
from typing import List
import logging

from app.schemas.support_contact import SupportContactResponse
from app.services.repository import NotificationRepository

logger = logging.getLogger(__name__)


class SupportContactResolver:
    """Maps a user to the contacts that user registered."""

    def __init__(self, repository: NotificationRepository):
        self._repository = repository

    def resolve(self, user_id: str) -> List[SupportContactResponse]:
        """
        Contacts owned by user_id (usually 0 to 2). An empty list means
        there is nobody to notify; it is not an error.
        """
        contacts = self._repository.list_support_contacts(user_id)
        owned = [c for c in contacts if c.user_id == user_id]
        if len(owned) != len(contacts):
            logger.error(
                f"Dropped {len(contacts) - len(owned)} contact(s) not owned by user {user_id}"
            )
        return owned
