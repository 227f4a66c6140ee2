"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.mood import MoodEntry
from app.models.support_contact import SupportContact
from app.models.journal import JournalEntry
from app.models.notification import NotificationDelivery, DeliveryStatus

__all__ = [
    "User",
    "MoodEntry",
    "SupportContact",
    "JournalEntry",
    "NotificationDelivery",
    "DeliveryStatus",
]
