"""
Notification delivery ledger used to de-duplicate well-being emails.
"""
import enum
from sqlalchemy import Column, String, Date, DateTime, Text, Enum, UniqueConstraint
from app.db.base import BaseModel


class DeliveryStatus(str, enum.Enum):
    """Lifecycle of a single (user, date, contact) delivery."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationDelivery(BaseModel):
    """One row per contact notified about a user for a reference date."""
    __tablename__ = "notification_deliveries"

    user_id = Column(String(36), nullable=False, index=True)
    reference_date = Column(Date, nullable=False, index=True)
    contact_id = Column(String(36), nullable=False)
    contact_email = Column(String(255), nullable=False)
    trigger = Column(String(20), nullable=False)  # "batch" or "event"
    reason = Column(String(20), nullable=False)
    status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PENDING, nullable=False)
    error = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint('user_id', 'reference_date', 'contact_id', name='uq_delivery_user_date_contact'),
    )
