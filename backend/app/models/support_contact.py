"""
Support contact model (family members notified about a user's well-being).
"""
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class SupportContact(BaseModel):
    """A person registered by a user to receive well-being alerts."""
    __tablename__ = "family_members"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    relationship_type = Column("relationship", String(50), nullable=False)
    email = Column(String(255), nullable=False)

    # Relationships
    user = relationship("User", back_populates="support_contacts")

    # The two-contact cap is enforced at registration, not here
    __table_args__ = (
        UniqueConstraint('user_id', 'email', name='uq_family_members_user_email'),
    )
