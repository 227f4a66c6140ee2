"""
Journal model for free-text entries.
"""
from sqlalchemy import Column, String, Date, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class JournalEntry(BaseModel):
    """Journal entry written by a user for a date."""
    __tablename__ = "journal_entries"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    entry_date = Column(Date, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    tags = Column(JSON, nullable=True)

    # Relationships
    user = relationship("User", back_populates="journal_entries")
