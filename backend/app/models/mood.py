"""
Mood model for daily mood tracking.
"""
from sqlalchemy import Column, String, Date, ForeignKey, Integer, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class MoodEntry(BaseModel):
    """One mood score (1 = worst, 5 = best) per user per calendar date."""
    __tablename__ = "mood_entries"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    mood_value = Column(Integer, nullable=False)
    entry_date = Column(Date, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="mood_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'entry_date', name='uq_mood_entries_user_date'),
        CheckConstraint('mood_value BETWEEN 1 AND 5', name='ck_mood_entries_value_range'),
    )
