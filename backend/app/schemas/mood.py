"""
Pydantic schemas for MoodEntry entity.
"""
from pydantic import BaseModel, Field
from datetime import date, datetime


class MoodBase(BaseModel):
    """Base mood schema."""
    mood_value: int = Field(..., ge=1, le=5)


class MoodUpsert(MoodBase):
    """Schema for creating or replacing the mood of a date."""
    pass


class MoodResponse(MoodBase):
    """Schema for mood response."""
    id: str
    user_id: str
    entry_date: date
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
