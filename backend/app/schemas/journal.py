"""
Pydantic schemas for JournalEntry entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class JournalEntryBase(BaseModel):
    """Base journal entry schema."""
    entry_date: date
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    tags: Optional[List[str]] = None


class JournalEntryCreate(JournalEntryBase):
    """Schema for journal entry creation."""
    pass


class JournalEntryResponse(JournalEntryBase):
    """Schema for journal entry response."""
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
