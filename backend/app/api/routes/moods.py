"""
Mood tracking routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from app.db.session import get_db
from app.models.user import User
from app.schemas.mood import MoodResponse, MoodUpsert
from app.api.dependencies import get_current_user
from app.services.mood_service import list_mood_entries, upsert_mood_entry

router = APIRouter(prefix="/moods", tags=["moods"])


@router.get("", response_model=List[MoodResponse])
async def get_moods(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's mood history."""
    if start and end and start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must not be after end"
        )
    return list_mood_entries(current_user.id, db, start=start, end=end)


@router.put("/{entry_date}", response_model=MoodResponse)
async def set_mood(
    entry_date: date,
    mood_data: MoodUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create or replace the mood of a date (one entry per date)."""
    return upsert_mood_entry(current_user.id, entry_date, mood_data.mood_value, db)
