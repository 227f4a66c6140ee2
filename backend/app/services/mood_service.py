"""
Mood service for mood-entry business logic.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import date
from typing import List, Optional
from app.models.mood import MoodEntry


def get_mood_entry_for_date(user_id: str, entry_date: date, db: Session) -> Optional[MoodEntry]:
    """Get the mood entry of a user for a specific date."""
    return db.query(MoodEntry).filter(
        MoodEntry.user_id == user_id,
        MoodEntry.entry_date == entry_date
    ).first()


def upsert_mood_entry(user_id: str, entry_date: date, mood_value: int, db: Session) -> MoodEntry:
    """
    Set the mood of a date, keeping at most one entry per user per date.
    Updates the existing entry, or inserts a new one.
    """
    entry = get_mood_entry_for_date(user_id, entry_date, db)
    if entry:
        entry.mood_value = mood_value
    else:
        entry = MoodEntry(user_id=user_id, entry_date=entry_date, mood_value=mood_value)
        db.add(entry)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent insert won the race; apply the value to that row instead
        db.rollback()
        entry = get_mood_entry_for_date(user_id, entry_date, db)
        entry.mood_value = mood_value
        db.commit()

    db.refresh(entry)
    return entry


def list_mood_entries(
    user_id: str,
    db: Session,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[MoodEntry]:
    """List a user's mood entries, newest first, optionally within [start, end]."""
    query = db.query(MoodEntry).filter(MoodEntry.user_id == user_id)
    if start:
        query = query.filter(MoodEntry.entry_date >= start)
    if end:
        query = query.filter(MoodEntry.entry_date <= end)
    return query.order_by(MoodEntry.entry_date.desc()).all()
