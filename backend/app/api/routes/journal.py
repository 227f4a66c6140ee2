"""
Journal routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from app.db.session import get_db
from app.models.user import User
from app.models.journal import JournalEntry
from app.schemas.journal import JournalEntryCreate, JournalEntryResponse
from app.api.dependencies import get_current_user

router = APIRouter(prefix="/journal", tags=["journal"])


@router.get("", response_model=List[JournalEntryResponse])
async def get_journal_entries(
    entry_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's journal entries, newest first."""
    query = db.query(JournalEntry).filter(JournalEntry.user_id == current_user.id)
    if entry_date:
        query = query.filter(JournalEntry.entry_date == entry_date)
    return query.order_by(JournalEntry.entry_date.desc(), JournalEntry.created_at.desc()).all()


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    entry_data: JournalEntryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Write a new journal entry."""
    entry = JournalEntry(
        user_id=current_user.id,
        entry_date=entry_data.entry_date,
        title=entry_data.title,
        content=entry_data.content,
        tags=entry_data.tags or None
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_journal_entry(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one of the current user's journal entries."""
    entry = db.query(JournalEntry).filter(
        JournalEntry.id == entry_id,
        JournalEntry.user_id == current_user.id
    ).first()
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Journal entry not found"
        )
    db.delete(entry)
    db.commit()
    return None
