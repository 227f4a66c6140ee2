"""
Support contact (family member) registration routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List
import logging
from app.db.session import get_db
from app.models.user import User
from app.models.support_contact import SupportContact
from app.schemas.support_contact import SupportContactCreate, SupportContactResponse
from app.api.dependencies import get_current_user
from app.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/support-contacts", tags=["support-contacts"])


@router.get("", response_model=List[SupportContactResponse])
async def get_support_contacts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's support contacts."""
    return db.query(SupportContact).filter(
        SupportContact.user_id == current_user.id
    ).order_by(SupportContact.created_at).all()


@router.post("", response_model=SupportContactResponse, status_code=status.HTTP_201_CREATED)
async def create_support_contact(
    contact_data: SupportContactCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Register a support contact (at most MAX_SUPPORT_CONTACTS per user)."""
    existing_count = db.query(SupportContact).filter(
        SupportContact.user_id == current_user.id
    ).count()
    if existing_count >= settings.MAX_SUPPORT_CONTACTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"You can register at most {settings.MAX_SUPPORT_CONTACTS} support contacts"
        )

    email = contact_data.email.lower()
    duplicate = db.query(SupportContact).filter(
        SupportContact.user_id == current_user.id,
        SupportContact.email == email
    ).first()
    if duplicate:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already registered as a support contact"
        )

    contact = SupportContact(
        user_id=current_user.id,
        name=contact_data.name,
        relationship_type=contact_data.relationship,
        email=email
    )
    db.add(contact)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already registered as a support contact"
        )
    db.refresh(contact)
    logger.info(f"User {current_user.id} registered support contact {contact.id}")
    return contact


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_support_contact(
    contact_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove one of the current user's support contacts."""
    contact = db.query(SupportContact).filter(
        SupportContact.id == contact_id,
        SupportContact.user_id == current_user.id
    ).first()
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Support contact not found"
        )
    db.delete(contact)
    db.commit()
    return None
