"""
Shared FastAPI dependencies: authentication and notification wiring.
"""
from typing import Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_access_token
from app.db.session import SessionLocal, get_db
from app.models.user import User
from app.services.notification_dispatcher import build_dispatcher
from app.services.triggers import DispatcherFactory, MoodEventAdapter, ScheduledSweepAdapter

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """Verify the identity provider's bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the caller's user row, mirroring it from the token on first sight.
    The identity provider owns users; this table only caches id and email.
    """
    user_id = payload["sub"]
    user = db.query(User).filter(User.id == user_id).first()
    if user:
        return user

    email = payload.get("email")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no email claim"
        )
    metadata = payload.get("user_metadata") or {}
    user = User(id=user_id, email=email, full_name=metadata.get("full_name"))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Mirrored user {user_id} from identity token")
    return user


def get_dispatcher_factory() -> DispatcherFactory:
    """Builds a dispatcher per invocation; overridden with fakes in tests."""
    return lambda: build_dispatcher(settings, SessionLocal)


def get_sweep_adapter(
    dispatcher_factory: DispatcherFactory = Depends(get_dispatcher_factory)
) -> ScheduledSweepAdapter:
    return ScheduledSweepAdapter(
        cron_secret=settings.CRON_SECRET,
        dispatcher_factory=dispatcher_factory,
        timezone=settings.NOTIFICATION_TIMEZONE,
    )


def get_event_adapter(
    dispatcher_factory: DispatcherFactory = Depends(get_dispatcher_factory)
) -> MoodEventAdapter:
    return MoodEventAdapter(
        dispatcher_factory=dispatcher_factory,
        webhook_secret=settings.WEBHOOK_SECRET,
    )
