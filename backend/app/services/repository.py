"""
Data store access for the notification pipeline.

Every operation opens its own short-lived session from the factory, so
concurrent per-user tasks never share a session, and every result is
returned as a Pydantic snapshot rather than a live ORM object. Failures
are raised as DataStoreError so callers can tell an outage apart from
"nothing found".
"""
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional
import logging

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DataStoreError
from app.models.mood import MoodEntry
from app.models.notification import DeliveryStatus, NotificationDelivery
from app.models.support_contact import SupportContact
from app.models.user import User
from app.schemas.mood import MoodResponse
from app.schemas.notification import NotificationReason, TriggerKind, UserIdentity
from app.schemas.support_contact import SupportContactResponse

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Typed queries and commands over mood entries, contacts and deliveries."""

    def __init__(self, session_factory: Callable[[], Session], stale_claim_after: timedelta = timedelta(minutes=15)):
        self._session_factory = session_factory
        self._stale_claim_after = stale_claim_after

    def find_mood_entry(self, user_id: str, entry_date: date) -> Optional[MoodResponse]:
        """Mood entry for (user_id, entry_date), or None when there is none."""
        with self._session(f"find mood entry for {user_id} on {entry_date}") as db:
            entry = db.query(MoodEntry).filter(
                MoodEntry.user_id == user_id,
                MoodEntry.entry_date == entry_date
            ).first()
            return MoodResponse.model_validate(entry) if entry else None

    def list_support_contacts(self, user_id: str) -> List[SupportContactResponse]:
        """All contacts owned by user_id."""
        with self._session(f"list support contacts for {user_id}") as db:
            contacts = db.query(SupportContact).filter(
                SupportContact.user_id == user_id
            ).order_by(SupportContact.created_at, SupportContact.id).all()
            return [SupportContactResponse.model_validate(c) for c in contacts]

    def list_users_with_contacts(self) -> List[str]:
        """Distinct user ids owning at least one support contact."""
        with self._session("list users with support contacts") as db:
            rows = db.query(SupportContact.user_id).distinct().order_by(SupportContact.user_id).all()
            return [row[0] for row in rows]

    def get_user(self, user_id: str) -> Optional[UserIdentity]:
        with self._session(f"get user {user_id}") as db:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                return None
            return UserIdentity(id=user.id, email=user.email, full_name=user.full_name)

    def claim_delivery(
        self,
        user_id: str,
        reference_date: date,
        contact: SupportContactResponse,
        trigger: TriggerKind,
        reason: NotificationReason,
    ) -> bool:
        """
        Reserve the right to email `contact` about `user_id` for `reference_date`.

        Returns True when this caller owns the send. Returns False when the
        contact was already emailed, or another run is sending right now.
        A previously failed delivery, or a pending one abandoned for longer
        than the stale window, is re-claimed so it can be retried.
        """
        with self._session(f"claim delivery {user_id}/{reference_date}/{contact.id}") as db:
            delivery = NotificationDelivery(
                user_id=user_id,
                reference_date=reference_date,
                contact_id=contact.id,
                contact_email=contact.email,
                trigger=trigger.value,
                reason=reason.value,
                status=DeliveryStatus.PENDING,
            )
            db.add(delivery)
            try:
                db.commit()
                return True
            except IntegrityError:
                db.rollback()

            stale_before = datetime.utcnow() - self._stale_claim_after
            result = db.execute(
                update(NotificationDelivery)
                .where(
                    NotificationDelivery.user_id == user_id,
                    NotificationDelivery.reference_date == reference_date,
                    NotificationDelivery.contact_id == contact.id,
                    or_(
                        NotificationDelivery.status == DeliveryStatus.FAILED,
                        and_(
                            NotificationDelivery.status == DeliveryStatus.PENDING,
                            NotificationDelivery.updated_at < stale_before,
                        ),
                    ),
                )
                .values(
                    status=DeliveryStatus.PENDING,
                    trigger=trigger.value,
                    reason=reason.value,
                    error=None,
                    updated_at=datetime.utcnow(),
                )
            )
            db.commit()
            return result.rowcount == 1

    def complete_delivery(
        self,
        user_id: str,
        reference_date: date,
        contact_id: str,
        error: Optional[str] = None,
    ) -> None:
        """Mark a claimed delivery as sent, or as failed with the error text."""
        values = {"updated_at": datetime.utcnow()}
        if error is None:
            values.update(status=DeliveryStatus.SENT, sent_at=datetime.utcnow(), error=None)
        else:
            values.update(status=DeliveryStatus.FAILED, error=error[:1000])

        with self._session(f"complete delivery {user_id}/{reference_date}/{contact_id}") as db:
            db.execute(
                update(NotificationDelivery)
                .where(
                    NotificationDelivery.user_id == user_id,
                    NotificationDelivery.reference_date == reference_date,
                    NotificationDelivery.contact_id == contact_id,
                )
                .values(**values)
            )
            db.commit()

    def _session(self, operation: str) -> "_RepositorySession":
        return _RepositorySession(self._session_factory, operation)


class _RepositorySession:
    """Context manager that owns one session and translates store failures."""

    def __init__(self, session_factory: Callable[[], Session], operation: str):
        self._session_factory = session_factory
        self._operation = operation
        self._db: Optional[Session] = None

    def __enter__(self) -> Session:
        try:
            self._db = self._session_factory()
        except SQLAlchemyError as e:
            logger.error(f"Data store unavailable ({self._operation}): {e}")
            raise DataStoreError(f"Failed to {self._operation}") from e
        return self._db

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None:
                self._db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning(f"Rollback failed ({self._operation}): {rollback_error}")
        finally:
            self._db.close()
        if isinstance(exc, SQLAlchemyError):
            logger.error(f"Data store error ({self._operation}): {exc}")
            raise DataStoreError(f"Failed to {self._operation}") from exc
        return False
