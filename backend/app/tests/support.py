"""
Fakes and seeding helpers shared by the test modules.
"""
import asyncio
from datetime import date, datetime, timedelta
from typing import List, Optional, Set, Tuple

from jose import jwt

from app.core.errors import DataStoreError, EmailDispatchError
from app.models.mood import MoodEntry
from app.models.support_contact import SupportContact
from app.models.user import User
from app.schemas.notification import EmailMessage
from app.services.email_service import EmailSender
from app.services.repository import NotificationRepository

REFERENCE_DATE = date(2024, 3, 14)
JWT_TEST_SECRET = "test-jwt-secret"


class FakeEmailSender(EmailSender):
    """Records sends; raises for recipients listed in fail_for."""

    def __init__(self, fail_for: Set[str] = None, delay_for: Set[str] = None, delay: float = 0.0):
        self.sent: List[Tuple[str, EmailMessage]] = []
        self.fail_for = fail_for or set()
        self.delay_for = delay_for or set()
        self.delay = delay
        self.closed = False

    async def send(self, to: str, message: EmailMessage) -> Optional[str]:
        if to in self.delay_for:
            await asyncio.sleep(self.delay)
        if to in self.fail_for:
            raise EmailDispatchError("mailbox unavailable", recipient=to)
        self.sent.append((to, message))
        return f"msg-{len(self.sent)}"

    async def aclose(self) -> None:
        self.closed = True

    @property
    def recipients(self) -> List[str]:
        return [to for to, _ in self.sent]


class RecordingRepository(NotificationRepository):
    """Repository that records mood lookups and can fail them per user."""

    def __init__(self, session_factory, failing_users: Set[str] = None):
        super().__init__(session_factory)
        self.mood_lookups: List[str] = []
        self.failing_users = failing_users or set()

    def find_mood_entry(self, user_id, entry_date):
        self.mood_lookups.append(user_id)
        if user_id in self.failing_users:
            raise DataStoreError(f"Failed to find mood entry for {user_id}")
        return super().find_mood_entry(user_id, entry_date)


def make_token(user_id: str, email: str, expires_in: timedelta = timedelta(hours=1),
               secret: str = JWT_TEST_SECRET, **extra_claims) -> str:
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": datetime.utcnow() + expires_in,
    }
    claims.update(extra_claims)
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str, email: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


def add_user(db, user_id: str, email: str, full_name: str = None) -> User:
    user = User(id=user_id, email=email, full_name=full_name)
    db.add(user)
    db.commit()
    return user


def add_contact(db, user_id: str, name: str, email: str, relationship: str = "Mãe") -> SupportContact:
    contact = SupportContact(user_id=user_id, name=name, email=email, relationship_type=relationship)
    db.add(contact)
    db.commit()
    return contact


def add_mood(db, user_id: str, entry_date: date, mood_value: int) -> MoodEntry:
    entry = MoodEntry(user_id=user_id, entry_date=entry_date, mood_value=mood_value)
    db.add(entry)
    db.commit()
    return entry
