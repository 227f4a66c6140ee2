"""
Pydantic schemas for the mood-check notification pipeline.
"""
import enum
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import date, datetime

LOW_MOOD_VALUES = frozenset({1, 2})


class TriggerKind(str, enum.Enum):
    """Entry point that started an evaluation."""
    BATCH = "batch"
    EVENT = "event"


class NotificationReason(str, enum.Enum):
    """Why a notification is warranted."""
    NO_ENTRY = "no_entry"
    LOW_MOOD = "low_mood"

    @property
    def description(self) -> str:
        if self is NotificationReason.NO_ENTRY:
            return "no entry recorded"
        return "low mood recorded"


class EvaluationState(str, enum.Enum):
    """State of a single (user, reference date) evaluation."""
    PENDING = "pending"
    EVALUATED_NONE = "evaluated_none"
    EVALUATED_NOTIFY = "evaluated_notify"
    NO_CONTACTS = "no_contacts"
    DISPATCHING = "dispatching"
    DISPATCHED = "dispatched"
    PARTIALLY_DISPATCHED = "partially_dispatched"
    SUPPRESSED = "suppressed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({
    EvaluationState.EVALUATED_NONE,
    EvaluationState.NO_CONTACTS,
    EvaluationState.DISPATCHED,
    EvaluationState.PARTIALLY_DISPATCHED,
    EvaluationState.SUPPRESSED,
    EvaluationState.FAILED,
})


class RecipientStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    DUPLICATE = "duplicate"


class UserIdentity(BaseModel):
    """Identity-provider view of a user."""
    id: str
    email: str
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Profile name, else the local part of the email."""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        local_part = self.email.split("@")[0] if self.email else ""
        return local_part or "Usuário"


class NotificationDecision(BaseModel):
    """Result of evaluating one user's mood for one reference date."""
    user_id: str
    reference_date: date
    reason: Optional[NotificationReason] = None
    mood_value: Optional[int] = None

    @property
    def should_notify(self) -> bool:
        return self.reason is not None


class EmailMessage(BaseModel):
    """A rendered notification, before it is addressed to a recipient."""
    subject: str
    html: str


class RecipientOutcome(BaseModel):
    contact_id: str
    email: str
    status: RecipientStatus
    error: Optional[str] = None


class UserOutcome(BaseModel):
    """Outcome of processing one user for one reference date."""
    user_id: str
    reference_date: date
    trigger: TriggerKind
    state: EvaluationState = EvaluationState.PENDING
    reason: Optional[NotificationReason] = None
    mood_value: Optional[int] = None
    recipients: List[RecipientOutcome] = []
    error: Optional[str] = None

    def count(self, status: RecipientStatus) -> int:
        return sum(1 for r in self.recipients if r.status == status)

    @property
    def emails_attempted(self) -> int:
        return self.count(RecipientStatus.SENT) + self.count(RecipientStatus.FAILED)


class RunSummary(BaseModel):
    """Aggregate report of a batch or single-user run."""
    reference_date: date
    trigger: TriggerKind
    candidates: int = 0
    evaluated: int = 0
    notified_users: int = 0
    emails_attempted: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    duplicates_suppressed: int = 0
    failed_user_ids: List[str] = []
    completed_user_ids: List[str] = []
    unfinished_user_ids: List[str] = []
    timed_out: bool = False

    def add(self, outcome: UserOutcome) -> None:
        """Fold one user's outcome into the totals."""
        self.completed_user_ids.append(outcome.user_id)
        if outcome.state != EvaluationState.FAILED or outcome.reason is not None:
            self.evaluated += 1
        if outcome.state == EvaluationState.FAILED:
            self.failed_user_ids.append(outcome.user_id)
        sent = outcome.count(RecipientStatus.SENT)
        if sent:
            self.notified_users += 1
        self.emails_sent += sent
        self.emails_failed += outcome.count(RecipientStatus.FAILED)
        self.emails_attempted += outcome.emails_attempted
        self.duplicates_suppressed += outcome.count(RecipientStatus.DUPLICATE)


class MoodEventRecord(BaseModel):
    """The inserted mood_entries row carried by a change notification."""
    id: Optional[Union[str, int]] = None
    user_id: str = Field(..., min_length=1)
    mood_value: int = Field(..., ge=1, le=5, strict=True)
    entry_date: date
    created_at: Optional[datetime] = None


class MoodEventPayload(BaseModel):
    """Change-notification envelope sent by the data store."""
    type: str
    table: str
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None


class EventResponse(BaseModel):
    """Acknowledgement returned to the change-notification runtime."""
    status: str
    detail: Optional[str] = None
    outcome: Optional[UserOutcome] = None
