"""
Notification dispatcher: evaluates users' moods and emails their support contacts.

Two entry points share one per-user routine, so the scheduled sweep and the
mood-entry event can never disagree on the decision policy:

- run_batch(reference_date): every user owning at least one contact,
  processed concurrently under a semaphore and an overall time budget.
- run_single(user_id, reference_date): one user, used by the event trigger.

Per user the steps run in order: evaluate, resolve contacts, look up the
user's identity, then dispatch one email per contact. Each contact's send is
guarded by a persisted claim on (user_id, reference_date, contact_id), so a
contact is emailed at most once per incident even when both triggers fire.
Failures are isolated per recipient and per user; a run always finishes
with a summary.
"""
import asyncio
from datetime import date
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import DataStoreError, EmailDispatchError, IdentityLookupError
from app.core.utils import yesterday
from app.schemas.notification import (
    EvaluationState, NotificationDecision, RecipientOutcome, RecipientStatus,
    RunSummary, TriggerKind, UserIdentity, UserOutcome,
)
from app.schemas.support_contact import SupportContactResponse
from app.services.contact_resolver import SupportContactResolver
from app.services.email_service import EmailSender, build_email_sender
from app.services.identity_service import IdentityProvider, build_identity_provider
from app.services.mood_evaluation import MoodEvaluator
from app.services.notification_templates import render_notification
from app.services.repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Orchestrates evaluation, contact resolution and email dispatch."""

    def __init__(
        self,
        repository: NotificationRepository,
        evaluator: MoodEvaluator,
        resolver: SupportContactResolver,
        identity_provider: IdentityProvider,
        email_sender: EmailSender,
        concurrency: int = 10,
        run_timeout: float = 120.0,
        timezone: str = "America/Sao_Paulo",
    ):
        self._repository = repository
        self._evaluator = evaluator
        self._resolver = resolver
        self._identity = identity_provider
        self._email = email_sender
        self._concurrency = max(1, concurrency)
        self._run_timeout = run_timeout
        self._timezone = timezone

    async def aclose(self) -> None:
        """Release the email and identity clients."""
        try:
            await self._email.aclose()
        finally:
            self._identity.close()

    async def run_batch(self, reference_date: date) -> RunSummary:
        """
        Process every user with support contacts for reference_date.

        Raises DataStoreError only when the candidate list itself cannot be
        read; every later failure is reported in the summary.
        """
        summary = RunSummary(reference_date=reference_date, trigger=TriggerKind.BATCH)
        user_ids = await asyncio.to_thread(self._repository.list_users_with_contacts)
        summary.candidates = len(user_ids)
        logger.info(f"Daily mood check for {reference_date}: {len(user_ids)} candidate user(s)")

        if not user_ids:
            return summary

        semaphore = asyncio.Semaphore(self._concurrency)

        async def guarded(user_id: str) -> UserOutcome:
            async with semaphore:
                return await self._process_user_safely(user_id, reference_date, TriggerKind.BATCH)

        tasks = {asyncio.create_task(guarded(user_id)): user_id for user_id in user_ids}
        done, pending = await asyncio.wait(tasks.keys(), timeout=self._run_timeout)

        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            summary.add(task.result())

        summary.completed_user_ids.sort()
        summary.failed_user_ids.sort()
        summary.unfinished_user_ids = sorted(tasks[task] for task in pending)
        summary.timed_out = bool(pending)

        if summary.timed_out:
            logger.error(
                f"Daily mood check for {reference_date} exceeded {self._run_timeout}s: "
                f"completed={summary.completed_user_ids} unfinished={summary.unfinished_user_ids}"
            )
        if summary.failed_user_ids:
            logger.warning(f"Daily mood check for {reference_date}: failed users {summary.failed_user_ids}")
        logger.info(
            f"Daily mood check for {reference_date} finished: evaluated={summary.evaluated} "
            f"notified={summary.notified_users} attempted={summary.emails_attempted} "
            f"sent={summary.emails_sent} failed={summary.emails_failed} "
            f"duplicates={summary.duplicates_suppressed}"
        )
        return summary

    async def run_single(
        self,
        user_id: str,
        reference_date: date,
        trigger: TriggerKind = TriggerKind.EVENT,
    ) -> UserOutcome:
        """Process one user for reference_date."""
        return await self._process_user_safely(user_id, reference_date, trigger)

    async def _process_user_safely(self, user_id: str, reference_date: date, trigger: TriggerKind) -> UserOutcome:
        try:
            return await self._process_user(user_id, reference_date, trigger)
        except asyncio.CancelledError:
            logger.warning(f"Processing of user {user_id} for {reference_date} was abandoned")
            raise
        except Exception as e:
            logger.error(f"Unexpected error processing user {user_id} for {reference_date}: {e}", exc_info=True)
            return UserOutcome(
                user_id=user_id,
                reference_date=reference_date,
                trigger=trigger,
                state=EvaluationState.FAILED,
                error=str(e),
            )

    async def _process_user(self, user_id: str, reference_date: date, trigger: TriggerKind) -> UserOutcome:
        outcome = UserOutcome(user_id=user_id, reference_date=reference_date, trigger=trigger)

        try:
            decision = await asyncio.to_thread(self._evaluator.evaluate, user_id, reference_date)
        except DataStoreError as e:
            return self._fail(outcome, f"Mood lookup failed: {e}")

        outcome.reason = decision.reason
        outcome.mood_value = decision.mood_value
        if not decision.should_notify:
            outcome.state = EvaluationState.EVALUATED_NONE
            return outcome
        outcome.state = EvaluationState.EVALUATED_NOTIFY

        try:
            contacts = await asyncio.to_thread(self._resolver.resolve, user_id)
        except DataStoreError as e:
            return self._fail(outcome, f"Contact lookup failed: {e}")

        if not contacts:
            logger.info(f"User {user_id} needs attention on {reference_date} but has no support contacts")
            outcome.state = EvaluationState.NO_CONTACTS
            return outcome

        try:
            identity = await asyncio.to_thread(self._identity.get_user, user_id)
        except (DataStoreError, IdentityLookupError) as e:
            return self._fail(outcome, f"Identity lookup failed: {e}")

        outcome.state = EvaluationState.DISPATCHING
        outcome.recipients = list(await asyncio.gather(*(
            self._dispatch_to_contact(identity, decision, contact, trigger)
            for contact in contacts
        )))
        outcome.state = self._final_state(outcome.recipients)

        log = logger.info if outcome.state != EvaluationState.FAILED else logger.error
        log(
            f"User {user_id} for {reference_date} [{trigger.value}]: {outcome.state.value} "
            f"(sent={outcome.count(RecipientStatus.SENT)}, failed={outcome.count(RecipientStatus.FAILED)}, "
            f"duplicates={outcome.count(RecipientStatus.DUPLICATE)})"
        )
        return outcome

    async def _dispatch_to_contact(
        self,
        identity: UserIdentity,
        decision: NotificationDecision,
        contact: SupportContactResponse,
        trigger: TriggerKind,
    ) -> RecipientOutcome:
        result = RecipientOutcome(contact_id=contact.id, email=contact.email, status=RecipientStatus.FAILED)

        try:
            claimed = await asyncio.to_thread(
                self._repository.claim_delivery,
                decision.user_id, decision.reference_date, contact, trigger, decision.reason,
            )
        except DataStoreError as e:
            # No claim, no send
            result.error = f"Could not record delivery: {e}"
            logger.error(f"Skipping {contact.email} for user {decision.user_id}: {result.error}")
            return result

        if not claimed:
            logger.info(
                f"Suppressed duplicate notification to {contact.email} "
                f"for user {decision.user_id} on {decision.reference_date}"
            )
            result.status = RecipientStatus.DUPLICATE
            return result

        message = render_notification(
            identity,
            decision,
            trigger,
            contact_name=contact.name,
            is_yesterday=decision.reference_date == yesterday(self._timezone),
        )

        try:
            await self._email.send(contact.email, message)
        except EmailDispatchError as e:
            result.error = str(e)
        except Exception as e:
            logger.error(f"Unexpected error emailing {contact.email}: {e}", exc_info=True)
            result.error = str(e)
        else:
            result.status = RecipientStatus.SENT
            logger.info(f"Email sent to {contact.email} ({contact.relationship} of user {decision.user_id})")

        if result.error:
            logger.error(f"Failed to email {contact.email} about user {decision.user_id}: {result.error}")

        try:
            await asyncio.to_thread(
                self._repository.complete_delivery,
                decision.user_id, decision.reference_date, contact.id, result.error,
            )
        except DataStoreError as e:
            logger.error(
                f"Could not record delivery status for {contact.email} "
                f"(user {decision.user_id}, {decision.reference_date}): {e}"
            )
        return result

    @staticmethod
    def _final_state(recipients: List[RecipientOutcome]) -> EvaluationState:
        sent = sum(1 for r in recipients if r.status == RecipientStatus.SENT)
        failed = sum(1 for r in recipients if r.status == RecipientStatus.FAILED)
        if failed and sent:
            return EvaluationState.PARTIALLY_DISPATCHED
        if failed:
            return EvaluationState.FAILED
        if sent:
            return EvaluationState.DISPATCHED
        return EvaluationState.SUPPRESSED

    @staticmethod
    def _fail(outcome: UserOutcome, error: str) -> UserOutcome:
        logger.error(f"User {outcome.user_id} for {outcome.reference_date} skipped: {error}")
        outcome.state = EvaluationState.FAILED
        outcome.error = error
        return outcome


def build_dispatcher(
    settings: Settings,
    session_factory: Callable[[], Session],
    email_sender: Optional[EmailSender] = None,
) -> NotificationDispatcher:
    """
    Wire a dispatcher from settings.

    Raises ConfigurationError when a required credential is missing, before
    any data-store or email call is made.
    """
    repository = NotificationRepository(session_factory)
    identity_provider = build_identity_provider(settings, repository)
    return NotificationDispatcher(
        repository=repository,
        evaluator=MoodEvaluator(repository),
        resolver=SupportContactResolver(repository),
        identity_provider=identity_provider,
        email_sender=email_sender or build_email_sender(settings),
        concurrency=settings.NOTIFY_CONCURRENCY,
        run_timeout=settings.NOTIFY_RUN_TIMEOUT_SECONDS,
        timezone=settings.NOTIFICATION_TIMEZONE,
    )
