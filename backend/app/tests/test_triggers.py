"""
Tests for the scheduled sweep and mood-event trigger adapters.
"""
import asyncio
from datetime import date, datetime, timezone

import pytest

from app.core.errors import ConfigurationError, InvalidEventPayload, TriggerAuthError
from app.services.triggers import MoodEventAdapter, ScheduledSweepAdapter
from app.tests.support import REFERENCE_DATE, add_contact, add_mood, add_user


class FactorySpy:
    """Dispatcher factory that counts how often it is asked for a dispatcher."""

    def __init__(self, build=None):
        self.calls = 0
        self._build = build

    def __call__(self):
        self.calls += 1
        if self._build is None:
            raise AssertionError("dispatcher should not have been built")
        return self._build()


def mood_event(mood_value, user_id="user-d", entry_date="2024-03-14", event_type="INSERT", table="mood_entries"):
    return {
        "type": event_type,
        "table": table,
        "record": {
            "id": "m-1",
            "user_id": user_id,
            "mood_value": mood_value,
            "entry_date": entry_date,
            "created_at": "2024-03-14T21:05:00Z",
        },
        "old_record": None,
    }


def test_sweep_rejects_missing_secret_before_any_work():
    factory = FactorySpy()
    adapter = ScheduledSweepAdapter("s3cret", factory, "America/Sao_Paulo")

    with pytest.raises(TriggerAuthError):
        asyncio.run(adapter.handle(None))
    with pytest.raises(TriggerAuthError):
        asyncio.run(adapter.handle("wrong"))
    assert factory.calls == 0


def test_sweep_without_configured_secret_is_a_configuration_error():
    factory = FactorySpy()
    adapter = ScheduledSweepAdapter("", factory, "America/Sao_Paulo")

    with pytest.raises(ConfigurationError):
        asyncio.run(adapter.handle("anything"))
    assert factory.calls == 0


def test_sweep_runs_for_yesterday_in_local_time(db, make_dispatcher, email_sender):
    """00:30 UTC on the 15th is still the 14th in Sao Paulo, so the 13th is swept."""
    add_user(db, "user-a", "ana@example.com")
    add_contact(db, "user-a", "Maria Souza", "maria@example.com")
    adapter = ScheduledSweepAdapter("s3cret", FactorySpy(make_dispatcher), "America/Sao_Paulo")

    summary = asyncio.run(adapter.handle("s3cret", now=datetime(2024, 3, 15, 0, 30, tzinfo=timezone.utc)))

    assert summary.reference_date == date(2024, 3, 13)
    assert summary.emails_sent == 1
    assert email_sender.closed is True


def test_event_for_fine_mood_does_no_work():
    factory = FactorySpy()
    adapter = MoodEventAdapter(factory)

    response = asyncio.run(adapter.handle(mood_event(5)))

    assert response.status == "not_low"
    assert factory.calls == 0


@pytest.mark.parametrize("event_type, table", [("UPDATE", "mood_entries"), ("INSERT", "journal_entries")])
def test_event_other_than_mood_insert_is_ignored(event_type, table):
    factory = FactorySpy()

    response = asyncio.run(MoodEventAdapter(factory).handle(mood_event(1, event_type=event_type, table=table)))

    assert response.status == "ignored"
    assert factory.calls == 0


@pytest.mark.parametrize("body", [
    {"table": "mood_entries"},
    {"type": "INSERT", "table": "mood_entries"},
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "user-d", "mood_value": 1}},
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "", "mood_value": 1, "entry_date": "2024-03-14"}},
    ["not", "an", "object"],
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "user-d", "mood_value": True, "entry_date": "2024-03-14"}},
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "user-d", "mood_value": "2", "entry_date": "2024-03-14"}},
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "user-d", "mood_value": 0, "entry_date": "2024-03-14"}},
    {"type": "INSERT", "table": "mood_entries", "record": {"user_id": "user-d", "mood_value": 6, "entry_date": "2024-03-14"}},
])
def test_malformed_event_is_rejected(body):
    factory = FactorySpy()

    with pytest.raises(InvalidEventPayload):
        asyncio.run(MoodEventAdapter(factory).handle(body))
    assert factory.calls == 0


def test_event_webhook_secret_is_checked_when_configured():
    factory = FactorySpy()
    adapter = MoodEventAdapter(factory, webhook_secret="hook")

    with pytest.raises(TriggerAuthError):
        asyncio.run(adapter.handle(mood_event(1), None))
    assert factory.calls == 0


def test_event_for_low_mood_dispatches(db, make_dispatcher, email_sender):
    add_user(db, "user-d", "diego@example.com", "Diego Alves")
    add_contact(db, "user-d", "Helena Rocha", "helena@example.com")
    add_mood(db, "user-d", REFERENCE_DATE, 2)
    factory = FactorySpy(make_dispatcher)

    response = asyncio.run(MoodEventAdapter(factory).handle(mood_event(2)))

    assert response.status == "dispatched"
    assert response.outcome.reference_date == REFERENCE_DATE
    assert factory.calls == 1
    assert email_sender.recipients == ["helena@example.com"]
    assert "baixo (2)" in email_sender.sent[0][1].html
