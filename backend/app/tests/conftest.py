"""
Shared fixtures for the Equilibrius backend tests.
"""
import os

# Settings are read at import time, so the environment is set first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["RESEND_API_KEY"] = "re_test_key"
os.environ["WEBHOOK_SECRET"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.api.dependencies import get_dispatcher_factory
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app
from app.services.contact_resolver import SupportContactResolver
from app.services.email_service import EmailSender
from app.services.identity_service import DatabaseIdentityProvider
from app.services.mood_evaluation import MoodEvaluator
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.repository import NotificationRepository
from app.tests.support import FakeEmailSender, RecordingRepository


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def repository(session_factory):
    return RecordingRepository(session_factory)


@pytest.fixture
def make_dispatcher(repository, email_sender):
    """Build a dispatcher over the test database with fake email delivery."""

    def _make(repo: NotificationRepository = None, sender: EmailSender = None, **kwargs) -> NotificationDispatcher:
        repo = repo or repository
        return NotificationDispatcher(
            repository=repo,
            evaluator=MoodEvaluator(repo),
            resolver=SupportContactResolver(repo),
            identity_provider=DatabaseIdentityProvider(repo),
            email_sender=sender or email_sender,
            **kwargs,
        )

    return _make


@pytest.fixture
def client(session_factory, make_dispatcher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_dispatcher_factory] = lambda: make_dispatcher
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()
