"""
Tests for identity lookups.
"""
import asyncio

import httpx
import pytest

from app.core.config import Settings
from app.core.errors import ConfigurationError, IdentityLookupError
from app.services.identity_service import (
    AuthAdminIdentityProvider, DatabaseIdentityProvider, build_identity_provider
)
from app.services.contact_resolver import SupportContactResolver
from app.services.mood_evaluation import MoodEvaluator
from app.services.notification_dispatcher import NotificationDispatcher, build_dispatcher
from app.services.repository import NotificationRepository
from app.tests.support import FakeEmailSender, add_user


def admin_provider(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return AuthAdminIdentityProvider("https://auth.example.com/auth/v1/", "service-key", client=client)


def test_database_provider(db, session_factory):
    add_user(db, "user-a", "ana@example.com", "Ana Souza")
    provider = DatabaseIdentityProvider(NotificationRepository(session_factory))

    assert provider.get_user("user-a").display_name == "Ana Souza"
    with pytest.raises(IdentityLookupError):
        provider.get_user("nobody")


def test_auth_admin_provider_reads_profile_name():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "id": "user-a",
            "email": "ana@example.com",
            "user_metadata": {"full_name": "Ana Souza"},
        })

    identity = admin_provider(handler).get_user("user-a")

    assert identity.email == "ana@example.com"
    assert identity.full_name == "Ana Souza"
    assert str(seen[0].url) == "https://auth.example.com/auth/v1/admin/users/user-a"
    assert seen[0].headers["apikey"] == "service-key"


def test_auth_admin_provider_unwraps_user_record():
    def handler(request):
        return httpx.Response(200, json={"user": {"id": "user-a", "email": "ana@example.com"}})

    identity = admin_provider(handler).get_user("user-a")

    assert identity.full_name is None
    assert identity.display_name == "ana"


def test_auth_admin_provider_errors():
    with pytest.raises(IdentityLookupError):
        admin_provider(lambda request: httpx.Response(404, json={"msg": "User not found"})).get_user("user-a")
    with pytest.raises(IdentityLookupError):
        admin_provider(lambda request: httpx.Response(200, json={"id": "user-a"})).get_user("user-a")


def test_build_identity_provider(session_factory):
    repository = NotificationRepository(session_factory)

    assert isinstance(build_identity_provider(Settings(IDENTITY_BACKEND="database"), repository),
                      DatabaseIdentityProvider)
    with pytest.raises(ConfigurationError):
        build_identity_provider(Settings(IDENTITY_BACKEND="auth_admin", AUTH_ADMIN_URL=""), repository)
    with pytest.raises(ConfigurationError):
        build_identity_provider(Settings(IDENTITY_BACKEND="ldap"), repository)


def test_dispatcher_aclose_releases_identity_client(session_factory):
    """Closing a dispatcher closes the identity HTTP client as well as the email client."""
    identity_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    repository = NotificationRepository(session_factory)
    sender = FakeEmailSender()
    dispatcher = NotificationDispatcher(
        repository=repository,
        evaluator=MoodEvaluator(repository),
        resolver=SupportContactResolver(repository),
        identity_provider=AuthAdminIdentityProvider("https://auth.example.com/auth/v1", "service-key",
                                                    client=identity_client),
        email_sender=sender,
    )

    asyncio.run(dispatcher.aclose())

    assert sender.closed is True
    assert identity_client.is_closed


def test_identity_client_closed_when_email_close_fails(session_factory):
    class BrokenCloseSender(FakeEmailSender):
        async def aclose(self):
            raise RuntimeError("close failed")

    identity_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    repository = NotificationRepository(session_factory)
    dispatcher = NotificationDispatcher(
        repository=repository,
        evaluator=MoodEvaluator(repository),
        resolver=SupportContactResolver(repository),
        identity_provider=AuthAdminIdentityProvider("https://auth.example.com/auth/v1", "service-key",
                                                    client=identity_client),
        email_sender=BrokenCloseSender(),
    )

    with pytest.raises(RuntimeError):
        asyncio.run(dispatcher.aclose())
    assert identity_client.is_closed


def test_build_dispatcher_with_auth_admin_closes_on_aclose(session_factory):
    settings = Settings(IDENTITY_BACKEND="auth_admin", AUTH_ADMIN_URL="https://auth.example.com/auth/v1",
                        AUTH_SERVICE_ROLE_KEY="service-key")
    sender = FakeEmailSender()
    dispatcher = build_dispatcher(settings, session_factory, email_sender=sender)

    asyncio.run(dispatcher.aclose())

    assert sender.closed is True
    assert dispatcher._identity._client.is_closed
