"""
Identity lookups used to address and personalise notifications.
"""
from typing import Optional
import httpx
import logging

from app.core.config import Settings
from app.core.errors import ConfigurationError, IdentityLookupError
from app.schemas.notification import UserIdentity
from app.services.repository import NotificationRepository

logger = logging.getLogger(__name__)


class IdentityProvider:
    """Resolves a user id to the user's email and optional profile name."""

    def get_user(self, user_id: str) -> UserIdentity:
        raise NotImplementedError

    def close(self) -> None:
        return None


class DatabaseIdentityProvider(IdentityProvider):
    """Reads the `users` mirror table."""

    def __init__(self, repository: NotificationRepository):
        self._repository = repository

    def get_user(self, user_id: str) -> UserIdentity:
        user = self._repository.get_user(user_id)
        if user is None:
            raise IdentityLookupError(f"User {user_id} not found")
        return user


class AuthAdminIdentityProvider(IdentityProvider):
    """
    Calls the identity provider's admin API:
    GET {base_url}/admin/users/{id} with the service-role key.
    """

    def __init__(self, base_url: str, service_role_key: str, timeout: float = 10.0,
                 client: Optional[httpx.Client] = None):
        if not base_url or not service_role_key:
            raise ConfigurationError("AUTH_ADMIN_URL and AUTH_SERVICE_ROLE_KEY are required")
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }
        self._client = client or httpx.Client(timeout=timeout)

    def get_user(self, user_id: str) -> UserIdentity:
        url = f"{self._base_url}/admin/users/{user_id}"
        try:
            response = self._client.get(url, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Identity lookup for {user_id} failed: HTTP {e.response.status_code}")
            raise IdentityLookupError(f"Identity lookup HTTP error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Identity lookup for {user_id} failed: {e}")
            raise IdentityLookupError(f"Identity lookup network error: {e}") from e

        # Some versions wrap the record in {"user": {...}}
        record = data.get("user", data) if isinstance(data, dict) else {}
        email = record.get("email")
        if not email:
            raise IdentityLookupError(f"User {user_id} has no email")
        metadata = record.get("user_metadata") or {}
        return UserIdentity(id=user_id, email=email, full_name=metadata.get("full_name"))

    def close(self) -> None:
        self._client.close()


def build_identity_provider(settings: Settings, repository: NotificationRepository) -> IdentityProvider:
    """Select the identity backend named by IDENTITY_BACKEND."""
    backend = settings.IDENTITY_BACKEND.lower()
    if backend == "database":
        return DatabaseIdentityProvider(repository)
    if backend == "auth_admin":
        return AuthAdminIdentityProvider(
            settings.AUTH_ADMIN_URL,
            settings.AUTH_SERVICE_ROLE_KEY,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    raise ConfigurationError(f"Unknown IDENTITY_BACKEND: {settings.IDENTITY_BACKEND}")
