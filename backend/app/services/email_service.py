"""
Email delivery through the Resend HTTP API.
"""
import asyncio
from typing import List, Optional, Tuple
import httpx
import logging

from app.core.config import Settings
from app.core.errors import ConfigurationError, EmailDispatchError
from app.schemas.notification import EmailMessage

logger = logging.getLogger(__name__)


class EmailSender:
    """Sends one rendered message to one recipient."""

    async def send(self, to: str, message: EmailMessage) -> Optional[str]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class ResendEmailSender(EmailSender):
    """
    Posts {from, to, subject, html} to Resend.

    At most max_concurrency requests are in flight at once across every
    send made through this instance.
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        max_concurrency: int = 5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError("RESEND_API_KEY is not configured")
        self._api_url = api_url
        self._from_email = from_email
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._limiter = asyncio.Semaphore(max(1, max_concurrency))

    async def send(self, to: str, message: EmailMessage) -> Optional[str]:
        payload = {
            "from": self._from_email,
            "to": [to],
            "subject": message.subject,
            "html": message.html,
        }
        async with self._limiter:
            try:
                response = await self._client.post(self._api_url, json=payload, headers=self._headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                error_text = e.response.text if hasattr(e.response, 'text') else str(e)
                logger.error(f"Resend rejected email to {to}: {e.response.status_code} - {error_text}")
                raise EmailDispatchError(f"Resend HTTP error: {e.response.status_code}", recipient=to) from e
            except httpx.HTTPError as e:
                logger.error(f"Network error sending email to {to}: {e}")
                raise EmailDispatchError(f"Resend network error: {e}", recipient=to) from e

        try:
            data = response.json()
        except ValueError:
            return None
        return data.get("id") if isinstance(data, dict) else None

    async def aclose(self) -> None:
        await self._client.aclose()


class LoggingEmailSender(EmailSender):
    """Records messages instead of sending them (dry runs)."""

    def __init__(self):
        self.sent: List[Tuple[str, EmailMessage]] = []

    async def send(self, to: str, message: EmailMessage) -> Optional[str]:
        self.sent.append((to, message))
        logger.info(f"[dry-run] Email to {to}: {message.subject}")
        return None


def build_email_sender(settings: Settings) -> EmailSender:
    return ResendEmailSender(
        api_key=settings.RESEND_API_KEY,
        from_email=settings.NOTIFICATION_FROM_EMAIL,
        api_url=settings.RESEND_API_URL,
        timeout=settings.EMAIL_TIMEOUT_SECONDS,
        max_concurrency=settings.EMAIL_MAX_CONCURRENCY,
    )
