"""Email notifier via the Resend API (email channel)."""

import httpx
import structlog

from app.core.config import settings
from app.core.identifiers import NotificationChannel, mask_identifier
from app.providers.notifier.base import Notifier

logger = structlog.get_logger()

_RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailNotifier(Notifier):
    """Delivers codes as short HTML emails.

    Args:
        client: Optional shared HTTP client. When omitted a client is
            opened per send.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    @property
    def channel(self) -> NotificationChannel:
        """Return the email channel."""
        return NotificationChannel.EMAIL

    def build_payload(self, email: str, code: str) -> dict:
        """Build the Resend request body for a code."""
        return {
            "from": settings.email_from,
            "to": [email],
            "subject": settings.email_subject,
            "html": (
                f"<p>Your 6 digit otp is <strong>{code}</strong>.</p>"
                f"<p>This code will expire in {settings.otp_ttl_minutes} minutes.</p>"
                "<p>If you did not ask to delete your account, ignore this email.</p>"
            ),
        }

    async def send(self, destination: str, code: str) -> bool:
        """Send the code to an email address."""
        api_key = settings.resend_api_key.get_secret_value()
        if not api_key:
            logger.error("notifier_not_configured", channel=self.channel.value)
            return False

        try:
            if self._client is not None:
                resp = await self._post(self._client, api_key, destination, code)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._post(client, api_key, destination, code)
        except httpx.HTTPError as exc:
            logger.error(
                "notifier_send_failed",
                channel=self.channel.value,
                destination=mask_identifier(destination),
                error_type=type(exc).__name__,
            )
            return False

        if resp.is_error:
            logger.error(
                "notifier_send_rejected",
                channel=self.channel.value,
                destination=mask_identifier(destination),
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            return False

        logger.info(
            "notifier_send_complete",
            channel=self.channel.value,
            destination=mask_identifier(destination),
        )
        return True

    async def _post(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        destination: str,
        code: str,
    ) -> httpx.Response:
        return await client.post(
            _RESEND_API_URL,
            headers={"Authorization": f"Bearer {api_key}"},
            json=self.build_payload(destination, code),
            timeout=settings.notifier_timeout_seconds,
        )
