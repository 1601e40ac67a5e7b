"""WhatsApp Cloud API notifier (chat channel).

Sends the code through a pre-approved authentication template. The code is
passed twice: once for the body text and once for the copy-code URL button.
"""

import httpx
import structlog

from app.core.config import settings
from app.core.identifiers import NotificationChannel, mask_identifier
from app.providers.notifier.base import Notifier

logger = structlog.get_logger()

_GRAPH_API_URL = "https://graph.facebook.com"


class WhatsAppNotifier(Notifier):
    """Delivers codes as WhatsApp template messages.

    Args:
        client: Optional shared HTTP client. When omitted a client is
            opened per send.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    @property
    def channel(self) -> NotificationChannel:
        """Return the chat channel."""
        return NotificationChannel.CHAT

    def build_payload(self, phone: str, code: str) -> dict:
        """Build the Graph API message body for a code."""
        return {
            "messaging_product": "whatsapp",
            "to": phone,
            "type": "template",
            "template": {
                "name": settings.whatsapp_template_name,
                "language": {"code": settings.whatsapp_template_lang},
                "components": [
                    {
                        "type": "body",
                        "parameters": [{"type": "text", "text": code}],
                    },
                    {
                        "type": "button",
                        "sub_type": "url",
                        "index": 0,
                        "parameters": [{"type": "text", "text": code}],
                    },
                ],
            },
        }

    async def send(self, destination: str, code: str) -> bool:
        """Send the code to a phone number over WhatsApp."""
        token = settings.whatsapp_token.get_secret_value()
        if not token or not settings.whatsapp_phone_id or not settings.whatsapp_template_name:
            logger.error("notifier_not_configured", channel=self.channel.value)
            return False

        url = (
            f"{_GRAPH_API_URL}/{settings.whatsapp_api_version}"
            f"/{settings.whatsapp_phone_id}/messages"
        )
        try:
            if self._client is not None:
                resp = await self._post(self._client, url, token, destination, code)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._post(client, url, token, destination, code)
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
        url: str,
        token: str,
        destination: str,
        code: str,
    ) -> httpx.Response:
        return await client.post(
            url,
            headers={"Authorization": f"Bearer {token}"},
            json=self.build_payload(destination, code),
            timeout=settings.notifier_timeout_seconds,
        )
