"""Mock notifier for testing.

Enables unit testing of the deletion flow without WhatsApp or Resend.
"""

from typing import Any

from app.core.identifiers import NotificationChannel
from app.providers.notifier.base import Notifier


class MockNotifier(Notifier):
    """Records every code it is asked to send.

    WHY MOCK:
    - Unit tests shouldn't hit real messaging APIs (cost, speed, flakiness)
    - Tests need the plaintext code, which is never stored anywhere else
    - Can simulate delivery failure

    Attributes:
        sent: Record of all sends, as {"destination", "code"} dicts.
        deliver: Return value of send(); False simulates a failed delivery.
    """

    def __init__(self, channel: NotificationChannel, *, deliver: bool = True) -> None:
        self._channel = channel
        self.deliver = deliver
        self.sent: list[dict[str, Any]] = []

    @property
    def channel(self) -> NotificationChannel:
        """Return the channel this mock stands in for."""
        return self._channel

    async def send(self, destination: str, code: str) -> bool:
        """Record the send and return the configured outcome."""
        self.sent.append({"destination": destination, "code": code})
        return self.deliver

    @property
    def last_code(self) -> str | None:
        """Most recently sent code, or None if nothing was sent."""
        if not self.sent:
            return None
        return str(self.sent[-1]["code"])
