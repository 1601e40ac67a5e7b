"""Abstract base class for verification code notifiers.

One adapter per delivery channel. The channel for a request is picked by
app.core.identifiers.select_channel; the deletion service never branches on
channel itself, it looks the notifier up in a NotifierRegistry.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.core.identifiers import NotificationChannel


class Notifier(ABC):
    """Sends a verification code to one destination.

    WHY ABSTRACT CLASS:
    - Enforces consistent interface across channels
    - Enables mock notifiers in tests

    Contract: ``send()`` reports delivery failure by returning False and
    never raises for upstream or configuration problems.
    """

    @property
    @abstractmethod
    def channel(self) -> NotificationChannel:
        """Channel this notifier delivers on."""
        ...

    @abstractmethod
    async def send(self, destination: str, code: str) -> bool:
        """Deliver a verification code.

        Args:
            destination: Normalized email address or phone number.
            code: Plaintext 6-digit code.

        Returns:
            True if the upstream service accepted the message.
        """
        ...


class NotifierRegistry:
    """Maps each channel to the notifier that serves it."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self._by_channel: dict[NotificationChannel, Notifier] = {
            notifier.channel: notifier for notifier in notifiers
        }

    def get(self, channel: NotificationChannel) -> Notifier:
        """Return the notifier for a channel.

        Raises:
            KeyError: If no notifier is registered for the channel.
        """
        return self._by_channel[channel]

    @property
    def channels(self) -> frozenset[NotificationChannel]:
        """Channels that have a registered notifier."""
        return frozenset(self._by_channel)
