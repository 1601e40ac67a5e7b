"""Verification code notifier module.

Notifier interface, channel registry and per-channel adapters.
"""

from app.providers.notifier.base import Notifier, NotifierRegistry
from app.providers.notifier.mock_adapter import MockNotifier
from app.providers.notifier.resend_adapter import ResendEmailNotifier
from app.providers.notifier.whatsapp_adapter import WhatsAppNotifier

__all__ = [
    "Notifier",
    "NotifierRegistry",
    "MockNotifier",
    "ResendEmailNotifier",
    "WhatsAppNotifier",
]
