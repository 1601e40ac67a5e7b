"""Provider factory functions.

Singleton notifier registry for the process. The identity directory is not
a singleton: it is bound to the request's database session in
app.api.deps.
"""

from app.providers.notifier.base import NotifierRegistry
from app.providers.notifier.resend_adapter import ResendEmailNotifier
from app.providers.notifier.whatsapp_adapter import WhatsAppNotifier

_notifier_registry: NotifierRegistry | None = None


def get_notifier_registry() -> NotifierRegistry:
    """Get or create the notifier registry singleton.

    WHY SINGLETON:
    - Notifiers are stateless apart from configuration
    - Tests swap the whole registry in one place

    Returns:
        NotifierRegistry with the chat (WhatsApp) and email (Resend)
        notifiers.
    """
    global _notifier_registry

    if _notifier_registry is None:
        _notifier_registry = NotifierRegistry(
            [WhatsAppNotifier(), ResendEmailNotifier()]
        )

    return _notifier_registry


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _notifier_registry
    _notifier_registry = None
