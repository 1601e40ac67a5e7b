"""Provider abstraction layer.

Collaborators the account deletion flow reaches through narrow interfaces.

Exports:
    Error classes for provider error handling
    Factory functions for provider instances
"""

from app.providers.errors import IdentityDirectoryError, ProviderError
from app.providers.factory import get_notifier_registry, reset_providers

__all__ = [
    # Errors
    "ProviderError",
    "IdentityDirectoryError",
    # Factory
    "get_notifier_registry",
    "reset_providers",
]
