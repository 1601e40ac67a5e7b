"""Provider error taxonomy.

Error classes for the collaborator layer (identity directory, notifiers).
The account deletion service translates these into API errors.

WHY SEPARATE ERROR CLASSES:
- Callers can tell a collaborator outage apart from a business failure
- Provider-agnostic error handling (adapters map to these)
"""


__all__ = [
    "ProviderError",
    "IdentityDirectoryError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    All provider-specific exceptions should inherit from this class,
    allowing callers to catch all provider errors with a single handler.
    """

    pass


class IdentityDirectoryError(ProviderError):
    """The identity directory could not complete an operation.

    Raised for storage failures during lookup, anonymization or principal
    deletion. Never raised for "principal not found", which is a normal
    answer, not a failure.
    """

    pass

