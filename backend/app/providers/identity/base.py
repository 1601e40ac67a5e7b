"""Abstract base class for the identity directory.

The directory owns principals (user accounts) and everything that hangs off
them. The deletion flow only needs four narrow operations from it.
"""

import uuid
from abc import ABC, abstractmethod


class IdentityDirectory(ABC):
    """Interface to the store that owns user principals.

    WHY ABSTRACT CLASS:
    - Keeps the deletion flow independent of the storage engine
    - Enables an in-memory directory for tests and local tooling

    All methods take a normalized identifier (see app.core.identifiers).
    Storage failures raise IdentityDirectoryError.
    """

    @abstractmethod
    async def exists_identity(self, identifier: str) -> bool:
        """Return True if a principal is registered under the identifier."""
        ...

    @abstractmethod
    async def resolve_principal(self, identifier: str) -> uuid.UUID | None:
        """Look up the principal id for an identifier.

        Returns:
            Principal id, or None if no principal matches (including one
            that was already deleted).
        """
        ...

    @abstractmethod
    async def anonymize_retained_records(self, principal_id: uuid.UUID) -> int:
        """Strip personal data from records kept for compliance.

        Returns:
            Number of records anonymized.
        """
        ...

    @abstractmethod
    async def delete_principal(self, principal_id: uuid.UUID) -> bool:
        """Delete the principal; dependent rows cascade in storage.

        Returns:
            True if a principal was deleted, False if it was already gone.
        """
        ...
