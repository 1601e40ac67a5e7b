"""Cascading deletion of a verified user's identity.

Steps, treated as one unit by the caller:
1. Re-resolve the identifier to a principal id (never reuse an id looked up
   earlier in the flow).
2. Anonymize compliance-retained records (orders).
3. Delete the principal; dependent rows cascade at the storage layer.

A principal that cannot be resolved is treated as already deleted. That
makes the executor idempotent, which is what keeps two concurrent
confirmations of the same code safe: both converge on one deleted principal.
"""

import uuid
from dataclasses import dataclass

import structlog

from app.core.errors import DeletionFailedError
from app.core.identifiers import mask_identifier
from app.providers.errors import ProviderError
from app.providers.identity.base import IdentityDirectory

logger = structlog.get_logger()


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of a cascading deletion.

    Attributes:
        principal_id: Principal that was targeted. None if it was already gone
            before this call.
        anonymized_records: Retained records scrubbed by this call.
        already_absent: True if nothing was left to delete.
    """

    principal_id: uuid.UUID | None
    anonymized_records: int
    already_absent: bool


class CascadingDeletionExecutor:
    """Removes a principal and its dependent data through the directory."""

    def __init__(self, directory: IdentityDirectory) -> None:
        self.directory = directory

    async def execute(self, identifier: str) -> DeletionOutcome:
        """Delete the principal registered under a verified identifier.

        Args:
            identifier: Normalized identifier whose ownership was verified.

        Returns:
            DeletionOutcome describing what was removed.

        Raises:
            DeletionFailedError: If any directory operation fails.
        """
        masked = mask_identifier(identifier)
        try:
            principal_id = await self.directory.resolve_principal(identifier)
            if principal_id is None:
                logger.info("principal_already_absent", identifier=masked)
                return DeletionOutcome(
                    principal_id=None, anonymized_records=0, already_absent=True
                )

            anonymized = await self.directory.anonymize_retained_records(principal_id)
            deleted = await self.directory.delete_principal(principal_id)
        except ProviderError as exc:
            logger.error(
                "principal_delete_failed",
                identifier=masked,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise DeletionFailedError() from exc

        logger.info(
            "principal_deleted",
            identifier=masked,
            principal_id=str(principal_id),
            anonymized_records=anonymized,
            already_absent=not deleted,
        )
        return DeletionOutcome(
            principal_id=principal_id,
            anonymized_records=anonymized,
            already_absent=not deleted,
        )
