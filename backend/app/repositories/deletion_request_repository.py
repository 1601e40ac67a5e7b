"""Repositories for AccountDeletionRequest rows.

The deletion service talks to the store through DeletionRequestRepository so
it can run against PostgreSQL in production and an in-memory store in tests
and local tooling.

Rows are append-only apart from two status transitions: pending → superseded
(a newer code was issued) and pending → completed (verified). Nothing here
deletes rows.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deletion_request import AccountDeletionRequest, DeletionRequestStatus

logger = logging.getLogger(__name__)

_PENDING = DeletionRequestStatus.PENDING.value


class DeletionRequestRepository(ABC):
    """Store for issued deletion challenges."""

    @abstractmethod
    async def create(
        self,
        *,
        identifier: str,
        otp_hash: str,
        otp_expires_at: datetime,
        created_at: datetime,
        reason: str | None = None,
    ) -> AccountDeletionRequest:
        """Persist a new pending request.

        Args:
            identifier: Normalized email or phone.
            otp_hash: Digest of the issued code.
            otp_expires_at: Expiry of the code.
            created_at: Issuance time.
            reason: Optional user-supplied reason.

        Returns:
            The created request.
        """

    @abstractmethod
    async def supersede_pending(self, *, identifier: str) -> int:
        """Mark every pending request for an identifier as superseded.

        Returns:
            Number of rows transitioned.
        """

    @abstractmethod
    async def get_latest_pending(
        self, *, identifier: str, now: datetime
    ) -> AccountDeletionRequest | None:
        """Return the newest pending, unexpired request for an identifier.

        A request expiring exactly at ``now`` is still eligible.
        """

    @abstractmethod
    async def mark_completed(
        self, request_id: uuid.UUID, *, verified_at: datetime
    ) -> None:
        """Transition a pending request to completed.

        A request that is no longer pending is left as is, so two
        confirmations racing on the same row both succeed.
        """

    @abstractmethod
    async def list_for_identifier(
        self, identifier: str
    ) -> list[AccountDeletionRequest]:
        """Return every request for an identifier, newest first."""

    @abstractmethod
    async def commit(self) -> None:
        """Make all writes so far durable."""


class SqlDeletionRequestRepository(DeletionRequestRepository):
    """PostgreSQL-backed store.

    Holds the request-scoped AsyncSession; the caller owns the transaction
    except where the service needs a write to survive a later failure
    (see commit()).
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(
        self,
        *,
        identifier: str,
        otp_hash: str,
        otp_expires_at: datetime,
        created_at: datetime,
        reason: str | None = None,
    ) -> AccountDeletionRequest:
        request = AccountDeletionRequest(
            identifier=identifier,
            reason=reason,
            otp_hash=otp_hash,
            otp_expires_at=otp_expires_at,
            status=_PENDING,
            created_at=created_at,
        )
        self.db.add(request)
        await self.db.flush()
        await self.db.refresh(request)
        return request

    async def supersede_pending(self, *, identifier: str) -> int:
        stmt = (
            update(AccountDeletionRequest)
            .where(
                AccountDeletionRequest.identifier == identifier,
                AccountDeletionRequest.status == _PENDING,
            )
            .values(status=DeletionRequestStatus.SUPERSEDED.value)
        )
        result = await self.db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    async def get_latest_pending(
        self, *, identifier: str, now: datetime
    ) -> AccountDeletionRequest | None:
        stmt = (
            select(AccountDeletionRequest)
            .where(
                AccountDeletionRequest.identifier == identifier,
                AccountDeletionRequest.status == _PENDING,
                AccountDeletionRequest.otp_expires_at >= now,
            )
            .order_by(AccountDeletionRequest.created_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_completed(
        self, request_id: uuid.UUID, *, verified_at: datetime
    ) -> None:
        stmt = (
            update(AccountDeletionRequest)
            .where(
                AccountDeletionRequest.id == request_id,
                AccountDeletionRequest.status == _PENDING,
            )
            .values(
                status=DeletionRequestStatus.COMPLETED.value,
                verified_at=verified_at,
            )
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            logger.info("Deletion request %s already left pending state", request_id)

    async def list_for_identifier(
        self, identifier: str
    ) -> list[AccountDeletionRequest]:
        stmt = (
            select(AccountDeletionRequest)
            .where(AccountDeletionRequest.identifier == identifier)
            .order_by(AccountDeletionRequest.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def commit(self) -> None:
        await self.db.commit()


class InMemoryDeletionRequestRepository(DeletionRequestRepository):
    """Process-local store for tests and local tooling.

    Attributes:
        rows: Every request ever created, in insertion order.
        commits: Number of commit() calls, for test assertions.
    """

    def __init__(self) -> None:
        self.rows: list[AccountDeletionRequest] = []
        self.commits = 0

    async def create(
        self,
        *,
        identifier: str,
        otp_hash: str,
        otp_expires_at: datetime,
        created_at: datetime,
        reason: str | None = None,
    ) -> AccountDeletionRequest:
        request = AccountDeletionRequest(
            id=uuid.uuid4(),
            identifier=identifier,
            reason=reason,
            otp_hash=otp_hash,
            otp_expires_at=otp_expires_at,
            status=_PENDING,
            created_at=created_at,
            verified_at=None,
        )
        self.rows.append(request)
        return request

    async def supersede_pending(self, *, identifier: str) -> int:
        count = 0
        for row in self.rows:
            if row.identifier == identifier and row.status == _PENDING:
                row.status = DeletionRequestStatus.SUPERSEDED.value
                count += 1
        return count

    async def get_latest_pending(
        self, *, identifier: str, now: datetime
    ) -> AccountDeletionRequest | None:
        eligible = [
            row
            for row in self.rows
            if row.identifier == identifier
            and row.status == _PENDING
            and row.otp_expires_at >= now
        ]
        if not eligible:
            return None
        return max(eligible, key=lambda row: row.created_at)

    async def mark_completed(
        self, request_id: uuid.UUID, *, verified_at: datetime
    ) -> None:
        for row in self.rows:
            if row.id == request_id and row.status == _PENDING:
                row.status = DeletionRequestStatus.COMPLETED.value
                row.verified_at = verified_at

    async def list_for_identifier(
        self, identifier: str
    ) -> list[AccountDeletionRequest]:
        matching = [row for row in self.rows if row.identifier == identifier]
        return sorted(matching, key=lambda row: row.created_at, reverse=True)

    async def commit(self) -> None:
        self.commits += 1
