"""Account deletion request model - one row per issued verification code.

Rows are never deleted; together they are the audit trail of every
deletion attempt. Only the digest of the code is stored.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base

_DEFAULT_UUID = text("gen_random_uuid()")


class DeletionRequestStatus(str, Enum):
    """Lifecycle of a deletion request.

    pending → completed: the code was verified and the account deleted.
    pending → superseded: a newer code was issued for the same identifier.
    """

    PENDING = "pending"
    SUPERSEDED = "superseded"
    COMPLETED = "completed"


class AccountDeletionRequest(Base):
    """Issued deletion challenge.

    Attributes:
        id: UUID primary key.
        identifier: Normalized email or phone number.
        reason: Optional free-text reason given by the user.
        otp_hash: Digest of the issued code.
        otp_expires_at: Code is unusable after this instant.
        status: One of DeletionRequestStatus values.
        created_at: Issuance time. The newest pending row wins on confirm.
        verified_at: When the code was verified. NULL until completed.
    """

    __tablename__ = "account_deletion_requests"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'superseded', 'completed')",
            name="ck_account_deletion_requests_status",
        ),
        Index(
            "ix_account_deletion_requests_lookup",
            "identifier",
            "status",
            "created_at",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    identifier: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    otp_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    otp_expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'pending'"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
