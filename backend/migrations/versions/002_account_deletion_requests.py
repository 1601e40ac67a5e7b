"""Create account_deletion_requests.

Revision ID: 002_account_deletion_requests
Revises: 001_storefront_identity
Create Date: 2026-10-17

One row per issued deletion code. Rows are never deleted (audit trail);
status moves pending → superseded or pending → completed.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "002_account_deletion_requests"
down_revision: str | None = "001_storefront_identity"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "account_deletion_requests",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("identifier", sa.String(255), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("otp_hash", sa.String(64), nullable=False),
        sa.Column("otp_expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="pending"
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'superseded', 'completed')",
            name="ck_account_deletion_requests_status",
        ),
    )
    # Confirm looks up the newest pending row for an identifier
    op.create_index(
        "ix_account_deletion_requests_lookup",
        "account_deletion_requests",
        ["identifier", "status", "created_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_account_deletion_requests_lookup",
        table_name="account_deletion_requests",
    )
    op.drop_table("account_deletion_requests")
