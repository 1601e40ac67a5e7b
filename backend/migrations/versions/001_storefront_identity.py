"""Create storefront identity tables: users and customer-owned data.

Revision ID: 001_storefront_identity
Revises:
Create Date: 2026-10-17

users is the identity principal. addresses, cart_items and wishlist_items
cascade on user delete; orders are retained (SET NULL) and anonymized.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_storefront_identity"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_UUID_DEFAULT = sa.text("gen_random_uuid()")
_USERS_ID = "users.id"


def _id_column() -> sa.Column:
    return sa.Column(
        "id", sa.UUID(), primary_key=True, server_default=_UUID_DEFAULT
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _owner_column(ondelete: str, *, nullable: bool) -> sa.Column:
    return sa.Column(
        "user_id",
        sa.UUID(),
        sa.ForeignKey(_USERS_ID, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # Principal: at least one of email / phone identifies the customer
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("phone", sa.String(20), nullable=True, unique=True),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL",
            name="ck_users_has_identifier",
        ),
    )

    op.create_table(
        "addresses",
        _id_column(),
        _owner_column("CASCADE", nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("line1", sa.String(255), nullable=False),
        sa.Column("line2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(12), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_addresses_user_id", "addresses", ["user_id"])

    op.create_table(
        "cart_items",
        _id_column(),
        _owner_column("CASCADE", nullable=False),
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "product_id", name="uq_cart_items_user_product"
        ),
        sa.CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )
    op.create_index("ix_cart_items_user_id", "cart_items", ["user_id"])

    op.create_table(
        "wishlist_items",
        _id_column(),
        _owner_column("CASCADE", nullable=False),
        sa.Column("product_id", sa.String(64), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "product_id", name="uq_wishlist_items_user_product"
        ),
    )
    op.create_index("ix_wishlist_items_user_id", "wishlist_items", ["user_id"])

    # Orders survive the user for accounting; personal fields are scrubbed
    op.create_table(
        "orders",
        _id_column(),
        _owner_column("SET NULL", nullable=True),
        sa.Column("order_number", sa.String(32), nullable=False, unique=True),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="placed"
        ),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(20), nullable=True),
        sa.Column("shipping_address", sa.Text(), nullable=True),
        sa.Column("anonymized_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_wishlist_items_user_id", table_name="wishlist_items")
    op.drop_table("wishlist_items")
    op.drop_index("ix_cart_items_user_id", table_name="cart_items")
    op.drop_table("cart_items")
    op.drop_index("ix_addresses_user_id", table_name="addresses")
    op.drop_table("addresses")
    op.drop_table("users")
