"""User model - the identity principal.

A user signs in with an email address, a phone number, or both. Every
customer-owned table references users.id; deleting the user row is what
removes a customer's personal data (see customer_data.py and order.py for
the per-table FK rules).
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.customer_data import Address, CartItem, WishlistItem

_DEFAULT_UUID = text("gen_random_uuid()")


class User(Base, TimestampMixin):
    """Customer identity record.

    Attributes:
        id: UUID primary key.
        email: Normalized (lower-case) email address, unique. NULL for
            phone-only customers.
        phone: Normalized phone number (digits with country code), unique.
            NULL for email-only customers.
        name: Display name.
        created_at: Account creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL",
            name="ck_users_has_identifier",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    phone: Mapped[str | None] = mapped_column(
        String(20),
        unique=True,
        nullable=True,
    )
    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Relationships
    # passive_deletes: the database cascades these on user delete
    addresses: Mapped[list["Address"]] = relationship(
        "Address",
        back_populates="user",
        passive_deletes=True,
    )
    cart_items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        back_populates="user",
        passive_deletes=True,
    )
    wishlist_items: Mapped[list["WishlistItem"]] = relationship(
        "WishlistItem",
        back_populates="user",
        passive_deletes=True,
    )
