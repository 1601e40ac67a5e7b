"""Order model - retained for tax and accounting compliance.

Orders outlive the customer who placed them. The ``user_id`` FK is
``ON DELETE SET NULL`` and the customer's contact and shipping details are
scrubbed (anonymized) before the user row is deleted.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin

_DEFAULT_UUID = text("gen_random_uuid()")


class Order(Base, TimestampMixin):
    """Placed order.

    Attributes:
        id: UUID primary key.
        user_id: Owning user. NULL once the user is deleted.
        order_number: Human-facing order reference.
        status: Fulfilment status (opaque to the deletion flow).
        total_amount: Order total in INR.
        customer_name: Name at time of order. Scrubbed on anonymization.
        customer_email: Contact email. Scrubbed on anonymization.
        customer_phone: Contact phone. Scrubbed on anonymization.
        shipping_address: Flattened shipping address. Scrubbed on anonymization.
        anonymized_at: When personal details were removed. NULL = intact.
    """

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    order_number: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'placed'"),
        nullable=False,
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    shipping_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    anonymized_at: Mapped[datetime | None] = mapped_column(nullable=True)
