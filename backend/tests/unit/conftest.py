"""Shared fixtures for database-backed repository and directory tests.

Builds one storefront customer with data in every dependent table, plus an
unrelated customer whose rows must never be touched.
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Address, CartItem, Order, User, WishlistItem

SHOPPER_EMAIL = "shopper@example.com"
SHOPPER_PHONE = "919876543210"
BYSTANDER_EMAIL = "bystander@example.com"


async def _add_customer(
    db_session: AsyncSession, *, email: str, phone: str | None, order_number: str
) -> User:
    user = User(email=email, phone=phone, name="Test Customer")
    db_session.add(user)
    await db_session.flush()

    db_session.add_all(
        [
            Address(
                user_id=user.id,
                full_name="Test Customer",
                phone=phone or "910000000000",
                line1="12 MG Road",
                city="Bengaluru",
                state="Karnataka",
                postal_code="560001",
            ),
            CartItem(user_id=user.id, product_id="sku-1", quantity=2),
            WishlistItem(user_id=user.id, product_id="sku-2"),
            Order(
                user_id=user.id,
                order_number=order_number,
                total_amount=Decimal("499.00"),
                customer_name="Test Customer",
                customer_email=email,
                customer_phone=phone,
                shipping_address="12 MG Road, Bengaluru 560001",
            ),
        ]
    )
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def shopper(db_session: AsyncSession) -> User:
    """Customer with an address, cart item, wishlist item and order."""
    return await _add_customer(
        db_session, email=SHOPPER_EMAIL, phone=SHOPPER_PHONE, order_number="ORD-1001"
    )


@pytest.fixture
async def bystander(db_session: AsyncSession) -> User:
    """Unrelated customer; deletion of the shopper must not touch them."""
    return await _add_customer(
        db_session, email=BYSTANDER_EMAIL, phone=None, order_number="ORD-2001"
    )
