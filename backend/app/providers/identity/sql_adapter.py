"""PostgreSQL identity directory.

Principals live in ``users``. Orders are kept (``ON DELETE SET NULL``) and
scrubbed first; addresses, cart and wishlist rows go with the user through
``ON DELETE CASCADE``.
"""

import logging
import uuid

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identifiers import is_email
from app.models.order import Order
from app.models.user import User
from app.providers.errors import IdentityDirectoryError
from app.providers.identity.base import IdentityDirectory

logger = logging.getLogger(__name__)


class SqlIdentityDirectory(IdentityDirectory):
    """Identity directory over the storefront schema.

    Uses the request-scoped session, so the anonymization and the delete
    commit (or roll back) together with the caller's transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists_identity(self, identifier: str) -> bool:
        return await self.resolve_principal(identifier) is not None

    async def resolve_principal(self, identifier: str) -> uuid.UUID | None:
        column = User.email if is_email(identifier) else User.phone
        try:
            result = await self.db.execute(select(User.id).where(column == identifier))
        except SQLAlchemyError as exc:
            logger.error("Principal lookup failed: %s", exc)
            raise IdentityDirectoryError("Principal lookup failed") from exc
        return result.scalar_one_or_none()

    async def anonymize_retained_records(self, principal_id: uuid.UUID) -> int:
        stmt = (
            update(Order)
            .where(Order.user_id == principal_id, Order.anonymized_at.is_(None))
            .values(
                customer_name=None,
                customer_email=None,
                customer_phone=None,
                shipping_address=None,
                anonymized_at=func.now(),
            )
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Order anonymization failed: %s", exc)
            raise IdentityDirectoryError("Order anonymization failed") from exc
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    async def delete_principal(self, principal_id: uuid.UUID) -> bool:
        try:
            result = await self.db.execute(delete(User).where(User.id == principal_id))
        except SQLAlchemyError as exc:
            logger.error("Principal delete failed: %s", exc)
            raise IdentityDirectoryError("Principal delete failed") from exc
        return bool(result.rowcount)  # type: ignore[attr-defined]
