"""SQLAlchemy ORM models for the storefront backend.

All models are exported from this module for convenient imports:
    from app.models import User, Order, AccountDeletionRequest, ...

Models are organized by domain:
- user.py: User (identity principal)
- customer_data.py: Address, CartItem, WishlistItem (cascade with user)
- order.py: Order (retained, anonymized on user deletion)
- deletion_request.py: AccountDeletionRequest (audit trail of deletion codes)
"""

from app.models.base import Base, TimestampMixin
from app.models.customer_data import Address, CartItem, WishlistItem
from app.models.deletion_request import AccountDeletionRequest, DeletionRequestStatus
from app.models.order import Order
from app.models.user import User

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Identity
    "User",
    # Customer data
    "Address",
    "CartItem",
    "WishlistItem",
    "Order",
    # Account deletion
    "AccountDeletionRequest",
    "DeletionRequestStatus",
]
