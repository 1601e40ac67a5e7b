"""Identity directory module.

Interface to the store that owns user principals, plus adapters.
"""

from app.providers.identity.base import IdentityDirectory
from app.providers.identity.mock_adapter import MockIdentityDirectory
from app.providers.identity.sql_adapter import SqlIdentityDirectory

__all__ = [
    "IdentityDirectory",
    "MockIdentityDirectory",
    "SqlIdentityDirectory",
]
