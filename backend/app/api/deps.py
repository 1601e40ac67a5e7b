"""Shared dependencies for API endpoints.

The deletion service is assembled per request: the request store and the
identity directory share the request's database session, while the notifier
registry is a process-wide singleton.

WHY DEPENDENCY INJECTION:
- Endpoints stay free of wiring
- Tests override get_account_deletion_service with in-memory collaborators
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.providers.factory import get_notifier_registry
from app.providers.identity.sql_adapter import SqlIdentityDirectory
from app.providers.notifier.base import NotifierRegistry
from app.repositories.deletion_request_repository import SqlDeletionRequestRepository
from app.services.account_deletion_service import AccountDeletionService

# Reusable type aliases for dependency injection (SonarCloud S8410)
DbSession = Annotated[AsyncSession, Depends(get_db)]
Notifiers = Annotated[NotifierRegistry, Depends(get_notifier_registry)]


def get_account_deletion_service(
    db: DbSession,
    notifiers: Notifiers,
) -> AccountDeletionService:
    """Build the account deletion service for one request.

    Args:
        db: Database session (injected).
        notifiers: Notifier registry singleton (injected).

    Returns:
        AccountDeletionService backed by PostgreSQL.
    """
    return AccountDeletionService(
        requests=SqlDeletionRequestRepository(db),
        directory=SqlIdentityDirectory(db),
        notifiers=notifiers,
    )


DeletionService = Annotated[
    AccountDeletionService, Depends(get_account_deletion_service)
]
